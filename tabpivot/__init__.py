# Copyright (c) Meta Platforms, Inc. and affiliates.

"""tabpivot: pivot tables from tab-delimited records."""
