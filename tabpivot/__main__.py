# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Allow running tabpivot as a module: python -m tabpivot
"""

from tabpivot.cli import main

if __name__ == "__main__":
    main()
