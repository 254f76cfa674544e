# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
tabpivot CLI entry point.

Provides command-line interface for building pivot tables from
tab-delimited records.
"""

import sys
from importlib.metadata import PackageNotFoundError, version

import click
from tabpivot.pivot.cli import functions_command, pivot_command


def _get_package_version() -> str:
    """Get package version from metadata."""
    try:
        return version("tabpivot")
    except PackageNotFoundError:
        return "0+unknown"


EXAMPLES = """
Examples:
  tabpivot pivot -r 1 -c 2 -d 'sum(4)' sales.tsv
  tabpivot pivot -r 1,3 -c 2 -d 'mean(4),stddev(4)' sales.tsv --format table
  tabpivot functions
"""


@click.group(epilog=EXAMPLES)
@click.version_option(version=_get_package_version(), prog_name="tabpivot")
def main() -> None:
    """tabpivot: pivot tables from tab-delimited records."""
    pass


# Register subcommands
main.add_command(pivot_command)
main.add_command(functions_command)


if __name__ == "__main__":
    sys.exit(main())
