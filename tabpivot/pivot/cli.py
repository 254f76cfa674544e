# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
CLI implementation for the pivot and functions subcommands.
"""

from pathlib import Path
from typing import Optional

import click
from tabulate import tabulate

from tabpivot.compression import compress_text, encode_text
from tabpivot.log import configure_logging
from tabpivot.pivot.accumulator import NonNumericValueError
from tabpivot.pivot.config import ConfigError, load_config, PivotConfig
from tabpivot.pivot.formatters import format_grid, OUTPUT_FORMATS
from tabpivot.pivot.grid import assemble_grid, SORT_KEYS
from tabpivot.pivot.grouper import PivotGrouper
from tabpivot.pivot.layout import LayoutError
from tabpivot.pivot.reader import iter_all_records, open_readers
from tabpivot.pivot.registry import AGGREGATE_FUNCTIONS


def _write_output(
    output: str,
    output_file: Optional[Path],
    compress: bool = False,
) -> None:
    """Write output to file or stdout."""
    if output_file:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        if compress:
            output_file.write_bytes(compress_text(output + "\n"))
        else:
            output_file.write_bytes(encode_text(output + "\n"))
        click.echo(f"Output written to {output_file}", err=True)
    else:
        click.echo(encode_text(output))


def _resolve_config(
    config_file: Optional[Path],
    rows: Optional[str],
    cols: Optional[str],
    data: Optional[str],
    sort: Optional[str],
    output_format: Optional[str],
    strict: Optional[bool],
) -> PivotConfig:
    """Merge the config file (if any) with command-line options."""
    config = PivotConfig()
    if config_file:
        try:
            config = load_config(config_file)
        except ConfigError as e:
            raise click.UsageError(str(e))
    return config.with_overrides(
        rows=rows,
        cols=cols,
        data=data,
        sort=sort,
        output_format=output_format,
        strict=strict,
    )


@click.command(name="pivot")
@click.argument(
    "files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
)
@click.option(
    "--rows",
    "-r",
    type=str,
    default=None,
    help="Comma-separated row field indices, 1-based (e.g. '1,3').",
)
@click.option(
    "--cols",
    "-c",
    type=str,
    default=None,
    help="Comma-separated column field indices, 1-based (e.g. '2').",
)
@click.option(
    "--data",
    "-d",
    type=str,
    default=None,
    help="Comma-separated aggregates 'function(field)' (e.g. 'sum(4),count(4)').",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON config file; command-line options override its values.",
)
@click.option(
    "--sort",
    type=click.Choice(list(SORT_KEYS)),
    default=None,
    help="Ordering of row and column keys.  [default: lexical]",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format.  [default: tsv]",
)
@click.option(
    "--strict/--lenient",
    default=None,
    help="Reject non-numeric values in numeric aggregates instead of "
    "reading them as their numeric prefix (0 if none).  [default: lenient]",
)
@click.option(
    "--output",
    "-o",
    "output_file",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file path (default: stdout).",
)
@click.option(
    "--compress",
    is_flag=True,
    default=False,
    help="Compress output with Zstd (requires --output).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Log progress to stderr.",
)
def pivot_command(
    files: tuple[Path, ...],
    rows: Optional[str],
    cols: Optional[str],
    data: Optional[str],
    config_file: Optional[Path],
    sort: Optional[str],
    output_format: Optional[str],
    strict: Optional[bool],
    output_file: Optional[Path],
    compress: bool,
    verbose: bool,
) -> None:
    """
    Build a pivot table from tab-delimited FILES (default: stdin).

    Records are grouped by the --rows and --cols fields, and every
    --data aggregate is computed per (row, column) pair. Row and column
    keys are sorted as strings, so "10" sorts before "2".

    \b
    Functions: count, min, max, sum, mean, variance, stddev, skew,
               uniques, allvalues

    \b
    Examples:
      tabpivot pivot -r 1 -c 2 -d 'sum(4)' sales.tsv
      tabpivot pivot -r 1,3 -c 2 -d 'sum(4),count(4)' sales.tsv
      cat sales.tsv | tabpivot pivot -r 1 -c 2 -d 'uniques(4)'
      tabpivot pivot --config pivot.json sales.tsv.zst --format table
    """
    configure_logging("DEBUG" if verbose else None, force=True)

    if compress and not output_file:
        raise click.ClickException("--compress requires --output")

    config = _resolve_config(
        config_file, rows, cols, data, sort, output_format, strict
    )
    try:
        layout = config.layout()
    except LayoutError as e:
        raise click.UsageError(str(e))

    try:
        readers = open_readers(files)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))

    grouper = PivotGrouper(iter_all_records(readers), layout, strict=config.strict)
    try:
        table = grouper.group()
    except NonNumericValueError as e:
        raise click.ClickException(str(e))

    grid = assemble_grid(table, sort=config.sort)
    output = format_grid(grid, config.output_format)
    _write_output(output, output_file, compress)


@click.command(name="functions")
def functions_command() -> None:
    """List the supported aggregate functions and what they track."""
    table_data = [
        [name, ", ".join(sorted(s.value for s in stats))]
        for name, stats in AGGREGATE_FUNCTIONS.items()
    ]
    click.echo(tabulate(table_data, headers=["FUNCTION", "TRACKS"], tablefmt="plain"))
