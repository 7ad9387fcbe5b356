"""Report formatting for timing rows.

Two formats are supported:

``human``
    Bordered, fixed-width columns::

        [---------|----------|----------|----------]
        | name    | real     | user     | sys      |
        [---------|----------|----------|----------]
        | 1       |    0.002 |    0.001 |    0.000 |

``csv``
    A ``name, real, user, sys`` header followed by one comma-separated
    row per sample.  No separator lines.

All values are seconds with three decimal digits.
"""

from __future__ import annotations

from typing import TextIO

import click

from nxtime.config import OutputFormat
from nxtime.timing import Sample

_COLUMNS = ("name", "real", "user", "sys")
_NAME_WIDTH = 7
_VALUE_WIDTH = 8
_CSV_SEP = ", "


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_separator(fmt: OutputFormat) -> str | None:
    """Return the separator line, or None if *fmt* has none."""
    if fmt is not OutputFormat.HUMAN:
        return None
    cells = ["-" * (_NAME_WIDTH + 2)] + ["-" * (_VALUE_WIDTH + 2)] * 3
    return "[" + "|".join(cells) + "]"


def format_header(fmt: OutputFormat) -> str:
    """Return the column header line."""
    if fmt is OutputFormat.CSV:
        return _CSV_SEP.join(_COLUMNS)
    name, *values = _COLUMNS
    cells = [f" {name:<{_NAME_WIDTH}} "] + [f" {v:<{_VALUE_WIDTH}} " for v in values]
    return "|" + "|".join(cells) + "|"


def format_row(fmt: OutputFormat, name: str, sample: Sample) -> str:
    """Return one data row for *sample* labeled *name*."""
    if fmt is OutputFormat.CSV:
        return _CSV_SEP.join([name] + [f"{v:.3f}" for v in sample.as_tuple()])
    cells = [f" {name:<{_NAME_WIDTH}} "] + [
        f" {v:>{_VALUE_WIDTH}.3f} " for v in sample.as_tuple()
    ]
    return "|" + "|".join(cells) + "|"


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def write_separator(sink: TextIO, fmt: OutputFormat) -> None:
    line = format_separator(fmt)
    if line is not None:
        click.echo(line, file=sink)


def write_header(sink: TextIO, fmt: OutputFormat) -> None:
    """Write the header block: separator, column names, separator."""
    write_separator(sink, fmt)
    click.echo(format_header(fmt), file=sink)
    write_separator(sink, fmt)


def write_row(sink: TextIO, fmt: OutputFormat, name: str, sample: Sample) -> None:
    click.echo(format_row(fmt, name, sample), file=sink)
