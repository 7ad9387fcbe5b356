"""Command-line interface for nxtime.

Usage::

    nxtime [-c|-h] [-n TIMES] [-o FILE] command [args...]

If the program is invoked under a name of the form ``<integer>x``
(e.g. a ``100x`` symlink), that integer is the default repeat count.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from nxtime import __version__
from nxtime.config import BenchConfig, ConfigError, OutputFormat, resolve_repeats
from nxtime.logging import setup_logging
from nxtime.runner import BenchRunner
from nxtime.timing import SpawnError


class BenchUsageError(click.UsageError):
    """Usage error reported with exit code 1."""

    exit_code = 1


class _BenchCommand(click.Command):
    """Command whose parse errors exit with 1 instead of click's 2."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


@click.command(
    cls=_BenchCommand,
    context_settings={
        "allow_interspersed_args": False,
        "help_option_names": ["--help"],
    },
)
@click.version_option(version=__version__)
@click.option(
    "-n",
    "repeats",
    metavar="TIMES",
    default=None,
    help="Number of runs, 1-10000 (default: 10).",
)
@click.option(
    "-c/-h",
    "csv_output",
    default=False,
    help="CSV (-c) or human-readable (-h, default) output.",
)
@click.option(
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the report to FILE instead of stdout.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Only show warnings.")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def main(
    ctx: click.Context,
    repeats: str | None,
    csv_output: bool,
    output_path: Path | None,
    verbose: bool,
    quiet: bool,
    command: tuple[str, ...],
) -> None:
    """Run COMMAND repeatedly and report real, user and sys times.

    One row is printed per run, followed by the mean, min, max and
    standard deviation of each column.  The exit status is that of the
    last run.

    \b
    Examples:
        nxtime -n 20 python -c 'pass'
        nxtime -c -n 5 -o times.csv make -s
    """
    setup_logging(verbose=verbose, quiet=quiet)

    try:
        config = BenchConfig(
            command=command,
            repeats=resolve_repeats(repeats, ctx.info_name or ""),
            output_format=OutputFormat.CSV if csv_output else OutputFormat.HUMAN,
            output_path=output_path,
        )
        config.validate()
    except ConfigError as exc:
        raise BenchUsageError(str(exc), ctx=ctx) from exc

    sink = _open_sink(ctx, config)
    try:
        report = BenchRunner(config, sink).run()
    except SpawnError as exc:
        click.echo(f"Error: {exc.strerror}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        raise SystemExit(130)  # noqa: B904
    finally:
        if sink is not sys.stdout:
            sink.close()

    raise SystemExit(report.exit_code)


def _open_sink(ctx: click.Context, config: BenchConfig) -> Any:
    """Open the report destination, creating or truncating the file."""
    if config.output_path is None:
        return sys.stdout
    try:
        return open(config.output_path, "w", encoding="utf-8")
    except OSError as exc:
        raise BenchUsageError(
            f"Can't open file {str(config.output_path)!r}: {exc.strerror}", ctx=ctx
        ) from exc
