"""Benchmark configuration.

Handles:
- The immutable :class:`BenchConfig` built once by the CLI and passed
  to the runner.
- Parsing and range-checking the repeat count.
- Deriving a default repeat count from the invoked program name
  (``100x`` means "run 100 times").
"""

from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass
from pathlib import Path

MIN_REPEATS = 1
MAX_REPEATS = 10000
DEFAULT_REPEATS = 10

_PROGRAM_NAME_RE = re.compile(r"([+-]?\d+)x", re.ASCII)
_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)


class ConfigError(ValueError):
    """Raised when the benchmark configuration is invalid."""


class OutputFormat(str, enum.Enum):
    """Output format for the timing report."""

    HUMAN = "human"
    CSV = "csv"


# ---------------------------------------------------------------------------
# BenchConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchConfig:
    """Resolved configuration for one benchmark run."""

    command: tuple[str, ...]
    repeats: int = DEFAULT_REPEATS
    output_format: OutputFormat = OutputFormat.HUMAN
    output_path: Path | None = None  # None = stdout

    @property
    def program(self) -> str:
        """The executable name (first element of the command)."""
        return self.command[0]

    def validate(self) -> None:
        """Raise :class:`ConfigError` if the configuration cannot be run."""
        if not self.command:
            raise ConfigError("No command given.")
        check_repeats(self.repeats)


# ---------------------------------------------------------------------------
# Repeat count
# ---------------------------------------------------------------------------


def check_repeats(repeats: int) -> int:
    """Return *repeats* unchanged if it lies in [1, 10000]."""
    if repeats < MIN_REPEATS or repeats > MAX_REPEATS:
        raise ConfigError(f"Repeats must be in the range [{MIN_REPEATS}-{MAX_REPEATS}].")
    return repeats


def parse_repeats(text: str) -> int:
    """Parse the value of the ``-n`` option.

    Raises:
        ConfigError: If *text* is not a decimal integer or is out of range.
    """
    if _INTEGER_RE.fullmatch(text) is None:
        raise ConfigError("invalid integer literal for -n parameter.")
    return check_repeats(int(text))


def repeats_from_program_name(program_name: str) -> int | None:
    """Return the repeat count encoded in a ``<integer>x`` program name.

    Only the basename is considered, so ``/usr/local/bin/50x`` yields 50.
    Returns None when the name does not follow the convention.
    """
    match = _PROGRAM_NAME_RE.fullmatch(os.path.basename(program_name))
    if match is None:
        return None
    return int(match.group(1))


def resolve_repeats(explicit: str | None, program_name: str) -> int:
    """Pick the repeat count: explicit ``-n`` > program name > default."""
    if explicit is not None:
        return parse_repeats(explicit)
    from_name = repeats_from_program_name(program_name)
    if from_name is not None:
        return check_repeats(from_name)
    return DEFAULT_REPEATS
