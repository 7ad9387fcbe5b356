"""Benchmark driver: run the command N times, report, aggregate.

Runs are strictly sequential.  Each iteration waits for its child to
terminate before the next one is spawned, so CPU accounting is never
shared between two children.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable, TextIO

from nxtime.config import BenchConfig
from nxtime.display import write_header, write_row, write_separator
from nxtime.logging import get_logger
from nxtime.stats import AggregateStats, StatCollector
from nxtime.timing import RunOutcome, Sample, TimedRun, run_timed

log = get_logger("runner")

# Exit code used when the last child did not exit normally.
EXIT_FAILURE = 1


# ---------------------------------------------------------------------------
# BenchReport
# ---------------------------------------------------------------------------


@dataclass
class BenchReport:
    """Everything a finished benchmark produced."""

    samples: tuple[Sample, ...]
    outcomes: list[RunOutcome] = field(default_factory=list)
    stats: AggregateStats | None = None

    @property
    def last_outcome(self) -> RunOutcome | None:
        return self.outcomes[-1] if self.outcomes else None

    @property
    def exit_code(self) -> int:
        """The last child's exit code, or 1 if it was terminated abnormally."""
        last = self.last_outcome
        if last is None or last.exit_code is None:
            return EXIT_FAILURE
        return last.exit_code


# ---------------------------------------------------------------------------
# BenchRunner
# ---------------------------------------------------------------------------


class BenchRunner:
    """Execute a benchmark described by a :class:`BenchConfig`.

    Args:
        config: The validated configuration.
        sink: Destination for report rows (stdout or the ``-o`` file).
        run_fn: Function that executes the command once.  Defaults to
            :func:`nxtime.timing.run_timed`; tests inject a fake.
    """

    def __init__(
        self,
        config: BenchConfig,
        sink: TextIO | None = None,
        *,
        run_fn: Callable[[tuple[str, ...]], TimedRun] | None = None,
    ) -> None:
        self.config = config
        self.sink = sink if sink is not None else sys.stdout
        self._run_fn = run_fn or run_timed

    def run(self) -> BenchReport:
        """Run all repeats, print every row, then print the summary.

        Raises:
            SpawnError: If a child process could not be created.  No
                summary is printed in that case.
        """
        config = self.config
        config.validate()
        fmt = config.output_format
        collector = StatCollector()
        outcomes: list[RunOutcome] = []

        log.debug("Running %r %d time(s)", " ".join(config.command), config.repeats)
        write_header(self.sink, fmt)

        for index in range(1, config.repeats + 1):
            self.sink.flush()
            result = self._run_fn(config.command)
            if result.outcome.abnormal:
                log.warning(
                    "Command terminated abnormally (signal %s).",
                    result.outcome.signal,
                )
            collector.record(result.sample)
            outcomes.append(result.outcome)
            write_row(self.sink, fmt, str(index), result.sample)

        stats = collector.aggregate()
        write_separator(self.sink, fmt)
        for name, sample in stats.rows():
            write_row(self.sink, fmt, name, sample)
        write_separator(self.sink, fmt)

        return BenchReport(samples=collector.samples, outcomes=outcomes, stats=stats)
