"""Aggregate statistics over a series of timing samples.

Each dimension (real, user, sys) is aggregated independently, so the
minimum real time and the minimum user time may come from different
runs.  The standard deviation is the population standard deviation:
the series is the whole population of interest, so the divisor is N.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence

from nxtime.timing import Sample


# ---------------------------------------------------------------------------
# AggregateStats
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AggregateStats:
    """Summary of a sample series, one derived Sample per statistic."""

    n: int
    mean: Sample
    min: Sample
    max: Sample
    stddev: Sample

    def rows(self) -> list[tuple[str, Sample]]:
        """Labeled summary rows in display order."""
        return [
            ("mean", self.mean),
            ("min", self.min),
            ("max", self.max),
            ("stddev", self.stddev),
        ]


def aggregate(samples: Sequence[Sample]) -> AggregateStats:
    """Compute min, max, mean and population stddev per dimension.

    Args:
        samples: A non-empty sequence of samples.

    Raises:
        ValueError: If *samples* is empty.
    """
    n = len(samples)
    if n == 0:
        raise ValueError("cannot aggregate an empty series")

    # Seed from the first sample rather than from +/- infinity.
    first = samples[0].as_tuple()
    lo = list(first)
    hi = list(first)
    total = list(first)
    for sample in samples[1:]:
        for d, value in enumerate(sample.as_tuple()):
            if value < lo[d]:
                lo[d] = value
            if value > hi[d]:
                hi[d] = value
            total[d] += value

    mean = [_clamp(total[d] / n, lo[d], hi[d]) for d in range(3)]

    # One accumulator per dimension.
    sq_dev = [0.0, 0.0, 0.0]
    for sample in samples:
        for d, value in enumerate(sample.as_tuple()):
            delta = value - mean[d]
            sq_dev[d] += delta * delta

    stddev = [math.sqrt(sq_dev[d] / n) for d in range(3)]

    return AggregateStats(
        n=n,
        mean=Sample(*mean),
        min=Sample(*lo),
        max=Sample(*hi),
        stddev=Sample(*stddev),
    )


def _clamp(value: float, lo: float, hi: float) -> float:
    # sum / n can land a ulp outside [min, max] for identical values.
    return min(max(value, lo), hi)


# ---------------------------------------------------------------------------
# StatCollector
# ---------------------------------------------------------------------------


class StatCollector:
    """Append-only, ordered series of samples in execution order."""

    def __init__(self) -> None:
        self._samples: list[Sample] = []

    def record(self, sample: Sample) -> None:
        """Append *sample* to the series."""
        self._samples.append(sample)

    def aggregate(self) -> AggregateStats:
        """Aggregate the full series.  The series must not be empty."""
        return aggregate(self._samples)

    @property
    def samples(self) -> tuple[Sample, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)
