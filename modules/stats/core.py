"""Stats module -- reduce duration sequences to descriptive summaries.

Percentiles are nearest-rank on the ascending sort, zero-indexed, with no
interpolation: ``median = sorted[n // 2]`` and ``p95 = sorted[floor(n * 0.95)]``.
Standard deviation is the population form (divide by ``n``).
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from domain.models import DerivedShares, PhaseStats, TimingStats

_EMPTY = TimingStats(
    count=0,
    average_ms=0.0,
    median_ms=0.0,
    p95_ms=0.0,
    min_ms=0.0,
    max_ms=0.0,
    std_dev_ms=0.0,
)


def compute_timing_stats(durations: Sequence[float]) -> TimingStats:
    """Summarize *durations* (milliseconds). Empty input yields all zeros."""
    ordered = sorted(durations)
    count = len(ordered)
    if count == 0:
        return _EMPTY

    average = sum(ordered) / count
    variance = sum((value - average) ** 2 for value in ordered) / count
    return TimingStats(
        count=count,
        average_ms=average,
        median_ms=ordered[count // 2],
        p95_ms=ordered[math.floor(count * 0.95)],
        min_ms=ordered[0],
        max_ms=ordered[-1],
        std_dev_ms=math.sqrt(variance),
    )


def share_pct(part_avg: float, total_avg: float) -> float:
    """Return *part_avg* as a percentage of *total_avg* (0 when total is 0)."""
    if total_avg <= 0:
        return 0.0
    return part_avg / total_avg * 100


def derive_shares(stats: PhaseStats) -> DerivedShares:
    """Compute average build/render shares of the average total."""
    total = stats.total.average_ms
    return DerivedShares(
        build_share_pct_avg=share_pct(stats.build.average_ms, total),
        render_share_pct_avg=share_pct(stats.render.average_ms, total),
    )
