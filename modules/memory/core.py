"""Memory module -- periodic process snapshots around a measured loop.

Sampling is all-or-nothing: with ``every == 0`` the sampler takes no
snapshots at all, including the start and end ones, and reports no stats.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from domain.models import MemorySample, MemoryStats

if TYPE_CHECKING:
    from domain.ports import MemoryProbePort

logger = logging.getLogger("framebench.memory")


def diff_memory(start: MemorySample, end: MemorySample) -> MemorySample:
    """Signed component-wise ``end - start``."""
    return MemorySample(
        rss=end.rss - start.rss,
        heap_total=end.heap_total - start.heap_total,
        heap_used=end.heap_used - start.heap_used,
        external=end.external - start.external,
        array_buffers=end.array_buffers - start.array_buffers,
    )


def compute_memory_stats(
    samples: Sequence[MemorySample],
    start: MemorySample,
    end: MemorySample,
) -> MemoryStats:
    """Derive delta and component-wise peak over start, *samples* and end."""
    snapshots = [start, *samples, end]
    peak = MemorySample(
        rss=max(s.rss for s in snapshots),
        heap_total=max(s.heap_total for s in snapshots),
        heap_used=max(s.heap_used for s in snapshots),
        external=max(s.external for s in snapshots),
        array_buffers=max(s.array_buffers for s in snapshots),
    )
    return MemoryStats(
        samples=len(snapshots),
        start=start,
        end=end,
        delta=diff_memory(start, end),
        peak=peak,
    )


class MemorySampler:
    """Takes snapshots before, during and after one measured loop.

    Constructor-injected MemoryProbePort does the actual reading, so a run
    never touches process state unless sampling is enabled.
    """

    def __init__(self, probe: MemoryProbePort, every: int) -> None:
        self._probe = probe
        self._every = max(0, every)
        self._start: MemorySample | None = None
        self._samples: list[MemorySample] = []

    @property
    def enabled(self) -> bool:
        return self._every > 0

    @property
    def samples(self) -> tuple[MemorySample, ...]:
        """Mid-loop snapshots taken so far."""
        return tuple(self._samples)

    def begin(self) -> None:
        """Take the start snapshot and forget any previous loop."""
        self._samples = []
        self._start = self._probe.read() if self.enabled else None

    def on_iteration_done(self, index: int) -> None:
        """Snapshot after every ``every``-th completed iteration (1-indexed)."""
        if self.enabled and (index + 1) % self._every == 0:
            self._samples.append(self._probe.read())

    def finish(self) -> MemoryStats | None:
        """Take the end snapshot and return the stats, or None when disabled."""
        if not self.enabled or self._start is None:
            return None
        end = self._probe.read()
        stats = compute_memory_stats(self._samples, self._start, end)
        logger.debug(
            "Memory: %d samples, rss delta %d bytes, rss peak %d bytes",
            stats.samples,
            stats.delta.rss,
            stats.peak.rss,
        )
        return stats
