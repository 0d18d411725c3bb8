"""Core data types for framebench.

All types are frozen dataclasses with complete type annotations.
This module has ZERO imports from outside the Python standard library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ApplyPolicy(Enum):
    """How an adapter should apply a payload to its retained state."""

    TEXT = "text"
    REBUILD = "rebuild"
    KEYED = "keyed"
    REPLACE = "replace"
    MUTATE = "mutate"


class RunnerState(Enum):
    """Lifecycle of a single scenario run."""

    NOT_STARTED = "not_started"
    WARMUP = "warmup"
    MEASURING = "measuring"
    DONE = "done"


# ---------------------------------------------------------------------------
# Workload types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Scenario:
    """A named workload family plus the sizes it resolved to."""

    name: str
    settings: dict[str, str | int | float] = field(default_factory=dict)


@dataclass(frozen=True)
class ListItem:
    """One row of a list payload."""

    id: str
    text: str


@dataclass(frozen=True)
class TextPayload:
    """Replace the single text node's content."""

    value: str


@dataclass(frozen=True)
class ListPayload:
    """A full list state, optionally annotated with the ids that changed."""

    items: tuple[ListItem, ...]
    mutate_ids: tuple[str, ...] | None = None
    items_by_id: dict[str, str] | None = None


WorkloadPayload = TextPayload | ListPayload


# ---------------------------------------------------------------------------
# Measurement types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PhaseDurations:
    """Timings of one measured iteration, in milliseconds."""

    build_ms: float
    render_ms: float
    total_ms: float


@dataclass(frozen=True)
class TimingStats:
    """Descriptive summary of a duration sequence, in milliseconds."""

    count: int
    average_ms: float
    median_ms: float
    p95_ms: float
    min_ms: float
    max_ms: float
    std_dev_ms: float


@dataclass(frozen=True)
class PhaseStats:
    """Timing summaries for the total, build and render phases."""

    total: TimingStats
    build: TimingStats
    render: TimingStats


@dataclass(frozen=True)
class MemorySample:
    """Process memory snapshot. All values are byte counts."""

    rss: int
    heap_total: int
    heap_used: int
    external: int
    array_buffers: int


@dataclass(frozen=True)
class MemoryStats:
    """Start/end/delta/peak view over the snapshots of one measured loop."""

    samples: int
    start: MemorySample
    end: MemorySample
    delta: MemorySample
    peak: MemorySample


@dataclass(frozen=True)
class DerivedShares:
    """Average build and render time as a percentage of average total time."""

    build_share_pct_avg: float
    render_share_pct_avg: float


@dataclass(frozen=True)
class ScenarioResult:
    """Aggregated outcome of one (framework, scenario) pair."""

    framework: str
    scenario: str
    iterations: int
    warmup_iterations: int
    elapsed_ms: int
    phase_stats: PhaseStats
    settings: dict[str, str | int | float]
    derived: DerivedShares
    memory_stats: MemoryStats | None = None


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunConfig:
    """Resolved settings for one benchmark run."""

    width: int
    height: int
    iterations: int
    warmup_iterations: int
    scale: float
    mem_sample_every: int
    scenarios: tuple[str, ...] = ()
    frameworks: tuple[str, ...] = ()
    json_path: str | None = None
    output_enabled: bool = True

    def meta(self) -> dict[str, int | float]:
        """Return the ``config`` block written into the JSON document."""
        return {
            "width": self.width,
            "height": self.height,
            "iterations": self.iterations,
            "warmupIterations": self.warmup_iterations,
            "scale": self.scale,
            "memSampleEvery": self.mem_sample_every,
        }
