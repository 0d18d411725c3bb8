"""Shared pytest fixtures and test factories for framebench.

Provides:
- Fake port implementations (RendererAdapter, MemoryProbe, FileSystem, clock)
- Factory functions for the domain models tests build most often
- Pytest fixtures wrapping the fakes and factories
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from domain.models import (
    DerivedShares,
    MemorySample,
    MemoryStats,
    PhaseStats,
    RunConfig,
    ScenarioResult,
    TimingStats,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from domain.models import ApplyPolicy, WorkloadPayload


# ── Fake Port Implementations ─────────────────────────────────────────────


class FakeAdapter:
    """Recording RendererAdapter.

    Every lifecycle call is appended to ``calls`` as a string so tests can
    assert on exact ordering. Set ``fail_on_build`` or ``fail_on_render`` to
    a 1-indexed call number to make that call raise.
    """

    def __init__(
        self,
        name: str = "fake",
        *,
        fail_on_build: int | None = None,
        fail_on_render: int | None = None,
    ) -> None:
        self.name = name
        self.calls: list[str] = []
        self.payloads: list[WorkloadPayload] = []
        self.started = False
        self.destroyed = False
        self._fail_on_build = fail_on_build
        self._fail_on_render = fail_on_render

    @property
    def builds(self) -> int:
        return self.calls.count("build")

    @property
    def renders(self) -> int:
        return self.calls.count("render")

    async def start(self) -> None:
        self.calls.append("start")
        self.started = True

    async def build(self, payload: WorkloadPayload) -> None:
        self.calls.append("build")
        self.payloads.append(payload)
        if self._fail_on_build is not None and self.builds == self._fail_on_build:
            msg = f"build {self.builds} failed"
            raise RuntimeError(msg)

    async def render(self) -> None:
        self.calls.append("render")
        if self._fail_on_render is not None and self.renders == self._fail_on_render:
            msg = f"render {self.renders} failed"
            raise RuntimeError(msg)

    async def destroy(self) -> None:
        self.calls.append("destroy")
        self.destroyed = True


class RecordingAdapterFactory:
    """AdapterFactory that hands out FakeAdapters and remembers each request.

    ``fail_on_build`` / ``fail_on_render`` are forwarded to every adapter it
    creates for the framework named in ``fail_framework`` (all when None).
    """

    def __init__(self) -> None:
        self.requests: list[tuple[str, str, ApplyPolicy, int, int]] = []
        self.adapters: list[FakeAdapter] = []
        self.fail_on_build: int | None = None
        self.fail_on_render: int | None = None
        self.fail_framework: str | None = None

    def __call__(
        self,
        framework: str,
        scenario: str,
        policy: ApplyPolicy,
        width: int,
        height: int,
    ) -> FakeAdapter:
        self.requests.append((framework, scenario, policy, width, height))
        failing = self.fail_framework is None or self.fail_framework == framework
        adapter = FakeAdapter(
            framework,
            fail_on_build=self.fail_on_build if failing else None,
            fail_on_render=self.fail_on_render if failing else None,
        )
        self.adapters.append(adapter)
        return adapter


class FakeMemoryProbe:
    """MemoryProbePort returning scripted samples.

    With no script, each read returns a sample whose fields all equal the
    1-indexed read number times 1 MiB. A script is consumed in order and its
    last entry repeats once exhausted.
    """

    def __init__(self, samples: list[MemorySample] | None = None) -> None:
        self._samples = list(samples or [])
        self.reads = 0

    def read(self) -> MemorySample:
        self.reads += 1
        if self._samples:
            return self._samples[min(self.reads, len(self._samples)) - 1]
        value = self.reads * 1024 * 1024
        return MemorySample(
            rss=value,
            heap_total=value,
            heap_used=value,
            external=value,
            array_buffers=value,
        )


class FakeClock:
    """Monotonic clock advancing by ``step`` seconds on every call."""

    def __init__(self, step: float = 0.001, start: float = 0.0) -> None:
        self.step = step
        self.now = start
        self.calls = 0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        self.calls += 1
        return value


class InMemoryFileSystem:
    """Stateful in-memory FileSystemPort.

    Tracks file contents and directory creation. Set ``fail_mkdir`` to make
    ``make_directory`` raise PermissionError.
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self.created_dirs: set[str] = set()
        self.fail_mkdir = False

    def read_file(self, path: str) -> str:
        """Read file content from memory."""
        if path not in self._files:
            msg = f"File not found: {path}"
            raise FileNotFoundError(msg)
        return self._files[path]

    def write_file(self, path: str, content: str) -> None:
        """Write file content to memory."""
        self._files[path] = content

    def file_exists(self, path: str) -> bool:
        """Check if a file exists in memory."""
        return path in self._files

    def make_directory(self, path: str) -> None:
        """Record that a directory was created."""
        if self.fail_mkdir:
            msg = f"Permission denied: {path}"
            raise PermissionError(msg)
        self.created_dirs.add(path)


# ── Domain Model Factories ───────────────────────────────────────────────


def make_run_config(
    width: int = 80,
    height: int = 24,
    iterations: int = 5,
    warmup_iterations: int = 2,
    scale: float = 1.0,
    mem_sample_every: int = 0,
    scenarios: tuple[str, ...] = (),
    frameworks: tuple[str, ...] = (),
    json_path: str | None = None,
    *,
    output_enabled: bool = True,
) -> RunConfig:
    """Create a RunConfig small enough for fast tests."""
    return RunConfig(
        width=width,
        height=height,
        iterations=iterations,
        warmup_iterations=warmup_iterations,
        scale=scale,
        mem_sample_every=mem_sample_every,
        scenarios=scenarios,
        frameworks=frameworks,
        json_path=json_path,
        output_enabled=output_enabled,
    )


def make_timing_stats(average_ms: float = 2.0, count: int = 5) -> TimingStats:
    """Create TimingStats where every statistic derives from *average_ms*."""
    return TimingStats(
        count=count,
        average_ms=average_ms,
        median_ms=average_ms,
        p95_ms=average_ms * 1.5,
        min_ms=average_ms / 2,
        max_ms=average_ms * 2,
        std_dev_ms=0.25,
    )


def make_memory_sample(value: int = 0) -> MemorySample:
    """Create a MemorySample with every field set to *value*."""
    return MemorySample(
        rss=value,
        heap_total=value,
        heap_used=value,
        external=value,
        array_buffers=value,
    )


def make_scenario_result(
    framework: str = "core",
    scenario: str = "text_update",
    iterations: int = 5,
    warmup_iterations: int = 2,
    elapsed_ms: int = 12,
    settings: dict[str, str | int | float] | None = None,
    memory_stats: MemoryStats | None = None,
) -> ScenarioResult:
    """Create a ScenarioResult with build 1ms, render 3ms, total 4ms averages."""
    if settings is None:
        settings = {"scenario": scenario, "textLen": 256}
    return ScenarioResult(
        framework=framework,
        scenario=scenario,
        iterations=iterations,
        warmup_iterations=warmup_iterations,
        elapsed_ms=elapsed_ms,
        phase_stats=PhaseStats(
            total=make_timing_stats(4.0, iterations),
            build=make_timing_stats(1.0, iterations),
            render=make_timing_stats(3.0, iterations),
        ),
        settings=settings,
        derived=DerivedShares(build_share_pct_avg=25.0, render_share_pct_avg=75.0),
        memory_stats=memory_stats,
    )


# ── Pytest Fixtures ──────────────────────────────────────────────────────


@pytest.fixture
def in_memory_fs() -> InMemoryFileSystem:
    """Provide a stateful in-memory FileSystemPort."""
    return InMemoryFileSystem()


@pytest.fixture
def fake_probe() -> FakeMemoryProbe:
    """Provide a MemoryProbePort counting up 1 MiB per read."""
    return FakeMemoryProbe()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a clock advancing 1ms per call."""
    return FakeClock()


@pytest.fixture
def adapter_factory() -> RecordingAdapterFactory:
    """Provide an AdapterFactory that records requests and hands out fakes."""
    return RecordingAdapterFactory()


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    """Provide a standalone recording adapter."""
    return FakeAdapter()


@pytest.fixture
def run_config_factory() -> Callable[..., RunConfig]:
    """Provide the make_run_config factory function."""
    return make_run_config


@pytest.fixture
def result_factory() -> Callable[..., ScenarioResult]:
    """Provide the make_scenario_result factory function."""
    return make_scenario_result


@pytest.fixture
def sample_factory() -> Callable[..., MemorySample]:
    """Provide the make_memory_sample factory function."""
    return make_memory_sample
