"""Runner module -- drive one workload against one adapter and time it.

A ``ScenarioRunner`` walks ``NOT_STARTED -> WARMUP -> MEASURING -> DONE``.
Warmup runs the same generate-and-apply path as measurement but keeps no
durations. During measurement each iteration is split by ``PhaseTimer``
into build and render phases; the total is the wall-clock span from
before build to after render, so it includes any gap between the two.

Iterations are strictly sequential: iteration ``i + 1`` starts only after
iteration ``i``'s build and render have resolved. Adapter exceptions are
neither retried nor suppressed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from domain.models import (
    PhaseDurations,
    PhaseStats,
    RunnerState,
    ScenarioResult,
    WorkloadPayload,
)
from modules.stats.core import compute_timing_stats, derive_shares

if TYPE_CHECKING:
    from domain.ports import RendererAdapter
    from modules.memory.core import MemorySampler
    from modules.workload.core import Workload

logger = logging.getLogger("framebench.runner")

Clock = Callable[[], float]


class PhaseTimer:
    """Times a build step and a render step with a monotonic clock.

    The clock returns seconds; durations are reported in milliseconds.
    """

    def __init__(self, clock: Clock = time.perf_counter) -> None:
        self._clock = clock

    async def time(
        self,
        build: Callable[[], Awaitable[object]],
        render: Callable[[], Awaitable[object]],
    ) -> PhaseDurations:
        clock = self._clock
        started = clock()
        build_start = clock()
        await build()
        build_end = clock()
        render_start = clock()
        await render()
        render_end = clock()
        return PhaseDurations(
            build_ms=(build_end - build_start) * 1000,
            render_ms=(render_end - render_start) * 1000,
            total_ms=(render_end - started) * 1000,
        )


class ScenarioRunner:
    """Runs warmup and measured iterations of one workload on one adapter.

    A runner is single-use; the adapter is started on entry to ``run`` and
    destroyed on exit, whether the run succeeded or not.
    """

    def __init__(
        self,
        *,
        framework: str,
        workload: Workload,
        adapter: RendererAdapter,
        iterations: int,
        warmup_iterations: int,
        sampler: MemorySampler,
        clock: Clock = time.perf_counter,
    ) -> None:
        self._framework = framework
        self._workload = workload
        self._adapter = adapter
        self._iterations = iterations
        self._warmup_iterations = warmup_iterations
        self._sampler = sampler
        self._clock = clock
        self._timer = PhaseTimer(clock)
        self._state = RunnerState.NOT_STARTED
        self._total_ms: list[float] = []
        self._build_ms: list[float] = []
        self._render_ms: list[float] = []

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def durations(self) -> tuple[tuple[float, ...], tuple[float, ...], tuple[float, ...]]:
        """Recorded (total, build, render) durations, in iteration order."""
        return tuple(self._total_ms), tuple(self._build_ms), tuple(self._render_ms)

    async def _apply(self, payload: WorkloadPayload) -> None:
        await self._adapter.build(payload)
        await self._adapter.render()

    async def _measure(self, payload: WorkloadPayload) -> None:
        durations = await self._timer.time(
            lambda: self._adapter.build(payload),
            self._adapter.render,
        )
        self._total_ms.append(durations.total_ms)
        self._build_ms.append(durations.build_ms)
        self._render_ms.append(durations.render_ms)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s/%s: iteration %d build=%.3fms render=%.3fms total=%.3fms",
                self._framework,
                self._workload.scenario.name,
                len(self._total_ms) - 1,
                durations.build_ms,
                durations.render_ms,
                durations.total_ms,
            )

    async def run(self) -> ScenarioResult:
        """Execute warmup then measurement and return the aggregated result."""
        if self._state is not RunnerState.NOT_STARTED:
            msg = f"runner for {self._workload.scenario.name} has already run"
            raise RuntimeError(msg)

        name = self._workload.scenario.name
        try:
            await self._adapter.start()

            self._state = RunnerState.WARMUP
            logger.info("%s/%s: warmup x%d", self._framework, name, self._warmup_iterations)
            await self._workload.warmup(self._apply, self._warmup_iterations)

            self._state = RunnerState.MEASURING
            logger.info("%s/%s: measuring x%d", self._framework, name, self._iterations)
            started = self._clock()
            self._sampler.begin()
            await self._workload.run(self._measure, self._iterations, self._sampler.on_iteration_done)
            elapsed_ms = round((self._clock() - started) * 1000)
            memory_stats = self._sampler.finish()

            if len(self._total_ms) != self._iterations:
                msg = f"{name}: recorded {len(self._total_ms)} of {self._iterations} iterations"
                raise RuntimeError(msg)
            self._state = RunnerState.DONE
        finally:
            await self._adapter.destroy()

        phase_stats = PhaseStats(
            total=compute_timing_stats(self._total_ms),
            build=compute_timing_stats(self._build_ms),
            render=compute_timing_stats(self._render_ms),
        )
        logger.info(
            "%s/%s: done in %dms, avg total %.3fms",
            self._framework,
            name,
            elapsed_ms,
            phase_stats.total.average_ms,
        )
        return ScenarioResult(
            framework=self._framework,
            scenario=name,
            iterations=self._iterations,
            warmup_iterations=self._warmup_iterations,
            elapsed_ms=elapsed_ms,
            phase_stats=phase_stats,
            settings=dict(self._workload.settings),
            derived=derive_shares(phase_stats),
            memory_stats=memory_stats,
        )
