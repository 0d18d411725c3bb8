"""
kernel/harness.py -- Sequential benchmark orchestration.

Runs every requested (framework, scenario) pair one after another, one fresh
adapter per pair, and collects the results in execution order. All names
are resolved when the harness is built, so a typo fails the run before any
adapter is created or any iteration executes.

The harness holds only run-scoped state; several harnesses can coexist in
one process.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from domain.errors import UnknownFrameworkError
from modules.memory.core import MemorySampler
from modules.runner.core import ScenarioRunner
from modules.workload.core import create_workload, scenario_names

if TYPE_CHECKING:
    from domain.models import RunConfig, ScenarioResult
    from domain.ports import AdapterFactory, MemoryProbePort
    from modules.workload.core import Workload

logger = logging.getLogger("framebench.harness")

ProgressFn = Callable[[int, int, str], None]


class BenchmarkHarness:
    """Runs frameworks x scenarios in order and owns the results list."""

    def __init__(
        self,
        config: RunConfig,
        *,
        adapter_factory: AdapterFactory,
        probe: MemoryProbePort,
        available_frameworks: Sequence[str],
        clock: Callable[[], float] = time.perf_counter,
        progress: ProgressFn | None = None,
    ) -> None:
        self._config = config
        self._adapter_factory = adapter_factory
        self._probe = probe
        self._clock = clock
        self._progress = progress

        names = config.scenarios or tuple(scenario_names())
        self._workloads: tuple[Workload, ...] = tuple(
            create_workload(name, config.scale) for name in names
        )

        frameworks = config.frameworks or tuple(available_frameworks)
        for framework in frameworks:
            if framework not in available_frameworks:
                raise UnknownFrameworkError(framework)
        self._frameworks: tuple[str, ...] = tuple(frameworks)

        self._results: list[ScenarioResult] = []
        self._started = False

    @property
    def plan(self) -> list[tuple[str, str]]:
        """The (framework, scenario) pairs in execution order."""
        return [(f, w.scenario.name) for f in self._frameworks for w in self._workloads]

    @property
    def results(self) -> tuple[ScenarioResult, ...]:
        return tuple(self._results)

    async def run(self) -> list[ScenarioResult]:
        """Execute the plan. Any adapter exception aborts the remaining pairs."""
        if self._started:
            msg = "harness has already run"
            raise RuntimeError(msg)
        self._started = True

        config = self._config
        total = len(self._frameworks) * len(self._workloads)
        logger.info("Running %d scenario(s) across %s", total, ", ".join(self._frameworks))

        step = 0
        for framework in self._frameworks:
            for workload in self._workloads:
                step += 1
                name = workload.scenario.name
                if self._progress is not None:
                    self._progress(step, total, f"{framework}/{name}")
                adapter = self._adapter_factory(
                    framework, name, workload.policy, config.width, config.height
                )
                runner = ScenarioRunner(
                    framework=framework,
                    workload=workload,
                    adapter=adapter,
                    iterations=config.iterations,
                    warmup_iterations=config.warmup_iterations,
                    sampler=MemorySampler(self._probe, config.mem_sample_every),
                    clock=self._clock,
                )
                self._results.append(await runner.run())

        return list(self._results)
