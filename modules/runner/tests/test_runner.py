"""Tests for the phase timer and the scenario runner state machine."""

from __future__ import annotations

import logging

import pytest

from domain.models import RunnerState, WorkloadPayload
from modules.memory.core import MemorySampler
from modules.runner.core import PhaseTimer, ScenarioRunner
from modules.workload.core import create_workload


def _runner(adapter, probe, clock, *, iterations=5, warmup=2, every=0, scenario="text_update"):
    return ScenarioRunner(
        framework="fake",
        workload=create_workload(scenario, 0.25),
        adapter=adapter,
        iterations=iterations,
        warmup_iterations=warmup,
        sampler=MemorySampler(probe, every),
        clock=clock,
    )


# ── PhaseTimer ────────────────────────────────────────────────────────────


async def test_phase_timer_splits_phases(fake_clock) -> None:
    fake_clock.step = 1.0
    order: list[str] = []

    async def build() -> None:
        order.append("build")

    async def render() -> None:
        order.append("render")

    durations = await PhaseTimer(fake_clock).time(build, render)
    assert order == ["build", "render"]
    assert durations.build_ms == 1000.0
    assert durations.render_ms == 1000.0
    # Total spans from before build to after render, gaps included.
    assert durations.total_ms == 4000.0
    assert durations.total_ms >= durations.build_ms + durations.render_ms


# ── ScenarioRunner ────────────────────────────────────────────────────────


async def test_records_exactly_iterations(fake_adapter, fake_probe, fake_clock) -> None:
    runner = _runner(fake_adapter, fake_probe, fake_clock, iterations=7, warmup=3)
    result = await runner.run()

    totals, builds, renders = runner.durations
    assert len(totals) == len(builds) == len(renders) == 7
    assert result.phase_stats.total.count == 7
    assert result.phase_stats.build.count == 7
    assert result.phase_stats.render.count == 7
    assert result.iterations == 7
    assert result.warmup_iterations == 3


async def test_adapter_lifecycle_order(fake_adapter, fake_probe, fake_clock) -> None:
    await _runner(fake_adapter, fake_probe, fake_clock, iterations=2, warmup=1).run()
    assert fake_adapter.calls == [
        "start",
        "build",
        "render",
        "build",
        "render",
        "build",
        "render",
        "destroy",
    ]


async def test_warmup_is_applied_but_not_recorded(fake_adapter, fake_probe, fake_clock) -> None:
    """Warmup and measurement both start from seed 0."""
    runner = _runner(fake_adapter, fake_probe, fake_clock, iterations=3, warmup=2)
    await runner.run()
    workload = create_workload("text_update", 0.25)
    assert fake_adapter.payloads == [
        workload.generate(0),
        workload.generate(1),
        workload.generate(0),
        workload.generate(1),
        workload.generate(2),
    ]
    assert len(runner.durations[0]) == 3


async def test_durations_from_clock(fake_adapter, fake_probe, fake_clock) -> None:
    fake_clock.step = 1.0
    result = await _runner(fake_adapter, fake_probe, fake_clock, iterations=5, warmup=0).run()
    stats = result.phase_stats
    assert stats.build.average_ms == 1000.0
    assert stats.render.average_ms == 1000.0
    assert stats.total.average_ms == 4000.0
    assert stats.total.std_dev_ms == 0.0
    # 5 clock reads per iteration plus the two around the loop.
    assert result.elapsed_ms == 26000
    assert result.derived.build_share_pct_avg == 25.0
    assert result.derived.render_share_pct_avg == 25.0


async def test_result_carries_settings(fake_adapter, fake_probe, fake_clock) -> None:
    result = await _runner(fake_adapter, fake_probe, fake_clock, scenario="list_mutate_10pct").run()
    assert result.framework == "fake"
    assert result.scenario == "list_mutate_10pct"
    assert result.settings == {
        "scenario": "list_mutate_10pct",
        "itemsCount": 50,
        "textLen": 5,
        "mutatePct": 0.1,
        "mutateCount": 5,
    }
    assert result.memory_stats is None


async def test_memory_sampling(fake_adapter, fake_probe, fake_clock) -> None:
    result = await _runner(fake_adapter, fake_probe, fake_clock, iterations=5, every=2).run()
    assert result.memory_stats is not None
    assert result.memory_stats.samples == 4
    assert fake_probe.reads == 4


async def test_state_transitions(fake_adapter, fake_probe, fake_clock) -> None:
    seen: list[RunnerState] = []
    runner = _runner(fake_adapter, fake_probe, fake_clock, iterations=2, warmup=2)
    original_build = fake_adapter.build

    async def spying_build(payload: WorkloadPayload) -> None:
        seen.append(runner.state)
        await original_build(payload)

    fake_adapter.build = spying_build
    assert runner.state is RunnerState.NOT_STARTED
    await runner.run()
    assert runner.state is RunnerState.DONE
    assert seen == [
        RunnerState.WARMUP,
        RunnerState.WARMUP,
        RunnerState.MEASURING,
        RunnerState.MEASURING,
    ]


async def test_adapter_error_propagates_and_destroys(adapter_factory, fake_probe, fake_clock) -> None:
    adapter_factory.fail_on_build = 3
    adapter = adapter_factory("fake", "text_update", None, 80, 24)
    runner = _runner(adapter, fake_probe, fake_clock, iterations=5, warmup=2)

    with pytest.raises(RuntimeError, match="build 3 failed"):
        await runner.run()

    assert adapter.destroyed
    assert adapter.calls[-1] == "destroy"
    assert runner.state is RunnerState.MEASURING
    assert runner.durations == ((), (), ())


async def test_render_error_during_warmup(adapter_factory, fake_probe, fake_clock) -> None:
    adapter_factory.fail_on_render = 1
    adapter = adapter_factory("fake", "text_update", None, 80, 24)
    runner = _runner(adapter, fake_probe, fake_clock, iterations=5, warmup=2)

    with pytest.raises(RuntimeError, match="render 1 failed"):
        await runner.run()

    assert runner.state is RunnerState.WARMUP
    assert adapter.destroyed


async def test_runner_is_single_use(fake_adapter, fake_probe, fake_clock) -> None:
    runner = _runner(fake_adapter, fake_probe, fake_clock)
    await runner.run()
    with pytest.raises(RuntimeError, match="already run"):
        await runner.run()


async def test_debug_trace_per_measured_iteration(
    fake_adapter, fake_probe, fake_clock, caplog: pytest.LogCaptureFixture
) -> None:
    fake_clock.step = 1.0
    caplog.set_level(logging.DEBUG, logger="framebench.runner")
    await _runner(fake_adapter, fake_probe, fake_clock, iterations=3, warmup=2).run()

    traces = [r.getMessage() for r in caplog.records if "iteration" in r.getMessage()]
    assert traces == [
        f"fake/text_update: iteration {i} build=1000.000ms render=1000.000ms total=4000.000ms"
        for i in range(3)
    ]


async def test_no_trace_above_debug(fake_adapter, fake_probe, fake_clock, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="framebench.runner")
    await _runner(fake_adapter, fake_probe, fake_clock).run()
    assert not [r for r in caplog.records if "iteration" in r.getMessage()]
