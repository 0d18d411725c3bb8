"""
wiring.py -- Framework registry and collaborator factories.

Maps each framework name to its renderer adapter and assembles the objects
the kernel needs (harness, memory probe, result writer). The kernel never
imports a concrete adapter; adding a framework means adding one entry to
``FRAMEWORKS``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from adapters.local_fs import LocalFileSystem
from adapters.process_memory import ProcessMemoryProbe
from adapters.rich_console import RichAdapter
from adapters.textual_app import TextualAdapter
from adapters.tree import TreeAdapter
from domain.errors import UnknownFrameworkError
from kernel.harness import BenchmarkHarness, ProgressFn
from modules.reporter.core import ResultWriter

if TYPE_CHECKING:
    from domain.models import ApplyPolicy, RunConfig
    from domain.ports import AdapterFactory, MemoryProbePort, RendererAdapter

logger = logging.getLogger("framebench.wiring")

_AdapterCtor = Callable[["ApplyPolicy", int, int], "RendererAdapter"]

# Registration order is the default run order.
FRAMEWORKS: dict[str, _AdapterCtor] = {
    "core": TreeAdapter,
    "rich": RichAdapter,
    "textual": TextualAdapter,
}


def framework_names() -> list[str]:
    """Return registered framework names in default run order."""
    return list(FRAMEWORKS)


def create_adapter(
    framework: str,
    scenario: str,
    policy: ApplyPolicy,
    width: int,
    height: int,
) -> RendererAdapter:
    """Build a fresh adapter for one (framework, scenario) pair.

    Raises:
        UnknownFrameworkError: If *framework* is not registered.
    """
    ctor = FRAMEWORKS.get(framework)
    if ctor is None:
        raise UnknownFrameworkError(framework)
    logger.debug("Creating %s adapter for %s (%s, %dx%d)", framework, scenario, policy.value, width, height)
    return ctor(policy, width, height)


def create_memory_probe() -> ProcessMemoryProbe:
    """Return a probe for the current process."""
    return ProcessMemoryProbe()


def create_result_writer(base_dir: str) -> ResultWriter:
    """Return a ResultWriter rooted at *base_dir*."""
    return ResultWriter(LocalFileSystem(base_dir))


def create_harness(
    config: RunConfig,
    *,
    adapter_factory: AdapterFactory | None = None,
    probe: MemoryProbePort | None = None,
    progress: ProgressFn | None = None,
) -> BenchmarkHarness:
    """Assemble a harness for *config* from the registered frameworks.

    Raises:
        UnknownScenarioError: If a requested scenario is not registered.
        UnknownFrameworkError: If a requested framework is not registered.
    """
    return BenchmarkHarness(
        config,
        adapter_factory=adapter_factory or create_adapter,
        probe=probe or create_memory_probe(),
        available_frameworks=framework_names(),
        progress=progress,
    )
