"""Exception taxonomy for framebench.

Adapter failures have no class here: whatever an adapter raises
propagates unchanged and aborts the run.
"""

from __future__ import annotations


class BenchmarkError(Exception):
    """Base class for errors raised by the harness itself."""


class ConfigurationError(BenchmarkError):
    """A configuration file could not be read or is not a mapping."""


class OutputError(BenchmarkError):
    """The JSON output location is unusable."""


class OutputConflictError(OutputError):
    """The JSON output path already exists."""

    def __init__(self, path: str) -> None:
        super().__init__(f"output file already exists: {path}")
        self.path = path


class UnknownScenarioError(BenchmarkError):
    """No generator is registered under the requested scenario name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown scenario: {name}")
        self.name = name


class UnknownFrameworkError(BenchmarkError):
    """No adapter is registered under the requested framework name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown framework: {name}")
        self.name = name
