"""Port interfaces for framebench.

All ports are defined as typing.Protocol -- structural subtyping means any class
with matching method signatures satisfies the Protocol without inheritance.

This module has ZERO external imports -- only stdlib and typing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from domain.models import ApplyPolicy, MemorySample, WorkloadPayload


class RendererAdapter(Protocol):
    """A rendering back-end driven by the harness.

    The harness never looks inside an adapter. It only sequences the calls:
    ``start`` once, then ``build``/``render`` pairs, then ``destroy`` once.
    """

    name: str

    async def start(self) -> None:
        """Acquire whatever the back-end needs before the first build."""
        ...

    async def build(self, payload: WorkloadPayload) -> None:
        """Apply a payload to the in-memory tree."""
        ...

    async def render(self) -> None:
        """Flush the tree to output."""
        ...

    async def destroy(self) -> None:
        """Release all resources held by the adapter."""
        ...


class AdapterFactory(Protocol):
    """Create the adapter for one (framework, scenario) pair."""

    def __call__(
        self,
        framework: str,
        scenario: str,
        policy: ApplyPolicy,
        width: int,
        height: int,
    ) -> RendererAdapter: ...


class MemoryProbePort(Protocol):
    """Abstraction over process memory inspection."""

    def read(self) -> MemorySample:
        """Return a snapshot of current process memory usage."""
        ...


class FileSystemPort(Protocol):
    """Abstraction over the file operations the result writer needs."""

    def read_file(self, path: str) -> str:
        """Read and return the contents of a file."""
        ...

    def write_file(self, path: str, content: str) -> None:
        """Write content to a file, creating parent directories as needed."""
        ...

    def file_exists(self, path: str) -> bool:
        """Return True if the file exists."""
        ...

    def make_directory(self, path: str) -> None:
        """Create a directory (and parents) if it doesn't exist."""
        ...
