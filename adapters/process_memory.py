"""Process memory probe implementing MemoryProbePort.

Field mapping onto MemorySample:
- rss: resident set size
- heap_total: virtual memory size
- heap_used: data segment size (0 where the platform does not report it)
- external: shared memory (0 where the platform does not report it)
- array_buffers: bytes traced by tracemalloc, 0 unless tracing is active
"""

from __future__ import annotations

import tracemalloc

import psutil

from domain.models import MemorySample


class ProcessMemoryProbe:
    """Concrete MemoryProbePort reading the current (or given) process."""

    def __init__(self, pid: int | None = None) -> None:
        self._process = psutil.Process(pid)

    def read(self) -> MemorySample:
        """Return a snapshot of the process's memory usage."""
        info = self._process.memory_info()
        traced = tracemalloc.get_traced_memory()[0] if tracemalloc.is_tracing() else 0
        return MemorySample(
            rss=info.rss,
            heap_total=info.vms,
            heap_used=getattr(info, "data", 0),
            external=getattr(info, "shared", 0),
            array_buffers=traced,
        )
