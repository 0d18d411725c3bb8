"""Reporter module -- formats scenario results and persists run documents.

Produces one key=value line per scenario for terminal output and a JSON
document ``{runId, config, results}`` for machine consumption. JSON keys are
camelCase; an absent ``memoryStats`` is omitted rather than written as null.

This module depends only on domain/ types and has zero external imports beyond stdlib.
"""

from __future__ import annotations

import dataclasses
import json
import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from domain.errors import OutputConflictError, OutputError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from domain.models import MemoryStats, RunConfig, ScenarioResult
    from domain.ports import FileSystemPort

DEFAULT_JSON_FILENAME = "latest-frameworks-bench-run.json"

_MIB = 1024 * 1024


# ---------------------------------------------------------------------------
# Human-readable lines
# ---------------------------------------------------------------------------


def format_mib(value: int) -> str:
    """Format a byte count as MiB with two decimals."""
    return f"{value / _MIB:.2f}MB"


def format_run_header(config: RunConfig) -> str:
    """Return the line printed before the per-scenario lines."""
    return (
        f"framebench iters={config.iterations} warmup={config.warmup_iterations}"
        f" width={config.width} height={config.height} scale={config.scale:g}"
        f" memSampleEvery={config.mem_sample_every}"
    )


def _format_memory(mem: MemoryStats | None) -> str:
    if mem is None:
        return ""
    return (
        f" memDeltaRss={format_mib(mem.delta.rss)}"
        f" memDeltaHeap={format_mib(mem.delta.heap_used)}"
        f" memDeltaExt={format_mib(mem.delta.external)}"
        f" memDeltaAB={format_mib(mem.delta.array_buffers)}"
        f" memPeakRss={format_mib(mem.peak.rss)}"
    )


def format_scenario_result(result: ScenarioResult) -> str:
    """Return the one-line summary of a scenario result."""
    total = result.phase_stats.total
    build = result.phase_stats.build
    render = result.phase_stats.render
    phases = (
        f" totalAvgMs={total.average_ms:.3f} totalP95Ms={total.p95_ms:.3f}"
        f" buildAvgMs={build.average_ms:.3f} buildP95Ms={build.p95_ms:.3f}"
        f" renderAvgMs={render.average_ms:.3f} renderP95Ms={render.p95_ms:.3f}"
        f" buildShareAvgPct={result.derived.build_share_pct_avg:.1f}"
        f" renderShareAvgPct={result.derived.render_share_pct_avg:.1f}"
    )
    return (
        f"framework={result.framework} scenario={result.scenario} iters={total.count}"
        f" elapsedMs={result.elapsed_ms}{phases}{_format_memory(result.memory_stats)}"
    )


# ---------------------------------------------------------------------------
# JSON document
# ---------------------------------------------------------------------------


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_dict(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """dict_factory for dataclasses.asdict: camelCase keys, drop absent memory."""
    return {_camel(k): v for k, v in pairs if not (k == "memory_stats" and v is None)}


def result_to_dict(result: ScenarioResult) -> dict[str, Any]:
    """Convert a ScenarioResult to its JSON-serializable wire shape."""
    raw: dict[str, Any] = dataclasses.asdict(result, dict_factory=_camel_dict)
    return raw


def make_run_id(now: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    moment = now or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_run_document(
    config: RunConfig,
    results: Sequence[ScenarioResult],
    run_id: str | None = None,
) -> dict[str, Any]:
    """Assemble the ``{runId, config, results}`` document."""
    return {
        "runId": run_id or make_run_id(),
        "config": config.meta(),
        "results": [result_to_dict(r) for r in results],
    }


def summary_rows(document: dict[str, Any]) -> tuple[list[str], list[list[str]]]:
    """Flatten a saved run document into table headers and rows.

    Raises:
        KeyError: If a result entry lacks a required field.
    """
    headers = [
        "Framework",
        "Scenario",
        "Iters",
        "Total avg",
        "Total p95",
        "Build avg",
        "Render avg",
        "Build %",
        "Render %",
        "RSS delta",
    ]
    rows: list[list[str]] = []
    for entry in document.get("results", []):
        phases = entry["phaseStats"]
        derived = entry["derived"]
        memory = entry.get("memoryStats")
        rows.append(
            [
                str(entry["framework"]),
                str(entry["scenario"]),
                str(phases["total"]["count"]),
                f"{phases['total']['averageMs']:.3f}ms",
                f"{phases['total']['p95Ms']:.3f}ms",
                f"{phases['build']['averageMs']:.3f}ms",
                f"{phases['render']['averageMs']:.3f}ms",
                f"{derived['buildSharePctAvg']:.1f}",
                f"{derived['renderSharePctAvg']:.1f}",
                format_mib(memory["delta"]["rss"]) if memory else "--",
            ]
        )
    return headers, rows


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class ResultWriter:
    """Persists run documents without ever overwriting an existing file.

    Constructor-injected FileSystemPort handles all file I/O.
    This class contains only serialization and path-guard logic.
    """

    def __init__(self, fs: FileSystemPort) -> None:
        self._fs = fs

    def prepare(self, path: str) -> None:
        """Ensure *path* can be written: parent exists, file does not.

        Called before any scenario runs so a conflict aborts the run early.

        Raises:
            OutputError: If the parent directory cannot be created.
            OutputConflictError: If *path* already exists.
        """
        parent = os.path.dirname(path)
        if parent:
            try:
                self._fs.make_directory(parent)
            except OSError as exc:
                msg = f"cannot create output directory {parent}: {exc}"
                raise OutputError(msg) from exc
        if self._fs.file_exists(path):
            raise OutputConflictError(path)

    def write(self, path: str, document: dict[str, Any]) -> str:
        """Serialize *document* to *path* and return the path.

        Raises:
            OutputConflictError: If *path* appeared since ``prepare``.
        """
        if self._fs.file_exists(path):
            raise OutputConflictError(path)
        content = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        self._fs.write_file(path, content)
        return path

    def load(self, path: str) -> dict[str, Any]:
        """Read a run document back from *path*."""
        data: dict[str, Any] = json.loads(self._fs.read_file(path))
        return data
