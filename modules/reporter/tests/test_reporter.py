"""Tests for result formatting, the JSON run document and the result writer."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from domain.errors import OutputConflictError, OutputError
from domain.models import MemoryStats
from modules.memory.core import compute_memory_stats
from modules.reporter.core import (
    DEFAULT_JSON_FILENAME,
    ResultWriter,
    build_run_document,
    format_mib,
    format_run_header,
    format_scenario_result,
    make_run_id,
    result_to_dict,
    summary_rows,
)

_MIB = 1024 * 1024


def _memory(sample_factory) -> MemoryStats:
    return compute_memory_stats([sample_factory(3 * _MIB)], sample_factory(_MIB), sample_factory(2 * _MIB))


# ── Human-readable lines ──────────────────────────────────────────────────


def test_format_mib() -> None:
    assert format_mib(0) == "0.00MB"
    assert format_mib(_MIB) == "1.00MB"
    assert format_mib(-_MIB // 2) == "-0.50MB"


def test_run_header(run_config_factory) -> None:
    config = run_config_factory(iterations=800, warmup_iterations=80, width=140, height=48, mem_sample_every=10)
    assert format_run_header(config) == (
        "framebench iters=800 warmup=80 width=140 height=48 scale=1 memSampleEvery=10"
    )
    assert "scale=0.25" in format_run_header(run_config_factory(scale=0.25))


def test_scenario_line_without_memory(result_factory) -> None:
    assert format_scenario_result(result_factory()) == (
        "framework=core scenario=text_update iters=5 elapsedMs=12"
        " totalAvgMs=4.000 totalP95Ms=6.000"
        " buildAvgMs=1.000 buildP95Ms=1.500"
        " renderAvgMs=3.000 renderP95Ms=4.500"
        " buildShareAvgPct=25.0 renderShareAvgPct=75.0"
    )


def test_scenario_line_with_memory(result_factory, sample_factory) -> None:
    line = format_scenario_result(result_factory(memory_stats=_memory(sample_factory)))
    assert line.endswith(
        " memDeltaRss=1.00MB memDeltaHeap=1.00MB memDeltaExt=1.00MB memDeltaAB=1.00MB memPeakRss=3.00MB"
    )


# ── JSON document ─────────────────────────────────────────────────────────


class TestRunDocument:
    def test_camel_case_keys(self, result_factory) -> None:
        data = result_to_dict(result_factory())
        assert set(data) == {
            "framework",
            "scenario",
            "iterations",
            "warmupIterations",
            "elapsedMs",
            "phaseStats",
            "settings",
            "derived",
        }
        assert set(data["phaseStats"]["total"]) == {
            "count",
            "averageMs",
            "medianMs",
            "p95Ms",
            "minMs",
            "maxMs",
            "stdDevMs",
        }
        assert data["derived"] == {"buildSharePctAvg": 25.0, "renderSharePctAvg": 75.0}
        assert data["settings"] == {"scenario": "text_update", "textLen": 256}

    def test_memory_stats_omitted_when_absent(self, result_factory) -> None:
        assert "memoryStats" not in result_to_dict(result_factory())

    def test_memory_stats_present(self, result_factory, sample_factory) -> None:
        data = result_to_dict(result_factory(memory_stats=_memory(sample_factory)))
        memory = data["memoryStats"]
        assert memory["samples"] == 3
        assert set(memory["delta"]) == {"rss", "heapTotal", "heapUsed", "external", "arrayBuffers"}
        assert memory["peak"]["rss"] == 3 * _MIB

    def test_document_shape(self, run_config_factory, result_factory) -> None:
        config = run_config_factory(iterations=800, warmup_iterations=80, scale=1.5, mem_sample_every=10)
        doc = build_run_document(config, [result_factory(), result_factory(framework="rich")], run_id="r1")
        assert doc["runId"] == "r1"
        assert doc["config"] == {
            "width": 80,
            "height": 24,
            "iterations": 800,
            "warmupIterations": 80,
            "scale": 1.5,
            "memSampleEvery": 10,
        }
        assert [r["framework"] for r in doc["results"]] == ["core", "rich"]
        json.dumps(doc)

    def test_run_id_format(self) -> None:
        moment = datetime(2026, 1, 2, 3, 4, 5, 678900, tzinfo=UTC)
        assert make_run_id(moment) == "2026-01-02T03:04:05.678Z"
        assert make_run_id().endswith("Z")

    def test_summary_rows(self, run_config_factory, result_factory, sample_factory) -> None:
        doc = build_run_document(
            run_config_factory(),
            [result_factory(), result_factory(memory_stats=_memory(sample_factory))],
        )
        headers, rows = summary_rows(doc)
        assert len(headers) == len(rows[0])
        assert rows[0][:4] == ["core", "text_update", "5", "4.000ms"]
        assert rows[0][-1] == "--"
        assert rows[1][-1] == "1.00MB"

    def test_summary_rows_missing_field(self) -> None:
        with pytest.raises(KeyError):
            summary_rows({"results": [{"framework": "core"}]})


# ── ResultWriter ──────────────────────────────────────────────────────────


class TestResultWriter:
    def test_prepare_creates_parent(self, in_memory_fs) -> None:
        ResultWriter(in_memory_fs).prepare("out/run.json")
        assert "out" in in_memory_fs.created_dirs

    def test_prepare_rejects_existing(self, in_memory_fs) -> None:
        in_memory_fs.write_file("run.json", "{}")
        with pytest.raises(OutputConflictError, match="output file already exists: run.json"):
            ResultWriter(in_memory_fs).prepare("run.json")

    def test_prepare_mkdir_failure(self, in_memory_fs) -> None:
        in_memory_fs.fail_mkdir = True
        with pytest.raises(OutputError, match="cannot create output directory out") as info:
            ResultWriter(in_memory_fs).prepare("out/run.json")
        assert not isinstance(info.value, OutputConflictError)

    def test_write_and_load(self, in_memory_fs, run_config_factory, result_factory) -> None:
        writer = ResultWriter(in_memory_fs)
        doc = build_run_document(run_config_factory(), [result_factory()], run_id="r1")
        assert writer.write(DEFAULT_JSON_FILENAME, doc) == DEFAULT_JSON_FILENAME
        raw = in_memory_fs.read_file(DEFAULT_JSON_FILENAME)
        assert raw.endswith("}\n")
        assert raw.startswith('{\n  "runId": "r1"')
        assert writer.load(DEFAULT_JSON_FILENAME) == doc

    def test_write_never_overwrites(self, in_memory_fs) -> None:
        in_memory_fs.write_file("run.json", "keep")
        with pytest.raises(OutputConflictError):
            ResultWriter(in_memory_fs).write("run.json", {"runId": "x"})
        assert in_memory_fs.read_file("run.json") == "keep"
