#!/usr/bin/env python3
"""
framebench CLI -- Entry point for the rendering benchmark harness.

Usage:
  framebench run [--iterations N] [--warmup-iterations N] [--width N] [--height N]
                 [--scale X] [--mem-sample-every N] [--scenario NAME ...]
                 [--framework NAME ...] [--json [PATH]] [--no-output]
                 [--config PATH] [--verbose | --quiet] [--trace]
  framebench scenarios
  framebench show <path>

Exit status is 1 when the JSON output path already exists or its directory
cannot be created (checked before any scenario runs), when a scenario or
framework name is unknown, or when the config file is unusable. Renderer
failures propagate with a traceback and no JSON is written.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from domain.errors import (
    ConfigurationError,
    OutputError,
    UnknownFrameworkError,
    UnknownScenarioError,
)
from kernel.console import configure, console

logger = logging.getLogger("framebench")

# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------


def cmd_run(args: argparse.Namespace) -> None:
    """Run the benchmark and report results."""
    import wiring
    from kernel.config import find_config_file, load_config_file, resolve_run_config
    from modules.reporter.core import (
        build_run_document,
        format_run_header,
        format_scenario_result,
    )

    project_root = Path.cwd()

    try:
        config_path = find_config_file(args.config, project_root)
        file_values = load_config_file(config_path) if config_path else {}
    except ConfigurationError as exc:
        console.error(str(exc))
        sys.exit(1)

    config = resolve_run_config(
        {
            "iterations": args.iterations,
            "warmup_iterations": args.warmup_iterations,
            "width": args.width,
            "height": args.height,
            "scale": args.scale,
            "mem_sample_every": args.mem_sample_every,
            "scenarios": args.scenarios,
            "frameworks": args.frameworks,
            "json": args.json,
            "output": args.output,
        },
        file_values,
        cwd=str(project_root),
    )
    logger.info("Resolved run config: %s", config)

    writer = wiring.create_result_writer(str(project_root))
    if config.json_path:
        try:
            writer.prepare(config.json_path)
        except OutputError as exc:
            console.error(f"Error: {exc}")
            sys.exit(1)

    try:
        harness = wiring.create_harness(
            config,
            progress=console.step if config.output_enabled else None,
        )
    except (UnknownScenarioError, UnknownFrameworkError) as exc:
        console.error(str(exc))
        sys.exit(1)

    try:
        results = asyncio.run(harness.run())
    except KeyboardInterrupt:
        console.warning("Interrupted. No results written.")
        sys.exit(130)
    except Exception:
        logger.exception("Benchmark run aborted")
        raise

    if config.output_enabled:
        console.line(format_run_header(config))
        for result in results:
            console.line(format_scenario_result(result))

    if config.json_path:
        path = writer.write(config.json_path, build_run_document(config, results))
        logger.info("Results written to %s", path)
        if config.output_enabled:
            console.success(f"Results written to {path}")


def cmd_scenarios() -> None:
    """List registered scenarios and frameworks."""
    import wiring
    from modules.workload.core import SCENARIOS

    rows: list[list[str]] = []
    for name, spec in SCENARIOS.items():
        settings = spec.build(1.0).settings
        sizes = " ".join(f"{k}={v}" for k, v in settings.items() if k != "scenario")
        rows.append([name, spec.policy.value, sizes, spec.description])
    console.table(["Scenario", "Policy", "Settings (scale 1)", "Description"], rows, title="Scenarios")
    console.info(f"Frameworks: {', '.join(wiring.framework_names())}")


def cmd_show(args: argparse.Namespace) -> None:
    """Display a saved JSON run document."""
    import wiring
    from modules.reporter.core import summary_rows

    writer = wiring.create_result_writer(str(Path.cwd()))
    try:
        document = writer.load(args.path)
        headers, rows = summary_rows(document)
    except (OSError, json.JSONDecodeError, KeyError, TypeError) as exc:
        console.error(f"Cannot read run document {args.path}: {exc}")
        sys.exit(1)

    config = document.get("config", {})
    console.kv(
        {"Run": str(document.get("runId", "--")), **{k: str(v) for k, v in config.items()}},
        title="Run",
    )
    if rows:
        console.table(headers, rows, title="Results")
    else:
        console.info("No results in document.")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _setup_logging(project_root: Path, *, verbose: bool, quiet: bool) -> None:
    """Configure the file-based audit log under .framebench/."""
    from kernel.config import log_file

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    path = log_file(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(path),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        level=level,
    )


def _enable_trace() -> None:
    """Emit one DEBUG record per measured iteration, whatever the log level."""
    logging.getLogger("framebench.runner").setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    from modules.reporter.core import DEFAULT_JSON_FILENAME

    parser = argparse.ArgumentParser(
        prog="framebench",
        description="framebench -- compare UI update cost across rendering back-ends",
    )
    parser.add_argument(
        "--console",
        choices=["auto", "rich", "plain"],
        default="auto",
        help="Terminal output style (default: auto)",
    )
    sub = parser.add_subparsers(dest="command")

    # framebench run
    # Numeric flags are parsed as strings: bad values fall back to defaults.
    run_p = sub.add_parser("run", help="Run benchmark scenarios")
    run_p.add_argument("-i", "--iterations", default=None, help="Measured iterations per scenario (default: 800)")
    run_p.add_argument("--warmup-iterations", default=None, help="Warmup iterations per scenario (default: 80)")
    run_p.add_argument("--width", default=None, help="Renderer viewport width (default: 140, min 40)")
    run_p.add_argument("--height", default=None, help="Renderer viewport height (default: 48, min 12)")
    run_p.add_argument("--scale", default=None, help="Dataset size multiplier (default: 1, min 0.25)")
    run_p.add_argument(
        "--mem-sample-every",
        default=None,
        help="Sample memory every N iterations, 0 disables (default: 10)",
    )
    run_p.add_argument(
        "--scenario",
        dest="scenarios",
        action="append",
        default=None,
        help="Scenario to run (repeatable, default: all)",
    )
    run_p.add_argument(
        "--framework",
        dest="frameworks",
        action="append",
        default=None,
        help="Framework to run (repeatable, default: all)",
    )
    run_p.add_argument(
        "--json",
        nargs="?",
        const=DEFAULT_JSON_FILENAME,
        default=None,
        metavar="PATH",
        help=f"Write JSON results to PATH (default: {DEFAULT_JSON_FILENAME})",
    )
    run_p.add_argument("--no-output", dest="output", action="store_false", help="Suppress stdout output")
    run_p.add_argument("--config", default=None, help="YAML config file (default: .framebench/config.yaml)")
    run_p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    run_p.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    run_p.add_argument(
        "--trace",
        action="store_true",
        help="Log per-iteration build/render timings to the run log",
    )

    # framebench scenarios
    sub.add_parser("scenarios", help="List registered scenarios and frameworks")

    # framebench show
    show_p = sub.add_parser("show", help="Display a saved JSON run document")
    show_p.add_argument("path", help="Path to the JSON document")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # -- Console configuration (TUI output) ---------------------------------
    configure(backend=args.console)

    if args.command == "run":
        _setup_logging(Path.cwd(), verbose=args.verbose, quiet=args.quiet)
        if args.trace:
            _enable_trace()
        cmd_run(args)
    elif args.command == "scenarios":
        cmd_scenarios()
    elif args.command == "show":
        cmd_show(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
