"""
kernel/config.py -- Defaults, limits and run-configuration resolution.

Numeric settings are parsed leniently: anything that is not a finite number
silently falls back to its documented default, then gets floored and clamped.
Values come from CLI flags first, then an optional YAML config file, then
the defaults below.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from domain.errors import ConfigurationError
from domain.models import RunConfig

logger = logging.getLogger("framebench.config")

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

STATE_DIR = ".framebench"
CONFIG_FILE = "config.yaml"
LOG_FILE = "framebench.log"


def state_dir(project_root: Path) -> Path:
    """Return the .framebench directory path under *project_root*."""
    return project_root / STATE_DIR


def config_file(project_root: Path) -> Path:
    """Return the default config.yaml path."""
    return state_dir(project_root) / CONFIG_FILE


def log_file(project_root: Path) -> Path:
    """Return the audit log path."""
    return state_dir(project_root) / LOG_FILE


# ---------------------------------------------------------------------------
# Run defaults and limits
# ---------------------------------------------------------------------------

DEFAULT_ITERATIONS = 800
DEFAULT_WARMUP_ITERATIONS = 80
DEFAULT_WIDTH = 140
DEFAULT_HEIGHT = 48
DEFAULT_SCALE = 1.0
DEFAULT_MEM_SAMPLE_EVERY = 10

MIN_ITERATIONS = 1
MIN_WARMUP_ITERATIONS = 0
MIN_WIDTH = 40
MIN_HEIGHT = 12
MIN_SCALE = 0.25
MIN_MEM_SAMPLE_EVERY = 0

# Keys accepted in the YAML config file.
CONFIG_KEYS = (
    "iterations",
    "warmup_iterations",
    "width",
    "height",
    "scale",
    "mem_sample_every",
    "scenarios",
    "frameworks",
)


# ---------------------------------------------------------------------------
# Lenient parsing
# ---------------------------------------------------------------------------


def to_number(value: object, fallback: float) -> float:
    """Return *value* as a finite float, or *fallback* if it is not one."""
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else fallback
    if isinstance(value, str) and value.strip():
        if "_" in value:  # float() would accept digit separators
            logger.debug("Ignoring non-numeric value %r", value)
            return fallback
        try:
            parsed = float(value)
        except ValueError:
            logger.debug("Ignoring non-numeric value %r", value)
            return fallback
        if math.isfinite(parsed):
            return parsed
    return fallback


def floored(value: object, fallback: int, minimum: int) -> int:
    """Parse, floor and clamp an integer setting."""
    return max(minimum, math.floor(to_number(value, fallback)))


def normalize_names(values: object) -> tuple[str, ...]:
    """Strip and lowercase names, dropping blanks. Accepts a scalar or a list."""
    if not values:
        return ()
    items: Iterable[object] = values if isinstance(values, list | tuple) else [values]
    names = (str(v).strip().lower() for v in items)
    return tuple(name for name in names if name)


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file.

    Unknown keys are ignored with a warning in the log.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or its
            top level is not a mapping.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        msg = f"cannot load config file {path}: {exc}"
        raise ConfigurationError(msg) from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"config file {path} must contain a mapping, got {type(raw).__name__}"
        raise ConfigurationError(msg)
    unknown = sorted(str(k) for k in raw if k not in CONFIG_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in raw.items() if k in CONFIG_KEYS}


def find_config_file(explicit: str | None, project_root: Path) -> Path | None:
    """Return the config file to use: the explicit one, else the default if present."""
    if explicit:
        return Path(explicit)
    default = config_file(project_root)
    return default if default.is_file() else None


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_run_config(
    cli: Mapping[str, Any],
    file_values: Mapping[str, Any] | None = None,
    *,
    cwd: str | None = None,
) -> RunConfig:
    """Merge CLI values over config-file values over defaults.

    ``cli`` uses the config-file key names plus ``json`` (a path, or None)
    and ``output`` (bool). A CLI value of None means "not given".
    """
    file_values = file_values or {}

    def pick(key: str) -> object:
        value = cli.get(key)
        return file_values.get(key) if value is None or value == [] else value

    json_arg = cli.get("json")
    json_path = os.path.abspath(os.path.join(cwd or os.getcwd(), json_arg)) if json_arg else None

    return RunConfig(
        width=floored(pick("width"), DEFAULT_WIDTH, MIN_WIDTH),
        height=floored(pick("height"), DEFAULT_HEIGHT, MIN_HEIGHT),
        iterations=floored(pick("iterations"), DEFAULT_ITERATIONS, MIN_ITERATIONS),
        warmup_iterations=floored(
            pick("warmup_iterations"), DEFAULT_WARMUP_ITERATIONS, MIN_WARMUP_ITERATIONS
        ),
        scale=max(MIN_SCALE, to_number(pick("scale"), DEFAULT_SCALE)),
        mem_sample_every=floored(
            pick("mem_sample_every"), DEFAULT_MEM_SAMPLE_EVERY, MIN_MEM_SAMPLE_EVERY
        ),
        scenarios=normalize_names(pick("scenarios")),
        frameworks=normalize_names(pick("frameworks")),
        json_path=json_path,
        output_enabled=bool(cli.get("output", True)),
    )
