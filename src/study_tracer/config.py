"""Tracer parameters and expected response times, optionally read from YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .models import BKTParams, Difficulty, ensure_difficulty

PACKAGE_ROOT = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_ROOT / "data"
DEFAULT_PARAMS_FILE = DATA_DIR / "params.yaml"
DEFAULT_SKILLS_FILE = DATA_DIR / "skills.yaml"
PARAMS_FILE = Path(os.environ.get("STUDY_TRACER_PARAMS_PATH", DEFAULT_PARAMS_FILE))
SKILLS_FILE = Path(os.environ.get("STUDY_TRACER_SKILLS_PATH", DEFAULT_SKILLS_FILE))

DEFAULT_PARAMS = BKTParams(p_init=0.10, p_transit=0.15, p_slip=0.10, p_guess=0.20)

# Seconds a prepared student is expected to spend per difficulty level
EXPECTED_TIME: dict[Difficulty, float] = {
    Difficulty.BASIC: 45.0,
    Difficulty.INTERMEDIATE: 90.0,
    Difficulty.ADVANCED: 180.0,
    Difficulty.OLYMPIAD: 400.0,
}

_PARAM_KEYS = ("p_init", "p_transit", "p_slip", "p_guess")


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return raw


def _section(path: Path, name: str) -> dict[str, Any]:
    section = _read_yaml(path).get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' in {path} must be a mapping")
    return section


def _number(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be a number, got {value!r}") from None


def load_params(path: Path | None = None) -> BKTParams:
    """Read the `bkt` section. Missing keys fall back to DEFAULT_PARAMS."""
    file_path = path or PARAMS_FILE
    section = _section(file_path, "bkt")
    logger.debug("Loading BKT parameters from {}", file_path)

    values: dict[str, float] = {}
    for key in _PARAM_KEYS:
        raw = section.get(key)
        value = _number(key, getattr(DEFAULT_PARAMS, key) if raw is None else raw)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"BKT parameter '{key}' must be within [0, 1], got {value}")
        values[key] = value

    unknown = set(section) - set(_PARAM_KEYS)
    if unknown:
        raise ValueError(f"Unknown BKT parameter(s): {', '.join(sorted(unknown))}")
    return BKTParams(**values)


def load_expected_times(path: Path | None = None) -> dict[Difficulty, float]:
    """Read the `expected_time` section, merged over EXPECTED_TIME."""
    section = _section(path or PARAMS_FILE, "expected_time")
    table = dict(EXPECTED_TIME)
    for name, raw in section.items():
        difficulty = ensure_difficulty(name)
        if raw is None:
            continue
        seconds = _number(name, raw)
        if seconds <= 0:
            raise ValueError(f"Expected time for '{name}' must be positive, got {seconds}")
        table[difficulty] = seconds
    return table


__all__ = [
    "DATA_DIR",
    "DEFAULT_PARAMS",
    "EXPECTED_TIME",
    "PARAMS_FILE",
    "SKILLS_FILE",
    "load_expected_times",
    "load_params",
]
