"""Configuration loading and validation."""

from __future__ import annotations

import json
import math
from copy import deepcopy
from pathlib import Path

from fitting.grid_search import FitConfig
from physics.materials import SILVER


DEFAULT_CONFIG = {
    "material": {
        "name": SILVER.name,
        "eps_inf": SILVER.eps_inf,
    },
    "data": {
        "path": None,
    },
    "fit": {
        "validity_window": [1.5e15, 4.0e15],
        "plasma_freq_range": [1.0e15, 3.0e16],
        "damping_range": [1.0e13, 1.5e14],
        "plasma_freq_step": 0.05e15,
        "damping_step": 0.1e13,
        "workers": 1,
        "timeout_sec": None,
        "log_every": 50,
        "keep_landscape": True,
    },
    "plots": {
        "modes": ["basic", "advanced"],
        "landscape": True,
    },
}

PLOT_MODES = {"basic", "advanced"}


def _deep_update(base: dict, updates: dict) -> dict:
    for k, v in updates.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_update(base[k], v)
        else:
            base[k] = v
    return base


def load_config(path: str | Path | None) -> dict:
    cfg = deepcopy(DEFAULT_CONFIG)
    if path is None:
        return validate_config(cfg)

    with Path(path).open("r", encoding="utf-8-sig") as f:
        user_cfg = json.load(f)
    _deep_update(cfg, user_cfg)
    return validate_config(cfg)


def _pair(cfg: dict, key: str) -> tuple[float, float]:
    value = cfg[key]
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"fit.{key} must be a [min, max] pair")
    lo, hi = float(value[0]), float(value[1])
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ValueError(f"fit.{key} must be finite")
    return lo, hi


def validate_config(cfg: dict) -> dict:
    material = cfg["material"]
    if not str(material.get("name", "")).strip():
        raise ValueError("material.name must be a non-empty string")
    if not math.isfinite(float(material["eps_inf"])):
        raise ValueError("material.eps_inf must be finite")

    fit = cfg["fit"]
    w_lo, w_hi = _pair(fit, "validity_window")
    if w_lo <= 0 or w_lo > w_hi:
        raise ValueError("fit.validity_window must satisfy 0 < min <= max")

    for key in ("plasma_freq_range", "damping_range"):
        lo, hi = _pair(fit, key)
        if lo <= 0:
            raise ValueError(f"fit.{key} lower bound must be positive")
        if lo >= hi:
            raise ValueError(f"fit.{key} must satisfy min < max")

    for key in ("plasma_freq_step", "damping_step"):
        step = float(fit[key])
        if not math.isfinite(step) or step <= 0:
            raise ValueError(f"fit.{key} must be positive")

    if int(fit.get("workers", 1)) < 1:
        raise ValueError("fit.workers must be >= 1")
    timeout = fit.get("timeout_sec")
    if timeout is not None and float(timeout) <= 0:
        raise ValueError("fit.timeout_sec must be positive or null")
    if int(fit.get("log_every", 1)) <= 0:
        raise ValueError("fit.log_every must be positive")

    modes = [str(m).lower() for m in cfg.get("plots", {}).get("modes", [])]
    unknown = sorted(set(modes) - PLOT_MODES)
    if unknown:
        raise ValueError(f"plots.modes must be drawn from {sorted(PLOT_MODES)}, got {unknown}")

    return cfg


def build_fit_config(cfg: dict) -> FitConfig:
    fit = cfg["fit"]
    return FitConfig(
        eps_inf=float(cfg["material"]["eps_inf"]),
        plasma_freq_range=_pair(fit, "plasma_freq_range"),
        damping_range=_pair(fit, "damping_range"),
        plasma_freq_step=float(fit["plasma_freq_step"]),
        damping_step=float(fit["damping_step"]),
        validity_window=_pair(fit, "validity_window"),
    )


def save_config(cfg: dict, out_path: str | Path) -> None:
    with Path(out_path).open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)
