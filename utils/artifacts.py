"""Artifact writing helpers."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np

from fitting.grid_search import FitConfig, FitResult
from physics.materials import angular_frequency_to_eV


def save_json(path: str | Path, payload: dict) -> None:
    with Path(path).open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def save_fit_result(path: str | Path, result: FitResult, config: FitConfig, material: str) -> None:
    payload = {
        "material": material,
        **result.to_dict(),
        "omega_p_eV": angular_frequency_to_eV(result.omega_p),
        "gamma_eV": angular_frequency_to_eV(result.gamma),
        "config": config.to_dict(),
    }
    save_json(path, payload)


def save_arrays(arrays_dir: str | Path, **arrays) -> None:
    out = Path(arrays_dir)
    out.mkdir(parents=True, exist_ok=True)
    for name, arr in arrays.items():
        np.save(out / f"{name}.npy", np.asarray(arr))
