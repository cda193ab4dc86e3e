"""Normalized fit error between Drude predictions and measured permittivity."""

from __future__ import annotations

import numpy as np

from physics.dispersion import drude_permittivity


DATA_EPS = 1e-12


def window_mask(omegas: np.ndarray, window: tuple[float, float]) -> np.ndarray:
    w = np.asarray(omegas, dtype=float)
    lo, hi = float(window[0]), float(window[1])
    return (w >= lo) & (w <= hi)


def normalized_fit_error(
    omegas: np.ndarray,
    eps_inf: float,
    omega_p: float,
    gamma: float,
    eps1_data: np.ndarray,
    eps2_data: np.ndarray,
    window: tuple[float, float],
) -> float:
    """Sum of squared relative residuals over samples inside ``window``.

    Each in-window sample adds
    ((Re eps_model - eps1)^2 + (Im eps_model - eps2)^2) / (eps1^2 + eps2^2 + DATA_EPS).
    Samples outside the window add nothing; an empty window gives exactly 0.
    """
    mask = window_mask(omegas, window)
    if not mask.any():
        return 0.0

    w = np.asarray(omegas, dtype=float)[mask]
    e1 = np.asarray(eps1_data, dtype=float)[mask]
    e2 = np.asarray(eps2_data, dtype=float)[mask]

    model = drude_permittivity(w, eps_inf, omega_p, gamma)
    d1 = model.real - e1
    d2 = model.imag - e2
    return float(np.sum((d1 * d1 + d2 * d2) / (e1 * e1 + e2 * e2 + DATA_EPS)))


def normalized_fit_error_row(
    omegas: np.ndarray,
    eps_inf: float,
    omega_p: float,
    gammas: np.ndarray,
    eps1_data: np.ndarray,
    eps2_data: np.ndarray,
) -> np.ndarray:
    """Normalized error for every damping rate in ``gammas`` at one omega_p.

    ``omegas`` and the data arrays must already be restricted to the
    validity window. Returns an array shaped like ``gammas``.
    """
    w = np.asarray(omegas, dtype=float)[np.newaxis, :]
    g = np.asarray(gammas, dtype=float)[:, np.newaxis]
    e1 = np.asarray(eps1_data, dtype=float)[np.newaxis, :]
    e2 = np.asarray(eps2_data, dtype=float)[np.newaxis, :]

    model = drude_permittivity(w, eps_inf, omega_p, g)
    d1 = model.real - e1
    d2 = model.imag - e2
    terms = (d1 * d1 + d2 * d2) / (e1 * e1 + e2 * e2 + DATA_EPS)
    return terms.sum(axis=1)
