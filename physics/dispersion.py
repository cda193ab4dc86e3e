"""Drude free-electron dispersion model."""

from __future__ import annotations

import numpy as np


def drude_permittivity(omega, eps_inf: float, omega_p: float, gamma: float):
    """Drude relative permittivity.

    eps(omega) = eps_inf - omega_p^2 / (omega^2 + i*gamma*omega)

    omega may be a scalar or an array (rad/s); gamma may be an array that
    broadcasts against it. The free-electron term is undefined at omega = 0;
    those entries are masked out and evaluate to eps_inf. Callers keep
    gamma > 0.
    """
    w = np.asarray(omega, dtype=float)
    zero = w == 0.0

    den = w * w + 1j * (gamma * w)
    den = np.where(zero, 1.0, den)
    eps = np.where(zero, eps_inf + 0j, eps_inf - (omega_p * omega_p) / den)
    return complex(eps) if eps.ndim == 0 else eps


def epsilon_to_nk(eps) -> tuple[np.ndarray, np.ndarray]:
    """Return (n, k) with n + ik = sqrt(eps) on the branch n, k >= 0."""
    eps = np.asarray(eps, dtype=complex)
    mag = np.abs(eps)
    n = np.sqrt(np.clip((mag + eps.real) / 2.0, 0.0, None))
    k = np.sqrt(np.clip((mag - eps.real) / 2.0, 0.0, None))
    return n, k
