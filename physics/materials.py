"""Material presets and unit conversion helpers for optical-constant tables."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from utils.errors import InvalidSampleError


SPEED_OF_LIGHT_M_S = 2.99792458e8
EV_NM = 1240.0
HBAR_EV_S = 6.582119569e-16


@dataclass(frozen=True)
class Material:
    name: str
    eps_inf: float


SILVER = Material(name="Silver", eps_inf=4.3)


def _check_wavelengths(wavelength_nm) -> np.ndarray:
    wl = np.asarray(wavelength_nm, dtype=float)
    if np.any(~np.isfinite(wl)) or np.any(wl <= 0):
        raise InvalidSampleError("wavelength must be finite and positive")
    return wl


def angular_frequency(wavelength_nm):
    """Return omega = 2*pi*c / lambda in rad/s for lambda given in nm."""
    wl = _check_wavelengths(wavelength_nm)
    omega = 2.0 * np.pi * SPEED_OF_LIGHT_M_S / (wl * 1e-9)
    return float(omega) if omega.ndim == 0 else omega


def photon_energy_eV(wavelength_nm):
    """Return E = 1240 / lambda in eV for lambda given in nm.

    Uses the rounded hc = 1240 eV*nm (exact value is about 1239.84).
    """
    wl = _check_wavelengths(wavelength_nm)
    energy = EV_NM / wl
    return float(energy) if energy.ndim == 0 else energy


def angular_frequency_to_eV(omega):
    """Return hbar * omega in eV for omega in rad/s."""
    energy = np.asarray(omega, dtype=float) * HBAR_EV_S
    return float(energy) if energy.ndim == 0 else energy
