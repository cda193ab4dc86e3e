"""Tabulated optical constants (wavelength, n, k) for a single material."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from physics.materials import angular_frequency, photon_energy_eV
from utils.errors import DataFormatError, DataLoadError, InvalidSampleError
from utils.logging import get_logger


@dataclass(frozen=True)
class Sample:
    wavelength_nm: float
    n: float
    k: float


def _read_source(source) -> tuple[str, str]:
    if hasattr(source, "read"):
        label = str(getattr(source, "name", "<stream>"))
        try:
            text = source.read()
            if isinstance(text, (bytes, bytearray)):
                text = bytes(text).decode("utf-8-sig")
            return label, text
        except UnicodeDecodeError as exc:
            raise DataLoadError(f"could not decode {label} as UTF-8 text: {exc}") from exc
        except OSError as exc:
            raise DataLoadError(f"could not read {label}: {exc}") from exc

    path = Path(source)
    try:
        with path.open("r", encoding="utf-8-sig") as f:
            return str(path), f.read()
    except UnicodeDecodeError as exc:
        raise DataLoadError(f"could not decode {path} as UTF-8 text: {exc}") from exc
    except OSError as exc:
        raise DataLoadError(f"could not open {path}: {exc}") from exc


def _parse_table(label: str, text: str) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    line_numbers = []
    rows = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        line_numbers.append(lineno)
        rows.append(stripped)
    if not rows:
        raise DataFormatError(f"{label} contains no samples")

    try:
        df = pd.read_csv(
            io.StringIO("\n".join(rows)),
            header=None,
            dtype=str,
            skipinitialspace=True,
        )
    except pd.errors.ParserError as exc:
        raise DataFormatError(f"{label}: {exc}") from exc

    if df.shape[1] != 3:
        raise DataFormatError(
            f"{label}: line {line_numbers[0]}: expected 3 fields (wavelength,n,k), found {df.shape[1]}"
        )

    stripped_df = df.apply(lambda col: col.map(lambda v: v.strip() if isinstance(v, str) else v))
    numeric = stripped_df.apply(lambda col: pd.to_numeric(col, errors="coerce"))
    values = numeric.to_numpy(dtype=float)
    ok = np.isfinite(values).all(axis=1)
    if not ok.all():
        idx = int(np.argmin(ok))
        raise DataFormatError(
            f"{label}: line {line_numbers[idx]}: could not parse {rows[idx]!r} as wavelength,n,k"
        )

    bad_wl = values[:, 0] <= 0
    if bad_wl.any():
        idx = int(np.argmax(bad_wl))
        raise InvalidSampleError(
            f"{label}: line {line_numbers[idx]}: wavelength must be positive, got {values[idx, 0]:g}"
        )

    return values[:, 0].copy(), values[:, 1].copy(), values[:, 2].copy()


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


class OpticalDataset:
    """Ordered (wavelength, n, k) samples of one material.

    Populated once by :meth:`load` (or :meth:`from_arrays`) and read-only
    afterwards. Every derived quantity is recomputed from the samples.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._wavelength = np.empty(0, dtype=float)
        self._n = np.empty(0, dtype=float)
        self._k = np.empty(0, dtype=float)
        self._loaded = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def wavelengths(self) -> np.ndarray:
        return self._wavelength

    @property
    def n(self) -> np.ndarray:
        return self._n

    @property
    def k(self) -> np.ndarray:
        return self._k

    @property
    def samples(self) -> tuple[Sample, ...]:
        return tuple(
            Sample(wavelength_nm=float(w), n=float(n), k=float(k))
            for w, n, k in zip(self._wavelength, self._n, self._k)
        )

    def __len__(self) -> int:
        return int(self._wavelength.size)

    def __repr__(self) -> str:
        return f"OpticalDataset(name={self._name!r}, points={len(self)})"

    def _populate(self, wavelength: np.ndarray, n: np.ndarray, k: np.ndarray, logger: logging.Logger) -> None:
        if self._loaded:
            raise RuntimeError(f"dataset {self._name!r} is already populated")
        self._wavelength = _readonly(wavelength)
        self._n = _readonly(n)
        self._k = _readonly(k)
        self._loaded = True

        if np.any(n < 0) or np.any(k < 0):
            logger.warning("Negative n or k values present in data for %s", self._name)
        logger.info(
            "Loaded %d data points for %s between %g and %g nm",
            len(self),
            self._name,
            float(wavelength[0]),
            float(wavelength[-1]),
        )

    def load(self, source, logger: logging.Logger | None = None) -> "OpticalDataset":
        """Read comma-separated ``wavelength,n,k`` rows from a path or text stream.

        The whole load fails on the first unreadable source, malformed row or
        non-positive wavelength; the dataset is then left unpopulated.
        """
        label, text = _read_source(source)
        wavelength, n, k = _parse_table(label, text)
        self._populate(wavelength, n, k, logger or get_logger())
        return self

    @classmethod
    def from_arrays(cls, name: str, wavelength_nm, n, k, logger: logging.Logger | None = None) -> "OpticalDataset":
        wl = np.array(wavelength_nm, dtype=float).reshape(-1)
        n_arr = np.array(n, dtype=float).reshape(-1)
        k_arr = np.array(k, dtype=float).reshape(-1)
        if not (wl.size == n_arr.size == k_arr.size):
            raise DataFormatError("wavelength, n and k must have equal length")
        if wl.size == 0:
            raise DataFormatError(f"no samples given for {name}")
        if not (np.isfinite(wl).all() and np.isfinite(n_arr).all() and np.isfinite(k_arr).all()):
            raise DataFormatError(f"non-finite optical constants given for {name}")
        if np.any(wl <= 0):
            raise InvalidSampleError(f"wavelength must be positive for {name}")

        ds = cls(name)
        ds._populate(wl, n_arr, k_arr, logger or get_logger())
        return ds

    def permittivity(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (eps1, eps2) with eps1 = n^2 - k^2 and eps2 = 2nk."""
        eps1 = self._n * self._n - self._k * self._k
        eps2 = 2.0 * self._n * self._k
        return eps1, eps2

    def complex_permittivity(self) -> np.ndarray:
        eps1, eps2 = self.permittivity()
        return eps1 + 1j * eps2

    def angular_frequencies(self) -> np.ndarray:
        if not len(self):
            return np.empty(0, dtype=float)
        return np.asarray(angular_frequency(self._wavelength), dtype=float)

    def photon_energies(self) -> np.ndarray:
        if not len(self):
            return np.empty(0, dtype=float)
        return np.asarray(photon_energy_eV(self._wavelength), dtype=float)
