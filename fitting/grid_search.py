"""Exhaustive (omega_p, gamma) grid search for the Drude model."""

from __future__ import annotations

import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field

import numpy as np

from fitting.callbacks import RowCallback
from fitting.losses import normalized_fit_error_row, window_mask
from numerics.grid import ParameterGrid, build_grid
from physics.dataset import OpticalDataset
from utils.errors import FitCancelledError, NoFitFoundError


@dataclass(frozen=True)
class DrudeParameters:
    omega_p: float
    gamma: float


@dataclass(frozen=True)
class FitConfig:
    eps_inf: float = 4.3
    plasma_freq_range: tuple[float, float] = (1.0e15, 3.0e16)
    damping_range: tuple[float, float] = (1.0e13, 1.5e14)
    plasma_freq_step: float = 0.05e15
    damping_step: float = 0.1e13
    validity_window: tuple[float, float] = (1.5e15, 4.0e15)

    def to_dict(self) -> dict:
        out = asdict(self)
        for key in ("plasma_freq_range", "damping_range", "validity_window"):
            out[key] = [float(v) for v in out[key]]
        return out


@dataclass(frozen=True)
class FitResult:
    params: DrudeParameters
    error: float
    n_window_samples: int
    grid_shape: tuple[int, int]
    n_evaluated: int
    landscape: np.ndarray | None = field(default=None, repr=False, compare=False)

    @property
    def omega_p(self) -> float:
        return self.params.omega_p

    @property
    def gamma(self) -> float:
        return self.params.gamma

    def to_dict(self) -> dict:
        return {
            "omega_p": float(self.params.omega_p),
            "gamma": float(self.params.gamma),
            "error": float(self.error),
            "n_window_samples": int(self.n_window_samples),
            "grid_shape": [int(v) for v in self.grid_shape],
            "n_evaluated": int(self.n_evaluated),
        }


@dataclass
class _ChunkBest:
    error: float
    row: int
    col: int
    n_evaluated: int

    def key(self) -> tuple[float, int, int]:
        return (self.error, self.row, self.col)


def _check_stop(deadline: float | None, cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise FitCancelledError("grid search cancelled")
    if deadline is not None and time.monotonic() > deadline:
        raise FitCancelledError("grid search exceeded its deadline")


def _search_rows(
    rows: np.ndarray,
    grid: ParameterGrid,
    omegas: np.ndarray,
    eps1: np.ndarray,
    eps2: np.ndarray,
    eps_inf: float,
    deadline: float | None,
    cancel_event: threading.Event | None,
    row_cb: RowCallback | None,
    cb_lock: threading.Lock,
    landscape: np.ndarray | None,
) -> _ChunkBest:
    best = _ChunkBest(error=math.inf, row=-1, col=-1, n_evaluated=0)

    for i in rows:
        _check_stop(deadline, cancel_event)
        t0 = time.time()
        i = int(i)
        omega_p = float(grid.plasma[i])
        errs = normalized_fit_error_row(omegas, eps_inf, omega_p, grid.damping, eps1, eps2)
        best.n_evaluated += int(errs.size)
        if landscape is not None:
            landscape[i, :] = errs

        # nanargmin returns the first finite minimum, i.e. the lowest damping rate.
        finite = np.isfinite(errs)
        if finite.any():
            j = int(np.nanargmin(np.where(finite, errs, np.nan)))
            row_err = float(errs[j])
        else:
            j = 0
            row_err = math.nan
        if row_err < best.error:
            best.error = row_err
            best.row = i
            best.col = j

        if row_cb is not None:
            metrics = {
                "row": i,
                "omega_p": omega_p,
                "row_best_gamma": float(grid.damping[j]),
                "row_best_error": row_err,
                "best_error": best.error,
                "dt_sec": time.time() - t0,
            }
            with cb_lock:
                row_cb(i, metrics)

    return best


def fit_drude(
    dataset: OpticalDataset,
    config: FitConfig,
    *,
    workers: int = 1,
    timeout_sec: float | None = None,
    cancel_event: threading.Event | None = None,
    row_cb: RowCallback | None = None,
    keep_landscape: bool = False,
) -> FitResult:
    """Minimize the normalized fit error over the (omega_p, gamma) grid.

    Plasma frequency is the outer axis and damping the inner one. Only a
    strictly smaller error replaces the incumbent, so ties resolve to the
    lowest omega_p and then the lowest gamma. With ``workers > 1`` the
    omega_p axis is split into contiguous chunks searched on a thread pool
    and the chunk winners are reduced with the same tie-break, so the result
    does not depend on the worker count.

    Raises NoFitFoundError when there is nothing to evaluate: no samples, no
    sample inside the validity window, or an empty axis. Raises
    FitCancelledError if ``cancel_event`` is set or ``timeout_sec`` elapses;
    both are checked before every omega_p row.
    """
    if workers < 1:
        raise ValueError("workers must be >= 1")

    omegas = dataset.angular_frequencies()
    if omegas.size == 0:
        raise NoFitFoundError(f"dataset {dataset.name!r} has no samples")

    eps1, eps2 = dataset.permittivity()
    mask = window_mask(omegas, config.validity_window)
    n_window = int(mask.sum())
    if n_window == 0:
        lo, hi = config.validity_window
        raise NoFitFoundError(
            f"no sample of {dataset.name!r} lies inside the validity window [{lo:.3e}, {hi:.3e}] rad/s"
        )

    grid = build_grid(
        config.plasma_freq_range,
        config.damping_range,
        config.plasma_freq_step,
        config.damping_step,
    )
    if grid.is_empty:
        raise NoFitFoundError(f"empty parameter grid {grid.shape}; check the plasma and damping ranges")

    deadline = time.monotonic() + float(timeout_sec) if timeout_sec is not None else None
    landscape = np.full(grid.shape, np.nan, dtype=float) if keep_landscape else None
    cb_lock = threading.Lock()

    search_args = (
        grid,
        omegas[mask],
        eps1[mask],
        eps2[mask],
        float(config.eps_inf),
        deadline,
        cancel_event,
        row_cb,
        cb_lock,
        landscape,
    )

    all_rows = np.arange(grid.shape[0])
    n_chunks = min(workers, grid.shape[0])
    if n_chunks == 1:
        chunk_bests = [_search_rows(all_rows, *search_args)]
    else:
        chunks = np.array_split(all_rows, n_chunks)
        with ThreadPoolExecutor(max_workers=n_chunks) as pool:
            futures = [pool.submit(_search_rows, chunk, *search_args) for chunk in chunks]
            chunk_bests = [f.result() for f in futures]

    found = [b for b in chunk_bests if b.row >= 0]
    if not found:
        raise NoFitFoundError("grid search produced no finite error")
    best = min(found, key=_ChunkBest.key)

    if landscape is not None:
        landscape.setflags(write=False)

    return FitResult(
        params=DrudeParameters(
            omega_p=float(grid.plasma[best.row]),
            gamma=float(grid.damping[best.col]),
        ),
        error=best.error,
        n_window_samples=n_window,
        grid_shape=grid.shape,
        n_evaluated=sum(b.n_evaluated for b in chunk_bests),
        landscape=landscape,
    )
