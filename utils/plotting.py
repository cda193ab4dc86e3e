"""Plotting helpers for optical constants and Drude fits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import matplotlib
import numpy as np

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from fitting.grid_search import FitResult
from physics.dataset import OpticalDataset
from physics.dispersion import drude_permittivity


class PlotMode(Enum):
    BASIC = "basic"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class PlotSeries:
    """Two y-series sharing one x axis, plus the labels to draw them with."""

    name: str
    x: np.ndarray
    y_a: np.ndarray
    y_b: np.ndarray
    title: str
    x_label: str
    y_label: str
    label_a: str
    label_b: str


def _ensure_out_dir(out_dir: str | Path) -> Path:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    return out


def build_plot_series(
    dataset: OpticalDataset,
    mode: PlotMode,
    result: FitResult | None = None,
    eps_inf: float | None = None,
) -> list[PlotSeries]:
    name = dataset.name
    eps1, eps2 = dataset.permittivity()

    if mode is PlotMode.BASIC:
        wl = dataset.wavelengths
        return [
            PlotSeries(
                name="refractive_index",
                x=wl,
                y_a=dataset.n,
                y_b=dataset.k,
                title=f"Refractive Index of {name}",
                x_label="Wavelength λ (nm)",
                y_label="Refractive index (n)",
                label_a="n (real part)",
                label_b="k (imag part)",
            ),
            PlotSeries(
                name="permittivity",
                x=wl,
                y_a=eps1,
                y_b=eps2,
                title=f"Complex Permittivity of {name}",
                x_label="Wavelength λ (nm)",
                y_label="Permittivity (ε)",
                label_a="ε₁ (real part)",
                label_b="ε₂ (imag part)",
            ),
        ]

    if mode is PlotMode.ADVANCED:
        if result is None or eps_inf is None:
            raise ValueError("advanced plots need a fit result and eps_inf")
        energy = dataset.photon_energies()
        model = drude_permittivity(
            dataset.angular_frequencies(),
            eps_inf,
            result.omega_p,
            result.gamma,
        )
        return [
            PlotSeries(
                name="eps1_drude",
                x=energy,
                y_a=eps1,
                y_b=np.asarray(model.real),
                title=f"Real Permittivity of {name}: Data vs Drude",
                x_label="Photon energy (eV)",
                y_label="ε₁",
                label_a="ε₁ data",
                label_b="ε₁ Drude fit",
            ),
            PlotSeries(
                name="eps2_drude",
                x=energy,
                y_a=eps2,
                y_b=np.asarray(model.imag),
                title=f"Imaginary Permittivity of {name}: Data vs Drude",
                x_label="Photon energy (eV)",
                y_label="ε₂",
                label_a="ε₂ data",
                label_b="ε₂ Drude fit",
            ),
        ]

    raise ValueError(f"unsupported plot mode: {mode!r}")


def plot_series(series: PlotSeries, out_path: str | Path, data_markers: bool = False) -> Path:
    out_path = Path(out_path)
    _ensure_out_dir(out_path.parent)

    fig, ax = plt.subplots(figsize=(8, 4))
    if data_markers:
        ax.plot(series.x, series.y_a, "o", ms=4, label=series.label_a)
        ax.plot(series.x, series.y_b, lw=1.6, label=series.label_b)
    else:
        ax.plot(series.x, series.y_a, lw=1.6, label=series.label_a)
        ax.plot(series.x, series.y_b, lw=1.6, label=series.label_b)
    ax.set_xlabel(series.x_label)
    ax.set_ylabel(series.y_label)
    ax.set_title(series.title)
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    fig.savefig(out_path, dpi=180)
    plt.close(fig)
    return out_path


def plot_dispersion(
    dataset: OpticalDataset,
    mode: PlotMode,
    out_dir: str | Path,
    result: FitResult | None = None,
    eps_inf: float | None = None,
) -> list[Path]:
    out = _ensure_out_dir(out_dir)
    paths = []
    for series in build_plot_series(dataset, mode, result=result, eps_inf=eps_inf):
        path = out / f"{mode.value}_{series.name}.png"
        paths.append(plot_series(series, path, data_markers=mode is PlotMode.ADVANCED))
    return paths


def plot_error_landscape(
    landscape: np.ndarray,
    plasma: np.ndarray,
    damping: np.ndarray,
    out_path: str | Path,
    best: tuple[float, float] | None = None,
) -> Path:
    out_path = Path(out_path)
    _ensure_out_dir(out_path.parent)

    mat = np.log10(np.clip(np.asarray(landscape, dtype=float), 1e-16, None))
    extent = [
        float(np.min(damping)),
        float(np.max(damping)),
        float(np.min(plasma)),
        float(np.max(plasma)),
    ]

    fig, ax = plt.subplots(figsize=(7, 5))
    im = ax.imshow(mat, cmap="viridis", origin="lower", aspect="auto", extent=extent)
    if best is not None:
        ax.plot(best[1], best[0], marker="x", color="red", ms=9, mew=2, label="best")
        ax.legend(fontsize=8)
    ax.set_xlabel("Damping rate γ (1/s)")
    ax.set_ylabel("Plasma frequency ωₚ (rad/s)")
    ax.set_title("Normalized Fit Error (log10)")
    fig.colorbar(im, ax=ax, label="log10 error")
    fig.tight_layout()
    fig.savefig(out_path, dpi=180)
    plt.close(fig)
    return out_path


def plot_fit_history(history: list[dict], out_dir: str | Path) -> None:
    out = _ensure_out_dir(out_dir)
    if not history:
        return

    rows = sorted(history, key=lambda h: h["row"])
    omega_p = np.array([h["omega_p"] for h in rows], dtype=float)
    row_err = np.array([h["row_best_error"] for h in rows], dtype=float)
    row_gamma = np.array([h["row_best_gamma"] for h in rows], dtype=float)

    fig, axs = plt.subplots(2, 1, figsize=(8, 7), sharex=True)
    axs[0].semilogy(omega_p, np.clip(row_err, 1e-16, None), lw=1.2)
    axs[0].set_ylabel("Best error in row")
    axs[0].set_title("Grid Search Profile")
    axs[0].grid(True, alpha=0.3)

    axs[1].plot(omega_p, row_gamma, lw=1.2, color="tab:orange")
    axs[1].set_xlabel("Plasma frequency ωₚ (rad/s)")
    axs[1].set_ylabel("Best γ in row (1/s)")
    axs[1].grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(out / "fit_profile.png", dpi=180)
    plt.close(fig)
