"""Entry point: load an n,k table, fit the Drude model, write reports and plots."""

from __future__ import annotations

import argparse
import traceback
from pathlib import Path

import numpy as np

from fitting.grid_search import FitResult, fit_drude
from numerics.grid import build_grid
from physics.dataset import OpticalDataset
from physics.dispersion import drude_permittivity
from utils.artifacts import save_arrays, save_fit_result, save_json
from utils.config import build_fit_config, load_config, save_config, validate_config
from utils.errors import DataLoadError, DispersionError
from utils.logging import JsonlMetricsWriter, build_logger, close_logger
from utils.plotting import PlotMode, plot_dispersion, plot_error_landscape, plot_fit_history
from utils.run_manager import RunContext, create_run, finalize_run


def run_fit(
    cfg: dict,
    results_root: str | Path = "results",
    experiment_name: str = "drude_fit",
) -> tuple[RunContext, FitResult]:
    ctx = create_run(results_root, experiment_name, cfg)
    logger = build_logger(ctx.logs_dir / "fit.log")
    metrics_writer = JsonlMetricsWriter(ctx.logs_dir / "metrics.jsonl")
    stage = "setup"

    try:
        save_config(cfg, ctx.run_dir / "config.json")
        fit_cfg = build_fit_config(cfg)
        fit_opts = cfg["fit"]
        material = str(cfg["material"]["name"])

        stage = "load"
        data_path = cfg["data"].get("path")
        if not data_path:
            raise DataLoadError("no data path configured (data.path or --data)")
        dataset = OpticalDataset(material).load(data_path, logger=logger)

        stage = "fit"
        log_every = int(fit_opts.get("log_every", 50))
        history: list[dict] = []

        def row_cb(row: int, metrics: dict) -> None:
            history.append(metrics)
            metrics_writer.write(metrics)
            if row % log_every == 0:
                logger.info(
                    "row=%d omega_p=%.4e best_gamma=%.4e row_error=%.6e",
                    row,
                    metrics["omega_p"],
                    metrics["row_best_gamma"],
                    metrics["row_best_error"],
                )

        timeout = fit_opts.get("timeout_sec")
        result = fit_drude(
            dataset,
            fit_cfg,
            workers=int(fit_opts.get("workers", 1)),
            timeout_sec=float(timeout) if timeout is not None else None,
            row_cb=row_cb,
            keep_landscape=bool(fit_opts.get("keep_landscape", True)),
        )
        logger.info("Best-fit plasma frequency omega_p = %.4e rad/s", result.omega_p)
        logger.info("Best-fit damping rate gamma = %.4e 1/s", result.gamma)
        logger.info(
            "Best normalized error = %.6e over %d samples in window",
            result.error,
            result.n_window_samples,
        )

        stage = "report"
        omegas = dataset.angular_frequencies()
        eps1, eps2 = dataset.permittivity()
        model = drude_permittivity(omegas, fit_cfg.eps_inf, result.omega_p, result.gamma)
        arrays = {
            "wavelength_nm": dataset.wavelengths,
            "photon_energy_eV": dataset.photon_energies(),
            "omega": omegas,
            "eps1_data": eps1,
            "eps2_data": eps2,
            "eps1_model": model.real,
            "eps2_model": model.imag,
        }
        if result.landscape is not None:
            arrays["error_landscape"] = result.landscape
        save_arrays(ctx.arrays_dir, **arrays)
        save_fit_result(ctx.reports_dir / "fit_result.json", result, fit_cfg, material)

        plot_cfg = cfg.get("plots", {})
        plot_files = []
        for mode_name in plot_cfg.get("modes", []):
            mode = PlotMode(str(mode_name).lower())
            paths = plot_dispersion(dataset, mode, ctx.plots_dir, result=result, eps_inf=fit_cfg.eps_inf)
            plot_files.extend(p.name for p in paths)
        plot_fit_history(history, ctx.plots_dir)
        if history:
            plot_files.append("fit_profile.png")
        if plot_cfg.get("landscape", True) and result.landscape is not None:
            grid = build_grid(
                fit_cfg.plasma_freq_range,
                fit_cfg.damping_range,
                fit_cfg.plasma_freq_step,
                fit_cfg.damping_step,
            )
            save_arrays(ctx.arrays_dir, grid_plasma=grid.plasma, grid_damping=grid.damping)
            plot_error_landscape(
                result.landscape,
                grid.plasma,
                grid.damping,
                ctx.plots_dir / "error_landscape.png",
                best=(result.omega_p, result.gamma),
            )
            plot_files.append("error_landscape.png")

        save_json(
            ctx.reports_dir / "final_summary.json",
            {
                "run_id": ctx.run_id,
                "material": material,
                "points": len(dataset),
                "wavelength_range_nm": [float(np.min(dataset.wavelengths)), float(np.max(dataset.wavelengths))],
                "fit": result.to_dict(),
                "plots": plot_files,
            },
        )

        finalize_run(ctx, status="completed")
        logger.info("Run completed at %s", str(ctx.run_dir))
        return ctx, result
    except Exception as exc:
        logger.error("%s stage failed: %s", stage.capitalize(), exc)
        tb = traceback.format_exc()
        (ctx.reports_dir / "error_traceback.txt").write_text(tb, encoding="utf-8")
        finalize_run(ctx, status="failed", error_message=str(exc), stage=stage)
        raise
    finally:
        metrics_writer.close()
        close_logger(logger)


def main() -> None:
    parser = argparse.ArgumentParser(description="Fit a Drude model to tabulated n,k data of a metal.")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--data", type=str, default=None, help="Comma-separated wavelength,n,k table.")
    parser.add_argument("--material", type=str, default=None)
    parser.add_argument("--eps-inf", type=float, default=None)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--timeout", type=float, default=None, help="Grid search deadline in seconds.")
    parser.add_argument("--results-root", type=str, default="results")
    parser.add_argument("--experiment-name", type=str, default="drude_fit")
    args = parser.parse_args()

    cfg = load_config(args.config)
    if args.data is not None:
        cfg["data"]["path"] = args.data
    if args.material is not None:
        cfg["material"]["name"] = args.material
    if args.eps_inf is not None:
        cfg["material"]["eps_inf"] = args.eps_inf
    if args.workers is not None:
        cfg["fit"]["workers"] = args.workers
    if args.timeout is not None:
        cfg["fit"]["timeout_sec"] = args.timeout
    cfg = validate_config(cfg)

    try:
        run_fit(cfg, results_root=args.results_root, experiment_name=args.experiment_name)
    except DispersionError as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
