"""Write a wavelength,n,k table whose permittivity follows a chosen Drude curve."""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np
import pandas as pd

from physics.dispersion import drude_permittivity, epsilon_to_nk
from physics.materials import SILVER, angular_frequency


def synthesize_drude_table(
    wavelengths_nm,
    eps_inf: float,
    omega_p: float,
    gamma: float,
) -> pd.DataFrame:
    wl = np.asarray(wavelengths_nm, dtype=float)
    eps = drude_permittivity(angular_frequency(wl), eps_inf, omega_p, gamma)
    n, k = epsilon_to_nk(eps)
    return pd.DataFrame({"wavelength_nm": wl, "n": n, "k": k})


def write_table(path: str | Path, table: pd.DataFrame) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(out, header=False, index=False, float_format="%.17g")
    return out


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic Drude-metal optical-constant table.")
    parser.add_argument("--out", type=str, required=True)
    parser.add_argument("--eps-inf", type=float, default=SILVER.eps_inf)
    parser.add_argument("--omega-p", type=float, default=1.37e16, help="Plasma frequency in rad/s.")
    parser.add_argument("--gamma", type=float, default=2.73e13, help="Damping rate in 1/s.")
    parser.add_argument("--start-nm", type=float, default=400.0)
    parser.add_argument("--stop-nm", type=float, default=900.0)
    parser.add_argument("--points", type=int, default=6)
    args = parser.parse_args()

    if args.points < 1:
        parser.error("--points must be >= 1")
    wavelengths = np.linspace(args.start_nm, args.stop_nm, args.points)
    table = synthesize_drude_table(wavelengths, args.eps_inf, args.omega_p, args.gamma)
    out = write_table(args.out, table)
    print(f"Wrote {len(table)} samples to {out}")


if __name__ == "__main__":
    main()
