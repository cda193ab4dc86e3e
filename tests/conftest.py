import pytest

from experiments.generate_synthetic_data import synthesize_drude_table
from physics.dataset import OpticalDataset


AG_WAVELENGTHS = [400.0, 500.0, 600.0, 700.0, 800.0, 900.0]
AG_OMEGA_P = 1.37e16
AG_GAMMA = 2.73e13
AG_EPS_INF = 4.3


@pytest.fixture
def ag_table():
    return synthesize_drude_table(AG_WAVELENGTHS, AG_EPS_INF, AG_OMEGA_P, AG_GAMMA)


@pytest.fixture
def ag_dataset(ag_table):
    return OpticalDataset.from_arrays(
        "Ag",
        ag_table["wavelength_nm"].to_numpy(),
        ag_table["n"].to_numpy(),
        ag_table["k"].to_numpy(),
    )


@pytest.fixture
def ag_file(tmp_path, ag_table):
    path = tmp_path / "Ag_synthetic.txt"
    lines = [f"{float(w)!r}, {float(n)!r}, {float(k)!r}" for w, n, k in ag_table.itertuples(index=False)]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
