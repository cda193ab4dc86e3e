import json

import numpy as np

from fitting.grid_search import DrudeParameters, FitConfig, FitResult
from utils.artifacts import save_arrays, save_fit_result


def test_save_arrays(tmp_path):
    save_arrays(tmp_path, a=np.zeros((2, 2)), b=np.ones((3,)))
    assert (tmp_path / "a.npy").exists()
    assert (tmp_path / "b.npy").exists()


def test_save_fit_result(tmp_path):
    out = tmp_path / "fit_result.json"
    result = FitResult(
        params=DrudeParameters(omega_p=1.37e16, gamma=2.73e13),
        error=1.5e-3,
        n_window_samples=5,
        grid_shape=(580, 140),
        n_evaluated=580 * 140,
    )
    save_fit_result(out, result, FitConfig(), material="Silver")
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["material"] == "Silver"
    assert payload["omega_p"] == 1.37e16
    assert payload["gamma"] == 2.73e13
    assert payload["error"] == 1.5e-3
    assert abs(payload["omega_p_eV"] - 9.0) < 0.05
    assert payload["config"]["validity_window"] == [1.5e15, 4.0e15]
