import io
import logging

import numpy as np
import pytest

from physics.dataset import OpticalDataset, Sample
from physics.materials import angular_frequency, photon_energy_eV
from utils.errors import DataFormatError, DataLoadError, InvalidSampleError


def _write(tmp_path, text, name="nk.txt"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_load_parses_rows_with_whitespace_and_blank_lines(tmp_path):
    path = _write(tmp_path, "# Ag test data\n400, 0.05, 2.1\n\n  500 ,0.05 , 3.0 \n600,0.06,3.8\n")
    ds = OpticalDataset("Silver").load(path)
    assert ds.is_loaded
    assert len(ds) == 3
    np.testing.assert_array_equal(ds.wavelengths, [400.0, 500.0, 600.0])
    np.testing.assert_array_equal(ds.n, [0.05, 0.05, 0.06])
    np.testing.assert_array_equal(ds.k, [2.1, 3.0, 3.8])
    assert ds.samples[1] == Sample(wavelength_nm=500.0, n=0.05, k=3.0)


def test_load_keeps_file_order(tmp_path):
    path = _write(tmp_path, "900,0.1,6\n400,0.05,2\n650,0.07,4\n")
    ds = OpticalDataset("Silver").load(path)
    np.testing.assert_array_equal(ds.wavelengths, [900.0, 400.0, 650.0])


def test_load_logs_summary(tmp_path, caplog):
    path = _write(tmp_path, "400,0.05,2.1\n900,0.1,6.0\n")
    with caplog.at_level(logging.INFO, logger="drude_fit"):
        OpticalDataset("Silver").load(path)
    assert "Loaded 2 data points for Silver between 400 and 900 nm" in caplog.text


def test_load_from_stream():
    ds = OpticalDataset("Gold").load(io.StringIO("500,0.9,1.9\n600,0.25,2.9\n"))
    assert len(ds) == 2


def test_load_from_binary_stream():
    ds = OpticalDataset("Silver").load(io.BytesIO(b"\xef\xbb\xbf400,0.05,2.1\n500,0.05,3.0\n"))
    assert len(ds) == 2
    np.testing.assert_array_equal(ds.wavelengths, [400.0, 500.0])


def test_non_utf8_file_raises_load_error(tmp_path):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"400,0.05,2.1\n500,\xff\xfe,3.0\n")
    ds = OpticalDataset("Silver")
    with pytest.raises(DataLoadError, match="latin1.txt"):
        ds.load(path)
    assert not ds.is_loaded


def test_non_utf8_stream_raises_load_error():
    ds = OpticalDataset("Silver")
    with pytest.raises(DataLoadError, match="UTF-8"):
        ds.load(io.BytesIO(b"400,0.05,2.1\n500,\xff,3.0\n"))
    assert not ds.is_loaded


def test_interleaved_comments_keep_source_line_numbers(tmp_path):
    path = _write(tmp_path, "# header\n400,0.05,2.1\n\n# mid\n\n500,0.05,oops\n")
    with pytest.raises(DataFormatError, match="line 6"):
        OpticalDataset("Silver").load(path)


def test_missing_file_raises_load_error(tmp_path):
    ds = OpticalDataset("Silver")
    with pytest.raises(DataLoadError):
        ds.load(tmp_path / "missing.txt")
    assert not ds.is_loaded
    assert len(ds) == 0


def test_directory_raises_load_error(tmp_path):
    with pytest.raises(DataLoadError):
        OpticalDataset("Silver").load(tmp_path)


def test_malformed_row_fails_whole_load(tmp_path):
    path = _write(tmp_path, "400,0.05,2.1\n500,abc,3.0\n600,0.06,3.8\n")
    ds = OpticalDataset("Silver")
    with pytest.raises(DataFormatError, match="line 2"):
        ds.load(path)
    assert not ds.is_loaded
    assert ds.wavelengths.size == 0


def test_row_with_missing_field_is_rejected(tmp_path):
    path = _write(tmp_path, "400,0.05,2.1\n500,0.05\n")
    with pytest.raises(DataFormatError, match="line 2"):
        OpticalDataset("Silver").load(path)


def test_row_with_extra_field_is_rejected(tmp_path):
    path = _write(tmp_path, "400,0.05,2.1\n500,0.05,3.0,9\n")
    with pytest.raises(DataFormatError):
        OpticalDataset("Silver").load(path)


def test_two_column_file_is_rejected(tmp_path):
    path = _write(tmp_path, "400,0.05\n500,0.05\n")
    with pytest.raises(DataFormatError, match="expected 3 fields"):
        OpticalDataset("Silver").load(path)


def test_empty_file_is_rejected(tmp_path):
    path = _write(tmp_path, "\n# nothing here\n")
    with pytest.raises(DataFormatError, match="no samples"):
        OpticalDataset("Silver").load(path)


@pytest.mark.parametrize("wl", ["0", "-450"])
def test_non_positive_wavelength_is_rejected(tmp_path, wl):
    path = _write(tmp_path, f"400,0.05,2.1\n{wl},0.05,3.0\n")
    ds = OpticalDataset("Silver")
    with pytest.raises(InvalidSampleError, match="line 2"):
        ds.load(path)
    assert not ds.is_loaded


def test_load_twice_is_refused(tmp_path):
    path = _write(tmp_path, "400,0.05,2.1\n")
    ds = OpticalDataset("Silver").load(path)
    with pytest.raises(RuntimeError):
        ds.load(path)


def test_permittivity_matches_direct_computation():
    n = np.array([0.05, 0.5, 1.2, 0.0])
    k = np.array([2.1, 0.5, 0.3, 0.0])
    ds = OpticalDataset.from_arrays("X", [400.0, 500.0, 600.0, 700.0], n, k)
    eps1, eps2 = ds.permittivity()
    np.testing.assert_array_equal(eps1, n * n - k * k)
    np.testing.assert_array_equal(eps2, 2.0 * n * k)
    assert np.all(eps2 >= 0)
    np.testing.assert_array_equal(ds.complex_permittivity(), eps1 + 1j * eps2)


def test_derived_axes():
    wl = [400.0, 620.0]
    ds = OpticalDataset.from_arrays("X", wl, [0.1, 0.1], [2.0, 3.0])
    np.testing.assert_allclose(ds.photon_energies(), photon_energy_eV(np.array(wl)))
    np.testing.assert_allclose(ds.angular_frequencies(), angular_frequency(np.array(wl)))
    assert ds.photon_energies()[1] == pytest.approx(2.0)


def test_unpopulated_dataset_derives_empty_arrays():
    ds = OpticalDataset("Empty")
    eps1, eps2 = ds.permittivity()
    assert eps1.size == 0 and eps2.size == 0
    assert ds.angular_frequencies().size == 0
    assert ds.photon_energies().size == 0


def test_dataset_arrays_are_read_only():
    ds = OpticalDataset.from_arrays("X", [400.0], [0.1], [2.0])
    with pytest.raises(ValueError):
        ds.wavelengths[0] = 1.0


def test_from_arrays_validation():
    with pytest.raises(DataFormatError):
        OpticalDataset.from_arrays("X", [400.0, 500.0], [0.1], [2.0])
    with pytest.raises(DataFormatError):
        OpticalDataset.from_arrays("X", [], [], [])
    with pytest.raises(InvalidSampleError):
        OpticalDataset.from_arrays("X", [0.0], [0.1], [2.0])
