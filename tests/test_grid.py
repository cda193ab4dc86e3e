import numpy as np
import pytest

from numerics.grid import build_grid, parameter_axis


def test_parameter_axis_is_half_open():
    np.testing.assert_array_equal(parameter_axis(0.0, 1.0, 0.25), [0.0, 0.25, 0.5, 0.75])


def test_parameter_axis_uses_integer_indexing():
    axis = parameter_axis(1.0e15, 3.0e16, 0.05e15)
    assert axis.size == 580
    np.testing.assert_array_equal(axis, 1.0e15 + np.arange(580, dtype=float) * 0.05e15)
    assert axis[-1] < 3.0e16


def test_parameter_axis_with_inexact_step():
    axis = parameter_axis(0.0, 0.3, 0.1)
    assert axis.size == 3
    assert axis[-1] < 0.3


def test_parameter_axis_empty_when_bounds_inverted():
    assert parameter_axis(2.0, 1.0, 0.1).size == 0
    assert parameter_axis(1.0, 1.0, 0.1).size == 0


@pytest.mark.parametrize("step", [0.0, -0.1, float("inf")])
def test_parameter_axis_rejects_bad_step(step):
    with pytest.raises(ValueError, match="step"):
        parameter_axis(0.0, 1.0, step)


def test_build_grid_shape():
    grid = build_grid((1.0e15, 3.0e16), (1.0e13, 1.5e14), 0.05e15, 0.1e13)
    assert grid.shape == (580, 140)
    assert grid.size == 580 * 140
    assert not grid.is_empty


def test_build_grid_empty_axis():
    grid = build_grid((3.0e16, 1.0e15), (1.0e13, 1.5e14), 0.05e15, 0.1e13)
    assert grid.is_empty
