"""Parameter-grid construction for exhaustive searches."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass
class ParameterGrid:
    plasma: np.ndarray
    damping: np.ndarray

    @property
    def shape(self) -> tuple[int, int]:
        return (int(self.plasma.size), int(self.damping.size))

    @property
    def size(self) -> int:
        return int(self.plasma.size * self.damping.size)

    @property
    def is_empty(self) -> bool:
        return self.size == 0


def parameter_axis(start: float, stop: float, step: float) -> np.ndarray:
    """Half-open axis start, start + step, ... (< stop).

    The point count is fixed as an integer before any value is formed and
    each value is start + i * step, so accumulated rounding cannot add or
    drop points near the upper bound.
    """
    if not (step > 0) or not math.isfinite(step):
        raise ValueError("step must be positive and finite")
    if not (math.isfinite(start) and math.isfinite(stop)):
        raise ValueError("axis bounds must be finite")
    if start >= stop:
        return np.empty(0, dtype=float)

    count = int(math.ceil((stop - start) / step))
    values = start + np.arange(count, dtype=float) * step
    return values[values < stop]


def build_grid(
    plasma_range: tuple[float, float],
    damping_range: tuple[float, float],
    plasma_step: float,
    damping_step: float,
) -> ParameterGrid:
    plasma = parameter_axis(float(plasma_range[0]), float(plasma_range[1]), float(plasma_step))
    damping = parameter_axis(float(damping_range[0]), float(damping_range[1]), float(damping_step))
    return ParameterGrid(plasma=plasma, damping=damping)
