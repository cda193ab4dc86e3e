"""Exception types raised by the load and fit stages."""

from __future__ import annotations


class DispersionError(Exception):
    """Base class for dataset and fitting failures."""


class DataLoadError(DispersionError):
    """The optical-constant source could not be opened or read."""


class DataFormatError(DispersionError, ValueError):
    """A row of the source is not three finite numeric fields."""


class InvalidSampleError(DispersionError, ValueError):
    """A sample has a wavelength for which frequency/energy are undefined."""


class NoFitFoundError(DispersionError):
    """The grid search evaluated no candidate point."""


class FitCancelledError(DispersionError):
    """The grid search was cancelled or ran past its deadline."""
