"""
Spline Interpolation of Tabulated Distributions

Fits smooth 1D curves through (position, value) tables such as chord, twist,
leading-edge and tilt distributions along a blade span.
"""
import logging
from typing import Sequence, Tuple, Union

import numpy as np
from scipy import interpolate

from turbinegen.config import SPLINE_BOUNDARY_POLICIES

logger = logging.getLogger(__name__)

# FITPACK supports degrees 1 through 5
MAX_SPLINE_DEGREE = 5

# Mapping of boundary policies onto UnivariateSpline's `ext` argument
_EXT_CODES = {
    "extrapolate": 0,
    "zero": 1,
    "error": 2,
    "nearest": 3,
    "clamp": 3,
}


class SplineCurve:
    """
    A fitted 1D distribution curve.

    Calling the curve (or `evaluate`) with a scalar returns a float; calling it
    with an array returns an array of the same shape.
    """

    def __init__(self, positions: np.ndarray, values: np.ndarray, degree: int,
                 smoothing: float, boundary: str):
        self.positions = positions
        self.values = values
        self.degree = degree
        self.smoothing = smoothing
        self.boundary = boundary
        self._spline = interpolate.UnivariateSpline(
            positions, values, k=degree, s=smoothing, ext=_EXT_CODES[boundary]
        )

    def evaluate(self, position: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        result = self._spline(position)
        if np.ndim(position) == 0:
            return float(result)
        return result

    def __call__(self, position):
        return self.evaluate(position)

    @property
    def bounds(self) -> Tuple[float, float]:
        return float(self.positions[0]), float(self.positions[-1])

    def __repr__(self):
        lo, hi = self.bounds
        return (f"SplineCurve(k={self.degree}, s={self.smoothing}, "
                f"boundary={self.boundary!r}, range=[{lo}, {hi}])")


def as_distribution(points: Union[np.ndarray, Sequence[Sequence[float]]]) -> np.ndarray:
    """
    Converts a (position, value) table into an (n, 2) float array.

    Raises:
        ValueError: If the table is not two columns wide, has fewer than two
                    rows, or positions are not strictly increasing.
    """
    table = np.asarray(points, dtype=float)
    if table.ndim != 2 or table.shape[1] != 2:
        raise ValueError(f"Distribution must be an (n, 2) table, got shape {table.shape}")
    if table.shape[0] < 2:
        raise ValueError(f"Distribution needs at least 2 points, got {table.shape[0]}")
    if np.any(np.diff(table[:, 0]) <= 0):
        raise ValueError("Distribution positions must be strictly increasing")
    return table


def effective_degree(n_points: int, degree: int) -> int:
    """
    Degree actually used for a fit through n_points control points.

    Short tables cannot determine a high-degree spline, so the degree is
    lowered to n_points - 1.
    """
    return max(1, min(degree, n_points - 1, MAX_SPLINE_DEGREE))


def fit(points, degree: int = 5, smoothing: float = 0.001,
        boundary: str = "extrapolate") -> SplineCurve:
    """
    Fit a smoothing spline through a tabulated distribution.

    Args:
        points: (n, 2) table of (position, value) pairs, ordered by position
        degree: Requested spline degree
        smoothing: Smoothing factor (sum of squared residuals allowed)
        boundary: Behavior outside the fitted range ('extrapolate', 'zero',
                  'error', 'nearest' or its alias 'clamp')

    Returns:
        SplineCurve passing within the smoothing tolerance through the points
    """
    if boundary not in SPLINE_BOUNDARY_POLICIES:
        raise ValueError(f"Unknown spline boundary policy {boundary!r}, "
                         f"expected one of {SPLINE_BOUNDARY_POLICIES}")
    if degree < 1:
        raise ValueError(f"Spline degree must be at least 1, got {degree}")

    table = as_distribution(points)
    k = effective_degree(table.shape[0], degree)
    if k != degree:
        logger.debug("Lowering spline degree from %d to %d for %d points",
                     degree, k, table.shape[0])

    return SplineCurve(table[:, 0], table[:, 1], k, smoothing, boundary)


def fit_with(points, options) -> SplineCurve:
    """Fit a spline using the fields of a SplineOptions record."""
    return fit(points, degree=options.degree, smoothing=options.smoothing,
               boundary=options.boundary)
