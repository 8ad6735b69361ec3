"""
Closed Contour Reparameterization

Splits closed 2D contours (airfoils, farm perimeters) into two x-monotonic
chains, parameterizes each chain by normalized arclength, and resamples them
with uniform, stretched, or piecewise (multi-section) point distributions.
"""
import logging
from collections import namedtuple
from numbers import Integral
from typing import Callable, Sequence, Tuple

import numpy as np

from turbinegen import splines

logger = logging.getLogger(__name__)

# One piece of a multi-section descriptor. `count` is the number of elements in
# the piece; `stretching` is the ratio between its last and first element
# lengths; `reverse` flips the stretching direction.
MultiSection = namedtuple("MultiSection", ["fraction", "count", "stretching", "reverse"])


class ParametricCurve:
    """Planar curve t -> (x, y) over t in [0, 1], built from two splines."""

    def __init__(self, x_spline: splines.SplineCurve, y_spline: splines.SplineCurve,
                 length: float):
        self.x_spline = x_spline
        self.y_spline = y_spline
        self.length = length

    def __call__(self, t: float) -> np.ndarray:
        return np.array([self.x_spline(t), self.y_spline(t)])

    def evaluate_many(self, ts: np.ndarray) -> np.ndarray:
        ts = np.asarray(ts, dtype=float)
        return np.column_stack([self.x_spline(ts), self.y_spline(ts)])


def _as_points(contour, name: str = "contour") -> np.ndarray:
    pts = np.asarray(contour, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"{name} must be an (n, 2) array of points, got shape {pts.shape}")
    return pts


def _drop_repeated(pts: np.ndarray) -> np.ndarray:
    """Removes consecutive duplicate points."""
    if len(pts) < 2:
        return pts
    steps = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    keep = np.concatenate([[True], steps > 0])
    return pts[keep]


def split_contour(contour) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split a closed contour into upper and lower chains, each monotonic in x.

    The contour is implicitly closed (its last point connects to its first); an
    explicit repetition of the first point at the end is accepted. The split
    happens at the minimum-x and maximum-x points.

    Args:
        contour: (n, 2) array of ordered contour points

    Returns:
        (upper, lower) chains, both ordered from minimum x to maximum x and
        sharing their end points. `upper` is the chain with the larger mean y.

    Raises:
        ValueError: If the contour cannot be closed (fewer than 3 distinct
                    points, no extent in x) or is not splittable into two
                    x-monotonic chains.
    """
    pts = _drop_repeated(_as_points(contour))
    if len(pts) > 1 and np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]

    if len(pts) < 3:
        raise ValueError(f"Contour is not closed: needs at least 3 distinct points, got {len(pts)}")

    x = pts[:, 0]
    if np.ptp(x) <= 0:
        raise ValueError("Contour is not closed: all points share the same x coordinate")

    # Start where the contour leaves its minimum-x plateau going forward
    n = len(pts)
    x_min = x.min()
    minima = np.flatnonzero(x == x_min)
    start = int(minima[0])
    for i in minima:
        if x[(i + 1) % n] > x_min:
            start = int(i)
            break

    loop = np.roll(pts, -start, axis=0)
    loop = np.vstack([loop, loop[:1]])
    lx = loop[:, 0]

    # Walk forward while x does not decrease: that is the first chain
    turn = len(loop) - 1
    for i in range(1, len(loop)):
        if lx[i] < lx[i - 1]:
            turn = i - 1
            break

    if turn == len(loop) - 1:
        raise ValueError("Contour is not splittable: it never turns back in x")

    first = loop[:turn + 1]
    second = loop[turn:]
    if np.any(np.diff(second[:, 0]) > 0):
        raise ValueError("Contour is not splittable into two x-monotonic chains")

    second = second[::-1]
    logger.debug("Split contour of %d points into chains of %d and %d points",
                 n, len(first), len(second))

    if first[:, 1].mean() >= second[:, 1].mean():
        return first, second
    return second, first


def parameterize(chain, degree=None, smoothing: float = 0.001,
                 boundary: str = "extrapolate") -> ParametricCurve:
    """
    Build an arclength parameterization of an open chain of points.

    Args:
        chain: (n, 2) array of ordered points
        degree: Spline degree; None picks min(5, n - 1)
        smoothing: Spline smoothing factor
        boundary: Spline boundary policy

    Returns:
        ParametricCurve with t = 0 at the first point and t = 1 at the last
    """
    pts = _drop_repeated(_as_points(chain, "chain"))
    if len(pts) < 2:
        raise ValueError("Chain needs at least 2 distinct points to be parameterized")

    steps = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    arclength = np.concatenate([[0.0], np.cumsum(steps)])
    length = float(arclength[-1])
    t = arclength / length

    k = splines.MAX_SPLINE_DEGREE if degree is None else degree
    x_spline = splines.fit(np.column_stack([t, pts[:, 0]]), k, smoothing, boundary)
    y_spline = splines.fit(np.column_stack([t, pts[:, 1]]), k, smoothing, boundary)

    return ParametricCurve(x_spline, y_spline, length)


def spacing(t0: float, t1: float, n: int, stretching: float = 1.0,
            reverse: bool = False) -> np.ndarray:
    """
    Return n + 1 parameter values from t0 to t1.

    Element lengths grow geometrically so that the last element is
    `stretching` times the first (1.0 gives uniform spacing). `reverse`
    swaps the roles of the first and last elements. n = 0 returns [t0].
    """
    if n < 0:
        raise ValueError(f"Number of divisions must be non-negative, got {n}")
    if stretching <= 0:
        raise ValueError(f"Stretching factor must be positive, got {stretching}")
    if n == 0:
        return np.array([float(t0)])

    ratio = 1.0 / stretching if reverse else float(stretching)
    if n == 1 or np.isclose(ratio, 1.0):
        return np.linspace(t0, t1, n + 1)

    growth = ratio ** (1.0 / (n - 1))
    lengths = growth ** np.arange(n)
    lengths *= (t1 - t0) / lengths.sum()

    ts = np.concatenate([[t0], t0 + np.cumsum(lengths)])
    ts[-1] = t1
    return ts


def resolve_divisions(ndivs):
    """
    Normalize a division descriptor.

    Args:
        ndivs: A plain division count, or a sequence of
               (fraction, count, stretching, reverse) sections

    Returns:
        The count as an int, or a tuple of MultiSection

    Raises:
        TypeError: If ndivs is neither of the supported descriptor types
        ValueError: If a descriptor is of the right type but invalid
    """
    if isinstance(ndivs, bool):
        raise TypeError("Expected a division count or a multi-section descriptor, got bool")
    if isinstance(ndivs, Integral):
        if ndivs < 0:
            raise ValueError(f"Number of divisions must be non-negative, got {ndivs}")
        return int(ndivs)

    if isinstance(ndivs, (list, tuple)) and ndivs and all(
            isinstance(sec, (list, tuple)) and len(sec) == 4 for sec in ndivs):
        sections = []
        for fraction, count, stretching, reverse in ndivs:
            if isinstance(count, bool) or not isinstance(count, Integral) or count < 1:
                raise ValueError(f"Section count must be a positive integer, got {count!r}")
            if fraction <= 0:
                raise ValueError(f"Section length fraction must be positive, got {fraction}")
            if stretching <= 0:
                raise ValueError(f"Section stretching must be positive, got {stretching}")
            sections.append(MultiSection(float(fraction), int(count), float(stretching),
                                         bool(reverse)))
        return tuple(sections)

    raise TypeError("Expected a division count (int) or a multi-section descriptor "
                    f"[(fraction, count, stretching, reverse), ...], got {ndivs!r}")


def division_count(ndivs) -> int:
    """Total number of divisions described by ndivs."""
    resolved = resolve_divisions(ndivs)
    if isinstance(resolved, int):
        return resolved
    return sum(sec.count for sec in resolved)


def multispacing(t0: float, t1: float, sections: Sequence) -> np.ndarray:
    """
    Piecewise parameter values described by multi-section descriptors.

    Section length fractions are normalized by their sum. Returns
    sum(count) + 1 values; section joints are not repeated.
    """
    resolved = resolve_divisions(list(sections))
    if isinstance(resolved, int):
        raise TypeError("multispacing expects a multi-section descriptor")

    total = sum(sec.fraction for sec in resolved)
    ts = [np.array([float(t0)])]
    start = float(t0)
    for sec in resolved:
        end = start + (t1 - t0) * sec.fraction / total
        ts.append(spacing(start, end, sec.count, sec.stretching, sec.reverse)[1:])
        start = end

    result = np.concatenate(ts)
    result[-1] = t1
    return result


def spacing_for(t0: float, t1: float, ndivs) -> np.ndarray:
    """Parameter values for either descriptor mode."""
    resolved = resolve_divisions(ndivs)
    if isinstance(resolved, int):
        return spacing(t0, t1, resolved)
    return multispacing(t0, t1, resolved)


def _sample(fun: Callable, ts: np.ndarray) -> np.ndarray:
    if isinstance(fun, ParametricCurve):
        return fun.evaluate_many(ts)
    return np.array([np.atleast_1d(fun(t)) for t in ts], dtype=float)


def discretize(fun: Callable, t0: float, t1: float, n: int,
               stretching: float = 1.0, reverse: bool = False) -> np.ndarray:
    """
    Sample fun at n + 1 parameter values between t0 and t1.

    Returns:
        Array of shape (n + 1, dim) with the sampled points in order
    """
    return _sample(fun, spacing(t0, t1, n, stretching, reverse))


def multidiscretize(fun: Callable, t0: float, t1: float, sections: Sequence) -> np.ndarray:
    """Sample fun following a multi-section descriptor."""
    return _sample(fun, multispacing(t0, t1, sections))


def discretize_divisions(fun: Callable, t0: float, t1: float, ndivs) -> np.ndarray:
    """Sample fun with either a plain division count or a multi-section descriptor."""
    return _sample(fun, spacing_for(t0, t1, ndivs))
