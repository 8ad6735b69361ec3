import numpy as np
import pytest

from turbinegen import splines
from turbinegen.config import SplineOptions


def test_linear_table_interpolates_midpoint():
    chord = splines.fit([(0.0, 1.0), (1.0, 0.5)])
    assert chord.degree == 1
    assert chord(0.5) == pytest.approx(0.75)


def test_degree_lowered_for_short_tables():
    curve = splines.fit([(0.0, 0.0), (0.5, 0.25), (1.0, 1.0)], degree=5)
    assert curve.degree == 2


def test_degree_kept_when_enough_points():
    x = np.linspace(0, 1, 10)
    curve = splines.fit(np.column_stack([x, x**2]), degree=3)
    assert curve.degree == 3


def test_passes_through_points_without_smoothing():
    x = np.linspace(0, np.pi, 12)
    curve = splines.fit(np.column_stack([x, np.sin(x)]), degree=3, smoothing=0.0)
    assert np.allclose(curve(x), np.sin(x), atol=1e-10)


def test_scalar_and_array_evaluation():
    curve = splines.fit([(0.0, 0.0), (1.0, 2.0)])
    assert isinstance(curve(0.25), float)
    values = curve(np.array([0.0, 0.5, 1.0]))
    assert values.shape == (3,)
    assert np.allclose(values, [0.0, 1.0, 2.0])


def test_boundary_policies():
    table = [(0.0, 0.0), (1.0, 1.0)]
    assert splines.fit(table, boundary="extrapolate")(2.0) == pytest.approx(2.0)
    assert splines.fit(table, boundary="nearest")(2.0) == pytest.approx(1.0)
    assert splines.fit(table, boundary="clamp")(-1.0) == pytest.approx(0.0)
    assert splines.fit(table, boundary="zero")(2.0) == pytest.approx(0.0)


@pytest.mark.parametrize("table", [
    [(0.0, 1.0)],
    [(0.0, 1.0), (0.0, 2.0)],
    [(1.0, 1.0), (0.0, 2.0)],
    [(0.0, 1.0, 2.0), (1.0, 2.0, 3.0)],
])
def test_invalid_tables_rejected(table):
    with pytest.raises(ValueError):
        splines.fit(table)


def test_unknown_boundary_rejected():
    with pytest.raises(ValueError):
        splines.fit([(0.0, 0.0), (1.0, 1.0)], boundary="wrap")


def test_fit_with_options():
    curve = splines.fit_with([(0.0, 0.0), (1.0, 1.0)], SplineOptions(boundary="nearest"))
    assert curve.boundary == "nearest"
    assert curve.bounds == (0.0, 1.0)
