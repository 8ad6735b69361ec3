import numpy as np
import pytest
from scipy.spatial.distance import directed_hausdorff

from turbinegen import contour


def test_split_circle(circle):
    upper, lower = contour.split_contour(circle)

    for chain in (upper, lower):
        assert np.all(np.diff(chain[:, 0]) >= 0)
        assert chain[0, 0] == pytest.approx(circle[:, 0].min())
        assert chain[-1, 0] == pytest.approx(circle[:, 0].max())

    assert upper[:, 1].mean() > 0 > lower[:, 1].mean()
    # Both chains meet at the split points
    assert np.allclose(upper[0], lower[0])
    assert np.allclose(upper[-1], lower[-1])
    # Every original point lands in one of the chains
    assert len(upper) + len(lower) == len(circle) + 2


def test_split_accepts_explicitly_closed_contour(circle):
    closed = np.vstack([circle, circle[:1]])
    upper, lower = contour.split_contour(closed)
    ref_upper, ref_lower = contour.split_contour(circle)
    assert np.allclose(upper, ref_upper)
    assert np.allclose(lower, ref_lower)


def test_split_rectangle_with_vertical_sides():
    rect = [(0, 1), (0, 0), (2, 0), (2, 1)]
    upper, lower = contour.split_contour(rect)
    assert np.allclose(lower, [(0, 0), (2, 0), (2, 1)])
    assert np.allclose(upper, [(0, 0), (0, 1), (2, 1)])


def test_unsplittable_contour_rejected():
    zigzag = [(0, 0), (2, 0), (1, 1), (3, 1), (3, 2), (0, 2)]
    with pytest.raises(ValueError, match="splittable"):
        contour.split_contour(zigzag)


@pytest.mark.parametrize("points", [
    [(0, 0), (1, 1)],
    [(0, 0), (1, 1), (0, 0)],
    [(1, 0), (1, 1), (1, 2)],
])
def test_non_closed_contour_rejected(points):
    with pytest.raises(ValueError, match="not closed"):
        contour.split_contour(points)


def test_parameterize_hits_chain_ends(circle):
    upper, _ = contour.split_contour(circle)
    fun = contour.parameterize(upper)
    assert np.allclose(fun(0.0), upper[0], atol=3e-2)
    assert np.allclose(fun(1.0), upper[-1], atol=3e-2)
    assert fun.length == pytest.approx(np.pi, rel=1e-3)


def test_parameterize_drops_repeated_points():
    chain = [(0, 0), (0.5, 0.1), (0.5, 0.1), (1, 0)]
    fun = contour.parameterize(chain, degree=2, smoothing=0.0)
    assert np.allclose(fun(1.0), (1, 0))


def test_discretization_converges_to_contour(circle):
    upper, lower = contour.split_contour(circle)
    fun_upper = contour.parameterize(upper)
    fun_lower = contour.parameterize(lower)

    distances = []
    for n in (4, 16, 64):
        sampled = np.vstack([contour.discretize(fun_upper, 0, 1, n),
                             contour.discretize(fun_lower, 0, 1, n)])
        distances.append(directed_hausdorff(circle, sampled)[0])

    assert distances[0] > distances[1] > distances[2]
    assert distances[2] < 0.05


def test_uniform_spacing():
    assert np.allclose(contour.spacing(0, 1, 4), [0, 0.25, 0.5, 0.75, 1])
    assert np.allclose(contour.spacing(2, 3, 0), [2])


def test_stretched_spacing():
    ts = contour.spacing(0, 2, 5, stretching=8.0)
    steps = np.diff(ts)
    assert len(ts) == 6
    assert ts[-1] == 2
    assert steps[-1] / steps[0] == pytest.approx(8.0)

    reverse = np.diff(contour.spacing(0, 2, 5, stretching=8.0, reverse=True))
    assert reverse[0] / reverse[-1] == pytest.approx(8.0)


def test_multispacing():
    ts = contour.multispacing(0, 2, [(0.5, 4, 1.0, False), (0.5, 6, 3.0, False)])
    assert len(ts) == 11
    assert ts[4] == pytest.approx(1.0)
    assert ts[-1] == 2
    assert np.all(np.diff(ts) > 0)


def test_multispacing_normalizes_fractions():
    ts = contour.multispacing(0, 1, [(1, 2, 1.0, False), (3, 2, 1.0, False)])
    assert ts[2] == pytest.approx(0.25)


def test_discretize_modes_agree_for_uniform_sections():
    fun = lambda t: (t, t**2)
    plain = contour.discretize_divisions(fun, 0, 1, 4)
    multi = contour.discretize_divisions(fun, 0, 1, [(0.5, 2, 1.0, False), (0.5, 2, 1.0, False)])
    assert plain.shape == (5, 2)
    assert np.allclose(plain, multi)
    assert np.allclose(contour.multidiscretize(fun, 0, 1, [(1.0, 4, 1.0, False)]), plain)


def test_division_count():
    assert contour.division_count(7) == 7
    assert contour.division_count([(0.3, 2, 1.0, False), (0.7, 5, 2.0, True)]) == 7


@pytest.mark.parametrize("ndivs", ["10", 2.5, True, None, [(0.5, 2, 1.0)], []])
def test_unsupported_descriptor_type(ndivs):
    with pytest.raises(TypeError):
        contour.resolve_divisions(ndivs)


@pytest.mark.parametrize("ndivs", [-1, [(0.5, 0, 1.0, False)], [(0.0, 2, 1.0, False)],
                                   [(0.5, 2, -1.0, False)]])
def test_invalid_descriptor_values(ndivs):
    with pytest.raises(ValueError):
        contour.resolve_divisions(ndivs)


def test_curve_sampling_matches_pointwise_evaluation(circle):
    upper, _ = contour.split_contour(circle)
    fun = contour.parameterize(upper)

    sampled = contour.discretize(fun, 0, 1, 10, stretching=3.0)
    pointwise = np.array([fun(t) for t in contour.spacing(0, 1, 10, stretching=3.0)])

    assert sampled.shape == (11, 2)
    assert np.allclose(sampled, pointwise)
    assert contour.discretize(fun, 0.5, 1, 0).shape == (1, 2)
