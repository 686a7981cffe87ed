import itertools

import numpy as np
import pytest

from cquant.color import Color, hues
from cquant.errors import InvalidArgumentError
from cquant.metrics import CircularHueMetric, SquaredEuclideanMetric, get_metric

SAMPLE_COLORS = [
    Color(0, 0, 0),
    Color(255, 255, 255),
    Color(255, 0, 0),
    Color(0, 255, 0),
    Color(0, 0, 255),
    Color(12, 200, 77),
    Color(130, 64, 250),
    Color(255, 0, 85),
]


def test_euclidean_matches_closed_form():
    metric = SquaredEuclideanMetric()
    assert metric.distance(Color(1, 2, 3), Color(4, 6, 3)) == 9 + 16 + 0
    assert metric.distance(Color(0, 0, 0), Color(255, 255, 255)) == 3 * 255 ** 2
    assert metric.distance(Color(10, 20, 30), Color(10, 20, 31)) == 1


def test_euclidean_symmetric_and_zero_iff_equal():
    metric = SquaredEuclideanMetric()
    for a, b in itertools.product(SAMPLE_COLORS, repeat=2):
        assert metric.distance(a, b) == metric.distance(b, a)
        assert (metric.distance(a, b) == 0) == (a == b)
        assert metric.distance(a, b) >= 0


def test_hue_distance_wraps_around():
    assert CircularHueMetric.hue_distance(20, 340) == 40
    assert CircularHueMetric.hue_distance(340, 20) == 40
    assert CircularHueMetric.hue_distance(50, 90) == 40
    assert CircularHueMetric.hue_distance(0, 180) == 180
    assert CircularHueMetric.hue_distance(359, 0) == 1


def test_primary_hues():
    assert Color(255, 0, 0).hue == 0
    assert Color(0, 255, 0).hue == 120
    assert Color(0, 0, 255).hue == 240
    assert Color(128, 128, 128).hue == 0


def test_hue_metric_symmetric_and_bounded():
    metric = CircularHueMetric()
    for a, b in itertools.product(SAMPLE_COLORS, repeat=2):
        d = metric.distance(a, b)
        assert d == metric.distance(b, a)
        assert 0 <= d <= 180


def test_hue_metric_ignores_saturation_and_lightness():
    metric = CircularHueMetric()
    assert metric.distance(Color(255, 0, 0), Color(100, 0, 0)) == 0
    assert metric.distance(Color(255, 0, 0), Color(0, 0, 255)) == 120


@pytest.mark.parametrize("metric", [SquaredEuclideanMetric(), CircularHueMetric()])
def test_pairwise_agrees_with_distance(metric):
    colors = np.array(SAMPLE_COLORS)
    centroids = np.array(SAMPLE_COLORS[:3])
    table = metric.pairwise(colors, centroids)

    assert table.shape == (len(SAMPLE_COLORS), 3)
    for i, color in enumerate(SAMPLE_COLORS):
        for j, centroid in enumerate(SAMPLE_COLORS[:3]):
            assert table[i, j] == metric.distance(color, centroid)


def test_get_metric_by_name():
    assert isinstance(get_metric("euclidean"), SquaredEuclideanMetric)
    assert isinstance(get_metric("HUE"), CircularHueMetric)
    with pytest.raises(InvalidArgumentError):
        get_metric("manhattan")


def test_hue_metric_on_colors_wrapping_past_red():
    metric = CircularHueMetric()
    orange_red = Color(255, 85, 0)
    pink_red = Color(255, 0, 85)
    assert orange_red.hue == 20
    assert pink_red.hue == 340
    assert metric.distance(orange_red, pink_red) == 40
    assert metric.distance(pink_red, orange_red) == 40


def test_vectorized_hues_match_color_hue():
    rng = np.random.default_rng(1)
    colors = rng.integers(0, 256, size=(20000, 3))
    # grays, primaries and ties between the max channels
    extras = np.array([[0, 0, 0], [77, 77, 77], [255, 255, 255], [255, 0, 0], [0, 255, 0],
                       [0, 0, 255], [255, 255, 0], [0, 255, 255], [255, 0, 255], [255, 85, 0], [255, 0, 85]])
    colors = np.vstack([colors, extras])

    expected = [Color.of(c).hue for c in colors]
    np.testing.assert_array_equal(hues(colors), expected)


def test_euclidean_pairwise_matches_brute_force_on_many_colors():
    rng = np.random.default_rng(2)
    colors = rng.integers(0, 256, size=(5000, 3))
    centroids = np.vstack([rng.integers(0, 256, size=(63, 3)), [[0, 0, 0]], [[255, 255, 255]]])

    table = SquaredEuclideanMetric().pairwise(colors, centroids)

    diff = colors[:, None, :].astype(np.int64) - centroids[None, :, :]
    assert table.shape == (5000, 65)
    assert table.dtype == np.int64
    np.testing.assert_array_equal(table, (diff * diff).sum(axis=2))
    assert table.min() >= 0
