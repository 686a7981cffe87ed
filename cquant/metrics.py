import numpy as np
from typing import Dict, Type

from cquant.color import Color, hues
from cquant.errors import InvalidArgumentError


class DistanceMetric:
    """
    Base class for color distance metrics.

    Subclasses implement .distance(a, b) for a single pair of Colors and
    .pairwise(colors, centroids) for whole arrays. Both must agree, be
    symmetric, non-negative and free of side effects.
    """
    name = "base"

    def distance(self, a: Color, b: Color) -> float:
        raise NotImplementedError

    def pairwise(self, colors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """
        Distances between every color and every centroid.

        Args:
            colors (np.ndarray): (N, 3) RGB array.
            centroids (np.ndarray): (K, 3) RGB array.

        Returns:
            np.ndarray: (N, K) array where [i, j] == distance(colors[i], centroids[j]).
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


class SquaredEuclideanMetric(DistanceMetric):
    """Sum of squared per-channel differences, in [0, 3 * 255**2]."""
    name = "euclidean"

    def distance(self, a: Color, b: Color) -> float:
        return float((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)

    def pairwise(self, colors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        colors = np.asarray(colors, dtype=np.int64).reshape(-1, 3)
        centroids = np.asarray(centroids, dtype=np.int64).reshape(-1, 3)
        # |c|^2 - 2 c.k + |k|^2 in int64: exact, and only (N, K) in size
        color_norms = (colors * colors).sum(axis=1)
        centroid_norms = (centroids * centroids).sum(axis=1)
        table = colors @ centroids.T
        table *= -2
        table += color_norms[:, None]
        table += centroid_norms[None, :]
        return table


class CircularHueMetric(DistanceMetric):
    """
    Distance between hues on the color wheel, in [0, 180].

    Only hue is compared, so colors that differ in saturation or lightness
    but share a hue are at distance zero. Hue wraps around: 20 and 340 are
    40 degrees apart.
    """
    name = "hue"

    @staticmethod
    def hue_distance(h1: int, h2: int) -> int:
        d = abs(h1 - h2)
        return min(d, 360 - d)

    def distance(self, a: Color, b: Color) -> float:
        return float(self.hue_distance(Color.of(a).hue, Color.of(b).hue))

    def pairwise(self, colors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        color_hues = hues(np.asarray(colors).reshape(-1, 3))
        centroid_hues = hues(np.asarray(centroids).reshape(-1, 3))
        d = np.abs(color_hues[:, None] - centroid_hues[None, :])
        return np.minimum(d, 360 - d)


METRICS: Dict[str, Type[DistanceMetric]] = {
    SquaredEuclideanMetric.name: SquaredEuclideanMetric,
    CircularHueMetric.name: CircularHueMetric,
}


def get_metric(name: str) -> DistanceMetric:
    """Instantiate a metric by its registry name ('euclidean' or 'hue')."""
    try:
        return METRICS[name.lower()]()
    except (KeyError, AttributeError):
        raise InvalidArgumentError(
            f"Unknown distance metric {name!r}. Choose from: {', '.join(sorted(METRICS))}"
        ) from None
