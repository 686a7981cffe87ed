import logging
from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from cquant.color import Color, as_pixel_matrix, distinct_colors
from cquant.errors import InvalidArgumentError
from cquant.generator import ColorMapGenerator, PaletteMapping
from cquant.metrics import DistanceMetric
from cquant.palette_tools import generate_initial_palette

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 1000


@dataclass(frozen=True)
class ClusteringResult:
    """
    Outcome of a clustering run.

    `converged` is False when the iteration cap was hit before the centroids
    stopped moving; the palette and color map are then a best-effort result.
    `iterations` counts assign/update/check passes, including the final one
    that confirmed convergence.
    """
    palette: List[Color]
    color_map: Dict[Color, Color]
    labels: np.ndarray
    iterations: int
    converged: bool


class ClusteringMapGenerator(ColorMapGenerator):
    """
    Color quantization by Lloyd's k-means, parameterized by a distance metric.

    The initial palette comes from farthest-point sampling; refinement then
    alternates between assigning each distinct color to its nearest centroid
    and moving each centroid to the integer mean of its members, until the
    centroids stop changing or max_iterations passes have run.
    """
    name = "clustering"

    def __init__(self, metric: DistanceMetric, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        if metric is None:
            raise InvalidArgumentError("A distance metric is required")
        if isinstance(max_iterations, bool) or not isinstance(max_iterations, int) or max_iterations < 1:
            raise InvalidArgumentError(f"max_iterations must be a positive integer, got {max_iterations!r}")
        self.metric = metric
        self.max_iterations = max_iterations

    def __repr__(self):
        return f"ClusteringMapGenerator(metric={self.metric!r}, max_iterations={self.max_iterations})"

    def generate_color_palette(self, matrix: np.ndarray, num_colors: int) -> List[Color]:
        return generate_initial_palette(matrix, num_colors, self.metric)

    def generate_color_map(self, matrix: np.ndarray, initial_palette: List[Color]) -> Dict[Color, Color]:
        return self.cluster(matrix, initial_palette).color_map

    def refine(self, matrix: np.ndarray, initial_palette: List[Color]) -> PaletteMapping:
        result = self.cluster(matrix, initial_palette)
        return PaletteMapping(
            palette=result.palette,
            color_map=result.color_map,
            iterations=result.iterations,
            converged=result.converged,
        )

    def cluster(self, matrix: np.ndarray, initial_palette: List[Color]) -> ClusteringResult:
        """
        Refine initial_palette with Lloyd's algorithm.

        Args:
            matrix (np.ndarray): (rows, cols, 3) pixel matrix.
            initial_palette (List[Color]): Starting centroids, in order.

        Returns:
            ClusteringResult: final palette, color map and convergence status.
        """
        if not initial_palette:
            raise InvalidArgumentError("initial_palette must contain at least one color")

        colors, counts, _ = distinct_colors(as_pixel_matrix(matrix))
        centroids = np.array([Color.of(c) for c in initial_palette], dtype=np.int64)

        refinements = 0
        passes = 0
        while True:
            passes += 1
            labels = self._assign(colors, centroids)
            new_centroids = self._update(colors, counts, labels, centroids)

            if np.array_equal(new_centroids, centroids):
                converged = True
                logger.debug("Iteration %d: centroids stable, converged", passes)
                break

            moved = int(np.any(new_centroids != centroids, axis=1).sum())
            logger.debug("Iteration %d: %d of %d centroids moved", passes, moved, len(centroids))
            centroids = new_centroids
            refinements += 1
            if refinements == self.max_iterations:
                converged = False
                logger.warning(
                    "Clustering stopped after %d iterations without converging; using best-effort palette",
                    self.max_iterations,
                )
                break

        palette = [Color.of(c) for c in centroids]
        color_map = {Color.of(color): palette[label] for color, label in zip(colors, labels)}
        return ClusteringResult(
            palette=palette,
            color_map=color_map,
            labels=labels,
            iterations=passes,
            converged=converged,
        )

    def _assign(self, colors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        # argmin keeps the lowest index on ties, so coinciding centroids resolve deterministically
        return np.argmin(self.metric.pairwise(colors, centroids), axis=1)

    @staticmethod
    def _update(colors: np.ndarray, counts: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        k = len(centroids)
        sums = np.zeros((k, 3), dtype=np.int64)
        sizes = np.zeros(k, dtype=np.int64)
        np.add.at(sums, labels, colors * counts[:, None])
        np.add.at(sizes, labels, counts)

        means = sums // np.maximum(sizes, 1)[:, None]
        return np.where((sizes > 0)[:, None], means, centroids)
