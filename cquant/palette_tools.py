import logging
from typing import Dict, List

import numpy as np

from cquant.color import Color, as_pixel_matrix, distinct_colors, pack
from cquant.errors import InvalidArgumentError
from cquant.metrics import DistanceMetric

logger = logging.getLogger(__name__)


def count_distinct_colors(matrix: np.ndarray) -> int:
    return len(np.unique(pack(as_pixel_matrix(matrix).reshape(-1, 3))))


def validate_num_colors(num_colors, available: int) -> int:
    """
    Check a requested palette size against the number of distinct colors.

    Raises:
        InvalidArgumentError: if num_colors is not a positive int or exceeds `available`.
    """
    if isinstance(num_colors, bool) or not isinstance(num_colors, (int, np.integer)):
        raise InvalidArgumentError(f"num_colors must be an integer, got {num_colors!r}")
    if num_colors <= 0:
        raise InvalidArgumentError(f"num_colors must be positive, got {num_colors}")
    if num_colors > available:
        raise InvalidArgumentError(
            f"num_colors ({num_colors}) exceeds the number of distinct colors in the image ({available})"
        )
    return int(num_colors)


def generate_initial_palette(matrix: np.ndarray, num_colors: int, metric: DistanceMetric) -> List[Color]:
    """
    Seed a palette by farthest-point sampling.

    The first entry is the color at (0, 0). Each following entry is the color
    whose distance to its nearest already-chosen entry is largest. Ties on
    that distance go to the color with the larger packed value
    (red*65536 + green*256 + blue).

    Args:
        matrix (np.ndarray): (rows, cols, 3) pixel matrix.
        num_colors (int): Palette size, 1 <= num_colors <= distinct colors.
        metric (DistanceMetric): Metric used to measure distances.

    Returns:
        List[Color]: The ordered seed palette.
    """
    matrix = as_pixel_matrix(matrix)
    colors, _, _ = distinct_colors(matrix)
    num_colors = validate_num_colors(num_colors, len(colors))

    first = Color.of(matrix[0, 0])
    palette = [first]
    packed = pack(colors)
    nearest = metric.pairwise(colors, np.array([first]))[:, 0]

    for _ in range(1, num_colors):
        farthest = nearest.max()
        candidates = np.flatnonzero(nearest == farthest)
        winner = candidates[np.argmax(packed[candidates])]
        chosen = Color.of(colors[winner])
        palette.append(chosen)
        nearest = np.minimum(nearest, metric.pairwise(colors, colors[winner:winner + 1])[:, 0])

    logger.debug("Seed palette (%d colors): %s", len(palette), palette)
    return palette


def apply_color_map(matrix: np.ndarray, color_map: Dict[Color, Color]) -> np.ndarray:
    """
    Replace every pixel's color with its image under color_map.

    Args:
        matrix (np.ndarray): HxWx3 RGB image data
        color_map (dict): Mapping of every distinct color in matrix to its replacement.

    Returns:
        np.ndarray: Recolored image array of same shape as input
    """
    matrix = as_pixel_matrix(matrix)
    colors, _, inverse = distinct_colors(matrix)
    try:
        replacements = np.array([color_map[Color.of(c)] for c in colors], dtype=np.uint8)
    except KeyError as e:
        raise InvalidArgumentError(f"Color map has no entry for color {e.args[0]}") from e

    return replacements[inverse].reshape(matrix.shape)
