from typing import Dict, List

import numpy as np

from cquant.color import Color, as_pixel_matrix, distinct_colors, pack
from cquant.errors import InvalidArgumentError
from cquant.generator import ColorMapGenerator

COLOR_SPACE_SIZE = 1 << 24


class BucketingMapGenerator(ColorMapGenerator):
    """
    Non-clustering strategy: split the packed RGB range [0, 2**24) into
    equal-width buckets and map each color to the center of its bucket.

    No distance metric is involved, and the palette does not depend on the image.
    """
    name = "bucketing"

    def generate_color_palette(self, matrix: np.ndarray, num_colors: int) -> List[Color]:
        as_pixel_matrix(matrix)  # validate only; bucket centers do not depend on the image
        if isinstance(num_colors, bool) or not isinstance(num_colors, (int, np.integer)):
            raise InvalidArgumentError(f"num_colors must be an integer, got {num_colors!r}")
        if not 1 <= num_colors <= COLOR_SPACE_SIZE:
            raise InvalidArgumentError(f"num_colors must be in [1, {COLOR_SPACE_SIZE}], got {num_colors}")
        return [Color.unpack(self._center(i, num_colors)) for i in range(num_colors)]

    def generate_color_map(self, matrix: np.ndarray, initial_palette: List[Color]) -> Dict[Color, Color]:
        if not initial_palette:
            raise InvalidArgumentError("initial_palette must contain at least one color")
        palette = [Color.of(c) for c in initial_palette]
        num_buckets = len(palette)

        colors, _, _ = distinct_colors(as_pixel_matrix(matrix))
        buckets = pack(colors) * num_buckets // COLOR_SPACE_SIZE
        return {Color.of(color): palette[bucket] for color, bucket in zip(colors, buckets)}

    @staticmethod
    def _center(index: int, num_buckets: int) -> int:
        return (2 * index + 1) * COLOR_SPACE_SIZE // (2 * num_buckets)
