from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from cquant.color import Color


@dataclass(frozen=True)
class PaletteMapping:
    palette: List[Color]
    color_map: Dict[Color, Color]
    iterations: int = 0
    converged: bool = True


class ColorMapGenerator:
    """
    Base class for palette/color-map generation strategies.

    A strategy first proposes a palette for a pixel matrix, then maps every
    distinct color of the matrix onto that (possibly refined) palette.
    """
    name = "base"

    def generate_color_palette(self, matrix: np.ndarray, num_colors: int) -> List[Color]:
        raise NotImplementedError

    def generate_color_map(self, matrix: np.ndarray, initial_palette: List[Color]) -> Dict[Color, Color]:
        raise NotImplementedError

    def refine(self, matrix: np.ndarray, initial_palette: List[Color]) -> PaletteMapping:
        """Final palette and color map for initial_palette; strategies that iterate override this."""
        return PaletteMapping(
            palette=list(initial_palette),
            color_map=self.generate_color_map(matrix, initial_palette),
        )
