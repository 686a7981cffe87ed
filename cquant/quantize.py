import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from cquant import file_utils
from cquant.color import Color, as_pixel_matrix
from cquant.errors import InvalidArgumentError
from cquant.generator import ColorMapGenerator
from cquant.palette_tools import apply_color_map, count_distinct_colors, validate_num_colors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuantizationResult:
    """
    A recolored pixel matrix and the palette it was drawn from.

    `converged` is False only when a clustering strategy hit its iteration
    cap; strategies without refinement always report True.
    """
    pixels: np.ndarray
    palette: List[Color]
    color_map: Dict[Color, Color]
    converged: bool = True
    iterations: int = 0


class ColorQuantizer:
    """
    Reduces an image to a palette of at most num_colors colors using a
    ColorMapGenerator strategy (clustering or bucketing).
    """

    def __init__(self, pixels, generator: ColorMapGenerator):
        if pixels is None:
            raise InvalidArgumentError("pixels must not be None")
        if generator is None:
            raise InvalidArgumentError("A color map generator is required")
        self.pixels = as_pixel_matrix(pixels)
        self.generator = generator

    @classmethod
    def from_file(cls, input_path, generator: ColorMapGenerator) -> "ColorQuantizer":
        """Decode an image file and build a quantizer for it."""
        if generator is None:
            raise InvalidArgumentError("A color map generator is required")
        return cls(file_utils.load_pixel_matrix(input_path), generator)

    @property
    def shape(self):
        return self.pixels.shape[:2]

    def quantize(self, num_colors: int) -> QuantizationResult:
        """
        Quantize the image to num_colors colors.

        Args:
            num_colors (int): Target palette size, 1 <= num_colors <= distinct colors.

        Returns:
            QuantizationResult: The recolored matrix (same shape as the input),
            the final palette, the color map and the convergence status.

        Raises:
            InvalidArgumentError: if num_colors is not positive or exceeds the
                                  number of distinct colors in the image.
        """
        num_colors = validate_num_colors(num_colors, count_distinct_colors(self.pixels))
        logger.info(
            "Quantizing %dx%d image to %d colors with %s",
            self.shape[1], self.shape[0], num_colors, self.generator.name,
        )

        initial_palette = self.generator.generate_color_palette(self.pixels, num_colors)
        mapping = self.generator.refine(self.pixels, initial_palette)

        quantized = apply_color_map(self.pixels, mapping.color_map)
        logger.info(
            "Quantization finished: %d palette colors, converged=%s after %d iterations",
            len(mapping.palette), mapping.converged, mapping.iterations,
        )
        return QuantizationResult(
            pixels=quantized,
            palette=mapping.palette,
            color_map=mapping.color_map,
            converged=mapping.converged,
            iterations=mapping.iterations,
        )

    def quantize_to_array(self, num_colors: int) -> np.ndarray:
        return self.quantize(num_colors).pixels

    def quantize_to_file(
        self,
        output_path,
        num_colors: int,
        command_line_invocation: Optional[str] = None,
        additional_metadata: Optional[Dict[str, str]] = None,
    ) -> QuantizationResult:
        """
        Quantize and write the result to output_path.

        Raises:
            InvalidArgumentError: if output_path names a lossy format; checked
                                  before any quantization work.
            ImageIOError: if the output cannot be written.
        """
        file_utils.output_format(output_path)
        result = self.quantize(num_colors)
        metadata = {
            "NumColors": str(num_colors),
            "Strategy": self.generator.name,
            "Converged": str(result.converged),
            "Iterations": str(result.iterations),
        }
        metric = getattr(self.generator, "metric", None)
        if metric is not None:
            metadata["Metric"] = metric.name
        metadata.update(additional_metadata or {})

        file_utils.save_pixel_matrix(
            result.pixels,
            Path(output_path),
            command_line_invocation=command_line_invocation,
            additional_metadata=metadata,
        )
        return result
