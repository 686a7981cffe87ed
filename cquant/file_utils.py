import logging
import re
from pathlib import Path
from typing import Dict, Optional

import numpy as np
from PIL import Image, PngImagePlugin, UnidentifiedImageError

from cquant.color import as_pixel_matrix
from cquant.errors import ImageIOError, InvalidArgumentError

logger = logging.getLogger(__name__)

METADATA_PREFIX = "cquant:"
SOFTWARE_TAG = "cquant color quantizer"
DEFAULT_FORMAT = "BMP"
LOSSLESS_FORMATS = {"BMP", "PNG", "TIFF"}


def load_pixel_matrix(input_path) -> np.ndarray:
    """
    Decode an image file into a (rows, cols, 3) uint8 pixel matrix.

    Raises:
        ImageIOError: if the file is missing, unreadable or not a supported image.
    """
    input_path = Path(input_path)
    try:
        with Image.open(input_path) as image:
            matrix = as_pixel_matrix(image)
    except FileNotFoundError as e:
        raise ImageIOError(f"Input file not found: {input_path}") from e
    except UnidentifiedImageError as e:
        raise ImageIOError(f"Unsupported or invalid image format: {input_path}") from e
    except OSError as e:
        raise ImageIOError(f"Error reading image {input_path}: {e}") from e

    logger.debug("Loaded %s: %dx%d pixels", input_path, matrix.shape[1], matrix.shape[0])
    return matrix


def matrix_to_image(matrix: np.ndarray) -> Image.Image:
    return Image.fromarray(np.asarray(matrix, dtype=np.uint8), "RGB")


def _clean_key(key: str) -> str:
    key_clean = re.sub(r'\s+', '_', key)
    key_clean = re.sub(r'[^a-zA-Z0-9_.-]', '', key_clean)
    if not re.match(r'^[a-zA-Z_]', key_clean):
        key_clean = "cquant_" + key_clean
    # tEXt keywords are limited to 79 bytes including the prefix
    return key_clean[:70]


def output_format(output_path) -> str:
    """
    Pillow format name for output_path, chosen by extension (BMP if unknown).

    Raises:
        InvalidArgumentError: if the extension names a lossy format, which
                              would write colors outside the palette.
    """
    output_path = Path(output_path)
    image_format = Image.registered_extensions().get(output_path.suffix.lower(), DEFAULT_FORMAT)
    if image_format not in LOSSLESS_FORMATS:
        raise InvalidArgumentError(
            f"Cannot write {image_format} to {output_path}: use one of "
            f"{', '.join(sorted(LOSSLESS_FORMATS))} so only palette colors are stored"
        )
    return image_format


def save_pixel_matrix(
    matrix: np.ndarray,
    output_path,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None,
) -> Path:
    """
    Encode a pixel matrix and write it to output_path.

    The format follows the file extension, falling back to BMP. PNG files
    also get tEXt chunks carrying the command line and any extra metadata.

    Returns:
        Path: The path written.

    Raises:
        InvalidArgumentError: if the extension names a lossy format.
        ImageIOError: if the file cannot be written.
    """
    output_path = Path(output_path)
    image = matrix_to_image(matrix)
    image_format = output_format(output_path)

    save_kwargs = {}
    if image_format == "PNG":
        png_info = PngImagePlugin.PngInfo()
        png_info.add_text("Software", SOFTWARE_TAG)
        if command_line_invocation:
            png_info.add_text(f"{METADATA_PREFIX}command_line", command_line_invocation)
        for key, value in (additional_metadata or {}).items():
            png_info.add_text(f"{METADATA_PREFIX}{_clean_key(key)}", str(value))
        save_kwargs["pnginfo"] = png_info
    elif additional_metadata or command_line_invocation:
        logger.debug("Metadata is only embedded in PNG output; skipping for %s", image_format)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(output_path, image_format, **save_kwargs)
    except (OSError, ValueError) as e:
        raise ImageIOError(f"Error saving {image_format} to {output_path}: {e}") from e

    logger.info("Saved %s", output_path)
    return output_path


def read_cquant_metadata(path) -> Dict[str, str]:
    """Return the cquant-prefixed text entries of a PNG, with the prefix stripped."""
    path = Path(path)
    try:
        with Image.open(path) as image:
            info = dict(image.info)
    except FileNotFoundError as e:
        raise ImageIOError(f"File not found: {path}") from e
    except (UnidentifiedImageError, OSError) as e:
        raise ImageIOError(f"Error reading image {path}: {e}") from e

    return {
        key[len(METADATA_PREFIX):]: str(value)
        for key, value in info.items()
        if isinstance(key, str) and key.startswith(METADATA_PREFIX)
    }
