import colorsys
from functools import lru_cache
from typing import NamedTuple, Tuple

import numpy as np
from PIL import Image

from cquant.errors import InvalidArgumentError


class Color(NamedTuple):
    """An RGB triple. Two colors with the same channels are the same color."""
    red: int
    green: int
    blue: int

    @classmethod
    def of(cls, value) -> "Color":
        """
        Build a Color from any 3-item sequence (tuple, list, ndarray row).

        Raises:
            InvalidArgumentError: if the value is not three integers in [0, 255].
        """
        if isinstance(value, Color):
            return value
        try:
            channels = [int(c) for c in value]
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Not an RGB triple: {value!r}") from e
        if len(channels) != 3:
            raise InvalidArgumentError(f"Expected 3 channels, got {len(channels)}: {value!r}")
        if any(c < 0 or c > 255 for c in channels):
            raise InvalidArgumentError(f"Channel values must be in [0, 255]: {value!r}")
        return cls(*channels)

    @property
    def packed(self) -> int:
        return (self.red << 16) | (self.green << 8) | self.blue

    @property
    def hue(self) -> int:
        return _hue(self.red, self.green, self.blue)

    @classmethod
    def unpack(cls, packed: int) -> "Color":
        packed = int(packed)
        return cls((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)


@lru_cache(maxsize=65536)
def _hue(red: int, green: int, blue: int) -> int:
    # Gray has no hue; colorsys reports 0.0 for it.
    h, _, _ = colorsys.rgb_to_hsv(red / 255.0, green / 255.0, blue / 255.0)
    # round, not truncate: pure blue comes out as 239.99999999999997
    return int(round(h * 360)) % 360


def hues(colors: np.ndarray) -> np.ndarray:
    """
    Hue in integer degrees for each row of an (N, 3) color array.

    Same arithmetic as colorsys.rgb_to_hsv, step for step, so every entry
    equals Color.hue for that row.
    """
    rgb = np.asarray(colors, dtype=np.float64).reshape(-1, 3) / 255.0
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    maxc = rgb.max(axis=1)
    rangec = maxc - rgb.min(axis=1)
    gray = rangec == 0
    rangec = np.where(gray, 1.0, rangec)

    rc = (maxc - r) / rangec
    gc = (maxc - g) / rangec
    bc = (maxc - b) / rangec
    h = np.where(r == maxc, bc - gc, np.where(g == maxc, 2.0 + rc - bc, 4.0 + gc - rc))
    h = (h / 6.0) % 1.0
    h[gray] = 0.0
    return np.round(h * 360).astype(np.int64) % 360


def pack(colors: np.ndarray) -> np.ndarray:
    """Pack an (..., 3) color array into red*65536 + green*256 + blue integers."""
    colors = np.asarray(colors, dtype=np.int64)
    return (colors[..., 0] << 16) | (colors[..., 1] << 8) | colors[..., 2]


def unpack(packed: np.ndarray) -> np.ndarray:
    packed = np.asarray(packed, dtype=np.int64)
    return np.stack([(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF], axis=-1)


def as_pixel_matrix(pixels) -> np.ndarray:
    """
    Coerce image data into a PixelMatrix: a (rows, cols, 3) uint8 array, row-major.

    Args:
        pixels: A PIL Image, a numpy array of shape (rows, cols, 3), or a nested
                list of Colors / RGB triples.

    Returns:
        np.ndarray: The validated pixel matrix.

    Raises:
        InvalidArgumentError: if the data is empty, ragged, not three-channel,
                              not integral, or has channels outside [0, 255].
    """
    if pixels is None:
        raise InvalidArgumentError("pixels must not be None")

    if isinstance(pixels, Image.Image):
        return np.array(pixels.convert("RGB"), dtype=np.uint8)

    try:
        arr = np.asarray(pixels)
    except ValueError as e:  # inhomogeneous nested lists
        raise InvalidArgumentError(f"Pixel data is not a rectangular grid: {e}") from e

    if arr.dtype == object or arr.ndim != 3 or arr.shape[2] != 3:
        raise InvalidArgumentError(f"Pixel data must have shape (rows, cols, 3), got {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise InvalidArgumentError("Pixel data must contain at least one pixel")
    if not np.issubdtype(arr.dtype, np.integer):
        raise InvalidArgumentError(f"Pixel channels must be integers, got dtype {arr.dtype}")
    if arr.min() < 0 or arr.max() > 255:
        raise InvalidArgumentError("Pixel channel values must be in [0, 255]")

    return arr.astype(np.uint8)


def distinct_colors(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Find the distinct colors of a pixel matrix.

    Returns:
        Tuple of:
            - (N, 3) int64 array of distinct colors, ordered by packed value.
            - (N,) occurrence count of each distinct color.
            - (rows*cols,) index into the distinct colors for every pixel, row-major.
    """
    packed = pack(matrix.reshape(-1, 3))
    unique_packed, inverse, counts = np.unique(packed, return_inverse=True, return_counts=True)
    return unpack(unique_packed), counts, inverse.reshape(-1)
