import os
from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from cquant.color import Color


def _load_font(font_path: Optional[str], font_size: int):
    if font_path and os.path.isfile(font_path):
        try:
            return ImageFont.truetype(font_path, font_size)
        except OSError:
            pass  # fall back to the default font
    try:
        return ImageFont.load_default(size=font_size)
    except TypeError:  # Pillow < 10.1 has no size argument
        return ImageFont.load_default()


def _label_fill(color: Color):
    # dark text on light swatches, light text on dark ones
    luma = 0.299 * color.red + 0.587 * color.green + 0.114 * color.blue
    return (0, 0, 0) if luma >= 128 else (255, 255, 255)


def create_legend_image(
    palette: Sequence,
    font_path: Optional[str] = None,
    font_size: int = 14,
    swatch_size: int = 40,
    padding: int = 10,
) -> Optional[Image.Image]:
    """
    Render a palette as a row of numbered swatches.

    Args:
        palette: Palette colors, each a Color, RGB tuple/list or ndarray row.
        font_path (str, optional): Path to a TTF font file.
        font_size (int): Font size for the index numbers.
        swatch_size (int): Width/height of each swatch.
        padding (int): Space around and between swatches.

    Returns:
        PIL.Image.Image: The legend image, or None for an empty palette.
    """
    num_colors = len(palette)
    if num_colors == 0:
        return None

    width = (swatch_size * num_colors) + (padding * (num_colors + 1))
    height = swatch_size + (2 * padding)

    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    draw = ImageDraw.Draw(image)
    font = _load_font(font_path, font_size)

    for idx, entry in enumerate(palette):
        color = Color.of(entry)
        x0 = padding + idx * (swatch_size + padding)
        y0 = padding
        draw.rectangle([x0, y0, x0 + swatch_size, y0 + swatch_size], fill=tuple(color), outline=(0, 0, 0))

        label = str(idx)
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        text_x = x0 + (swatch_size - (right - left)) / 2.0 - left
        text_y = y0 + (swatch_size - (bottom - top)) / 2.0 - top
        draw.text((text_x, text_y), label, fill=_label_fill(color), font=font)

    return image
