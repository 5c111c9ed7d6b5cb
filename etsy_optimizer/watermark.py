"""
watermark.py — Free-tier watermark for generated mockups.

Layout (same pixel size as the input):
  ┌────────────────────────────────────┐
  │   ╱ETSY DESIGN OPTIMIZER  ╱ETSY …  │  ← tiled label, −30°, 15% white
  │ ╱ETSY DESIGN OPTIMIZER  ╱ETSY …    │
  │▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒│  ← gradient band, max(60px, 8% of height)
  │ Upgrade to Pro for watermark-free… │
  │      etsydesignoptimizer.com       │
  └────────────────────────────────────┘

Input and output are data URIs; output is always PNG.
"""

from __future__ import annotations

import io
import math
from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .encoder import from_data_uri, to_data_uri
from .errors import WatermarkRenderError

WATERMARK_TEXT = "ETSY DESIGN OPTIMIZER"
CAPTION_TEXT = "Upgrade to Pro for watermark-free images"
SITE_TEXT = "etsydesignoptimizer.com"

TILE_OPACITY = 0.15
TILE_ANGLE = 30                      # degrees, counter-clockwise
BAND_MIN_HEIGHT = 60
BAND_HEIGHT_RATIO = 0.08
BAND_ALPHA_STOPS = ([0.0, 0.3, 1.0], [0.0, 0.3, 0.5])

_FONT_BOLD_CANDIDATES = [
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
]

_FONT_CANDIDATES = [
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
]


def _load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    candidates = _FONT_BOLD_CANDIDATES if bold else _FONT_CANDIDATES
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        # Pillow < 10.1 has no sized default font
        return ImageFont.load_default()


def _draw_centered(
    draw: ImageDraw.ImageDraw,
    center: Tuple[float, float],
    text: str,
    font: ImageFont.ImageFont,
    fill,
) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = center[0] - (right - left) / 2 - left
    y = center[1] - (bottom - top) / 2 - top
    draw.text((x, y), text, font=font, fill=fill)


def _gradient_band(width: int, height: int) -> Image.Image:
    """Black band whose alpha ramps 0 → 0.3 → 0.5 from top to bottom."""
    ramp = np.interp(np.linspace(0.0, 1.0, height), *BAND_ALPHA_STOPS)
    band = np.zeros((height, width, 4), dtype=np.uint8)
    band[..., 3] = (ramp * 255).astype(np.uint8)[:, None]
    return Image.fromarray(band, "RGBA")


def _diagonal_tiles(width: int, height: int) -> Image.Image:
    """Repeating rotated label covering the full (width, height) canvas."""
    side = int(math.ceil(math.hypot(width, height))) + 2
    layer = Image.new("RGBA", (side, side), (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    font = _load_font(int(max(24, width * 0.04)), bold=True)
    spacing = int(max(200, width * 0.25))
    fill = (255, 255, 255, int(255 * TILE_OPACITY))

    for y in range(0, side + spacing, spacing):
        for x in range(0, side + spacing, spacing):
            _draw_centered(draw, (x, y), WATERMARK_TEXT, font, fill)

    rotated = layer.rotate(TILE_ANGLE, resample=Image.BICUBIC)
    left = (side - width) // 2
    top = (side - height) // 2
    return rotated.crop((left, top, left + width, top + height))


def _caption_layer(width: int, height: int, band_h: int) -> Image.Image:
    layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    shadow = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    caption_font = _load_font(int(max(16, width * 0.025)), bold=True)
    site_font = _load_font(int(max(12, width * 0.018)))
    caption_at = (width / 2, height - band_h / 2 - band_h * 0.1)
    site_at = (width / 2, height - band_h / 4)

    shadow_draw = ImageDraw.Draw(shadow)
    _draw_centered(shadow_draw, (caption_at[0] + 1, caption_at[1] + 1), CAPTION_TEXT, caption_font, (0, 0, 0, 128))
    _draw_centered(shadow_draw, (site_at[0] + 1, site_at[1] + 1), SITE_TEXT, site_font, (0, 0, 0, 128))
    shadow = shadow.filter(ImageFilter.GaussianBlur(2))

    draw = ImageDraw.Draw(layer)
    _draw_centered(draw, caption_at, CAPTION_TEXT, caption_font, (255, 255, 255, 255))
    _draw_centered(draw, site_at, SITE_TEXT, site_font, (255, 255, 255, 255))

    shadow.alpha_composite(layer)
    return shadow


def apply_watermark(image_uri: str) -> str:
    """Return a PNG data URI of `image_uri` with the free-tier overlay.

    Raises WatermarkRenderError when the image can't be decoded or rendered.
    """
    try:
        raw, _mime = from_data_uri(image_uri)
        with Image.open(io.BytesIO(raw)) as src:
            had_alpha = "A" in src.getbands()
            canvas = src.convert("RGBA")

        width, height = canvas.size
        band_h = min(height, int(max(BAND_MIN_HEIGHT, height * BAND_HEIGHT_RATIO)))

        canvas.alpha_composite(_gradient_band(width, band_h), (0, height - band_h))
        canvas.alpha_composite(_diagonal_tiles(width, height))
        canvas.alpha_composite(_caption_layer(width, height, band_h))

        if not had_alpha:
            canvas = canvas.convert("RGB")
        buf = io.BytesIO()
        canvas.save(buf, format="PNG")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise WatermarkRenderError(f"Failed to load image for watermarking: {e}") from e

    return to_data_uri(buf.getvalue(), "image/png")
