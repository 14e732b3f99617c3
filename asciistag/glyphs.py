"""
Glyph selection - map brightness or edge strength to ramp characters.

A ramp is ordered from dark to bright. A selection value in 0-255 is
quantized onto the ramp with ``index = value * len(ramp) // 256``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .image_buffer import ImageBuffer

if TYPE_CHECKING:
    from .config import RenderParams
    from .edges import EdgeMap

RGB = tuple[int, int, int]

# Rec. 601 luminance weights in thousandths (0.299, 0.587, 0.114)
LUMA_R = 299
LUMA_G = 587
LUMA_B = 114
LUMA_DIVISOR = 1000

EMPTY_GLYPH = " "


class GlyphRamp:
    """Predefined glyph ramps, ordered from dark to bright."""

    STANDARD = " .:-=+*#%@"
    DETAILED = " .'`^\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$"
    BLOCKS = " ░▒▓█"
    SIMPLE = " .oO@"

    @classmethod
    def presets(cls) -> dict[str, str]:
        return {
            "standard": cls.STANDARD,
            "detailed": cls.DETAILED,
            "blocks": cls.BLOCKS,
            "simple": cls.SIMPLE,
        }

    @classmethod
    def get(cls, name: str) -> str:
        """Resolve a preset name. Any other string is used as ramp itself."""
        return cls.presets().get(name.lower(), name)


@dataclass(frozen=True)
class PixelSample:
    """Values of a single pixel needed to pick its glyph.

    ``color`` is None when the source has less than 3 channels.
    """

    brightness: int = 0
    edge_magnitude: float = 0.0
    color: RGB | None = None
    sample_count: int = 1


@dataclass(frozen=True)
class BlockSample(PixelSample):
    """Aggregate over the pixels of a block (means, color truncated)."""

    sample_count: int = 0


def luminance(r: int, g: int, b: int) -> int:
    """8-bit Rec. 601 luminance, truncated."""
    return (LUMA_R * int(r) + LUMA_G * int(g) + LUMA_B * int(b)) // LUMA_DIVISOR


def luminance_plane(rgb: np.ndarray) -> np.ndarray:
    """Vectorized :func:`luminance` for an array of shape (..., 3)."""
    rgb = rgb.astype(np.int64)
    return (
        LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]
    ) // LUMA_DIVISOR


def selection_value(sample: PixelSample, params: RenderParams) -> int:
    """Boosted and clamped 0-255 value a glyph is chosen by."""
    if params.edges:
        raw = sample.edge_magnitude * params.brightness
    else:
        raw = float(sample.brightness) * params.brightness
    return int(min(max(raw, 0.0), 255.0))


def glyph_indices(values, ramp_length: int, invert: bool = False):
    """
    Quantizes selection values onto ramp positions.

    Accepts a single int or an integer numpy array; ``select_glyph`` and the
    renderer share this so both always pick the same characters.

    :param values: Value(s) in 0-255
    :param ramp_length: Number of glyphs in the ramp
    :param invert: Count from the bright end of the ramp
    :return: Ramp position(s)
    """
    index = np.minimum(np.asarray(values) * ramp_length // 256, ramp_length - 1)
    if invert:
        index = ramp_length - 1 - index
    if np.ndim(index) == 0:
        return int(index)
    return index


def invert_rgb(color: RGB) -> RGB:
    return (255 - color[0], 255 - color[1], 255 - color[2])


def select_glyph(
    sample: PixelSample, params: RenderParams
) -> tuple[str, RGB | None]:
    """
    Picks the glyph and optional foreground color for one sample.

    :param sample: The pixel or block sample
    :param params: Render parameters (ramp, boost, invert and color flags)
    :return: (glyph, (r, g, b) or None)
    """
    if isinstance(sample, BlockSample) and sample.sample_count == 0:
        return EMPTY_GLYPH, None

    ramp = params.ramp
    value = selection_value(sample, params)
    if value == 0:
        # Flat and black regions always get the extreme glyph
        glyph = ramp[-1] if params.invert else ramp[0]
    else:
        glyph = ramp[glyph_indices(value, len(ramp), params.invert)]

    color = None
    if params.color and sample.color is not None:
        color = invert_rgb(sample.color) if params.invert_colors else sample.color
    return glyph, color


def sample_pixel(
    buffer: ImageBuffer, x: int, y: int, edge_map: EdgeMap | None = None
) -> PixelSample:
    """
    Collects the values of pixel (x, y).

    Coordinates outside the buffer yield an all-zero sample. Missing color
    channels count as 0.
    """
    if not (0 <= x < buffer.width and 0 <= y < buffer.height):
        return PixelSample()
    pixel = buffer.pixels[y, x]
    channels = buffer.channels
    r = int(pixel[0])
    g = int(pixel[1]) if channels >= 2 else 0
    b = int(pixel[2]) if channels >= 3 else 0
    return PixelSample(
        brightness=luminance(r, g, b),
        edge_magnitude=edge_map.at(x, y) if edge_map is not None else 0.0,
        color=(r, g, b) if channels >= 3 else None,
    )


def sample_block(
    buffer: ImageBuffer,
    x: int,
    y: int,
    block_width: int,
    block_height: int,
    edge_map: EdgeMap | None = None,
) -> BlockSample:
    """
    Averages the block whose top-left pixel is (x, y), clipped at the buffer
    edges.

    :return: The block sample, sample_count is 0 if no pixel was covered
    """
    x0, y0 = max(x, 0), max(y, 0)
    x1 = min(x + block_width, buffer.width)
    y1 = min(y + block_height, buffer.height)
    if x1 <= x0 or y1 <= y0:
        return BlockSample()

    count = (x1 - x0) * (y1 - y0)
    rgb = buffer.get_rgb()[y0:y1, x0:x1].astype(np.int64)
    brightness = int(luminance_plane(rgb).sum()) // count
    edge_magnitude = 0.0
    if edge_map is not None:
        edge_magnitude = float(edge_map.magnitudes[y0:y1, x0:x1].sum()) / count
    color = None
    if buffer.channels >= 3:
        sums = rgb.reshape(-1, 3).sum(axis=0)
        color = (int(sums[0]) // count, int(sums[1]) // count, int(sums[2]) // count)
    return BlockSample(
        brightness=brightness,
        edge_magnitude=edge_magnitude,
        color=color,
        sample_count=count,
    )


__all__ = [
    "BlockSample",
    "EMPTY_GLYPH",
    "GlyphRamp",
    "PixelSample",
    "glyph_indices",
    "invert_rgb",
    "luminance",
    "luminance_plane",
    "sample_block",
    "sample_pixel",
    "select_glyph",
    "selection_value",
]
