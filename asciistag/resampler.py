"""
Resampler - scale buffers to glyph grid dimensions.

Text cells are not square, so the row count is divided by the character
aspect ratio in addition to the scale factor:

    width  = floor(source_width / scale)
    height = floor(source_height / scale / aspect_ratio)

Both are clamped to at least 1. Fit mode picks the scale so that the result
fits into the terminal's character grid.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

import cv2
import numpy as np

from .config import settings
from .errors import ResizeError
from .image_buffer import ImageBuffer
from .interpolation import InterpolationMethod

logger = logging.getLogger(__name__)


class TerminalSize(NamedTuple):
    """Terminal dimensions in character cells."""

    width: int
    height: int


def target_size(
    width: int, height: int, scale: float, aspect_ratio: float
) -> tuple[int, int]:
    """
    Computes the resampled size for a given scale and aspect ratio.

    :param width: Source width in pixels
    :param height: Source height in pixels
    :param scale: Scale factor, 2.0 halves the width
    :param aspect_ratio: Character aspect ratio applied to the rows
    :return: (width, height), each at least 1

    Raises a ResizeError for invalid factors or a size beyond
    settings.MAX_TARGET_PIXELS
    """
    if not (math.isfinite(scale) and scale > 0):
        raise ResizeError(f"Invalid scale factor {scale}")
    if not (math.isfinite(aspect_ratio) and aspect_ratio > 0):
        raise ResizeError(f"Invalid aspect ratio {aspect_ratio}")
    try:
        new_width = max(int(width / scale), 1)
        new_height = max(int(height / scale / aspect_ratio), 1)
    except (OverflowError, ValueError) as e:
        raise ResizeError(
            f"Scale {scale} with aspect ratio {aspect_ratio} is out of range"
        ) from e
    if new_width * new_height > settings.MAX_TARGET_PIXELS:
        raise ResizeError(
            f"Target size {new_width}x{new_height} exceeds "
            f"{settings.MAX_TARGET_PIXELS} pixels"
        )
    return new_width, new_height


def fit_scale(
    width: int, height: int, terminal_size: TerminalSize, aspect_ratio: float
) -> float:
    """
    Computes the scale factor which makes an image fit into the terminal.

    Never fails: degenerate values are clamped into
    [settings.MIN_SCALE, settings.MAX_SCALE].

    :param width: Source width in pixels
    :param height: Source height in pixels
    :param terminal_size: Available character cells
    :param aspect_ratio: Character aspect ratio
    :return: The scale factor
    """
    term_w = max(int(terminal_size.width), 1)
    term_h = max(int(terminal_size.height), 1)
    scale_w = width / term_w
    scale_h = height / (term_h * aspect_ratio) if aspect_ratio > 0 else math.inf
    scale = max(scale_w, scale_h)
    if math.isnan(scale):
        scale = settings.MIN_SCALE
    return min(max(scale, settings.MIN_SCALE), settings.MAX_SCALE)


def resize(
    buffer: ImageBuffer,
    scale: float,
    aspect_ratio: float,
    interpolation: InterpolationMethod = InterpolationMethod.NEAREST,
) -> ImageBuffer:
    """
    Resizes a buffer by a scale factor with aspect ratio correction.

    :param buffer: The source buffer, left unmodified
    :param scale: Scale factor (>0)
    :param aspect_ratio: Character aspect ratio (>0)
    :param interpolation: Sampling method
    :return: A new buffer

    Raises a ResizeError if the target size is invalid or sampling fails
    """
    new_width, new_height = target_size(
        buffer.width, buffer.height, scale, aspect_ratio
    )
    if new_width * new_height == 0:
        raise ResizeError("Target area is zero")
    if interpolation == InterpolationMethod.NEAREST:
        pixels = _sample_nearest(
            buffer.pixels, new_width, new_height, scale, scale * aspect_ratio
        )
    else:
        pixels = _sample_cv(buffer.pixels, new_width, new_height, interpolation)
    return ImageBuffer(pixels)


def resize_to_fit(
    buffer: ImageBuffer,
    terminal_size: TerminalSize,
    aspect_ratio: float,
    interpolation: InterpolationMethod = InterpolationMethod.NEAREST,
) -> ImageBuffer:
    """
    Resizes a buffer so it fits into the given terminal size.

    :param buffer: The source buffer, left unmodified
    :param terminal_size: The available character cells
    :param aspect_ratio: Character aspect ratio (>0)
    :param interpolation: Sampling method
    :return: A new buffer
    """
    scale = fit_scale(buffer.width, buffer.height, terminal_size, aspect_ratio)
    logger.debug(
        "Fitting %dx%d into %dx%d cells with scale %.4f",
        buffer.width,
        buffer.height,
        terminal_size.width,
        terminal_size.height,
        scale,
    )
    return resize(buffer, scale, aspect_ratio, interpolation)


def _sample_nearest(
    pixels: np.ndarray, width: int, height: int, step_x: float, step_y: float
) -> np.ndarray:
    src_h, src_w = pixels.shape[:2]
    src_x = np.minimum((np.arange(width) * step_x).astype(np.int64), src_w - 1)
    src_y = np.minimum((np.arange(height) * step_y).astype(np.int64), src_h - 1)
    return np.ascontiguousarray(pixels[src_y[:, np.newaxis], src_x[np.newaxis, :]])


def _sample_cv(
    pixels: np.ndarray, width: int, height: int, interpolation: InterpolationMethod
) -> np.ndarray:
    try:
        resized = cv2.resize(
            pixels, (width, height), interpolation=interpolation.to_cv()
        )
    except cv2.error as e:
        raise ResizeError(f"Interpolation failed: {e}") from e
    # OpenCV drops the channel axis of single channel images
    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    return resized


__all__ = ["TerminalSize", "fit_scale", "resize", "resize_to_fit", "target_size"]
