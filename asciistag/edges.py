"""
Edge detection using the Sobel operator.

The gradient magnitude of every interior pixel is computed from the standard
3x3 Sobel kernels and normalized to the range 0-255. The outermost 1-pixel
border is never convolved and stays at 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from .glyphs import luminance_plane
from .image_buffer import ImageBuffer

logger = logging.getLogger(__name__)

SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64)


@dataclass(frozen=True)
class EdgeMap:
    """Per-pixel gradient magnitudes of one frame, normalized to [0, 255].

    Attributes:
        width: Width of the source buffer
        height: Height of the source buffer
        magnitudes: float array of shape (height, width)
    """

    width: int
    height: int
    magnitudes: np.ndarray

    def __len__(self) -> int:
        return self.width * self.height

    def at(self, x: int, y: int) -> float:
        """Magnitude at pixel (x, y)."""
        return float(self.magnitudes[y, x])


def to_grayscale(buffer: ImageBuffer) -> np.ndarray:
    """
    Converts a buffer to 8-bit luminance using the Rec. 601 weights.

    Buffers with less than 3 channels have no usable color information and
    yield an all-zero plane (a warning is logged).

    :param buffer: The source buffer
    :return: uint8 array of shape (height, width)
    """
    if buffer.channels < 3:
        logger.warning(
            "Grayscale conversion needs at least 3 channels, got %d - "
            "treating all pixels as 0",
            buffer.channels,
        )
        return np.zeros((buffer.height, buffer.width), dtype=np.uint8)
    return luminance_plane(buffer.pixels[:, :, :3]).astype(np.uint8)


def detect_edges(buffer: ImageBuffer) -> EdgeMap:
    """
    Computes the normalized Sobel gradient magnitude map of a buffer.

    :param buffer: The source buffer, left unmodified
    :return: The edge map with width*height entries
    """
    gray = to_grayscale(buffer).astype(np.float64)
    height, width = gray.shape
    magnitude = np.zeros((height, width), dtype=np.float64)

    if width >= 3 and height >= 3:
        # filter2D correlates, which matches applying the kernels as written
        gx = cv2.filter2D(gray, cv2.CV_64F, SOBEL_X, borderType=cv2.BORDER_CONSTANT)
        gy = cv2.filter2D(gray, cv2.CV_64F, SOBEL_Y, borderType=cv2.BORDER_CONSTANT)
        magnitude[1:-1, 1:-1] = np.sqrt(gx[1:-1, 1:-1] ** 2 + gy[1:-1, 1:-1] ** 2)

    mag_max = magnitude.max()
    if mag_max > 0:
        magnitude = magnitude / mag_max * 255.0

    return EdgeMap(width=width, height=height, magnitudes=magnitude)


__all__ = [
    "EdgeMap",
    "SOBEL_X",
    "SOBEL_Y",
    "detect_edges",
    "to_grayscale",
]
