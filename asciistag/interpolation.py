"""
Defines the sampling methods available when resizing frames.
"""

from __future__ import annotations

from enum import Enum


class InterpolationMethod(Enum):
    """
    Enumeration of the resampling methods supported by the resampler
    """

    NEAREST = "nearest"
    "Nearest neighbor. Picks the source pixel each target pixel maps onto."
    LINEAR = "linear"
    "Bilinear interpolation between the four closest source pixels."

    def to_cv(self) -> int:
        """
        Returns the OpenCV interpolation flag for this method
        """
        import cv2

        return {
            InterpolationMethod.NEAREST: cv2.INTER_NEAREST,
            InterpolationMethod.LINEAR: cv2.INTER_LINEAR,
        }[self]


__all__ = ["InterpolationMethod"]
