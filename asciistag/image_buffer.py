"""
Implements :class:`.ImageBuffer`, the raw pixel container passed between the
pipeline stages, together with the decode and text output helpers.
"""

from __future__ import annotations

import io
import logging
import os
from contextlib import contextmanager
from typing import IO, Iterator
from urllib.error import URLError
from urllib.request import urlopen

import numpy as np
import PIL.Image

from .config import settings
from .errors import LoadError, OutputError

logger = logging.getLogger(__name__)

HTTP_PROTOCOL_URL_HEADER = "http://"
HTTPS_PROTOCOL_URL_HEADER = "https://"

VALID_CHANNEL_COUNTS = (1, 3, 4)
"Channel counts an ImageBuffer may hold (gray, RGB, RGBA)"


class ImageBuffer:
    """
    In-memory raw pixel buffer.

    The pixels are stored as ``uint8`` numpy array of shape
    ``(height, width, channels)``. Buffers are treated as read-only by all
    pipeline stages, each stage produces a new buffer instead of modifying
    its input.
    """

    def __init__(self, pixels: np.ndarray):
        """
        :param pixels: A uint8 array of shape (height, width) or
            (height, width, channels) with 1, 3 or 4 channels.

        Raises a ValueError if the array does not describe a valid buffer
        """
        if not isinstance(pixels, np.ndarray):
            raise ValueError("Pixels have to be passed as numpy array")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Unsupported pixel data type {pixels.dtype}")
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        if pixels.ndim != 3:
            raise ValueError(f"Unsupported pixel array shape {pixels.shape}")
        height, width, channels = pixels.shape
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer size {width}x{height}")
        if channels not in VALID_CHANNEL_COUNTS:
            raise ValueError(f"Unsupported channel count {channels}")
        self._pixels = pixels

    @classmethod
    def from_bytes(
        cls, data: bytes, width: int, height: int, channels: int
    ) -> ImageBuffer:
        """
        Creates a buffer from row-major interleaved pixel bytes

        :param data: The pixel data, e.g. RGBRGB...
        :param width: Width in pixels
        :param height: Height in pixels
        :param channels: Channels per pixel
        :return: The new buffer
        """
        if len(data) != width * height * channels:
            raise ValueError(
                f"Expected {width * height * channels} bytes for a "
                f"{width}x{height}x{channels} buffer, got {len(data)}"
            )
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, channels)
        return cls(pixels.copy())

    @classmethod
    def from_pil(cls, image: PIL.Image.Image) -> ImageBuffer:
        """
        Creates a buffer from a PIL image, converting uncommon modes to RGB(A)

        :param image: The PIL image
        :return: The new buffer
        """
        return cls(np.asarray(_normalize_mode(image), dtype=np.uint8).copy())

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def channels(self) -> int:
        return self._pixels.shape[2]

    @property
    def size(self) -> tuple[int, int]:
        """The buffer's size as (width, height)"""
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        """The pixel array of shape (height, width, channels)"""
        return self._pixels

    @property
    def data(self) -> bytes:
        """The row-major pixel bytes, width*height*channels long"""
        return self._pixels.tobytes()

    def get_rgb(self) -> np.ndarray:
        """
        Returns the red, green and blue planes as (height, width, 3) array.

        Channels the buffer does not have are filled with 0, alpha is dropped.
        """
        if self.channels >= 3:
            return self._pixels[:, :, :3]
        rgb = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        rgb[:, :, : self.channels] = self._pixels
        return rgb

    def __eq__(self, other):
        if not isinstance(other, ImageBuffer):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and np.array_equal(
            self._pixels, other._pixels
        )

    def __repr__(self):
        return f"ImageBuffer({self.width}x{self.height}x{self.channels})"


def _normalize_mode(image: PIL.Image.Image) -> PIL.Image.Image:
    if image.mode in ("RGB", "RGBA"):
        return image
    if image.mode == "P":
        if "transparency" in image.info:
            return image.convert("RGBA")
        return image.convert("RGB")
    if image.mode in ("LA", "PA"):
        return image.convert("RGBA")
    return image.convert("RGB")


def is_url(source: str) -> bool:
    """Returns True if the source is an http or https URL"""
    return source.startswith(HTTP_PROTOCOL_URL_HEADER) or source.startswith(
        HTTPS_PROTOCOL_URL_HEADER
    )


@contextmanager
def open_url(source: str) -> Iterator[IO[bytes]]:
    """
    Opens an http(s) URL for reading

    :param source: The URL
    :return: Context manager yielding the response, readable like a file

    Raises a LoadError if the connection fails or breaks while reading
    """
    logger.debug("Downloading %s", source)
    try:
        with urlopen(source, timeout=settings.URL_TIMEOUT) as response:
            yield response
    except (URLError, OSError, ValueError) as e:
        raise LoadError(source, str(e)) from e


def fetch_source(source: str) -> bytes:
    """
    Reads the raw file data from a file path or URL

    :param source: File path or http(s) URL
    :return: The file's bytes

    Raises a LoadError if the data could not be received
    """
    if is_url(source):
        with open_url(source) as response:
            return response.read()
    if not os.path.exists(source):
        raise LoadError(source, "file not found")
    try:
        with open(source, "rb") as f:
            return f.read()
    except OSError as e:
        raise LoadError(source, e.strerror or str(e)) from e


def decode_image(data: bytes, source: str = "<memory>") -> ImageBuffer:
    """
    Decodes compressed image data. Multi-frame formats yield their first frame.

    :param data: The compressed data (png, jpg, gif, bmp, ...)
    :param source: The origin of the data, used in error messages
    :return: The decoded buffer
    """
    try:
        handle = PIL.Image.open(io.BytesIO(data))
        handle.load()
    except PIL.UnidentifiedImageError as e:
        raise LoadError(source, "unknown or damaged image data") from e
    except (OSError, ValueError, SyntaxError, EOFError) as e:
        raise LoadError(source, str(e)) from e
    return ImageBuffer.from_pil(handle)


def load_image(source: str) -> ImageBuffer:
    """
    Loads and decodes an image from a file path or URL

    :param source: File path or http(s) URL
    :return: The decoded buffer

    Raises a LoadError carrying the path and the reason on failure
    """
    buffer = decode_image(fetch_source(source), source)
    logger.debug("Loaded %s as %r", source, buffer)
    return buffer


def write_text(blob: str, path: str) -> None:
    """
    Writes rendered text to a file

    :param blob: The rendered text, possibly including ANSI escapes
    :param path: The target file

    Raises an OutputError if the file can not be opened or written
    """
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(blob)
    except OSError as e:
        raise OutputError(path, e.strerror or str(e)) from e


__all__ = [
    "ImageBuffer",
    "VALID_CHANNEL_COUNTS",
    "decode_image",
    "fetch_source",
    "is_url",
    "load_image",
    "open_url",
    "write_text",
]
