"""Animated GIF frame source based on Pillow."""

from __future__ import annotations

import io
import logging

import PIL.Image
from PIL import ImageSequence

from ..errors import LoadError
from ..image_buffer import ImageBuffer
from .base import FrameSource

logger = logging.getLogger(__name__)


class GifSource(FrameSource):
    """Decodes the frames of a GIF (or any other Pillow multi-frame image).

    The frame rate is taken from the first frame's ``duration`` metadata.

    Example:
        with GifSource.from_bytes(data, "spinner.gif") as source:
            for frame in source:
                show(frame)
    """

    def __init__(self, handle: PIL.Image.Image, name: str = "<gif>") -> None:
        """
        :param handle: An opened Pillow image
        :param name: Source name for error messages
        """
        super().__init__()
        self._name = name
        self._handle = handle
        self._frames = ImageSequence.Iterator(handle)
        self._frame_count: int = getattr(handle, "n_frames", 1)
        duration = handle.info.get("duration") or 0
        self._fps: float = 1000.0 / duration if duration > 0 else 0.0

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "<gif>") -> GifSource:
        """
        Opens a GIF from its file data.

        Raises a LoadError if the data can not be decoded
        """
        try:
            handle = PIL.Image.open(io.BytesIO(data))
        except PIL.UnidentifiedImageError as e:
            raise LoadError(name, "unknown or damaged image data") from e
        except (OSError, ValueError, SyntaxError, EOFError) as e:
            raise LoadError(name, str(e)) from e
        return cls(handle, name)

    @property
    def fps(self) -> float:
        return self._fps

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def is_multi_frame(self) -> bool:
        return self._frame_count > 1

    def _read(self) -> ImageBuffer | None:
        try:
            frame = next(self._frames)
        except StopIteration:
            return None
        except (OSError, ValueError, EOFError) as e:
            raise LoadError(self._name, f"frame {self._frame_index}: {e}") from e
        return ImageBuffer.from_pil(frame.copy())

    def _release(self) -> None:
        logger.debug("Closing %s after %d frames", self._name, self._frame_index)
        self._handle.close()
