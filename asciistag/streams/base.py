"""Base frame source class for AsciiStag.

This module defines the FrameSource abstract base class that hands out
decoded frames one at a time until the source is exhausted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from ..image_buffer import ImageBuffer


class FrameSource(ABC):
    """Base class for all frame sources.

    Frames are decoded on demand, a source never buffers ahead. Consumers
    call next_frame() until it returns None and close the source when done,
    preferably by using the source as context manager.

    Example:
        with open_source("movie.mp4") as source:
            while (frame := source.next_frame()) is not None:
                process(frame)
    """

    def __init__(self) -> None:
        self._frame_index: int = 0
        self._closed: bool = False

    @abstractmethod
    def _read(self) -> ImageBuffer | None:
        """Decode the next frame, None at the end of the source."""
        ...

    @property
    @abstractmethod
    def fps(self) -> float:
        """Source frame rate in frames per second, 0.0 if unknown.

        :return: Frame rate (e.g., 25.0, 30.0)
        """
        ...

    @property
    def is_multi_frame(self) -> bool:
        """Whether the source may produce more than one frame."""
        return False

    @property
    def frame_index(self) -> int:
        """Number of frames handed out so far."""
        return self._frame_index

    @property
    def is_closed(self) -> bool:
        return self._closed

    def next_frame(self) -> ImageBuffer | None:
        """Get the next frame.

        :return: The decoded frame or None if the source is exhausted or closed
        """
        if self._closed:
            return None
        frame = self._read()
        if frame is not None:
            self._frame_index += 1
        return frame

    def close(self) -> None:
        """Release the decoder. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._release()

    def _release(self) -> None:
        """Free decoder resources (override in subclasses)."""
        pass

    def __iter__(self) -> Iterator[ImageBuffer]:
        while (frame := self.next_frame()) is not None:
            yield frame

    def __enter__(self) -> FrameSource:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
