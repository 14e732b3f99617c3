"""Single image frame source."""

from __future__ import annotations

from ..image_buffer import ImageBuffer
from .base import FrameSource


class StillImageSource(FrameSource):
    """Yields one already decoded image exactly once."""

    def __init__(self, buffer: ImageBuffer) -> None:
        super().__init__()
        self._buffer: ImageBuffer | None = buffer

    @property
    def fps(self) -> float:
        return 0.0

    def _read(self) -> ImageBuffer | None:
        buffer, self._buffer = self._buffer, None
        return buffer

    def _release(self) -> None:
        self._buffer = None
