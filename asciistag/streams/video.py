"""Video file frame source.

This module provides VideoSource for decoding video files with OpenCV.
"""

from __future__ import annotations

import logging

import cv2

from ..errors import LoadError
from ..image_buffer import ImageBuffer
from .base import FrameSource

logger = logging.getLogger(__name__)


class VideoSource(FrameSource):
    """Sequential video decoding via OpenCV's VideoCapture.

    Frames are converted from OpenCV's BGR channel order to RGB.

    Example:
        with VideoSource('/path/to/video.mp4') as video:
            print(video.fps, video.frame_count)
            frame = video.next_frame()

    Attributes:
        frame_count: Total number of frames reported by the container
    """

    def __init__(self, path: str) -> None:
        """
        :param path: Path or URL of the video

        Raises a LoadError if the video can not be opened
        """
        super().__init__()
        self._path = path
        self._cap = cv2.VideoCapture(path)
        if not self._cap.isOpened():
            self._cap.release()
            raise LoadError(path, "failed to open video source")
        self._fps: float = self._cap.get(cv2.CAP_PROP_FPS) or 0.0
        self.frame_count: int = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
        logger.debug(
            "Opened %s: %.2f fps, %d frames", path, self._fps, self.frame_count
        )

    @property
    def fps(self) -> float:
        return self._fps

    @property
    def is_multi_frame(self) -> bool:
        return True

    def _read(self) -> ImageBuffer | None:
        ret, frame = self._cap.read()
        if not ret or frame is None:
            return None
        if frame.ndim == 3 and frame.shape[2] == 4:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGBA)
        elif frame.ndim == 3:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return ImageBuffer(frame)

    def _release(self) -> None:
        self._cap.release()
