"""AsciiStag streams package.

This package provides frame sources for the playback loop:

- FrameSource: Abstract base class for all frame sources
- StillImageSource: A single decoded image
- GifSource: Animated GIFs via Pillow
- VideoSource: Video files via OpenCV

open_source() picks the right one by sniffing the input's file type.

Example:
    from asciistag.streams import open_source

    with open_source("clip.gif") as source:
        for frame in source:
            process(frame)
"""

from __future__ import annotations

import logging
import os

import filetype

from ..errors import LoadError
from ..image_buffer import decode_image, fetch_source, is_url, open_url
from .base import FrameSource
from .gif import GifSource
from .still import StillImageSource
from .video import VideoSource

logger = logging.getLogger(__name__)

GIF_MIME = "image/gif"
SNIFF_BYTES = 8192  # Leading bytes read from a URL to detect its file type


def _guess_mime(source: str, data: bytes | None) -> str | None:
    try:
        kind = filetype.guess(data if data is not None else source)
    except (OSError, TypeError) as e:
        raise LoadError(source, str(e)) from e
    return kind.mime if kind is not None else None


def _is_video(mime: str | None) -> bool:
    return mime is not None and mime.startswith("video/")


def open_source(source: str) -> FrameSource:
    """
    Opens a file path or URL as frame source.

    GIFs become a GifSource, other images a StillImageSource and videos a
    VideoSource. Unrecognized data is tried as still image.

    :param source: File path or http(s) URL
    :return: The frame source, to be closed by the caller

    Raises a LoadError if the input can not be read or decoded
    """
    data = None
    if is_url(source):
        # Videos are streamed by OpenCV, only the head is needed to detect them
        with open_url(source) as response:
            head = response.read(SNIFF_BYTES)
            mime = _guess_mime(source, head)
            if not _is_video(mime):
                data = head + response.read()
    elif not os.path.exists(source):
        raise LoadError(source, "file not found")
    else:
        mime = _guess_mime(source, None)
    logger.debug("Detected %s as %s", source, mime or "unknown")

    if _is_video(mime):
        return VideoSource(source)
    if data is None:
        data = fetch_source(source)
    if mime == GIF_MIME:
        return GifSource.from_bytes(data, source)
    return StillImageSource(decode_image(data, source))


__all__ = [
    "FrameSource",
    "GifSource",
    "SNIFF_BYTES",
    "StillImageSource",
    "VideoSource",
    "open_source",
]
