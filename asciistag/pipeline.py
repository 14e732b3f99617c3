"""
The frame pipeline shared by single images and playback:

    resize (or fit to terminal) -> optional edge detection -> render
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from .config import RenderParams
from .edges import EdgeMap, detect_edges
from .image_buffer import ImageBuffer, load_image, write_text
from .renderer import render_frame
from .resampler import TerminalSize, resize, resize_to_fit
from .terminal import query_terminal_size

logger = logging.getLogger(__name__)


def fit_area(params: RenderParams, terminal_size: TerminalSize) -> TerminalSize:
    """Pixel area matching the terminal's cells (one cell per block in block mode)."""
    return TerminalSize(
        terminal_size.width * params.block_width,
        terminal_size.height * params.block_height,
    )


def prepare_frame(
    buffer: ImageBuffer,
    params: RenderParams,
    terminal_size: TerminalSize | None = None,
) -> tuple[ImageBuffer, EdgeMap | None]:
    """
    Resizes a frame and computes its edge map if edge mode is enabled.

    :param buffer: The decoded frame
    :param params: Render parameters
    :param terminal_size: Size to fit into in auto-fit mode (queried if None)
    :return: The resized buffer and its edge map (None if edges are disabled)
    """
    if params.auto_fit:
        if terminal_size is None:
            terminal_size = query_terminal_size()
        resized = resize_to_fit(
            buffer,
            fit_area(params, terminal_size),
            params.aspect_ratio,
            params.interpolation,
        )
    else:
        resized = resize(buffer, params.scale, params.aspect_ratio, params.interpolation)
    edge_map = detect_edges(resized) if params.edges else None
    return resized, edge_map


def render_buffer(
    buffer: ImageBuffer,
    params: RenderParams,
    terminal_size: TerminalSize | None = None,
) -> str:
    """Runs the full pipeline on one decoded frame and returns the text."""
    resized, edge_map = prepare_frame(buffer, params, terminal_size)
    return render_frame(resized, params, edge_map)


def emit(text: str, params: RenderParams, stream: IO[str] | None = None) -> None:
    """Writes rendered text to params.output_path or, if unset, to the stream."""
    if params.output_path:
        write_text(text, params.output_path)
        logger.info("Wrote %d characters to %s", len(text), params.output_path)
        return
    stream = stream if stream is not None else sys.stdout
    stream.write(text)
    stream.flush()


def process_image(params: RenderParams, stream: IO[str] | None = None) -> str:
    """
    Converts a single image: load, render and output.

    :param params: Render parameters, input_path names the image or URL
    :param stream: Console stream used when no output path is set
    :return: The rendered text
    """
    buffer = load_image(params.input_path)
    text = render_buffer(buffer, params)
    emit(text, params, stream)
    return text


__all__ = ["emit", "fit_area", "prepare_frame", "process_image", "render_buffer"]
