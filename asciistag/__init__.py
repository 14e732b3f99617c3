"""
AsciiStag - Convert images, animated GIFs and videos to ASCII art.

Example:
    from asciistag import RenderParams, load_image, render_buffer

    params = RenderParams(input_path="photo.jpg", color=True, scale=4)
    print(render_buffer(load_image(params.input_path), params), end="")
"""

from .config import RenderParams, Settings, settings
from .edges import EdgeMap, detect_edges
from .errors import (
    AsciiStagError,
    LoadError,
    OutputError,
    ResizeError,
    ValidationError,
)
from .glyphs import BlockSample, GlyphRamp, PixelSample, select_glyph
from .image_buffer import ImageBuffer, load_image, write_text
from .interpolation import InterpolationMethod
from .pipeline import process_image, render_buffer
from .renderer import AsciiRenderer, render_frame
from .resampler import TerminalSize, resize, resize_to_fit

__version__ = "0.1.0"

__all__ = [
    "AsciiRenderer",
    "AsciiStagError",
    "BlockSample",
    "EdgeMap",
    "GlyphRamp",
    "ImageBuffer",
    "InterpolationMethod",
    "LoadError",
    "OutputError",
    "PixelSample",
    "RenderParams",
    "ResizeError",
    "Settings",
    "TerminalSize",
    "ValidationError",
    "detect_edges",
    "load_image",
    "process_image",
    "render_buffer",
    "render_frame",
    "resize",
    "resize_to_fit",
    "select_glyph",
    "settings",
    "write_text",
]
