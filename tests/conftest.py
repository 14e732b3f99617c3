"""
Pytest fixtures for AsciiStag tests
"""

from types import SimpleNamespace

import numpy as np
import PIL.Image
import pytest

from asciistag import ImageBuffer, RenderParams


@pytest.fixture
def gradient_buffer() -> ImageBuffer:
    """
    A 16x8 RGB buffer whose red channel rises from left to right and green
    channel from top to bottom.
    """
    arr = np.zeros((8, 16, 3), dtype=np.uint8)
    for y in range(8):
        for x in range(16):
            arr[y, x, 0] = x * 16
            arr[y, x, 1] = y * 32
            arr[y, x, 2] = 128
    return ImageBuffer(arr)


@pytest.fixture
def params() -> RenderParams:
    """Plain 1:1 parameters: no scaling, no aspect correction."""
    return RenderParams(input_path="test.png", scale=1.0, aspect_ratio=1.0)


@pytest.fixture
def png_file(tmp_path):
    """A 4x4 RGB PNG, left half black, right half white."""
    arr = np.zeros((4, 4, 3), dtype=np.uint8)
    arr[:, 2:] = 255
    path = tmp_path / "half.png"
    PIL.Image.fromarray(arr).save(path)
    return path


def make_gif(path, frame_values, size=(4, 4), duration=50):
    """Writes a grayscale-looking RGB GIF with one uniform frame per value."""
    frames = [
        PIL.Image.new("RGB", size, (value, value, value)) for value in frame_values
    ]
    frames[0].save(
        path,
        save_all=True,
        append_images=frames[1:],
        duration=duration,
        loop=0,
    )
    return path


@pytest.fixture
def gif_writer():
    """The :func:`make_gif` helper, for tests needing custom GIFs."""
    return make_gif


@pytest.fixture
def gif_file(tmp_path):
    """A 3 frame 4x4 GIF at 20 fps (black, gray, white)."""
    return make_gif(tmp_path / "anim.gif", [0, 128, 255])


@pytest.fixture
def fake_terminal():
    """
    Stand-in for a blessed Terminal with fixed capability strings, so tests
    can assert the exact byte sequences written.
    """
    return SimpleNamespace(
        enter_fullscreen="<FS>",
        exit_fullscreen="</FS>",
        hide_cursor="<HIDE>",
        normal_cursor="<SHOW>",
        home="<HOME>",
        clear_eol="<EOL>",
        does_styling=True,
        move_yx=lambda y, x: f"<MV{y},{x}>",
    )
