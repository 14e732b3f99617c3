"""Tests for the ASCII renderer."""

import numpy as np
import pytest

from asciistag.config import RenderParams
from asciistag.edges import detect_edges
from asciistag.glyphs import sample_block, sample_pixel, select_glyph
from asciistag.image_buffer import ImageBuffer
from asciistag.renderer import RESET, AsciiRenderer, fg_color, render_frame

RAMP = " .:-=+*#%@"


def _params(**kwargs) -> RenderParams:
    kwargs.setdefault("ramp", RAMP)
    return RenderParams(input_path="x.png", **kwargs)


class TestMonochrome:
    """Renders without color."""

    def test_one_line_per_row(self, gradient_buffer):
        text = render_frame(gradient_buffer, _params())
        lines = text.split("\n")
        assert lines[-1] == ""
        assert len(lines) - 1 == 8
        assert all(len(line) == 16 for line in lines[:-1])
        assert "\033[" not in text

    def test_black_and_white(self):
        arr = np.zeros((1, 2, 3), dtype=np.uint8)
        arr[0, 1] = 255
        assert render_frame(ImageBuffer(arr), _params()) == " @\n"

    def test_invert(self):
        arr = np.zeros((1, 2, 3), dtype=np.uint8)
        arr[0, 1] = 255
        assert render_frame(ImageBuffer(arr), _params(invert=True)) == "@ \n"

    def test_matches_select_glyph(self, gradient_buffer):
        params = _params(brightness=1.7)
        text = render_frame(gradient_buffer, params)
        expected = "".join(
            "".join(
                select_glyph(sample_pixel(gradient_buffer, x, y), params)[0]
                for x in range(gradient_buffer.width)
            )
            + "\n"
            for y in range(gradient_buffer.height)
        )
        assert text == expected

    def test_color_ignored_without_rgb(self):
        buffer = ImageBuffer(np.full((2, 2), 255, dtype=np.uint8))
        text = render_frame(buffer, _params(color=True))
        assert "\033[" not in text


class TestColor:
    """24-bit color output."""

    def test_reset_per_row(self, gradient_buffer):
        text = render_frame(gradient_buffer, _params(color=True))
        lines = text.split("\n")[:-1]
        assert len(lines) == 8
        assert all(line.endswith(RESET) for line in lines)

    def test_escape_per_color_run(self):
        arr = np.array(
            [[[255, 0, 0], [255, 0, 0], [0, 0, 255]]], dtype=np.uint8
        )
        text = render_frame(ImageBuffer(arr), _params(color=True))
        red = fg_color(255, 0, 0)
        blue = fg_color(0, 0, 255)
        assert text.count(red) == 1
        assert text.count(blue) == 1
        assert text.startswith(red)
        assert text.endswith(RESET + "\n")

    def test_invert_colors(self):
        arr = np.array([[[255, 0, 0]]], dtype=np.uint8)
        text = render_frame(ImageBuffer(arr), _params(color=True, invert_colors=True))
        assert fg_color(0, 255, 255) in text


class TestBlockMode:
    """Block aggregation."""

    def test_block_grid(self, gradient_buffer):
        params = _params(block_width=4, block_height=3)
        text = render_frame(gradient_buffer, params)
        lines = text.split("\n")[:-1]
        # 16 / 4 = 4 columns, ceil(8 / 3) = 3 rows with a clipped last row
        assert len(lines) == 3
        assert all(len(line) == 4 for line in lines)

    def test_matches_sample_block(self, gradient_buffer):
        params = _params(block_width=3, block_height=3, brightness=1.3)
        text = render_frame(gradient_buffer, params)
        expected = "".join(
            "".join(
                select_glyph(sample_block(gradient_buffer, x, y, 3, 3), params)[0]
                for x in range(0, gradient_buffer.width, 3)
            )
            + "\n"
            for y in range(0, gradient_buffer.height, 3)
        )
        assert text == expected

    def test_block_color_is_mean(self):
        arr = np.array([[[0, 0, 0], [100, 50, 31]]], dtype=np.uint8)
        params = _params(block_width=2, color=True)
        text = render_frame(ImageBuffer(arr), params)
        assert fg_color(50, 25, 15) in text


class TestEdgeMode:
    """Glyphs from edge magnitudes."""

    def test_flat_image_is_first_glyph(self):
        buffer = ImageBuffer(np.full((3, 3, 3), 128, dtype=np.uint8))
        params = _params(edges=True)
        text = render_frame(buffer, params, detect_edges(buffer))
        assert text == "   \n   \n   \n"

    def test_edge_map_required(self, gradient_buffer):
        with pytest.raises(ValueError):
            render_frame(gradient_buffer, _params(edges=True))

    def test_edge_map_size_mismatch(self, gradient_buffer):
        other = ImageBuffer(np.zeros((3, 3, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            AsciiRenderer(_params(edges=True)).render(gradient_buffer, detect_edges(other))

    def test_matches_select_glyph(self, gradient_buffer):
        params = _params(edges=True, brightness=2.0)
        edge_map = detect_edges(gradient_buffer)
        text = render_frame(gradient_buffer, params, edge_map)
        expected = "".join(
            "".join(
                select_glyph(sample_pixel(gradient_buffer, x, y, edge_map), params)[0]
                for x in range(gradient_buffer.width)
            )
            + "\n"
            for y in range(gradient_buffer.height)
        )
        assert text == expected
