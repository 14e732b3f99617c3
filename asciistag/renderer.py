"""
ASCII Art Renderer - Assemble glyphs into a text frame.

Each output unit (a pixel, or a block in block mode) becomes one glyph of the
ramp. With color enabled the glyphs are preceded by 24-bit ANSI foreground
escapes, and every row is terminated with a reset so colors never bleed into
the next row or the shell prompt.

Example:
    from asciistag import RenderParams, load_image
    from asciistag.renderer import AsciiRenderer

    buffer = load_image("photo.jpg")
    renderer = AsciiRenderer(RenderParams(input_path="photo.jpg", color=True))
    print(renderer.render(buffer), end="")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .glyphs import EMPTY_GLYPH, RGB, glyph_indices, luminance_plane
from .image_buffer import ImageBuffer

if TYPE_CHECKING:
    from .config import RenderParams
    from .edges import EdgeMap

# ANSI escape codes
ESC = "\033"
RESET = f"{ESC}[0m"


def fg_color(r: int, g: int, b: int) -> str:
    """24-bit foreground color escape."""
    return f"{ESC}[38;2;{r};{g};{b}m"


class AsciiRenderer:
    """
    Converts buffers into glyph text using a fixed set of render parameters.

    The per-unit math is exactly the one of :func:`~asciistag.glyphs.select_glyph`
    but evaluated on whole numpy planes at once.
    """

    def __init__(self, params: "RenderParams"):
        """
        :param params: Ramp, boost, inversion, color and block settings
        """
        self.params = params
        self._ramp = np.array(list(params.ramp))

    def render(self, buffer: ImageBuffer, edge_map: "EdgeMap | None" = None) -> str:
        """
        Render a buffer as text.

        :param buffer: The (already resized) buffer
        :param edge_map: Edge magnitudes of this buffer, required in edge mode
        :return: The text blob, one line per output row
        """
        params = self.params
        if params.edges:
            if edge_map is None:
                raise ValueError("Edge mode requires an edge map")
            if (edge_map.width, edge_map.height) != buffer.size:
                raise ValueError(
                    f"Edge map size {edge_map.width}x{edge_map.height} does not "
                    f"match buffer size {buffer.width}x{buffer.height}"
                )

        if params.block_mode:
            values, colors, counts = self._sample_blocks(buffer, edge_map)
        else:
            values, colors = self._sample_pixels(buffer, edge_map)
            counts = None

        positions = glyph_indices(values, len(self._ramp), params.invert)
        glyphs = self._ramp[positions]
        if counts is not None:
            glyphs[counts == 0] = EMPTY_GLYPH

        use_color = params.color and buffer.channels >= 3
        if not use_color:
            return "".join("".join(row) + "\n" for row in glyphs)

        if params.invert_colors:
            colors = 255 - colors
        return self._assemble_colored(glyphs, colors, counts)

    def _selection_values(self, luma: np.ndarray, edges: np.ndarray | None) -> np.ndarray:
        boost = self.params.brightness
        if self.params.edges and edges is not None:
            raw = edges * boost
        else:
            raw = luma.astype(np.float64) * boost
        return np.clip(raw, 0.0, 255.0).astype(np.int64)

    def _sample_pixels(
        self, buffer: ImageBuffer, edge_map: "EdgeMap | None"
    ) -> tuple[np.ndarray, np.ndarray]:
        rgb = buffer.get_rgb().astype(np.int64)
        edges = edge_map.magnitudes if edge_map is not None else None
        return self._selection_values(luminance_plane(rgb), edges), rgb

    def _sample_blocks(
        self, buffer: ImageBuffer, edge_map: "EdgeMap | None"
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Block means via reduceat; edge blocks are clipped to the buffer."""
        bw, bh = self.params.block_width, self.params.block_height
        row_starts = np.arange(0, buffer.height, bh)
        col_starts = np.arange(0, buffer.width, bw)

        def block_sums(plane: np.ndarray) -> np.ndarray:
            sums = np.add.reduceat(plane, row_starts, axis=0)
            return np.add.reduceat(sums, col_starts, axis=1)

        rgb = buffer.get_rgb().astype(np.int64)
        counts = block_sums(np.ones(rgb.shape[:2], dtype=np.int64))
        safe_counts = np.maximum(counts, 1)
        luma = block_sums(luminance_plane(rgb)) // safe_counts
        colors = block_sums(rgb) // safe_counts[:, :, np.newaxis]
        edges = None
        if edge_map is not None:
            edges = block_sums(edge_map.magnitudes) / safe_counts
        return self._selection_values(luma, edges), colors, counts

    @staticmethod
    def _assemble_colored(
        glyphs: np.ndarray, colors: np.ndarray, counts: np.ndarray | None
    ) -> str:
        rows = []
        for y, row in enumerate(glyphs):
            parts = []
            current: RGB | None = None
            for x, glyph in enumerate(row):
                if counts is not None and counts[y, x] == 0:
                    parts.append(EMPTY_GLYPH)
                    continue
                r, g, b = colors[y, x]
                color = (int(r), int(g), int(b))
                if color != current:
                    parts.append(fg_color(*color))
                    current = color
                parts.append(glyph)
            parts.append(RESET)
            rows.append("".join(parts) + "\n")
        return "".join(rows)


def render_frame(
    buffer: ImageBuffer,
    params: "RenderParams",
    edge_map: "EdgeMap | None" = None,
) -> str:
    """
    Render a buffer as text with the given parameters.

    :param buffer: The (already resized) buffer
    :param params: Render parameters
    :param edge_map: Edge magnitudes, required if params.edges is set
    :return: The text blob
    """
    return AsciiRenderer(params).render(buffer, edge_map)


__all__ = ["AsciiRenderer", "ESC", "RESET", "fg_color", "render_frame"]
