"""
Terminal Player - Paced playback of multi-frame sources as ASCII art.

Plays GIFs and videos frame by frame in the terminal's alternate screen.
Every frame runs through the regular pipeline (resize, edges, render), is
held back until the frame delay since the previous frame has passed and is
then drawn over the previous one from the top-left corner. Rows and columns
a smaller frame no longer covers are cleared explicitly so nothing of the
previous frame remains visible.

Example:
    from asciistag import RenderParams
    from asciistag.player import PlaybackLoop
    from asciistag.streams import open_source

    params = RenderParams(input_path="clip.gif", color=True, auto_fit=True)
    PlaybackLoop(params).play(open_source(params.input_path))

Playback is single threaded. Ctrl+C stops it, the terminal is always
restored.
"""

from __future__ import annotations

import logging
import math
import re
import time
from dataclasses import dataclass
from typing import IO, Callable

from .config import RenderParams, settings
from .errors import ResizeError
from .pipeline import render_buffer
from .resampler import TerminalSize
from .streams import FrameSource
from .terminal import TerminalControl, query_terminal_size

logger = logging.getLogger(__name__)

_ANSI_SGR = re.compile(r"\x1b\[[0-9;]*m")


def visible_width(line: str) -> int:
    """Printable length of a rendered row, color escapes excluded."""
    return len(_ANSI_SGR.sub("", line))


def target_delay_ms(params: RenderParams, fps: float) -> float:
    """
    Delay between two frames in milliseconds.

    An explicit params.frame_delay_ms wins, otherwise it is derived from the
    source fps. Unknown or non-positive rates fall back to
    settings.DEFAULT_FRAME_DELAY_MS.
    """
    if params.frame_delay_ms is not None:
        return params.frame_delay_ms
    if fps and math.isfinite(fps) and fps > 0:
        return 1000.0 / fps
    return settings.DEFAULT_FRAME_DELAY_MS


@dataclass
class PlaybackStats:
    """Summary of a playback run."""

    frames_rendered: int = 0
    frames_skipped: int = 0
    target_delay_ms: float = 0.0
    interrupted: bool = False


class PlaybackLoop:
    """
    Drives the render pipeline across all frames of a source.

    Lifecycle of :meth:`play`:

    - Init: enter the terminal session (alternate screen, hidden cursor,
      mouse capture), best-effort
    - PerFrame: decode, render, wait for the frame delay, redraw
    - Drain: repeat until the source is exhausted
    - Teardown: restore the terminal and close the source, always exactly once
    """

    def __init__(
        self,
        params: RenderParams,
        terminal: TerminalControl | None = None,
        stream: IO[str] | None = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        size_query: Callable[[], TerminalSize] = query_terminal_size,
    ):
        """
        :param params: Render parameters
        :param terminal: Terminal control (default: one writing to stream)
        :param stream: Output stream if no terminal is given (default: stdout)
        :param clock: Monotonic clock in seconds
        :param sleep: Blocking sleep in seconds
        :param size_query: Terminal size query, called once per frame in
            auto-fit mode
        """
        self.params = params
        self.terminal = terminal if terminal is not None else TerminalControl(stream)
        self._clock = clock
        self._sleep = sleep
        self._size_query = size_query

        # Redraw state of the previously presented frame
        self._prev_rows = 0
        self._prev_width = 0
        self._last_presented: float | None = None

    def play(self, source: FrameSource) -> PlaybackStats:
        """
        Play all frames of a source.

        :param source: The frame source, closed when playback ends
        :return: Playback statistics
        """
        stats = PlaybackStats(target_delay_ms=target_delay_ms(self.params, source.fps))
        delay = stats.target_delay_ms / 1000.0
        logger.debug("Frame delay %.1f ms (source fps %.2f)", stats.target_delay_ms, source.fps)

        self._prev_rows = 0
        self._prev_width = 0
        self._last_presented = None

        with source, self.terminal.session():
            try:
                while True:
                    frame = source.next_frame()
                    if frame is None:
                        break
                    try:
                        text = self._render(frame)
                    except ResizeError as e:
                        logger.warning("Skipping frame %d: %s", source.frame_index, e)
                        stats.frames_skipped += 1
                        continue
                    self._wait(delay)
                    self._present(text)
                    stats.frames_rendered += 1
            except KeyboardInterrupt:
                logger.info("Playback interrupted")
                stats.interrupted = True

        return stats

    def _render(self, frame) -> str:
        terminal_size = None
        if self.params.auto_fit:
            size = self._size_query()
            # Keep the last row free so the final line never scrolls the screen
            terminal_size = TerminalSize(size.width, max(size.height - 1, 1))
        return render_buffer(frame, self.params, terminal_size)

    def _wait(self, delay: float) -> None:
        if self._last_presented is None:
            return
        remaining = delay - (self._clock() - self._last_presented)
        if remaining > 0:
            self._sleep(remaining)

    def _present(self, text: str) -> None:
        term = self.terminal
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        clear_eol = term.clear_eol

        output = [term.home]
        width = 0
        for row, line in enumerate(lines):
            position = term.move_to_row(row)
            output.append(position)
            output.append(line)
            line_width = visible_width(line)
            width = max(width, line_width)
            if line_width < self._prev_width:
                output.append(clear_eol)
            if not position:
                # No cursor addressing (e.g. redirected output): frames follow each other
                output.append("\n")

        # Rows of a taller previous frame
        for row in range(len(lines), self._prev_rows):
            position = term.move_to_row(row)
            if position:
                output.append(position + clear_eol)

        term.write("".join(output))
        self._prev_rows = len(lines)
        self._prev_width = width
        self._last_presented = self._clock()


__all__ = ["PlaybackLoop", "PlaybackStats", "target_delay_ms", "visible_width"]
