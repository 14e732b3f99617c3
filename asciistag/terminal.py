"""
Terminal control - size queries and paired screen mode changes.

All terminal mode toggles go through :class:`TerminalControl`. Its
:meth:`TerminalControl.session` context manager enters the alternate screen,
hides the cursor and enables mouse capture, and reverts every change it made
when the block is left - normally, through an exception, Ctrl+C or SIGTERM.

Mode changes are cosmetic and best-effort: failures are logged and ignored.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading
from contextlib import contextmanager
from typing import IO, Iterator

from blessed import Terminal

from .config import settings
from .resampler import TerminalSize

logger = logging.getLogger(__name__)

# ANSI escape codes without terminfo capability
ESC = "\033"
MOUSE_ON = f"{ESC}[?1000h{ESC}[?1006h"  # Mouse tracking + SGR extended mode
MOUSE_OFF = f"{ESC}[?1006l{ESC}[?1000l"


def query_terminal_size() -> TerminalSize:
    """Get terminal size in character cells, falling back to 80x24."""
    try:
        size = os.get_terminal_size()
        if size.columns > 0 and size.lines > 0:
            return TerminalSize(size.columns, size.lines)
    except OSError:
        pass
    return TerminalSize(
        settings.FALLBACK_TERMINAL_WIDTH, settings.FALLBACK_TERMINAL_HEIGHT
    )


def _raise_system_exit(signum, _frame) -> None:
    raise SystemExit(128 + signum)


class TerminalControl:
    """Terminal-control abstraction on top of blessed.

    Capability strings come from the terminfo database via blessed, so on
    terminals (or pipes) without a capability nothing is emitted.
    """

    def __init__(
        self,
        stream: IO[str] | None = None,
        terminal: Terminal | None = None,
        enable_mouse: bool = True,
    ):
        """
        :param stream: Output stream (default: sys.stdout)
        :param terminal: blessed Terminal (created lazily if None)
        :param enable_mouse: Whether the session enables mouse capture
        """
        self.stream = stream if stream is not None else sys.stdout
        self.enable_mouse = enable_mouse
        self._terminal = terminal
        self._active: list[str] = []  # Restore sequences, in acquire order

    @property
    def terminal(self) -> Terminal | None:
        if self._terminal is None:
            try:
                self._terminal = Terminal(stream=self.stream)
            except Exception as e:  # curses setup can fail in many ways
                logger.debug("Terminal capabilities unavailable: %s", e)
        return self._terminal

    @property
    def is_active(self) -> bool:
        """Whether any mode change is currently waiting for its reversal."""
        return bool(self._active)

    def _capability(self, name: str) -> str:
        term = self.terminal
        if term is None:
            return ""
        try:
            return str(getattr(term, name))
        except Exception as e:
            logger.debug("Capability %s unavailable: %s", name, e)
            return ""

    def write(self, text: str) -> bool:
        """Write and flush, returning False if the stream rejected it."""
        if not text:
            return True
        try:
            self.stream.write(text)
            self.stream.flush()
            return True
        except (OSError, ValueError) as e:
            logger.debug("Terminal write failed: %s", e)
            return False

    # -------------------------------------------------------------------------
    # Cursor and line control
    # -------------------------------------------------------------------------

    @property
    def home(self) -> str:
        return self._capability("home")

    @property
    def clear_eol(self) -> str:
        return self._capability("clear_eol")

    def move_to_row(self, row: int) -> str:
        """Sequence moving the cursor to the start of a (0-based) row."""
        term = self.terminal
        if term is None:
            return ""
        try:
            return str(term.move_yx(row, 0))
        except Exception as e:
            logger.debug("Cursor addressing unavailable: %s", e)
            return ""

    # -------------------------------------------------------------------------
    # Paired mode changes
    # -------------------------------------------------------------------------

    def _acquire(self, enter: str, leave: str, what: str) -> None:
        if not enter:
            logger.debug("Terminal does not support %s", what)
            return
        if self.write(enter):
            self._active.append(leave)
        else:
            logger.debug("Could not enable %s", what)

    def acquire(self) -> None:
        """Enter alternate screen, hide the cursor, enable mouse capture."""
        self._acquire(
            self._capability("enter_fullscreen"),
            self._capability("exit_fullscreen"),
            "alternate screen",
        )
        self._acquire(
            self._capability("hide_cursor"),
            self._capability("normal_cursor"),
            "cursor hiding",
        )
        if self.enable_mouse:
            term = self.terminal
            if term is not None and getattr(term, "does_styling", False):
                self._acquire(MOUSE_ON, MOUSE_OFF, "mouse capture")

    def release(self) -> None:
        """Revert all acquired modes in reverse order."""
        while self._active:
            leave = self._active.pop()
            if not self.write(leave):
                logger.debug("Could not restore terminal mode %r", leave)

    @contextmanager
    def session(self) -> Iterator[TerminalControl]:
        """Scoped guard pairing every mode change with its reversal."""
        previous_handler = None
        install = (
            hasattr(signal, "SIGTERM")
            and threading.current_thread() is threading.main_thread()
        )
        if install:
            previous_handler = signal.signal(signal.SIGTERM, _raise_system_exit)
        self.acquire()
        try:
            yield self
        finally:
            self.release()
            if install:
                if previous_handler is None:
                    previous_handler = signal.SIG_DFL
                signal.signal(signal.SIGTERM, previous_handler)


__all__ = [
    "MOUSE_OFF",
    "MOUSE_ON",
    "TerminalControl",
    "TerminalSize",
    "query_terminal_size",
]
