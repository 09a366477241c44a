"""
Terminal session - Scoped ownership of the curses screen.

While acquired the terminal is in cbreak/no-echo mode on the alternate
screen. Line-mode prompts must run inside `suspended()`.
"""

from __future__ import annotations

import curses
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

logger = structlog.get_logger()


class TerminalSession:
    """Acquire/release handle for the interactive display mode."""

    def __init__(self) -> None:
        self.screen: Any = None

    @property
    def active(self) -> bool:
        return self.screen is not None

    def acquire(self) -> Any:
        """Enter the interactive mode and return the screen window."""
        if self.screen is not None:
            return self.screen

        screen = curses.initscr()
        # From here on endwin() is needed even if the rest fails
        self.screen = screen
        try:
            curses.noecho()
            curses.cbreak()
            screen.keypad(True)
            curses.set_escdelay(25)
            try:
                curses.curs_set(0)
            except curses.error:
                pass  # terminal cannot hide the cursor
        except BaseException:
            self.release()
            raise
        return screen

    def release(self) -> None:
        """Restore line mode. Safe to call when not acquired."""
        screen, self.screen = self.screen, None
        if screen is None:
            return
        try:
            screen.keypad(False)
            curses.nocbreak()
            curses.echo()
        finally:
            curses.endwin()

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """
        Hand the terminal to plain stdio for the duration of the block.

        The screen is reacquired only when the block exits normally; an
        exception leaves release to the enclosing session.
        """
        was_active = self.active
        self.release()
        logger.debug("terminal_suspended")
        yield
        if was_active:
            self.acquire()
            self.screen.clear()
            logger.debug("terminal_resumed")

    def __enter__(self) -> Any:
        return self.acquire()

    def __exit__(self, *exc_info: object) -> None:
        self.release()
