"""Curses rendering of the kernel list."""

from __future__ import annotations

import curses
from typing import Any, Sequence

TITLE = "Kernel Version Selector"
LIST_TITLE = "Available Kernel Versions"
INSTRUCTIONS = "Use ↑/↓ or j/k to navigate, Enter to select, q/Esc to quit"
HIGHLIGHT_SYMBOL = ">> "

_PAIR_TITLE = 1
_PAIR_CURRENT = 2
_PAIR_HIGHLIGHT = 3


def row_label(version: str, current: str | None) -> str:
    if version == current:
        return f"  {version} (current)"
    return f"  {version}"


def visible_window(cursor: int, total: int, height: int) -> range:
    """Indices of the rows to draw so that `cursor` stays on screen."""
    if height <= 0:
        return range(0)
    start = min(max(cursor - height + 1, 0), max(total - height, 0))
    return range(start, min(start + height, total))


class KernelListView:
    """Draws the title, the kernel list and the key help."""

    def __init__(self) -> None:
        self._colors = False

    def _init_colors(self) -> None:
        if self._colors or not curses.has_colors():
            return
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(_PAIR_TITLE, curses.COLOR_CYAN, -1)
        curses.init_pair(_PAIR_CURRENT, curses.COLOR_GREEN, -1)
        curses.init_pair(_PAIR_HIGHLIGHT, curses.COLOR_BLACK, curses.COLOR_GREEN)
        self._colors = True

    def _attr(self, pair: int) -> int:
        return curses.color_pair(pair) if self._colors else 0

    def draw(self, screen: Any, versions: Sequence[str], cursor: int, current: str | None) -> None:
        self._init_colors()
        screen.erase()
        height, width = screen.getmaxyx()

        def put(y: int, x: int, text: str, attr: int = 0) -> None:
            if 0 <= y < height and x < width:
                try:
                    screen.addnstr(y, x, text, max(width - x - 1, 0), attr)
                except curses.error:
                    pass  # writing the bottom-right cell raises

        put(0, 2, TITLE, self._attr(_PAIR_TITLE) | curses.A_BOLD)
        put(2, 2, LIST_TITLE, curses.A_UNDERLINE)

        list_height = max(height - 6, 1)
        for offset, index in enumerate(visible_window(cursor, len(versions), list_height)):
            version = versions[index]
            label = row_label(version, current)
            if index == cursor:
                attr = self._attr(_PAIR_HIGHLIGHT) if self._colors else curses.A_REVERSE
                put(3 + offset, 2, HIGHLIGHT_SYMBOL + label, attr | curses.A_BOLD)
            elif version == current:
                put(3 + offset, 2, " " * len(HIGHLIGHT_SYMBOL) + label, self._attr(_PAIR_CURRENT) | curses.A_BOLD)
            else:
                put(3 + offset, 2, " " * len(HIGHLIGHT_SYMBOL) + label)

        put(height - 2, 2, INSTRUCTIONS, curses.A_DIM)
        screen.refresh()
