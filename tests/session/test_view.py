"""Tests for the kernel list rendering."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from kswitch.session.view import HIGHLIGHT_SYMBOL, KernelListView, row_label, visible_window


def test_row_label_marks_current() -> None:
    assert row_label("6.1.0", "6.1.0") == "  6.1.0 (current)"
    assert row_label("5.10.0", "6.1.0") == "  5.10.0"
    assert row_label("5.10.0", None) == "  5.10.0"


class TestVisibleWindow:
    def test_everything_fits(self) -> None:
        assert visible_window(cursor=2, total=3, height=10) == range(0, 3)

    def test_scrolls_to_cursor(self) -> None:
        window = visible_window(cursor=9, total=12, height=4)

        assert 9 in window
        assert window == range(6, 10)

    def test_no_room(self) -> None:
        assert visible_window(cursor=0, total=3, height=0) == range(0)


def test_draw_highlights_cursor_row() -> None:
    screen = MagicMock()
    screen.getmaxyx.return_value = (24, 80)

    with patch("kswitch.session.view.curses") as mock_curses:
        mock_curses.has_colors.return_value = False
        KernelListView().draw(screen, ("5.10.0", "6.1.0"), cursor=1, current="5.10.0")

    texts = [call.args[2] for call in screen.addnstr.call_args_list]
    assert "Kernel Version Selector" in texts
    assert HIGHLIGHT_SYMBOL + "  6.1.0" in texts
    assert "     5.10.0 (current)" in texts
    screen.refresh.assert_called_once()
