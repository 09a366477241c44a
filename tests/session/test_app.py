"""Tests for the interactive selector loop."""

from __future__ import annotations

import curses
import io
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from kswitch.errors import StagingCommandFailed, SwitchCommandFailed
from kswitch.session.app import SelectorApp, is_declined, key_to_event
from kswitch.session.machine import Browsing, Event, SelectionStateMachine


class FakeScreen:
    def __init__(self, keys: list[int]) -> None:
        self.keys = list(keys)

    def getch(self) -> int:
        if not self.keys:
            raise AssertionError("selector asked for more keys than scripted")
        return self.keys.pop(0)


class FakeTerminal:
    """Records acquire/release order instead of touching a tty."""

    def __init__(self, keys: list[int]) -> None:
        self._screen = FakeScreen(keys)
        self.screen = None
        self.log: list[str] = []

    @property
    def active(self) -> bool:
        return self.screen is not None

    def __enter__(self):
        self.screen = self._screen
        self.log.append("acquire")
        return self.screen

    def __exit__(self, *exc_info) -> None:
        self.screen = None
        self.log.append("release")

    @contextmanager
    def suspended(self):
        self.screen = None
        self.log.append("suspend")
        yield
        self.screen = self._screen
        self.log.append("resume")


class Prompter:
    """Scripted answers; records whether the terminal was free when asked."""

    def __init__(self, terminal: FakeTerminal, answers: list[str]) -> None:
        self.terminal = terminal
        self.answers = list(answers)
        self.asked: list[str] = []

    def __call__(self, text: str) -> str:
        assert not self.terminal.active, "prompt while the list owns the terminal"
        self.asked.append(text)
        return self.answers.pop(0)


def build_app(keys: list[int], answers: list[str] = (), catalog=("5.10.0", "5.15.0")):
    machine = SelectionStateMachine(catalog, stager=MagicMock(), switcher=MagicMock())
    terminal = FakeTerminal(keys)
    prompter = Prompter(terminal, list(answers))
    output = io.StringIO()
    app = SelectorApp(
        machine,
        terminal,
        current="5.15.0",
        view=MagicMock(),
        console=Console(file=output, width=120, color_system=None),
        prompt=prompter,
    )
    return app, terminal, prompter, output


class TestKeyMapping:
    @pytest.mark.parametrize(
        ("key", "event"),
        [
            (curses.KEY_DOWN, Event.MOVE_NEXT),
            (ord("j"), Event.MOVE_NEXT),
            (curses.KEY_UP, Event.MOVE_PREVIOUS),
            (ord("k"), Event.MOVE_PREVIOUS),
            (ord("\n"), Event.SELECT),
            (curses.KEY_ENTER, Event.SELECT),
            (ord("q"), Event.QUIT),
            (27, Event.QUIT),
        ],
    )
    def test_bound_keys(self, key: int, event: Event) -> None:
        assert key_to_event(key) is event

    def test_unbound_key(self) -> None:
        assert key_to_event(ord("x")) is None


class TestDeclineAnswers:
    @pytest.mark.parametrize("answer", ["n", "N", "no", "No", " NO \n"])
    def test_declined(self, answer: str) -> None:
        assert is_declined(answer)

    @pytest.mark.parametrize("answer", ["", "y", "yes", "Y", "nope", "maybe"])
    def test_accepted(self, answer: str) -> None:
        assert not is_declined(answer)


class TestSelectorLoop:
    def test_navigate_and_quit(self) -> None:
        app, terminal, _, _ = build_app([ord("j"), ord("x"), ord("q")])

        app.run()

        assert app.machine.state == Browsing(cursor=1)
        assert terminal.log == ["acquire", "release"]
        app.machine.stager.load.assert_not_called()
        last_draw = app.view.draw.call_args
        assert last_draw.args[1:] == (("5.10.0", "5.15.0"), 1, "5.15.0")

    def test_escape_quits(self) -> None:
        app, terminal, _, _ = build_app([27])

        app.run()

        assert terminal.log == ["acquire", "release"]

    def test_staging_failure_requires_acknowledgement(self) -> None:
        app, terminal, prompter, output = build_app([ord("\n"), ord("q")], answers=[""])
        app.machine.stager.load.side_effect = StagingCommandFailed("Permission denied", 1)

        app.run()

        assert app.machine.state == Browsing(cursor=0)
        assert prompter.asked == ["Press Enter to continue..."]
        assert "Loading kernel version: 5.10.0..." in output.getvalue()
        assert "Failed: kexec load failed: Permission denied" in output.getvalue()
        assert terminal.log == ["acquire", "suspend", "resume", "release"]

    def test_declined_switch_returns_to_browsing(self) -> None:
        app, terminal, prompter, output = build_app(
            [ord("j"), ord("\n"), ord("q")], answers=["no"]
        )

        app.run()

        app.machine.stager.load.assert_called_once_with("5.15.0")
        app.machine.switcher.execute.assert_not_called()
        assert app.machine.state == Browsing(cursor=1)
        assert prompter.asked == ["\nDo you want to proceed with the kernel switch? (Y/n): "]
        assert "Kernel 5.15.0 has been loaded successfully!" in output.getvalue()
        assert terminal.log == ["acquire", "suspend", "resume", "release"]

    def test_default_answer_executes(self) -> None:
        app, _, prompter, output = build_app([ord("\n"), ord("q")], answers=["", ""])

        app.run()

        app.machine.switcher.execute.assert_called_once_with()
        assert "Running kexec" in output.getvalue()
        assert "should have rebooted" in output.getvalue()
        assert prompter.asked[-1] == "Press Enter to continue..."
        assert app.machine.state == Browsing(cursor=0)

    def test_switch_failure_is_surfaced(self) -> None:
        app, terminal, _, output = build_app([ord("\n"), ord("q")], answers=["y", ""])
        app.machine.switcher.execute.side_effect = SwitchCommandFailed("Nothing has been loaded!", 255)

        app.run()

        assert "Failed to execute kernel switch: kexec execute failed: Nothing has been loaded!" in output.getvalue()
        assert app.machine.state == Browsing(cursor=0)
        assert terminal.log == ["acquire", "suspend", "resume", "release"]

    def test_interrupt_still_releases(self) -> None:
        app, terminal, _, _ = build_app([])
        terminal._screen.getch = MagicMock(side_effect=KeyboardInterrupt)

        with pytest.raises(KeyboardInterrupt):
            app.run()

        assert terminal.log == ["acquire", "release"]
