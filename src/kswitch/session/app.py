"""
Interactive selector loop.

Reads keys from the curses screen, feeds them to the state machine as events
and runs the staging/confirmation dialogue in plain line mode.
"""

from __future__ import annotations

import curses
from typing import Callable

import structlog
from rich.console import Console
from rich.markup import escape

from kswitch.session.machine import Confirming, Event, SelectionStateMachine
from kswitch.session.terminal import TerminalSession
from kswitch.session.view import KernelListView

logger = structlog.get_logger()

KEY_ESC = 27

KEYMAP: dict[int, Event] = {
    curses.KEY_DOWN: Event.MOVE_NEXT,
    ord("j"): Event.MOVE_NEXT,
    curses.KEY_UP: Event.MOVE_PREVIOUS,
    ord("k"): Event.MOVE_PREVIOUS,
    curses.KEY_ENTER: Event.SELECT,
    ord("\n"): Event.SELECT,
    ord("\r"): Event.SELECT,
    ord("q"): Event.QUIT,
    KEY_ESC: Event.QUIT,
}

DECLINE_ANSWERS = {"n", "no"}


def key_to_event(key: int) -> Event | None:
    return KEYMAP.get(key)


def is_declined(answer: str) -> bool:
    """Everything except n/no (any case) counts as yes."""
    return answer.strip().lower() in DECLINE_ANSWERS


class SelectorApp:
    """Runs one selector session until quit or a successful kexec."""

    def __init__(
        self,
        machine: SelectionStateMachine,
        terminal: TerminalSession,
        current: str | None = None,
        view: KernelListView | None = None,
        console: Console | None = None,
        prompt: Callable[[str], str] | None = None,
    ) -> None:
        self.machine = machine
        self.terminal = terminal
        self.current = current
        self.view = view or KernelListView()
        self.console = console or Console()
        self.prompt = prompt or self.console.input

    def run(self) -> None:
        logger.info(
            "selector_started",
            kernels=len(self.machine.catalog),
            current=self.current,
        )
        with self.terminal:
            while True:
                screen = self.terminal.screen
                self.view.draw(screen, self.machine.catalog, self.machine.cursor, self.current)

                event = key_to_event(screen.getch())
                if event is None:
                    continue
                if event is Event.SELECT:
                    self._stage_and_confirm()
                    continue
                if self.machine.handle(event).finished:
                    logger.info("selector_quit")
                    return

    def _acknowledge(self) -> None:
        self.prompt("Press Enter to continue...")

    def _stage_and_confirm(self) -> None:
        version = self.machine.highlighted
        with self.terminal.suspended():
            self.console.print(f"Loading kernel version: {escape(version)}... ", end="")
            step = self.machine.handle(Event.SELECT)
            if step.error is not None:
                self.console.print(f"[red]Failed:[/red] {escape(str(step.error))}")
                self._acknowledge()
                return

            self.console.print("[green]Success![/green]")
            if isinstance(step.state, Confirming):
                self._confirm(step.state)

    def _confirm(self, state: Confirming) -> None:
        self.console.print(
            f"\nKernel [cyan]{escape(state.staged_version)}[/cyan] has been loaded successfully!"
        )
        answer = self.prompt("\nDo you want to proceed with the kernel switch? (Y/n): ")
        if is_declined(answer):
            self.machine.handle(Event.CONFIRM_NO)
            return

        self.console.print(
            "\nRunning kexec ... (The console will hang shortly, press any key to continue)"
        )
        step = self.machine.handle(Event.CONFIRM_YES)
        if step.error is not None:
            self.console.print(
                f"[red]Failed to execute kernel switch:[/red] {escape(str(step.error))}"
            )
        else:
            self.console.print("[yellow]Kernel switch should have rebooted the system[/yellow]")
        self._acknowledge()
