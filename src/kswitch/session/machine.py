"""
Selection state machine.

Browsing a fixed kernel catalog, staging the highlighted kernel and gating
the switch on an explicit confirmation. The machine does no terminal I/O;
every transition returns a Step that the interactive loop renders.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence, Union

import structlog

from kswitch.boot import KernelCatalog
from kswitch.errors import KswitchError, NoKernelsFound, StagingError, SwitchError

logger = structlog.get_logger()


class Event(Enum):
    """Device-independent operator inputs."""

    MOVE_NEXT = "move_next"
    MOVE_PREVIOUS = "move_previous"
    SELECT = "select"
    QUIT = "quit"
    CONFIRM_YES = "confirm_yes"
    CONFIRM_NO = "confirm_no"


@dataclass(frozen=True)
class Browsing:
    cursor: int


@dataclass(frozen=True)
class Confirming:
    staged_version: str
    cursor: int  # restored when the switch is declined or fails


SelectionState = Union[Browsing, Confirming]


@dataclass(frozen=True)
class Step:
    """Outcome of a single transition."""

    state: SelectionState
    error: KswitchError | None = None
    finished: bool = False


class Stager(Protocol):
    def load(self, version: str) -> object: ...


class Switcher(Protocol):
    def execute(self) -> None: ...


class SelectionStateMachine:
    """
    Owns the selection state.

    Navigation, SELECT and QUIT apply only while browsing; CONFIRM_YES and
    CONFIRM_NO apply only while confirming. Any other pairing is ignored.
    """

    def __init__(self, catalog: Sequence[str], stager: Stager, switcher: Switcher) -> None:
        if not catalog:
            raise NoKernelsFound()
        self.catalog = tuple(catalog)
        self.stager = stager
        self.switcher = switcher
        self._state: SelectionState = Browsing(cursor=0)

    @classmethod
    def discover(
        cls, catalog: KernelCatalog, stager: Stager, switcher: Switcher
    ) -> SelectionStateMachine:
        """Build from a fresh discovery; DiscoveryError propagates."""
        return cls(catalog.discover(), stager, switcher)

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def cursor(self) -> int:
        return self._state.cursor

    @property
    def highlighted(self) -> str:
        return self.catalog[self._state.cursor]

    def handle(self, event: Event) -> Step:
        if isinstance(self._state, Browsing):
            step = self._handle_browsing(self._state, event)
        else:
            step = self._handle_confirming(self._state, event)

        if step.state != self._state or step.error is not None:
            logger.debug(
                "selection_transition",
                event=event.value,
                state=type(step.state).__name__,
                cursor=step.state.cursor,
                error=str(step.error) if step.error else None,
            )
        self._state = step.state
        return step

    def _handle_browsing(self, state: Browsing, event: Event) -> Step:
        size = len(self.catalog)

        if event is Event.MOVE_NEXT:
            return Step(Browsing((state.cursor + 1) % size))
        if event is Event.MOVE_PREVIOUS:
            return Step(Browsing((state.cursor - 1 + size) % size))
        if event is Event.QUIT:
            return Step(state, finished=True)
        if event is Event.SELECT:
            version = self.catalog[state.cursor]
            try:
                self.stager.load(version)
            except StagingError as exc:
                logger.warning("staging_failed", version=version, error=str(exc))
                return Step(state, error=exc)
            return Step(Confirming(staged_version=version, cursor=state.cursor))

        return Step(state)

    def _handle_confirming(self, state: Confirming, event: Event) -> Step:
        browsing = Browsing(state.cursor)

        if event is Event.CONFIRM_NO:
            logger.info("switch_declined", version=state.staged_version)
            return Step(browsing)
        if event is Event.CONFIRM_YES:
            try:
                self.switcher.execute()
            except SwitchError as exc:
                logger.error("switch_failed", version=state.staged_version, error=str(exc))
                return Step(browsing, error=exc)
            # Only reached if kexec -e returned
            return Step(browsing)

        return Step(state)
