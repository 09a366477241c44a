"""Interactive selection: state machine, terminal handling and the key loop."""

from kswitch.session.machine import (
    Browsing,
    Confirming,
    Event,
    SelectionState,
    SelectionStateMachine,
    Step,
)
from kswitch.session.terminal import TerminalSession

__all__ = [
    "Browsing",
    "Confirming",
    "Event",
    "SelectionState",
    "SelectionStateMachine",
    "Step",
    "TerminalSession",
]
