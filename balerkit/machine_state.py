"""Tracking the state of the baling machine."""

from __future__ import annotations

import logging
from typing import Callable

from .common import MachineStateEvent

logger = logging.getLogger(__name__)

_STATE_LABELS = {
    MachineStateEvent.IDLE: "EN_MACHINE_STATE_IDLE",
    MachineStateEvent.FEEDING_STARTED: "EN_MACHINE_STATE_FEEDING_STARTED",
    MachineStateEvent.FEEDING_COMPLETE: "EN_MACHINE_STATE_FEEDING_COMPLETE",
    MachineStateEvent.VR_WRAP_SQUEEZE: "EN_MACHINE_STATE_VR_WRAP_SQUEEZ",
    MachineStateEvent.VR_WRAP_EXPAND: "EN_MACHINE_STATE_VR_WRAP_EXPAND",
    MachineStateEvent.CHAMBER_OPENED: "EN_MACHINE_STATE_CHAMBER_OPENED",
    MachineStateEvent.CHAMBER_CLOSED: "EN_MACHINE_STATE_CHAMBER_CLOSED",
    MachineStateEvent.HR_WRAP_STARTED: "EN_MACHINE_STATE_HR_WRAP_STARTED",
    MachineStateEvent.HR_WRAP_COMPLETED: "EN_MACHINE_STATE_HR_WRAP_COMPLETED",
    MachineStateEvent.WRAP_CUT_UP: "EN_MACHINE_STATE_WRAP_CUT_UP",
    MachineStateEvent.WRAP_CUT_DOWN: "EN_MACHINE_STATE_WRAP_CUT_DOWN",
    MachineStateEvent.BALE_UNLOADING_DOWN: "EN_MACHINE_STATE_BALE_UNLOADING_DOWN",
    MachineStateEvent.BALE_LOADING_UP: "EN_MACHINE_STATE_BALE_LOADING_UP",
}
_UNDEFINED_LABEL = "EN_MACHINE_STATE_UNDEFINED"


def describe_state(state: int) -> str:
    """Diagnostic name of a machine state; unknown states read as undefined."""
    try:
        return _STATE_LABELS.get(MachineStateEvent(state), _UNDEFINED_LABEL)
    except ValueError:
        return _UNDEFINED_LABEL


class MachineStateTracker:
    """Holds the current machine state and reports every change to ``log``."""

    def __init__(self, log: Callable[[str], None] | None = None) -> None:
        self._log = log or logger.debug
        self.state: int = MachineStateEvent.UNDEFINED

    def set_state(self, state: int) -> None:
        """Move to ``state`` and report it."""
        self.state = state
        self._log(f"MachineState: {describe_state(state)}")

    def reset(self) -> None:
        """Put the machine back into the idle state."""
        self.set_state(MachineStateEvent.IDLE)