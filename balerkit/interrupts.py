"""Machine sensor inputs and the latch their interrupts set."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum
from functools import partial
from typing import Callable

from .common import MachineEvent, MachineType, Pin


class Trigger(IntEnum):
    """Signal edge that raises an interrupt."""

    RISING = 1
    FALLING = 2
    CHANGE = 3


@dataclass(frozen=True)
class InterruptConfig:
    """A sensor pin, the event it reports and the edge that triggers it.

    Every event pin is an input with pull-up.
    """

    pin: int
    event: MachineEvent
    trigger: Trigger = Trigger.FALLING


class MachineEventLatch:
    """Holds the most recent machine event until the main loop takes it."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.pending = False
        self.event = MachineEvent.UNDEFINED

    def signal(self, event: MachineEvent) -> None:
        """Record ``event``; a later signal replaces an untaken one."""
        with self._lock:
            self.event = event
            self.pending = True

    def take(self) -> MachineEvent | None:
        """Return and clear the pending event, or None if there is none."""
        with self._lock:
            if not self.pending:
                return None
            event = self.event
            self.pending = False
            self.event = MachineEvent.UNDEFINED
            return event


_PROXIMITY = InterruptConfig(int(Pin.PROX_SEN_EVENT), MachineEvent.PROXIMITY_SENSOR)
_ASB_PINS = (
    _PROXIMITY,
    InterruptConfig(int(Pin.HRZ_WRAP_START_EVENT), MachineEvent.HR_WRAP_STARTED),
    InterruptConfig(int(Pin.UNLOADING_EVENT), MachineEvent.BALE_UNLOADING_DOWN),
)
_MSB_PINS = (_PROXIMITY,)


def machine_event_pins(machine_type: int) -> list[InterruptConfig]:
    """Sensor inputs watched for the given kind of machine."""
    if machine_type == MachineType.ASB:
        return list(_ASB_PINS)
    if machine_type == MachineType.MSB:
        return list(_MSB_PINS)
    return []


def attach_interrupts(
    machine_type: int,
    latch: MachineEventLatch,
    attach: Callable[[int, Callable[[], None], Trigger], None],
) -> list[InterruptConfig]:
    """Register a latch-setting callback for each sensor pin via ``attach``."""
    configs = machine_event_pins(machine_type)
    for config in configs:
        attach(config.pin, partial(latch.signal, config.event), config.trigger)
    return configs