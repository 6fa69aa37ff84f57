"""One-shot alarm timer used to detect the end of a wrapping run."""

from __future__ import annotations

import time
from typing import Callable

TIMER_FREQ_HZ = 1_000_000
PROX_SENSOR_ALARM_US = 5_000_000
PROX_SENSOR_PERIOD_MS = PROX_SENSOR_ALARM_US // 1000


def _millis() -> int:
    return time.monotonic_ns() // 1_000_000


class OneShotTimer:
    """A counter that raises an alarm once when it reaches ``period_ms``.

    The timer is created stopped. Stopping pauses the count, resetting or
    restarting sets it back to zero and re-arms the alarm.
    """

    def __init__(
        self,
        period_ms: int = PROX_SENSOR_PERIOD_MS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if period_ms <= 0:
            raise ValueError("period must be positive")
        self.period_ms = period_ms
        self._clock = clock or _millis
        self._count = 0
        self._started_at = 0
        self._running = False
        self._armed = True
        self._fired = False

    @property
    def stopped(self) -> bool:
        return not self._running

    @property
    def elapsed(self) -> int:
        """Milliseconds counted since the last reset."""
        if self._running:
            return self._count + (self._clock() - self._started_at)
        return self._count

    def _poll(self) -> None:
        if self._armed and self.elapsed >= self.period_ms:
            self._armed = False
            self._fired = True

    def start(self) -> None:
        """Resume counting."""
        if self._running:
            return
        self._poll()
        self._started_at = self._clock()
        self._running = True

    def stop(self) -> None:
        """Pause counting."""
        if not self._running:
            return
        self._poll()
        self._count = self.elapsed
        self._running = False

    def reset(self) -> None:
        """Set the count back to zero without changing whether it runs."""
        self._poll()
        self._count = 0
        self._started_at = self._clock()
        self._armed = True

    def restart(self) -> None:
        """Count again from zero, starting the timer if it was stopped."""
        self.reset()
        self._running = True

    def expired(self) -> bool:
        """True once after the alarm has gone off."""
        self._poll()
        fired, self._fired = self._fired, False
        return fired