"""Stopwatch counting in ten-millisecond steps."""

from __future__ import annotations

TICK_MS = 10
INITIAL_DISPLAY = "00 : 00 : 00 : 00"
_DAY_MS = 24 * 60 * 60 * 1000


def format_elapsed(milliseconds: int) -> str:
    """Elapsed time as 'hh : mm : ss : zzz'."""
    seconds, millis = divmod(milliseconds, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d} : {minutes:02d} : {seconds:02d} : {millis:03d}"


class Stopwatch:
    """A start/stop button, a reset button and a display driven by ``tick``."""

    def __init__(self) -> None:
        self.elapsed_ms = 0
        self.running = False
        self.timer_active = False
        self.display = INITIAL_DISPLAY
        self.button_text = "Start"

    def toggle(self) -> bool:
        """Start or stop counting; return the new running flag."""
        if self.running:
            self.timer_active = False
            self.button_text = "Start"
        else:
            self.timer_active = True
            self.button_text = "Stop"
        self.running = not self.running
        return self.running

    def reset(self) -> None:
        """Stop the timer and zero the display; the running flag is left as it is."""
        self.timer_active = False
        self.elapsed_ms = 0
        self.display = INITIAL_DISPLAY
        self.button_text = "Start"

    def tick(self) -> str:
        """Advance by one step while the timer runs; return the display."""
        if self.timer_active:
            self.elapsed_ms = (self.elapsed_ms + TICK_MS) % _DAY_MS
            self.display = format_elapsed(self.elapsed_ms)
        return self.display