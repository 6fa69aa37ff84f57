"""Driver for the HX711 load-cell amplifier, clocked over two GPIO pins."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Protocol

LOW = 0
HIGH = 1

DEFAULT_GAIN = 128
DEFAULT_AVERAGE_TIMES = 10

# Number of extra clock pulses after the 24 data bits, keyed by gain.
_GAIN_PULSES = {128: 1, 64: 3, 32: 2}


class PinMode(Enum):
    """Direction and pull configuration of a GPIO pin."""

    INPUT = "input"
    OUTPUT = "output"
    INPUT_PULLUP = "input_pullup"


class PinIO(Protocol):
    """Digital pin access the driver needs from the board."""

    def pin_mode(self, pin: int, mode: PinMode) -> None: ...

    def digital_write(self, pin: int, level: int) -> None: ...

    def digital_read(self, pin: int) -> int: ...


def _sleep_ms(milliseconds: float) -> None:
    time.sleep(milliseconds / 1000.0)


class HX711:
    """24-bit load-cell ADC with tare offset and scale factor."""

    def __init__(self, pins: PinIO, delay: Callable[[float], None] | None = None) -> None:
        self.pins = pins
        self._delay = delay or _sleep_ms
        self.pd_sck = 0
        self.dout = 0
        self.gain = _GAIN_PULSES[DEFAULT_GAIN]
        self.offset = 0
        self.scale = 1.0

    def begin(self, dout: int, pd_sck: int, gain: int = DEFAULT_GAIN) -> None:
        """Configure the data and clock pins and select the gain."""
        self.pd_sck = int(pd_sck)
        self.dout = int(dout)
        self.pins.pin_mode(self.pd_sck, PinMode.OUTPUT)
        self.pins.pin_mode(self.dout, PinMode.INPUT)
        self.set_gain(gain)

    def is_ready(self) -> bool:
        """The chip signals a finished conversion by pulling DOUT low."""
        return self.pins.digital_read(self.dout) == LOW

    def set_gain(self, gain: int = DEFAULT_GAIN) -> None:
        """Select channel and gain (128 or 64 on A, 32 on B); others are ignored."""
        self.gain = _GAIN_PULSES.get(gain, self.gain)

    def _pulse(self) -> None:
        self.pins.digital_write(self.pd_sck, HIGH)
        self.pins.digital_write(self.pd_sck, LOW)

    def _shift_in_byte(self) -> int:
        value = 0
        for _ in range(8):
            self.pins.digital_write(self.pd_sck, HIGH)
            bit = 1 if self.pins.digital_read(self.dout) else 0
            value = (value << 1) | bit
            self.pins.digital_write(self.pd_sck, LOW)
        return value

    def read(self) -> int:
        """Wait for a conversion and return it as a signed integer."""
        self.wait_ready()
        raw = 0
        for _ in range(3):
            raw = (raw << 8) | self._shift_in_byte()
        for _ in range(self.gain):
            self._pulse()
        return raw - (1 << 24) if raw & 0x800000 else raw

    def wait_ready(self, delay_ms: float = 0) -> None:
        """Block until the chip has a conversion ready."""
        while not self.is_ready():
            self._delay(delay_ms)

    def wait_ready_retry(self, retries: int = 3, delay_ms: float = 0) -> bool:
        """Poll up to ``retries`` times; True as soon as the chip is ready."""
        for _ in range(retries):
            if self.is_ready():
                return True
            self._delay(delay_ms)
        return False

    def wait_ready_timeout(self, timeout: float = 1000, delay_ms: float = 0) -> bool:
        """Poll for at most ``timeout`` milliseconds; True once the chip is ready."""
        started = time.monotonic()
        while (time.monotonic() - started) * 1000.0 < timeout:
            if self.is_ready():
                return True
            self._delay(delay_ms)
        return False

    def read_average(self, times: int = DEFAULT_AVERAGE_TIMES) -> int:
        """Average of ``times`` readings, truncated toward zero."""
        if times < 1:
            raise ValueError("times must be at least 1")
        total = sum(self.read() for _ in range(times))
        quotient = abs(total) // times
        return quotient if total >= 0 else -quotient

    def get_value(self, times: int = 1) -> float:
        """Averaged reading minus the tare offset."""
        return float(self.read_average(times) - self.offset)

    def get_units(self, times: int = 1) -> float:
        """Averaged, tared reading divided by the scale factor."""
        return self.get_value(times) / self.scale

    def tare(self, times: int = DEFAULT_AVERAGE_TIMES) -> None:
        """Take the current averaged reading as the zero offset."""
        self.offset = self.read_average(times)

    def power_down(self) -> None:
        """Put the chip into power-down mode."""
        self.pins.digital_write(self.pd_sck, LOW)
        self.pins.digital_write(self.pd_sck, HIGH)

    def power_up(self) -> None:
        """Wake the chip from power-down mode."""
        self.pins.digital_write(self.pd_sck, LOW)