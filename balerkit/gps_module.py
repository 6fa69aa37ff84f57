"""Polling a GPS receiver on a serial line and keeping the latest position."""

from __future__ import annotations

import time
from typing import Callable, Protocol

from .nmea import NmeaParser

GPS_SERIAL_BAUDRATE = 9600
GPS_DATA_UPDATE_INTERVAL = 1000
NO_GPS_DATA_RECEIVED_INTERVAL = 5000

_U32 = 0xFFFFFFFF


class SerialPort(Protocol):
    """The part of a serial port the module reads from."""

    @property
    def in_waiting(self) -> int: ...

    def read(self, size: int = 1) -> bytes: ...


def _millis() -> int:
    return (time.monotonic_ns() // 1_000_000) & _U32


class GpsModule:
    """Reads NMEA data once per interval and tracks a data heartbeat."""

    def __init__(self, serial: SerialPort, clock: Callable[[], int] | None = None) -> None:
        self.serial = serial
        self._clock = clock or _millis
        self.parser = NmeaParser(self._clock)
        self.last_update = 0
        self.data_last_received = self._clock()
        self.heartbeat = False
        self.latitude = 0.0
        self.longitude = 0.0

    def handle(self) -> None:
        """Read new data when the update interval has passed; expire the heartbeat."""
        now = self._clock()
        if (now - self.last_update) & _U32 >= GPS_DATA_UPDATE_INTERVAL:
            self.last_update = now
            self.read()

        now = self._clock()
        if (now - self.data_last_received) & _U32 > NO_GPS_DATA_RECEIVED_INTERVAL:
            self.data_last_received = now
            self.heartbeat = False

    def read(self) -> int:
        """Consume all waiting bytes; return how many sentences validated."""
        sentences = 0
        while self.serial.in_waiting > 0:
            self.data_last_received = self._clock()
            self.heartbeat = True
            for byte in self.serial.read(1):
                if self.parser.encode(byte):
                    sentences += 1
                    self.latitude = self.parser.location.lat()
                    self.longitude = self.parser.location.lng()
        return sentences