"""Rendering the baler screens on a character LCD."""

from __future__ import annotations

import math
import struct

from .common import (
    BALER_DEVICE_NAME,
    KILOGRAMS,
    BaleInformation,
    BalerPayload,
    DeviceConfig,
    MachineType,
)

_DDRAM_SIZE = 0x80


def _float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _two_places(value: float) -> str:
    return f"{value:.2f}"


def machine_type_label(machine_type: int) -> str:
    """Three-letter name of a machine type, '***' when it is not known."""
    if machine_type == MachineType.ASB:
        return "ASB"
    if machine_type == MachineType.MSB:
        return "MSB"
    return "***"


class LcdScreen:
    """Character display with HD44780 addressing, so long text wraps as on the device."""

    def __init__(self, columns: int = 20, rows: int = 4) -> None:
        if not 1 <= rows <= 4 or not 1 <= columns <= 40:
            raise ValueError("unsupported display size")
        self.columns = columns
        self.rows = rows
        self._row_offsets = (0x00, 0x40, columns, 0x40 + columns)
        self._ddram = [" "] * _DDRAM_SIZE
        self._address = 0

    def clear(self) -> None:
        self._ddram = [" "] * _DDRAM_SIZE
        self._address = 0

    def set_cursor(self, column: int, row: int) -> None:
        if row >= self.rows:
            row = self.rows - 1
        self._address = (column + self._row_offsets[row]) % _DDRAM_SIZE

    def write(self, text: str) -> None:
        for char in text:
            self._ddram[self._address] = char
            if self._address == 0x27:
                self._address = 0x40
            elif self._address == 0x67:
                self._address = 0x00
            else:
                self._address = (self._address + 1) % _DDRAM_SIZE

    def lines(self) -> list[str]:
        return [
            "".join(
                self._ddram[(offset + column) % _DDRAM_SIZE]
                for column in range(self.columns)
            )
            for offset in self._row_offsets[: self.rows]
        ]


def render_screen(
    screen: LcdScreen,
    info: BaleInformation,
    payload: BalerPayload,
    config: DeviceConfig,
) -> list[str]:
    """Draw the screen selected by ``info`` and return its lines."""
    screen.clear()

    def put(column: int, row: int, *texts: str) -> None:
        screen.set_cursor(column, row)
        for text in texts:
            screen.write(text)

    if info == BaleInformation.WEIGHT:
        put(0, 0, "Bales Weight & Count")
        put(0, 1, "Current : ",
            _two_places(_float32(payload.curr_bale_weight_grams) / 1000.0))
        put(18, 1, KILOGRAMS)
        put(2, 2, "Total : ",
            _two_places(_float32(payload.total_bale_weight_grams) / 1000.0))
        put(18, 2, KILOGRAMS)
        put(2, 3, "Bales : ", str(int(payload.total_bale_count)))
    elif info == BaleInformation.COUNT:
        put(5, 0, "Count Info")
        put(0, 1, "Total Bale : ", str(int(payload.total_bale_count)))
        put(1, 2, "Bale Wrap : ", str(int(payload.curr_bale_wrap_count)))
    elif info == BaleInformation.MOISTURE:
        put(6, 0, "Moisture")
        put(0, 1, "Moisture % : ", _two_places(_float32(payload.moisture_level)))
    elif info == BaleInformation.DEFAULT:
        put(6, 0, "CORNEXT")
        put(0, 1, "DELTA THINGS Pvt Ltd")
        put(4, 2, "Silage Baler")
        put(1, 3, BALER_DEVICE_NAME)
        put(16, 3, machine_type_label(config.machine_type))
    elif info == BaleInformation.ERROR:
        put(6, 0, "ERROR")
    elif info == BaleInformation.ATTRIBUTES:
        put(6, 0, BALER_DEVICE_NAME)
        put(0, 1, "Machine Type : ", machine_type_label(config.machine_type))
        put(0, 2, "Max Wrap Cnt : ", str(int(config.threshold_wrap_count)))
        put(0, 3, "Calib Factor : ",
            _two_places(_float32(config.load_cell_calib_factor)))
    return screen.lines()