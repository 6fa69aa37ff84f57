"""Weighing bales with the load cell: weight, tare and calibration."""

from __future__ import annotations

import logging
from typing import Any, Callable

from .common import NUM_OF_READINGS, DeviceConfig, Pin, SerialCmd, SpiffsParamType
from .config_store import ConfigStore
from .hx711 import HX711

logger = logging.getLogger(__name__)

KNOWN_WEIGHT_IN_GRAMS = 5000.0
MAX_OFFSET_VALUE_AT_ZERO_WEIGHT = 99
MIN_OFFSET_VALUE_AT_ZERO_WEIGHT = -99


def round_off_weight(weight: float) -> float:
    """Clamp small readings around zero to exactly zero."""
    if MIN_OFFSET_VALUE_AT_ZERO_WEIGHT < weight < MAX_OFFSET_VALUE_AT_ZERO_WEIGHT:
        return 0.0
    return float(weight)


class LoadCell:
    """The baler's load cell, its configuration and where that is stored."""

    def __init__(
        self, hx711: HX711, config: DeviceConfig, store: ConfigStore | None = None
    ) -> None:
        self.hx711 = hx711
        self.config = config
        self.store = store
        self.powered_up = False
        self.known_weight = 0.0

    def init(self) -> None:
        """Set up the amplifier pins and apply the stored scale and tare."""
        self.hx711.begin(int(Pin.LOADCELL_DOUT), int(Pin.LOADCELL_SCK))
        self.set_scale(self.config.load_cell_calib_factor)
        self.set_tare_offset(self.config.tare_offset)

    def weight_grams(self, readings: int = NUM_OF_READINGS) -> float:
        """Averaged weight in grams; 0 while no positive scale factor is set."""
        if self.hx711.scale > 0:
            weight = self.hx711.get_units(readings)
        else:
            weight = 0.0
        return round_off_weight(weight)

    def set_tare(self) -> None:
        """Zero the scale and persist the new offset."""
        self.hx711.tare()
        self.config.tare_offset = self.hx711.offset
        if self.store is not None:
            self.store.write(SpiffsParamType.TARE_OFFSET, self.config)
        logger.debug("tare set with offset %s", self.config.tare_offset)

    def calibrate(self, wait_for: Callable[[SerialCmd, str], Any]) -> float:
        """Walk the user through calibration and return the new scale factor.

        ``wait_for(cmd, prompt)`` shows ``prompt`` and blocks until the user
        answers; for ``SerialCmd.WEIGHT`` it returns the known weight in grams.
        Returns 0.0 when the amplifier is not present.
        """
        if not self.hx711.is_ready():
            logger.info("HX711 not found")
            return 0.0

        self.hx711.scale = 1.0
        wait_for(SerialCmd.OK, "Please remove any weights from the scale and enter 'ok'")
        self.hx711.tare()
        known = float(
            wait_for(SerialCmd.WEIGHT, "Tare done! Please enter a known weight in grams")
        )
        if not known > 0:
            raise ValueError("known weight must be a positive number of grams")
        self.known_weight = known

        wait_for(SerialCmd.OK, f"Place {known:.2f} grams weight on the scale and enter 'ok'")
        reading = int(self.hx711.get_units(NUM_OF_READINGS))
        factor = reading / known
        logger.info("calibration reading %s, factor %s", reading, factor)

        wait_for(SerialCmd.OK, "Please remove weights from scale and enter 'ok'")
        self.hx711.scale = factor
        self.set_tare()
        logger.info("calibration completed")
        return factor

    def power_up(self) -> None:
        self.hx711.power_up()
        self.powered_up = True

    def power_down(self) -> None:
        self.hx711.power_down()
        self.powered_up = False

    def set_scale(self, factor: float) -> None:
        self.hx711.scale = factor
        logger.debug("scale factor %s", factor)

    def set_tare_offset(self, offset: int) -> None:
        self.hx711.offset = offset
        logger.debug("tare offset %s", offset)