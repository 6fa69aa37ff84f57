"""Persistent JSON storage of the device configuration."""

from __future__ import annotations

import json
import logging
import math
from os import PathLike
from pathlib import Path
from typing import Any

from .common import DeviceConfig, MachineType, SpiffsParamType

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

KEY_MACHINE_TYPE = "machinetype"
KEY_CALIB_FACTOR = "loadcellcalib"
KEY_WRAP_COUNT = "wrapcount"
KEY_TARE_OFFSET = "tareoffset"

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class ConfigStoreError(Exception):
    """The configuration file could not be read, parsed or written."""


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value) if not isinstance(value, int) else value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _int_field(document: dict, key: str, low: int, high: int) -> int:
    """Integer value of ``key``, or 0 when missing or out of range."""
    value = _number(document.get(key))
    if value is None or (isinstance(value, float) and not math.isfinite(value)):
        return 0
    number = int(value)
    return number if low <= number <= high else 0


def _float_field(document: dict, key: str) -> float:
    value = _number(document.get(key))
    return 0.0 if value is None else float(value)


def _machine_type(number: int) -> int:
    try:
        return MachineType(number)
    except ValueError:
        return number


class ConfigStore:
    """Reads and updates the configuration document at ``path``."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)

    def _read_document(self) -> dict:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigStoreError(f"failed to open {self.path} for reading") from exc
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise ConfigStoreError(f"failed to parse {self.path}") from exc
        return document if isinstance(document, dict) else {}

    def setup(self, config: DeviceConfig) -> bool:
        """Load the stored configuration, or store the defaults if there is none.

        Returns whether the resulting machine type is a known one.
        """
        if self.path.exists():
            logger.debug("%s exists", self.path)
            try:
                self.load(config)
            except ConfigStoreError as exc:
                logger.warning("%s", exc)
        else:
            logger.debug("%s does not exist", self.path)
            try:
                self.write(SpiffsParamType.UPDATE_DEFAULT, config)
            except ConfigStoreError as exc:
                logger.warning("%s", exc)
        return config.machine_type in (MachineType.ASB, MachineType.MSB)

    def load(self, config: DeviceConfig) -> DeviceConfig:
        """Fill ``config`` from the stored document; missing keys read as 0."""
        document = self._read_document()
        config.machine_type = _machine_type(
            _int_field(document, KEY_MACHINE_TYPE, _INT32_MIN, _INT32_MAX)
        )
        config.load_cell_calib_factor = _float_field(document, KEY_CALIB_FACTOR)
        config.threshold_wrap_count = _int_field(document, KEY_WRAP_COUNT, 0, 255)
        config.tare_offset = _int_field(document, KEY_TARE_OFFSET, _INT32_MIN, _INT32_MAX)
        logger.debug(
            "read config: machinetype=%s loadcellcalib=%s wrapcount=%s tareoffset=%s",
            int(config.machine_type),
            config.load_cell_calib_factor,
            config.threshold_wrap_count,
            config.tare_offset,
        )
        return config

    def write(self, param: SpiffsParamType, config: DeviceConfig) -> dict:
        """Store the part of ``config`` selected by ``param``; return the document."""
        try:
            param = SpiffsParamType(param)
        except ValueError:
            param = SpiffsParamType.INVALID

        if param is SpiffsParamType.UPDATE_DEFAULT:
            document: dict = {}
        else:
            document = self._read_document()

        if param is SpiffsParamType.MACHINE_TYPE:
            document[KEY_MACHINE_TYPE] = int(config.machine_type)
        elif param is SpiffsParamType.CALIB_FACTOR:
            document[KEY_CALIB_FACTOR] = float(config.load_cell_calib_factor)
        elif param is SpiffsParamType.WRAP_COUNT:
            # A wrap-count update also records the tare offset.
            document[KEY_WRAP_COUNT] = int(config.threshold_wrap_count)
            document[KEY_TARE_OFFSET] = int(config.tare_offset)
        elif param is SpiffsParamType.TARE_OFFSET:
            document[KEY_TARE_OFFSET] = int(config.tare_offset)
        elif param is SpiffsParamType.UPDATE_DEFAULT:
            document[KEY_MACHINE_TYPE] = int(config.machine_type)
            document[KEY_CALIB_FACTOR] = float(config.load_cell_calib_factor)
            document[KEY_WRAP_COUNT] = int(config.threshold_wrap_count)
            document[KEY_TARE_OFFSET] = int(config.tare_offset)
        else:
            logger.info("invalid configuration parameter")

        text = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ConfigStoreError(f"failed to open {self.path} for writing") from exc
        logger.debug("configuration written to %s", self.path)
        return document