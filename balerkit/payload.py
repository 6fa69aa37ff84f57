"""Building the checksummed sentences sent to the host over serial."""

from __future__ import annotations

import math
import operator
import struct
from functools import reduce
from typing import TextIO

from .common import (
    COMMA_SEPARATOR,
    DATA_VALID,
    DEGREES,
    GRAMS,
    MOISTURE_LEVEL_PERCENT,
    PAYLOAD_ASTERISK,
    PAYLOAD_BEGIN,
    PAYLOAD_BEGIN_HDR_ANL,
    PAYLOAD_BEGIN_HDR_ATTR,
    PAYLOAD_END,
    BalerPayload,
    DevDataType,
    DeviceConfig,
)


def _float32(value: float) -> float:
    """Round a value to single precision, as the device stores it."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _fixed(value: float, places: int) -> str:
    return f"{value:.{places}f}"


def payload_checksum(text: str) -> int:
    """XOR of the bytes between the first '$' and the first '*'."""
    data = text.encode("utf-8")
    start = data.find(PAYLOAD_BEGIN.encode()) + 1
    end = data.find(PAYLOAD_ASTERISK.encode())
    if end < 0:
        end = len(data)
    if start > end:
        start, end = end, start
    return reduce(operator.xor, data[start:end], 0)


def _finish(body: str) -> str:
    body += DATA_VALID + PAYLOAD_ASTERISK
    return body + format(payload_checksum(body), "x") + PAYLOAD_END


def _join(fields: list[str]) -> str:
    return COMMA_SEPARATOR.join(fields) + COMMA_SEPARATOR


def attributes_sentence(config: DeviceConfig) -> str:
    """Sentence reporting the device attributes."""
    fields = [
        PAYLOAD_BEGIN + PAYLOAD_BEGIN_HDR_ATTR,
        str(int(config.machine_type)),
        _fixed(_float32(config.load_cell_calib_factor), 2),
        str(int(config.threshold_wrap_count)),
        str(int(config.tare_offset)),
    ]
    return _finish(_join(fields))


def analytics_sentence(payload: BalerPayload) -> str:
    """Sentence reporting the bale analytics."""
    fields = [
        PAYLOAD_BEGIN + PAYLOAD_BEGIN_HDR_ANL,
        _fixed(_float32(payload.curr_bale_weight_grams), 2),
        GRAMS,
        str(int(payload.curr_bale_wrap_count)),
        str(int(payload.total_bale_count)),
        _fixed(_float32(payload.total_bale_weight_grams), 2),
        GRAMS,
        _fixed(_float32(payload.moisture_level), 2),
        MOISTURE_LEVEL_PERCENT,
        _fixed(payload.latitude, 6),
        DEGREES,
        _fixed(payload.longitude, 6),
        DEGREES,
        str(int(bool(payload.gps_heartbeat))),
    ]
    return _finish(_join(fields))


def build_sentence(
    data_type: DevDataType, config: DeviceConfig, payload: BalerPayload
) -> str:
    """Sentence for the given kind of data; unknown kinds carry no fields."""
    if data_type == DevDataType.ATTRIBUTES:
        return attributes_sentence(config)
    if data_type == DevDataType.ANALYTICS:
        return analytics_sentence(payload)
    return _finish("")


def transmit_payload(
    stream: TextIO,
    data_type: DevDataType,
    config: DeviceConfig,
    payload: BalerPayload,
) -> str:
    """Write the sentence for ``data_type`` to ``stream`` and return it."""
    sentence = build_sentence(data_type, config, payload)
    stream.write(sentence)
    return sentence