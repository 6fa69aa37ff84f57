"""Streaming NMEA 0183 sentence decoder."""

from __future__ import annotations

import time
from bisect import bisect_right
from typing import Callable

from .gps_fields import (
    MAX_FIELD_SIZE,
    Altitude,
    Course,
    CustomField,
    FixMode,
    FixQuality,
    GpsDate,
    GpsTime,
    Hdop,
    IntegerField,
    Location,
    Satellites,
    Speed,
)

_U32 = 0xFFFFFFFF

_GGA, _RMC, _GSA, _GSV, _GLL, _TXT, _OTHER = range(7)
SYSTEM_GPS, SYSTEM_GLONASS, SYSTEM_GALILEO, SYSTEM_BEIDOU = range(4)

_SENTENCE_TYPES = {
    "RMC": _RMC,
    "GGA": _GGA,
    "GSA": _GSA,
    "GSV": _GSV,
    "TXT": _TXT,
    "GLL": _GLL,
}
_SYSTEMS = {"L": SYSTEM_GLONASS, "A": SYSTEM_GALILEO, "B": SYSTEM_BEIDOU}

_TIME_TERMS = frozenset({(_RMC, 1), (_GGA, 1), (_GLL, 5)})
_VALIDITY_TERMS = frozenset({(_RMC, 2), (_GLL, 6)})
_LATITUDE_TERMS = frozenset({(_RMC, 3), (_GGA, 2), (_GLL, 1)})
_NORTH_SOUTH_TERMS = frozenset({(_RMC, 4), (_GGA, 3), (_GLL, 2)})
_LONGITUDE_TERMS = frozenset({(_RMC, 5), (_GGA, 4), (_GLL, 3)})
_EAST_WEST_TERMS = frozenset({(_RMC, 6), (_GGA, 5), (_GLL, 4)})
_HDOP_TERMS = frozenset({(_GGA, 8), (_GSA, 16)})
_GSV_ID_TERMS = frozenset({4, 8, 12, 16})
_GSV_SNR_TERMS = frozenset({7, 11, 15, 19})


def _millis() -> int:
    return (time.monotonic_ns() // 1_000_000) & _U32


def _from_hex(char: str) -> int:
    code = ord(char) if char else 0
    if "A" <= char <= "F" and char:
        return code - ord("A") + 10
    if "a" <= char <= "f" and char:
        return code - ord("a") + 10
    return code - ord("0")


def _fix_quality(char: str) -> FixQuality | int:
    number = ord(char) - ord("0")
    try:
        return FixQuality(number)
    except ValueError:
        return number


def _fix_mode(char: str) -> FixMode | str:
    try:
        return FixMode(char)
    except ValueError:
        return char


class NmeaParser:
    """Decodes NMEA sentences one character at a time."""

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _millis
        self.location = Location()
        self.date = GpsDate()
        self.time = GpsTime()
        self.speed = Speed()
        self.course = Course()
        self.altitude = Altitude()
        self.satellites = IntegerField()
        self.hdop = Hdop()
        self.satellites_stats = Satellites()

        self.chars_processed = 0
        self.sentences_with_fix = 0
        self.failed_checksum = 0
        self.passed_checksum = 0
        self.invalid_data = 0

        self._customs: list[CustomField] = []
        self._candidates: list[CustomField] = []
        self._parity = 0
        self._is_checksum_term = False
        self._term: list[str] = []
        self._sentence_type = _OTHER
        self._system = SYSTEM_GPS
        self._term_number = 0
        self._sentence_has_fix = False

    def add_custom(self, sentence_name: str, term_number: int) -> CustomField:
        """Track the raw text of term ``term_number`` of ``sentence_name`` sentences."""
        field = CustomField(sentence_name, term_number)
        keys = [(c.sentence_name, c.term_number) for c in self._customs]
        self._customs.insert(bisect_right(keys, (sentence_name, term_number)), field)
        return field

    def feed(self, data: str | bytes) -> int:
        """Encode every character of ``data``; return how many sentences validated."""
        return sum(1 for char in data if self.encode(char))

    def encode(self, char: str | int) -> bool:
        """Process one character; True when it completes a valid sentence."""
        if isinstance(char, int):
            char = chr(char & 0xFF)
        if len(char) != 1:
            raise ValueError("encode() takes a single character")
        self.chars_processed = (self.chars_processed + 1) & _U32

        if char in ",\r\n*":
            if char == ",":
                self._parity ^= ord(",")
            valid = self._end_of_term()
            self._term_number = (self._term_number + 1) & 0xFF
            self._term.clear()
            self._is_checksum_term = char == "*"
            return valid

        if char == "$":
            self._term_number = 0
            self._term.clear()
            self._parity = 0
            self._sentence_type = _OTHER
            self._system = SYSTEM_GPS
            self._is_checksum_term = False
            self._sentence_has_fix = False
            return False

        if len(self._term) < MAX_FIELD_SIZE - 1:
            self._term.append(char)
        if not self._is_checksum_term:
            self._parity ^= ord(char) & 0xFF
        return False

    def _parse_sentence_type(self, term: str) -> None:
        self._sentence_type = _OTHER
        self._system = SYSTEM_GPS
        if len(term) < 5 or term[0] != "G":
            return
        self._system = _SYSTEMS.get(term[1], SYSTEM_GPS)
        self._sentence_type = _SENTENCE_TYPES.get(term[2:], _OTHER)

    def _end_of_term(self) -> bool:
        term = "".join(self._term)
        if self._is_checksum_term:
            return self._check_sentence(term)

        if self._term_number == 0:
            self._parse_sentence_type(term)
            self._candidates = [c for c in self._customs if c.sentence_name == term]
            return False

        if self._sentence_type != _OTHER and term:
            self._handle_term(term)

        for custom in self._candidates:
            if custom.term_number > self._term_number:
                break
            if custom.term_number == self._term_number:
                custom.set(term)
        return False

    def _check_sentence(self, term: str) -> bool:
        checksum = (16 * _from_hex(term[:1]) + _from_hex(term[1:2])) & 0xFF
        if checksum != self._parity:
            self.failed_checksum += 1
            return False

        self.passed_checksum += 1
        if self._sentence_has_fix:
            self.sentences_with_fix += 1
        now = self._clock()
        kind = self._sentence_type
        if kind == _RMC:
            self._commit_rmc(now)
        elif kind == _GLL:
            self._commit_gll(now)
        elif kind == _GGA:
            self._commit_gga(now)
        elif kind == _GSV:
            self.satellites_stats.commit(now)
        elif kind == _GSA:
            if not self.satellites_stats.snr_data_present:
                self.satellites_stats.commit(now)
            self.hdop.commit(now)

        for custom in self._candidates:
            custom.commit(now)
        return True

    def _invalidate(self, *fields) -> None:
        for field in fields:
            field.valid = False
        self.invalid_data += 1

    def _commit_rmc(self, now: int) -> None:
        self.date.commit(now)
        self.time.commit(now)
        if self._sentence_has_fix and self.date.valid and self.time.valid:
            self.location.commit(now)
            self.speed.commit(now)
            self.course.commit(now)
            if not (self.location.valid and self.speed.valid and self.course.valid):
                self._invalidate(self.date, self.time, self.location, self.speed, self.course)

    def _commit_gll(self, now: int) -> None:
        self.date.commit(now)
        self.time.commit(now)
        if self._sentence_has_fix and self.date.valid and self.time.valid:
            self.location.commit(now)
            if not self.location.valid:
                self._invalidate(self.date, self.time, self.location)

    def _commit_gga(self, now: int) -> None:
        self.time.commit(now)
        self.satellites.commit(now)
        self.hdop.commit(now)
        if self._sentence_has_fix and self.time.valid:
            self.location.commit(now)
            self.altitude.commit(now)
            if not (
                self.satellites.valid
                and self.hdop.valid
                and self.location.valid
                and self.altitude.valid
            ):
                self._invalidate(
                    self.time, self.satellites, self.hdop, self.location, self.altitude
                )

    def _handle_term(self, term: str) -> None:
        kind, number = self._sentence_type, self._term_number
        key = (kind, number)
        if key in _TIME_TERMS:
            self.time.set_time(term)
        elif key in _VALIDITY_TERMS:
            self._sentence_has_fix = term[0] == "A"
        elif key in _LATITUDE_TERMS:
            self.location.set_latitude(term)
        elif key in _NORTH_SOUTH_TERMS:
            self.location.raw_new_lat.negative = term[0] == "S"
        elif key in _LONGITUDE_TERMS:
            self.location.set_longitude(term)
        elif key in _EAST_WEST_TERMS:
            self.location.raw_new_lng.negative = term[0] == "W"
        elif key == (_RMC, 7):
            self.speed.set(term)
        elif key == (_RMC, 8):
            self.course.set(term)
        elif key == (_RMC, 9):
            self.date.set_date(term)
        elif key == (_GGA, 6):
            self._sentence_has_fix = term[0] > "0"
            self.location.new_fix_quality = (
                _fix_quality(term[0]) if self._sentence_has_fix else FixQuality.INVALID
            )
        elif key == (_GGA, 7):
            self.satellites.set(term)
        elif key in _HDOP_TERMS:
            self.hdop.set(term)
        elif key == (_GGA, 9):
            self.altitude.set(term)
        elif key == (_RMC, 12):
            self.location.new_fix_mode = _fix_mode(term[0])
        elif kind == _GSV and number == 2:
            self.satellites_stats.set_message_seq_nr(term, self._system)
        elif kind == _GSV and number in _GSV_ID_TERMS:
            self.satellites_stats.set_sat_id(term)
        elif kind == _GSV and number in _GSV_SNR_TERMS:
            self.satellites_stats.set_sat_snr(term)

        # GSA lists satellite ids in sequence; use them only without GSV data.
        if kind == _GSA and not self.satellites_stats.snr_data_present and 3 <= number <= 14:
            self.satellites_stats.set_sat_id(term)