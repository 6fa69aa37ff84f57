"""Values decoded from NMEA sentences, and the number parsing they rely on."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date as _date
from datetime import timedelta
from enum import Enum, IntEnum

MPH_PER_KNOT = 1.15077945
MPS_PER_KNOT = 0.51444444
KMPH_PER_KNOT = 1.852
MILES_PER_METER = 0.00062137112
KM_PER_METER = 0.001
FEET_PER_METER = 3.2808399
MAX_FIELD_SIZE = 15
MAX_NR_ACTIVE_SATELLITES = 16
MAX_NR_SYSTEMS = 2
MAX_ARRAY_LENGTH = MAX_NR_ACTIVE_SATELLITES * MAX_NR_SYSTEMS

EARTH_RADIUS_M = 6371009
INVALID_AGE = 0xFFFFFFFF
INVALID_DEGREES = 181
ROLLOVER_DAYS = 7 * 1024

_U32 = 0xFFFFFFFF
_CARDINAL_DIRECTIONS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def _int32(value: int) -> int:
    value &= _U32
    return value - (1 << 32) if value & 0x80000000 else value


def _leading_digits(text: str) -> str:
    end = 0
    while end < len(text) and text[end].isdigit() and text[end].isascii():
        end += 1
    return text[:end]


def _atol(term: str) -> int:
    """Leading integer of ``term`` the way C's atol reads it; 0 if there is none."""
    text = term.lstrip(" \t\n\r\f\v")
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = _leading_digits(text)
    return sign * int(digits) if digits else 0


def _is_digit(char: str) -> bool:
    return len(char) == 1 and char.isascii() and char.isdigit()


def parse_decimal(term: str) -> int:
    """Parse a possibly negative number with up to two decimals, in hundredths."""
    negative = term.startswith("-")
    if negative:
        term = term[1:]
    result = _int32(100 * _atol(term))
    rest = term[len(_leading_digits(term)):]
    if rest[:1] == "." and _is_digit(rest[1:2]):
        result += 10 * int(rest[1])
        if _is_digit(rest[2:3]):
            result += int(rest[2])
    return _int32(-result if negative else result)


@dataclass
class RawDegrees:
    """Whole degrees plus billionths of a degree, with a sign flag."""

    deg: int = 0
    billionths: int = 0
    negative: bool = False

    def value(self) -> float:
        result = self.deg + self.billionths / 1_000_000_000.0
        return -result if self.negative else result


def parse_degrees(term: str) -> RawDegrees | None:
    """Parse NMEA ``DDMM.MMMM`` degrees; None when the term is malformed."""
    if not term or not (_is_digit(term[0]) or term[0] == "."):
        return None
    left_of_decimal = _atol(term) & _U32
    rest = term[len(_leading_digits(term)):]
    if rest[:1] != ".":
        return None
    minutes = left_of_decimal % 100
    multiplier = 10_000_000
    ten_millionths = (minutes * multiplier) & _U32
    for char in _leading_digits(rest[1:]):
        multiplier //= 10
        ten_millionths = (ten_millionths + int(char) * multiplier) & _U32
    billionths = (((5 * ten_millionths) & _U32) + 1) // 3
    return RawDegrees(deg=(left_of_decimal // 100) & 0xFFFF, billionths=billionths)


def distance_between(lat1: float, long1: float, lat2: float, long2: float) -> float:
    """Great-circle distance in metres between two positions."""
    delta = math.radians(long1 - long2)
    sdlong = math.sin(delta)
    cdlong = math.cos(delta)
    lat1 = math.radians(lat1)
    lat2 = math.radians(lat2)
    slat1, clat1 = math.sin(lat1), math.cos(lat1)
    slat2, clat2 = math.sin(lat2), math.cos(lat2)
    delta = (clat1 * slat2) - (slat1 * clat2 * cdlong)
    delta = math.sqrt(delta * delta + (clat2 * sdlong) ** 2)
    denom = (slat1 * slat2) + (clat1 * clat2 * cdlong)
    return math.atan2(delta, denom) * EARTH_RADIUS_M


def course_to(lat1: float, long1: float, lat2: float, long2: float) -> float:
    """Initial course in degrees (north 0, east 90) from position 1 to position 2."""
    dlon = math.radians(long2 - long1)
    lat1 = math.radians(lat1)
    lat2 = math.radians(lat2)
    a1 = math.sin(dlon) * math.cos(lat2)
    a2 = math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    a2 = math.cos(lat1) * math.sin(lat2) - a2
    angle = math.atan2(a1, a2)
    if angle < 0.0:
        angle += 2 * math.pi
    return math.degrees(angle)


def cardinal(course: float) -> str:
    """Sixteen-point compass name of a course in degrees."""
    return _CARDINAL_DIRECTIONS[int((course + 11.25) / 22.5) % 16]


class FixQuality(IntEnum):
    """GGA fix quality indicator."""

    INVALID = 0
    GPS = 1
    DGPS = 2
    PPS = 3
    RTK = 4
    FLOAT_RTK = 5
    ESTIMATED = 6
    MANUAL = 7
    SIMULATED = 8


class FixMode(str, Enum):
    """RMC positioning mode indicator."""

    NONE = "N"
    AUTONOMOUS = "A"
    DIFFERENTIAL = "D"
    DEAD_RECKONING = "E"


class _Field:
    """Validity, update flag and commit time shared by every decoded value."""

    def __init__(self) -> None:
        self.valid = False
        self.updated = False
        self.last_commit_time = 0

    def age(self, now: int) -> int:
        """Milliseconds since the last commit, or INVALID_AGE if never valid."""
        if not self.valid:
            return INVALID_AGE
        return (now - self.last_commit_time) & _U32

    def _mark_committed(self, now: int) -> None:
        self.last_commit_time = now
        self.valid = True
        self.updated = True


class Location(_Field):
    """Latitude and longitude with fix quality and mode."""

    def __init__(self) -> None:
        super().__init__()
        self.raw_lat = RawDegrees()
        self.raw_lng = RawDegrees()
        self.raw_new_lat = RawDegrees()
        self.raw_new_lng = RawDegrees()
        self.fix_quality = FixQuality.INVALID
        self.new_fix_quality = FixQuality.INVALID
        self.fix_mode = FixMode.NONE
        self.new_fix_mode = FixMode.NONE

    @staticmethod
    def _parsed(term: str, previous: RawDegrees) -> RawDegrees:
        parsed = parse_degrees(term)
        if parsed is None:
            return replace(previous, deg=INVALID_DEGREES)
        return parsed

    def set_latitude(self, term: str) -> None:
        self.raw_new_lat = self._parsed(term, self.raw_new_lat)

    def set_longitude(self, term: str) -> None:
        self.raw_new_lng = self._parsed(term, self.raw_new_lng)

    def commit(self, now: int) -> None:
        self.raw_lat = replace(self.raw_new_lat)
        self.raw_lng = replace(self.raw_new_lng)
        self.fix_quality = self.new_fix_quality
        self.fix_mode = self.new_fix_mode
        self.last_commit_time = now
        self.updated = True
        self.valid = self.raw_new_lat.deg <= 90 and self.raw_new_lng.deg <= 180

    def lat(self) -> float:
        self.updated = False
        return self.raw_lat.value()

    def lng(self) -> float:
        self.updated = False
        return self.raw_lng.value()

    def age(self, now: int) -> int:
        """Milliseconds since the position was last committed, or INVALID_AGE."""
        if not self.valid:
            return INVALID_AGE
        return (now - self.last_commit_time) & _U32


class Satellites(_Field):
    """Satellite ids and signal-to-noise ratios gathered from GSV/GSA sentences."""

    def __init__(self) -> None:
        super().__init__()
        self.id = [0] * MAX_ARRAY_LENGTH
        self.snr = [0] * MAX_ARRAY_LENGTH
        self.pos = -1
        self.best_snr = 0
        self.sats_tracked = 0
        self.sats_visible = 0
        self.snr_data_present = False

    def commit(self, now: int) -> None:
        visible = [snr for sat_id, snr in zip(self.id, self.snr) if sat_id != 0]
        tracked = [snr for snr in visible if snr != 0]
        self.sats_visible = len(visible)
        self.sats_tracked = len(tracked)
        self.best_snr = max(tracked, default=0)
        self.pos = -1
        self._mark_committed(now)

    def set_sat_id(self, term: str) -> None:
        if self.pos + 1 < MAX_ARRAY_LENGTH:
            self.pos += 1
            value = _atol(term) & _U32
            if self.id[self.pos] != value:
                self.id[self.pos] = value & 0xFF
                self.snr[self.pos] = 0

    def set_sat_snr(self, term: str) -> None:
        if 0 <= self.pos < MAX_ARRAY_LENGTH:
            self.snr[self.pos] = _atol(term) & 0xFF
            self.snr_data_present = True

    def set_message_seq_nr(self, term: str, system: int) -> None:
        new_pos = (_int32(_atol(term)) - 1) * 4 + system * MAX_NR_ACTIVE_SATELLITES
        if 0 <= new_pos < MAX_ARRAY_LENGTH:
            for index in range(new_pos, min(new_pos + 4, MAX_ARRAY_LENGTH)):
                self.id[index] = 0
                self.snr[index] = 0
            self.pos = new_pos - 1


class GpsDate(_Field):
    """Date as the DDMMYY number carried in RMC sentences."""

    def __init__(self) -> None:
        super().__init__()
        self.date = 0
        self.new_date = 0

    def set_date(self, term: str) -> None:
        self.new_date = _atol(term) & _U32

    def value(self) -> int:
        self.updated = False
        return self.date

    def year(self) -> int:
        self.updated = False
        return self.date % 100 + 2000

    def month(self) -> int:
        self.updated = False
        return (self.date // 100) % 100

    def day(self) -> int:
        self.updated = False
        return (self.date // 10000) & 0xFF

    def commit(self, now: int) -> None:
        old_date = self.date
        self.date = self.new_date
        self.valid = False
        day = self.day()
        if day > 31 or day == 0:
            self.date = old_date
            return
        month = self.month()
        if month > 12 or month == 0:
            self.date = old_date
            return
        year = self.year()
        if year < 2021:
            # Old receivers miss the 1024-week rollover; move the date forward.
            shifted = _date(year, month, 1) + timedelta(days=day - 1 + ROLLOVER_DAYS)
            self.date = (shifted.year - 1900) + shifted.month * 100 + shifted.day * 10000
        self._mark_committed(now)


class GpsTime(_Field):
    """Time of day as the HHMMSSCC number, in centiseconds."""

    def __init__(self) -> None:
        super().__init__()
        self.time = 0
        self.new_time = 0

    def set_time(self, term: str) -> None:
        self.new_time = parse_decimal(term) & _U32

    def value(self) -> int:
        self.updated = False
        return self.time

    def hour(self) -> int:
        self.updated = False
        return (self.time // 1_000_000) & 0xFF

    def minute(self) -> int:
        self.updated = False
        return (self.time // 10_000) % 100

    def second(self) -> int:
        self.updated = False
        return (self.time // 100) % 100

    def centisecond(self) -> int:
        self.updated = False
        return self.time % 100

    def commit(self, now: int) -> None:
        old_time = self.time
        self.time = self.new_time
        if self.second() > 60 or self.minute() > 59 or self.hour() > 23:
            self.valid = False
            self.time = old_time
            return
        self._mark_committed(now)


class DecimalField(_Field):
    """A value held in hundredths."""

    def __init__(self) -> None:
        super().__init__()
        self.val = 0
        self.new_val = 0

    def set(self, term: str) -> None:
        self.new_val = parse_decimal(term)

    def commit(self, now: int) -> None:
        self.val = self.new_val
        self._mark_committed(now)

    def value(self) -> int:
        self.updated = False
        return self.val


class IntegerField(_Field):
    """An unsigned whole-number value."""

    def __init__(self) -> None:
        super().__init__()
        self.val = 0
        self.new_val = 0

    def set(self, term: str) -> None:
        self.new_val = _atol(term) & _U32

    def commit(self, now: int) -> None:
        self.val = self.new_val
        self._mark_committed(now)

    def value(self) -> int:
        self.updated = False
        return self.val


class Speed(DecimalField):
    """Speed over ground, stored in hundredths of a knot."""

    def knots(self) -> float:
        return self.value() / 100.0

    def mph(self) -> float:
        return MPH_PER_KNOT * self.value() / 100.0

    def mps(self) -> float:
        return MPS_PER_KNOT * self.value() / 100.0

    def kmph(self) -> float:
        return KMPH_PER_KNOT * self.value() / 100.0


class Course(DecimalField):
    """Course over ground, stored in hundredths of a degree."""

    def deg(self) -> float:
        return self.value() / 100.0


class Altitude(DecimalField):
    """Altitude, stored in centimetres."""

    def meters(self) -> float:
        return self.value() / 100.0

    def miles(self) -> float:
        return MILES_PER_METER * self.value() / 100.0

    def kilometers(self) -> float:
        return KM_PER_METER * self.value() / 100.0

    def feet(self) -> float:
        return FEET_PER_METER * self.value() / 100.0


class Hdop(DecimalField):
    """Horizontal dilution of precision, stored in hundredths."""

    def hdop(self) -> float:
        return self.value() / 100.0


class CustomField(_Field):
    """Raw text of one term of a named sentence type."""

    def __init__(self, sentence_name: str, term_number: int) -> None:
        super().__init__()
        self.sentence_name = sentence_name
        self.term_number = term_number
        self.staging = ""
        self.buffer = ""

    def set(self, term: str) -> None:
        self.staging = term[: MAX_FIELD_SIZE + 1]

    def commit(self, now: int) -> None:
        self.buffer = self.staging
        self._mark_committed(now)

    def value(self) -> str:
        self.updated = False
        return self.buffer