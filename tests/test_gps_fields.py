import math
from datetime import date

import pytest

from balerkit.gps_fields import (
    INVALID_AGE,
    INVALID_DEGREES,
    MAX_ARRAY_LENGTH,
    MPH_PER_KNOT,
    ROLLOVER_DAYS,
    Altitude,
    Course,
    CustomField,
    DecimalField,
    FixMode,
    GpsDate,
    GpsTime,
    Hdop,
    IntegerField,
    Location,
    Satellites,
    Speed,
    cardinal,
    course_to,
    distance_between,
    parse_decimal,
    parse_degrees,
)


@pytest.mark.parametrize(
    "term, expected",
    [("123.45", 12345), ("-1.5", -150), ("7", 700), ("abc", 0), ("12.", 1200)],
)
def test_parse_decimal(term, expected):
    assert parse_decimal(term) == expected


def test_parse_degrees_worked_example():
    raw = parse_degrees("4807.038")
    assert raw.deg == 48
    assert raw.value() == pytest.approx(48 + 7.038 / 60, abs=1e-8)
    assert raw.negative is False


@pytest.mark.parametrize("term", ["N", "4807", "", "-12.5"])
def test_parse_degrees_invalid(term):
    assert parse_degrees(term) is None


def test_location_commit_and_sign():
    loc = Location()
    loc.set_latitude("4807.038")
    loc.raw_new_lat.negative = True
    loc.set_longitude("01131.000")
    loc.commit(1000)
    assert loc.valid and loc.updated
    assert loc.lat() == pytest.approx(-(48 + 7.038 / 60), abs=1e-8)
    assert loc.lng() == pytest.approx(11 + 31 / 60, abs=1e-8)
    assert loc.updated is False
    assert loc.age(1500) == 500


def test_location_invalid_term_marks_invalid():
    loc = Location()
    loc.set_latitude("bad")
    loc.set_longitude("01131.000")
    loc.commit(0)
    assert loc.raw_lat.deg == INVALID_DEGREES
    assert loc.valid is False
    assert loc.age(10) == INVALID_AGE


def test_location_keeps_fix_mode_default():
    loc = Location()
    loc.commit(0)
    assert loc.fix_mode is FixMode.NONE


def test_satellites_commit_counts():
    sats = Satellites()
    sats.set_message_seq_nr("1", 0)
    assert sats.pos == -1
    sats.set_sat_id("12")
    sats.set_sat_snr("40")
    sats.set_sat_id("5")
    sats.commit(0)
    assert sats.sats_visible == 2
    assert sats.sats_tracked == 1
    assert sats.best_snr == 40
    assert sats.snr_data_present
    assert sats.pos == -1


def test_satellites_sequence_for_second_system():
    sats = Satellites()
    sats.set_message_seq_nr("2", 1)
    assert sats.pos == 4 + 16 - 1
    sats.set_message_seq_nr("99", 0)
    assert sats.pos == 19


def test_satellites_never_overflow():
    sats = Satellites()
    for n in range(MAX_ARRAY_LENGTH + 5):
        sats.set_sat_id(str(n + 1))
    assert sats.pos == MAX_ARRAY_LENGTH - 1
    assert len(sats.id) == MAX_ARRAY_LENGTH


def test_date_commit():
    d = GpsDate()
    d.set_date("230394")
    d.commit(5)
    assert d.valid
    assert (d.day(), d.month(), d.year()) == (23, 3, 2094)


@pytest.mark.parametrize("term", ["320194", "011394", "000194"])
def test_date_invalid_keeps_old(term):
    d = GpsDate()
    d.set_date(term)
    d.commit(0)
    assert d.valid is False
    assert d.value() == 0


def test_time_commit():
    t = GpsTime()
    t.set_time("123519.50")
    t.commit(0)
    assert t.valid
    assert (t.hour(), t.minute(), t.second(), t.centisecond()) == (12, 35, 19, 50)


def test_time_invalid_keeps_old():
    t = GpsTime()
    t.set_time("123519")
    t.commit(0)
    t.set_time("256000")
    t.commit(1)
    assert t.valid is False
    assert t.hour() == 12


def test_speed_conversions():
    speed = Speed()
    speed.set("022.4")
    speed.commit(0)
    assert speed.knots() == pytest.approx(22.4)
    assert speed.mph() / speed.knots() == pytest.approx(MPH_PER_KNOT)


def test_course_altitude_hdop():
    course, alt, hdop = Course(), Altitude(), Hdop()
    course.set("084.4")
    alt.set("545.4")
    hdop.set("0.9")
    for field in (course, alt, hdop):
        field.commit(0)
    assert course.deg() == pytest.approx(84.4)
    assert alt.meters() == pytest.approx(545.4)
    assert alt.kilometers() == pytest.approx(0.5454)
    assert hdop.hdop() == pytest.approx(0.9)


def test_decimal_and_integer_fields():
    dec, num = DecimalField(), IntegerField()
    dec.set("-3.25")
    num.set("08")
    assert dec.value() == 0
    dec.commit(0)
    num.commit(0)
    assert dec.value() == -325
    assert num.value() == 8
    assert num.updated is False


def test_custom_field():
    field = CustomField("GPRMC", 3)
    field.set("hello")
    assert field.value() == ""
    field.commit(7)
    assert field.updated
    assert field.value() == "hello"
    assert field.updated is False
    assert field.age(10) == 3


def test_distance_between():
    assert distance_between(10.0, 20.0, 10.0, 20.0) == pytest.approx(0.0, abs=1e-6)
    d1 = distance_between(0.0, 0.0, 0.0, 1.0)
    assert d1 == pytest.approx(math.radians(1) * 6371009)
    assert distance_between(0.0, 1.0, 0.0, 0.0) == pytest.approx(d1)


def test_course_to():
    assert course_to(0.0, 0.0, 1.0, 0.0) == pytest.approx(0.0, abs=1e-9)
    assert course_to(0.0, 0.0, 0.0, 1.0) == pytest.approx(90.0)
    assert course_to(0.0, 0.0, 0.0, -1.0) == pytest.approx(270.0)


@pytest.mark.parametrize(
    "course, name", [(0.0, "N"), (90.0, "E"), (180.0, "S"), (359.0, "N"), (45.0, "NE")]
)
def test_cardinal(course, name):
    assert cardinal(course) == name