from functools import reduce

import pytest

from balerkit.gps_fields import FixMode, FixQuality, parse_degrees
from balerkit.nmea import NmeaParser

RMC_BODY = "GPRMC,045103.000,A,3014.1984,N,09749.2872,W,0.67,161.46,150624,,,A"
GGA_BODY = "GPGGA,045104.000,3014.1985,N,09749.2873,W,1,09,1.2,211.6,M,-22.5,M,,0000"


def checksum(body):
    return reduce(lambda acc, ch: acc ^ ord(ch), body, 0)


def sentence(body, wrong=False):
    value = checksum(body) ^ (1 if wrong else 0)
    return f"${body}*{value:02X}\r\n"


class Clock:
    def __init__(self, now=1000):
        self.now = now

    def __call__(self):
        return self.now


def test_rmc_returns_true_once_at_end_of_checksum():
    parser = NmeaParser(Clock())
    text = sentence(RMC_BODY)
    results = [parser.encode(ch) for ch in text]
    assert results.count(True) == 1
    assert results.index(True) == text.index("\r")
    assert parser.passed_checksum == 1
    assert parser.failed_checksum == 0
    assert parser.chars_processed == len(text)


def test_rmc_location_and_signs():
    parser = NmeaParser(Clock())
    parser.feed(sentence(RMC_BODY))
    assert parser.location.valid
    assert parser.location.lat() == pytest.approx(parse_degrees("3014.1984").value())
    assert parser.location.lng() == pytest.approx(-parse_degrees("09749.2872").value())
    assert parser.location.fix_mode == FixMode.AUTONOMOUS
    assert parser.sentences_with_fix == 1


def test_rmc_time_date_speed_course():
    parser = NmeaParser(Clock())
    parser.feed(sentence(RMC_BODY))
    assert (parser.time.hour(), parser.time.minute(), parser.time.second()) == (4, 51, 3)
    assert (parser.date.day(), parser.date.month(), parser.date.year()) == (15, 6, 2024)
    assert parser.speed.knots() == pytest.approx(0.67)
    assert parser.course.deg() == pytest.approx(161.46)


def test_bad_checksum_commits_nothing():
    parser = NmeaParser(Clock())
    assert parser.feed(sentence(RMC_BODY, wrong=True)) == 0
    assert parser.failed_checksum == 1
    assert parser.passed_checksum == 0
    assert not parser.location.valid


def test_no_fix_leaves_location_invalid():
    parser = NmeaParser(Clock())
    parser.feed(sentence(RMC_BODY.replace(",A,3014", ",V,3014")))
    assert parser.passed_checksum == 1
    assert parser.sentences_with_fix == 0
    assert not parser.location.valid
    assert parser.time.valid


def test_gga_fields():
    parser = NmeaParser(Clock())
    assert parser.feed(sentence(GGA_BODY).encode("ascii")) == 1
    assert parser.satellites.value() == 9
    assert parser.hdop.hdop() == pytest.approx(1.2)
    assert parser.altitude.meters() == pytest.approx(211.6)
    assert parser.location.fix_quality == FixQuality.GPS
    assert parser.location.valid


def test_feed_counts_sentences():
    parser = NmeaParser(Clock())
    assert parser.feed(sentence(RMC_BODY) + sentence(GGA_BODY)) == 2
    assert parser.passed_checksum == 2


def test_location_age_uses_clock():
    clock = Clock(1000)
    parser = NmeaParser(clock)
    parser.feed(sentence(RMC_BODY))
    assert parser.location.age(1500) == 500


def test_gsv_satellite_statistics():
    parser = NmeaParser(Clock())
    parser.feed(sentence("GPGSV,1,1,02,10,45,120,30,12,30,200,00"))
    stats = parser.satellites_stats
    assert stats.sats_visible == 2
    assert stats.sats_tracked == 1
    assert stats.best_snr == 30
    assert stats.id[:2] == [10, 12]


def test_glonass_gsv_uses_second_block():
    parser = NmeaParser(Clock())
    parser.feed(sentence("GLGSV,1,1,01,10,45,120,30"))
    assert parser.satellites_stats.id[16] == 10
    assert parser.satellites_stats.id[0] == 0


def test_gsa_sets_ids_and_hdop():
    parser = NmeaParser(Clock())
    body = ",".join(["GPGSA", "A", "3", "04", "05", "09"] + [""] * 9 + ["2.5", "1.3", "2.1"])
    parser.feed(sentence(body))
    assert parser.satellites_stats.id[:3] == [4, 5, 9]
    assert parser.satellites_stats.sats_visible == 3
    assert parser.hdop.hdop() == pytest.approx(1.3)


def test_custom_fields():
    parser = NmeaParser(Clock())
    status = parser.add_custom("GPRMC", 2)
    mode = parser.add_custom("GPRMC", 12)
    other = parser.add_custom("GPGGA", 7)
    parser.feed(sentence(RMC_BODY))
    assert status.value() == "A"
    assert mode.value() == "A"
    assert status.valid and mode.valid
    assert not other.valid
    assert other.value() == ""


def test_encode_rejects_strings():
    with pytest.raises(ValueError):
        NmeaParser(Clock()).encode("ab")