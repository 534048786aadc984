"""Tests for tokens.py – time, day, room and course code helpers."""
import pytest

from schedule_visualizer.tokens import (
    clean_code,
    find_department_codes,
    is_day,
    is_room,
    is_time,
    normalize_time,
    parse_day_string,
    parse_time_range,
)


# ── Time ───────────────────────────────────────────────────────

class TestNormalizeTime:
    def test_pm(self):
        assert normalize_time("2:00 PM") == "14:00"
        assert normalize_time("02:30PM") == "14:30"

    def test_midnight_and_noon(self):
        assert normalize_time("12:00 AM") == "00:00"
        assert normalize_time("12:00 PM") == "12:00"
        assert normalize_time("12:30 am") == "00:30"

    def test_am(self):
        assert normalize_time("08:00AM") == "08:00"
        assert normalize_time("8:00 AM") == "08:00"

    def test_without_period(self):
        assert normalize_time("8:30") == "08:30"
        assert normalize_time("14:00") == "14:00"

    def test_hour_only(self):
        assert normalize_time("2 PM") == "14:00"

    def test_unrecognized(self):
        assert normalize_time("") == ""
        assert normalize_time(" noon ") == "NOON"

    @pytest.mark.parametrize("raw", ["2:00 PM", "12:00 AM", "9:15am", "11:45 PM", "07:30"])
    def test_idempotent(self, raw):
        once = normalize_time(raw)
        assert normalize_time(once) == once


class TestParseTimeRange:
    def test_hyphen(self):
        assert parse_time_range("08:00 AM - 10:00 AM") == ("08:00", "10:00")

    def test_dashes(self):
        assert parse_time_range("01:00 PM – 02:30 PM") == ("13:00", "14:30")
        assert parse_time_range("01:00PM—02:30PM") == ("13:00", "14:30")

    def test_missing(self):
        assert parse_time_range("08:00 AM") is None
        assert parse_time_range("") is None


def test_is_time():
    assert is_time("TH 08:00 AM - 10:00 AM,")
    assert is_time("9:00pm")
    assert not is_time("14:00")
    assert not is_time("")


# ── Days ───────────────────────────────────────────────────────

class TestParseDayString:
    def test_compound(self):
        assert parse_day_string("THS") == ["TH", "S"]
        assert parse_day_string("TTH") == ["T", "TH"]
        assert parse_day_string("MTWTHF") == ["M", "T", "W", "TH", "F"]
        assert parse_day_string("MWF") == ["M", "W", "F"]

    def test_decomposed(self):
        assert parse_day_string("MTH") == ["M", "TH"]
        assert parse_day_string("TTHS") == ["T", "TH", "S"]
        assert parse_day_string("SUS") == ["SU", "S"]

    def test_case_and_spacing(self):
        assert parse_day_string(" th ") == ["TH"]

    def test_no_repeats(self):
        assert parse_day_string("MM") == ["M"]

    def test_not_days(self):
        assert parse_day_string("123") == []
        assert parse_day_string("") == []


class TestIsDay:
    def test_days(self):
        assert is_day("TH")
        assert is_day("MWF")
        assert is_day("ths")
        assert is_day("MTH")

    def test_not_days(self):
        assert not is_day("12")
        assert not is_day("N")
        assert not is_day("Y")
        assert not is_day("IT101")
        assert not is_day("")


# ── Rooms / codes ──────────────────────────────────────────────

def test_is_room():
    assert is_room("NGE101")
    assert is_room("Online")
    assert is_room("CASEROOM")
    assert is_room("GLE202 LAB")
    assert not is_room("3")
    assert not is_room("CCS")
    assert not is_room("")


def test_clean_code():
    assert clean_code("cs 101") == "CS101"
    assert clean_code("IT332") == "IT332"


def test_find_department_codes():
    text = "Enrolled: MATH 101, it102 and CS101A, again MATH101; XYZ123 is not one"
    assert find_department_codes(text) == ["MATH101", "IT102", "CS101A"]
    assert find_department_codes("") == []
