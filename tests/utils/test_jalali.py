"""Tests for Jalali/Gregorian conversion."""

from datetime import date, datetime, timedelta, timezone

import pytest

from taskboard_cli.exceptions import ParseError
from taskboard_cli.utils import jalali
from taskboard_cli.utils.jalali import (
    alternate_to_canonical,
    canonical_to_alternate,
    gregorian_to_jalali,
    is_jalali_leap_year,
    is_valid_jalali_date,
    jalali_month_length,
    jalali_to_gregorian,
    normalize_to_day_start,
)

KNOWN_DATES = [
    ((1403, 1, 1), date(2024, 3, 20)),
    ((1404, 1, 1), date(2025, 3, 21)),
    ((1400, 1, 1), date(2021, 3, 21)),
    ((1403, 7, 1), date(2024, 9, 22)),
    ((1403, 6, 31), date(2024, 9, 21)),
    ((1357, 11, 22), date(1979, 2, 11)),
    ((1378, 10, 11), date(2000, 1, 1)),
    ((1402, 12, 29), date(2024, 3, 19)),
    ((1403, 12, 30), date(2025, 3, 20)),
    ((1399, 12, 30), date(2021, 3, 20)),
]


@pytest.mark.parametrize("jalali_date,gregorian", KNOWN_DATES)
def test_jalali_to_gregorian(jalali_date, gregorian):
    assert jalali_to_gregorian(*jalali_date) == gregorian


@pytest.mark.parametrize("jalali_date,gregorian", KNOWN_DATES)
def test_gregorian_to_jalali(jalali_date, gregorian):
    assert gregorian_to_jalali(gregorian) == jalali_date


def test_gregorian_to_jalali_accepts_datetime():
    assert gregorian_to_jalali(datetime(2024, 3, 20, 23, 59)) == (1403, 1, 1)


@pytest.mark.parametrize("year", [1399, 1403, 1408])
def test_leap_years(year):
    assert is_jalali_leap_year(year) is True
    assert jalali_month_length(year, 12) == 30


@pytest.mark.parametrize("year", [1400, 1401, 1402, 1404, 1407])
def test_common_years(year):
    assert is_jalali_leap_year(year) is False
    assert jalali_month_length(year, 12) == 29


def test_month_lengths():
    assert [jalali_month_length(1402, m) for m in range(1, 13)] == [31] * 6 + [30] * 5 + [29]


@pytest.mark.parametrize(
    "jy,jm,jd",
    [(1402, 12, 30), (1403, 7, 31), (1403, 13, 1), (1403, 0, 10), (1403, 1, 0), (5000, 1, 1)],
)
def test_invalid_dates_rejected(jy, jm, jd):
    assert is_valid_jalali_date(jy, jm, jd) is False
    with pytest.raises(ParseError):
        jalali_to_gregorian(jy, jm, jd)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        jalali_to_gregorian(1402, 12, 30)


def test_round_trip_over_three_decades():
    day = date(2000, 1, 1)
    end = date(2030, 12, 31)
    previous = None
    while day <= end:
        converted = gregorian_to_jalali(day)
        assert jalali_to_gregorian(*converted) == day
        if previous is not None:
            assert converted > previous
        previous = converted
        day += timedelta(days=1)


class TestAlternateToCanonical:
    @pytest.mark.parametrize("text", ["1403/01/01", "1403/1/01", "1403/01/1", "1403/1/1"])
    def test_accepted_patterns(self, text):
        assert alternate_to_canonical(text) == datetime(2024, 3, 20)

    def test_surrounding_whitespace(self):
        assert alternate_to_canonical(" 1403/07/01 ") == datetime(2024, 9, 22)

    def test_persian_digits(self):
        assert alternate_to_canonical("۱۴۰۳/۰۱/۰۱") == datetime(2024, 3, 20)

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "1403-01-01",
            "03/01/01",
            "1403/001/01",
            "1403/01/01 10:00",
            "1402/12/30",
            "1403/13/01",
            "abcd/ef/gh",
        ],
    )
    def test_invalid_input_returns_none(self, text):
        assert alternate_to_canonical(text) is None


class TestCanonicalToAlternate:
    def test_zero_padded(self):
        assert canonical_to_alternate(date(2024, 3, 20)) == "1403/01/01"
        assert canonical_to_alternate(datetime(1979, 2, 11, 15, 30)) == "1357/11/22"

    @pytest.mark.parametrize("value", [None, "2024-03-20", 1710892800])
    def test_invalid_input_returns_empty(self, value):
        assert canonical_to_alternate(value) == ""

    @pytest.mark.parametrize("value", [date(100, 1, 1), date(4000, 1, 1)])
    def test_outside_supported_years_returns_empty(self, value):
        assert canonical_to_alternate(value) == ""

    def test_supported_year_edges(self):
        assert canonical_to_alternate(jalali_to_gregorian(jalali.MAX_JALALI_YEAR, 1, 1)) == "3177/01/01"


    def test_aware_datetime_uses_system_zone(self, monkeypatch):
        tehran = timezone(timedelta(hours=3, minutes=30))
        monkeypatch.setattr(jalali.tzlocal, "get_localzone", lambda: tehran)

        # 2024-03-19 21:00 UTC is already 1403/01/01 in Tehran
        instant = datetime(2024, 3, 19, 21, 0, tzinfo=timezone.utc)
        assert canonical_to_alternate(instant) == "1403/01/01"


class TestNormalizeToDayStart:
    def test_strips_time(self):
        assert normalize_to_day_start(datetime(2024, 3, 15, 18, 45, 12)) == datetime(2024, 3, 15)

    def test_date(self):
        assert normalize_to_day_start(date(2024, 3, 15)) == datetime(2024, 3, 15)

    def test_explicit_zone(self):
        instant = datetime(2024, 3, 15, 22, 0, tzinfo=timezone.utc)
        tehran = timezone(timedelta(hours=3, minutes=30))
        assert normalize_to_day_start(instant, tz=tehran) == datetime(2024, 3, 16)
        assert normalize_to_day_start(instant, tz=timezone.utc) == datetime(2024, 3, 15)

    def test_result_is_naive(self):
        instant = datetime(2024, 3, 15, 22, 0, tzinfo=timezone.utc)
        assert normalize_to_day_start(instant, tz=timezone.utc).tzinfo is None

    @pytest.mark.parametrize("value", [None, "2024-03-15", 0])
    def test_non_dates(self, value):
        assert normalize_to_day_start(value) is None


def test_aliases():
    assert jalali.jalali_string_to_date is alternate_to_canonical
    assert jalali.date_to_jalali_string is canonical_to_alternate
