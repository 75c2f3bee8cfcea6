"""Jalali (Persian) / Gregorian calendar conversion.

The Jalali calendar is used for date input and display only; every stored
instant and every comparison uses the Gregorian calendar. Conversion follows
the 33-year "breaks" cycle (Borkowski), which matches the astronomical
calendar for Jalali years -61 through 3177.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, tzinfo

import tzlocal

from taskboard_cli.exceptions import ParseError

# Jalali years at which the 33-year leap pattern restarts.
_BREAKS = (
    -61, 9, 38, 199, 426, 686, 756, 818, 1111, 1181,
    1210, 1635, 2060, 2097, 2192, 2262, 2324, 2394, 2456, 3178,
)

MIN_JALALI_YEAR = _BREAKS[0]
MAX_JALALI_YEAR = _BREAKS[-1] - 1

# Accepts YYYY/MM/DD, YYYY/M/DD, YYYY/MM/D and YYYY/M/D.
_JALALI_PATTERN = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")

_DIGITS = str.maketrans("۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩", "01234567890123456789")


def _div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _mod(a: int, b: int) -> int:
    """Remainder with the sign of the dividend."""
    return a - _div(a, b) * b


def _jal_cal(jy: int) -> tuple[int, int, int]:
    """Return (leap, gregorian year, march day of Nowruz) for a Jalali year.

    ``leap`` is the number of years since the last leap year (0 means *jy*
    itself is leap).
    """
    if jy < MIN_JALALI_YEAR or jy > MAX_JALALI_YEAR:
        raise ParseError(f"Jalali year {jy} is out of the supported range")

    gy = jy + 621
    leap_j = -14
    jp = _BREAKS[0]
    jump = 0
    for jm in _BREAKS[1:]:
        jump = jm - jp
        if jy < jm:
            break
        leap_j += _div(jump, 33) * 8 + _div(_mod(jump, 33), 4)
        jp = jm

    n = jy - jp
    leap_j += _div(n, 33) * 8 + _div(_mod(n, 33) + 3, 4)
    if _mod(jump, 33) == 4 and jump - n == 4:
        leap_j += 1

    leap_g = _div(gy, 4) - _div((_div(gy, 100) + 1) * 3, 4) - 150
    march = 20 + leap_j - leap_g

    if jump - n < 6:
        n = n - jump + _div(jump + 4, 33) * 33
    leap = _mod(_mod(n + 1, 33) - 1, 4)
    if leap == -1:
        leap = 4
    return leap, gy, march


def is_jalali_leap_year(jy: int) -> bool:
    """Return True if the Jalali year has 366 days."""
    return _jal_cal(jy)[0] == 0


def jalali_month_length(jy: int, jm: int) -> int:
    """Number of days in a Jalali month."""
    if jm <= 6:
        return 31
    if jm <= 11:
        return 30
    return 30 if is_jalali_leap_year(jy) else 29


def is_valid_jalali_date(jy: int, jm: int, jd: int) -> bool:
    """Check whether the Jalali date exists."""
    if not MIN_JALALI_YEAR <= jy <= MAX_JALALI_YEAR:
        return False
    if not 1 <= jm <= 12:
        return False
    return 1 <= jd <= jalali_month_length(jy, jm)


def _nowruz(jy: int) -> date:
    """Gregorian date of the first day of Farvardin in *jy*."""
    _, gy, march = _jal_cal(jy)
    try:
        return date(gy, 3, march)
    except ValueError as e:
        raise ParseError(f"Jalali year {jy} has no Gregorian equivalent") from e


def jalali_to_gregorian(jy: int, jm: int, jd: int) -> date:
    """Convert a Jalali date to a Gregorian date.

    Raises:
        ParseError: If the Jalali date does not exist.
    """
    if not is_valid_jalali_date(jy, jm, jd):
        raise ParseError(f"Invalid Jalali date: {jy}/{jm}/{jd}")

    if jm <= 7:
        offset = (jm - 1) * 31
    else:
        offset = 186 + (jm - 7) * 30
    return _nowruz(jy) + timedelta(days=offset + jd - 1)


def gregorian_to_jalali(value: date) -> tuple[int, int, int]:
    """Convert a Gregorian date to a (year, month, day) Jalali tuple.

    Raises:
        ParseError: If the date falls outside the supported range.
    """
    if isinstance(value, datetime):
        value = value.date()

    jy = value.year - 621
    nowruz = _nowruz(jy)
    if value < nowruz:
        jy -= 1
        nowruz = _nowruz(jy)

    k = (value - nowruz).days
    if k < 186:
        return jy, 1 + k // 31, 1 + k % 31
    k -= 186
    return jy, 7 + k // 30, 1 + k % 30


def normalize_to_day_start(
    instant: date | datetime | None, tz: tzinfo | None = None
) -> datetime | None:
    """Strip time-of-day, returning a naive datetime at the start of the day.

    Aware datetimes are first converted to *tz* (the system zone by default),
    so the day is the one shown to the user.
    """
    if isinstance(instant, datetime):
        if instant.tzinfo is not None:
            instant = instant.astimezone(tz or tzlocal.get_localzone())
        return datetime(instant.year, instant.month, instant.day)
    if isinstance(instant, date):
        return datetime(instant.year, instant.month, instant.day)
    return None


def alternate_to_canonical(text: str | None) -> datetime | None:
    """Parse a Jalali "YYYY/MM/DD" string into a Gregorian midnight datetime.

    Returns None when the string matches none of the accepted patterns or
    names a day that does not exist.
    """
    if not text or not isinstance(text, str):
        return None

    match = _JALALI_PATTERN.match(text.strip().translate(_DIGITS))
    if match is None:
        return None

    jy, jm, jd = (int(part) for part in match.groups())
    try:
        converted = jalali_to_gregorian(jy, jm, jd)
    except ParseError:
        return None
    return datetime(converted.year, converted.month, converted.day)


def canonical_to_alternate(
    instant: date | datetime | None, tz: tzinfo | None = None
) -> str:
    """Format a Gregorian date or datetime as a zero-padded Jalali "YYYY/MM/DD".

    Aware datetimes are read in *tz* (the system zone when None). Returns an
    empty string for anything that is not a date, and for dates outside the
    supported Jalali years MIN_JALALI_YEAR..MAX_JALALI_YEAR (-61..3177,
    roughly Gregorian 560..3798).
    """
    day = normalize_to_day_start(instant, tz)
    if day is None:
        return ""
    try:
        jy, jm, jd = gregorian_to_jalali(day.date())
    except ParseError:
        return ""
    return f"{jy:04d}/{jm:02d}/{jd:02d}"


jalali_string_to_date = alternate_to_canonical
date_to_jalali_string = canonical_to_alternate
