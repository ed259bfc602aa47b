"""
Calendar utilities for the calculation engines.
Handles input coercion, the Julian day time base, the fixed solar term
table and timezone lookup.
"""

import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import swisseph as swe
from timezonefinder import TimezoneFinder

from urasei.errors import InvalidInput

logger = logging.getLogger(__name__)

DateLike = Union[datetime, date, str]

# J2000.0 epoch (2000-01-01 12:00 UT)
J2000 = 2451545.0


# ============================================================
# INPUT COERCION
# ============================================================

def to_datetime(value: DateLike) -> datetime:
    """
    Coerce a date-like value to a naive datetime.

    Accepts a datetime (returned unchanged), a date (midnight) or an
    ISO format string such as "1990-05-15" or "1990-05-15T10:30".

    Raises:
        InvalidInput: for any other type or an unparseable string
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidInput(f"Malformed date string: {value!r}") from e
    raise InvalidInput(f"Expected a date, datetime or ISO string, got {type(value).__name__}")


def validate_hour(hour) -> int:
    """Reject anything that is not an integer hour in [0, 23]."""
    if isinstance(hour, bool) or not isinstance(hour, int):
        raise InvalidInput(f"Hour must be an integer, got {hour!r}")
    if not 0 <= hour <= 23:
        raise InvalidInput(f"Hour must be in [0, 23], got {hour}")
    return hour


def validate_coordinates(latitude: float, longitude: float) -> tuple[float, float]:
    """Check latitude/longitude ranges (north and east positive)."""
    try:
        lat, lon = float(latitude), float(longitude)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Coordinates must be numeric: ({latitude!r}, {longitude!r})") from e
    if not -90.0 <= lat <= 90.0:
        raise InvalidInput(f"Latitude must be in [-90, 90], got {lat}")
    if not -180.0 <= lon <= 180.0:
        raise InvalidInput(f"Longitude must be in [-180, 180], got {lon}")
    return lat, lon


# ============================================================
# TIME BASE
# ============================================================

def julian_day(moment: datetime) -> float:
    """
    Continuous Julian day for a civil date and clock time.

    Only hours and minutes are used; seconds are ignored.
    """
    decimal_hours = moment.hour + moment.minute / 60.0
    return swe.julday(moment.year, moment.month, moment.day, decimal_hours)


def julian_day_number(day: date) -> int:
    """Integer Julian Day Number (the JD at noon of that civil day)."""
    return int(swe.julday(day.year, day.month, day.day, 12.0))


def days_since_j2000(moment: datetime) -> float:
    return julian_day(moment) - J2000


# ============================================================
# SOLAR TERMS
# ============================================================
#
# Approximate civil dates of the 24 solar terms, starting from Li Chun.
# The dates are fixed; they do not follow the true solar longitude of a
# given year. BaZi month boundaries use the first term listed for each
# civil month.

# (month, day, chinese, name)
SOLAR_TERMS = [
    (2, 4, "立春", "Li Chun"),
    (2, 19, "雨水", "Yu Shui"),
    (3, 6, "啓蟄", "Jing Zhe"),
    (3, 21, "春分", "Chun Fen"),
    (4, 5, "清明", "Qing Ming"),
    (4, 20, "穀雨", "Gu Yu"),
    (5, 6, "立夏", "Li Xia"),
    (5, 21, "小満", "Xiao Man"),
    (6, 6, "芒種", "Mang Zhong"),
    (6, 21, "夏至", "Xia Zhi"),
    (7, 7, "小暑", "Xiao Shu"),
    (7, 23, "大暑", "Da Shu"),
    (8, 8, "立秋", "Li Qiu"),
    (8, 23, "処暑", "Chu Shu"),
    (9, 8, "白露", "Bai Lu"),
    (9, 23, "秋分", "Qiu Fen"),
    (10, 8, "寒露", "Han Lu"),
    (10, 23, "霜降", "Shuang Jiang"),
    (11, 7, "立冬", "Li Dong"),
    (11, 22, "小雪", "Xiao Xue"),
    (12, 7, "大雪", "Da Xue"),
    (12, 21, "冬至", "Dong Zhi"),
    (1, 6, "小寒", "Xiao Han"),
    (1, 20, "大寒", "Da Han"),
]

# Start of spring: the BaZi year begins on this (month, day)
LI_CHUN = (2, 4)


def month_cutoff_day(month: int) -> Optional[int]:
    """Day of the first solar term listed for a civil month."""
    for term_month, term_day, _, _ in SOLAR_TERMS:
        if term_month == month:
            return term_day
    return None


# ============================================================
# TIMEZONES
# ============================================================

@lru_cache(maxsize=1)
def _timezone_finder() -> TimezoneFinder:
    return TimezoneFinder()


def detect_timezone(latitude: float, longitude: float) -> str:
    """
    IANA timezone name for a pair of coordinates.

    Raises:
        InvalidInput: when no zone covers the coordinates
    """
    tz_name = _timezone_finder().timezone_at(lat=latitude, lng=longitude)
    if tz_name is None:
        raise InvalidInput(f"Could not determine timezone for ({latitude}, {longitude})")
    logger.info("Detected timezone %s for (%s, %s)", tz_name, latitude, longitude)
    return tz_name


def validate_timezone(tz_name: str) -> str:
    """Make sure a timezone name is known to zoneinfo."""
    if not isinstance(tz_name, str) or not tz_name:
        raise InvalidInput(f"Timezone must be a non-empty string, got {tz_name!r}")
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInput(f"Unknown timezone: {tz_name!r}") from e
    return tz_name
