import math
import re
from datetime import datetime, timedelta, timezone

from .constants import Label
from .i18n import i18n

HHMM_PATTERN = re.compile(r'([01][0-9]|2[0-3]):[0-5][0-9]')


def is_valid_time(value):
    return isinstance(value, str) and HHMM_PATTERN.fullmatch(value) is not None


def time_to_number(time):
    """
    Turn "HH:MM" into an integer for ordering comparisons only ("09:30" -> 930).

    The result is not a duration: "10:00" minus "09:30" gives 70, not 30.
    Use minutes_between() for arithmetic.
    """
    return int(time.replace(':', '', 1))


def _minutes_of_day(time):
    hours, minutes = time.split(':')
    return int(hours) * 60 + int(minutes)


def minutes_between(start, end):
    """Minutes from start to end within one day; 0 when either side is empty"""
    if not start or not end:
        return 0
    return _minutes_of_day(end) - _minutes_of_day(start)


def to_hours(minutes):
    """One-decimal hours rounded down (365 minutes -> 6.0)"""
    return math.floor(minutes / 6) / 10



# -----------------------------------------
# "today" and "now" for a fixed UTC offset
# -----------------------------------------

def local_datetime(offset, now=None):
    """Shift the current instant by a raw UTC offset in seconds"""
    current = now if now is not None else datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(timezone.utc) + timedelta(seconds=offset or 0)


def today_yyyymmdd(offset, now=None):
    return local_datetime(offset, now).strftime('%Y%m%d')


def now_hhmm(offset, now=None):
    return local_datetime(offset, now).strftime('%H:%M')


def to_date_format(yyyymmdd):
    """20231030 -> 2023/10/30"""
    return f"{yyyymmdd[0:4]}/{yyyymmdd[4:6]}/{yyyymmdd[6:8]}"


def previous_month(yyyymm):
    year, month = int(yyyymm[:4]), int(yyyymm[4:6])
    if month == 1:
        return f"{year - 1}12"
    return f"{year}{month - 1:02d}"


# -----------------------------------------
# Localized durations
# -----------------------------------------

def day_duration(days, language):
    if days >= 1:
        unit = i18n(Label.DAYS if days >= 2 else Label.DAY, language)
        return f"{math.floor(days)} {unit}"
    return ''


def hour_duration(hours, language):
    if hours >= 1:
        unit = i18n(Label.HOURS if hours >= 2 else Label.HOUR, language)
        return f"{math.floor(hours)} {unit}"
    return ''


def minute_duration(minutes, language, show_zero=False):
    """Render the minutes part of a duration (the remainder after whole hours)"""
    m = math.floor(minutes) % 60
    if m != 0 or show_zero:
        unit = i18n(Label.MINUTES if m >= 2 or m == 0 else Label.MINUTE, language)
        return f"{m} {unit}"
    return ''


def format_duration(hours, minutes, language, show_zero_minutes=False):
    """e.g. (6.0, 365, 'en') -> '6 hours 5 minutes'"""
    parts = [
        hour_duration(hours, language),
        minute_duration(minutes, language, show_zero=show_zero_minutes),
    ]
    return ' '.join(p for p in parts if p)
