from datetime import datetime, timezone

import pytest

from timesheet.time_utils import (
    day_duration, format_duration, hour_duration, is_valid_time, minute_duration,
    minutes_between, now_hhmm, previous_month, time_to_number, to_date_format, to_hours,
    today_yyyymmdd,
)


def test_time_to_number_is_lexical():
    assert time_to_number('00:01') == 1
    assert time_to_number('23:45') == 2345
    assert time_to_number('09:30') == 930


def test_minutes_between():
    assert minutes_between('09:00', '18:00') == 540
    assert minutes_between('09:30', '10:00') == 30
    assert minutes_between('09:00', '') == 0
    assert minutes_between('', '10:00') == 0


@pytest.mark.parametrize('minutes, hours', [(360, 6.0), (365, 6.0), (59, 0.9), (0, 0.0), (425, 7.0), (431, 7.1)])
def test_to_hours_rounds_down(minutes, hours):
    assert to_hours(minutes) == hours


@pytest.mark.parametrize('value, valid', [
    ('09:00', True), ('23:59', True), ('00:00', True),
    ('24:00', False), ('9:00', False), ('09:60', False), ('09:00\n', False), ('', False), (None, False),
])
def test_is_valid_time(value, valid):
    assert is_valid_time(value) is valid


def test_format_duration_english():
    assert format_duration(6.0, 365, 'en') == '6 hours 5 minutes'
    assert format_duration(1.0, 60, 'en') == '1 hour'
    assert format_duration(1.0, 60, 'en', show_zero_minutes=True) == '1 hour 0 minutes'
    assert format_duration(0.5, 30, 'en') == '30 minutes'
    assert format_duration(0.0, 1, 'en') == '1 minute'
    assert format_duration(0.0, 0, 'en') == ''


def test_format_duration_japanese():
    assert format_duration(2.0, 125, 'ja') == '2 時間 5 分'


def test_partial_durations():
    assert hour_duration(0.9, 'en') == ''
    assert hour_duration(2.5, 'en') == '2 hours'
    assert minute_duration(125, 'en') == '5 minutes'
    assert day_duration(1, 'en') == '1 day'
    assert day_duration(20, 'en') == '20 days'
    assert day_duration(0, 'en') == ''


def test_today_and_now_apply_offset():
    now = datetime(2023, 10, 31, 16, 0, tzinfo=timezone.utc)
    assert today_yyyymmdd(9 * 60 * 60, now) == '20231101'
    assert now_hhmm(9 * 60 * 60, now) == '01:00'
    assert today_yyyymmdd(0, now) == '20231031'


def test_negative_offset():
    now = datetime(2023, 11, 1, 2, 0, tzinfo=timezone.utc)
    assert today_yyyymmdd(-5 * 60 * 60, now) == '20231031'
    assert now_hhmm(-5 * 60 * 60, now) == '21:00'


def test_date_helpers():
    assert to_date_format('20231030') == '2023/10/30'
    assert previous_month('202301') == '202212'
    assert previous_month('202311') == '202310'
