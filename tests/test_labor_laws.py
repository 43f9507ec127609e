import pytest

from timesheet.constants import CountryCode, Label
from timesheet.labor_laws import (
    LaborLawComplianceValidator, night_shift_work_minutes, overtime_work_minutes, validate_daily,
    validate_monthly,
)
from timesheet.reports import DailyReport


def daily(work_minutes, break_time_minutes):
    return DailyReport(date='2023/11/01', work_minutes=work_minutes, break_time_minutes=break_time_minutes)


def test_six_hour_rule():
    warnings = validate_daily(CountryCode.JAPAN, daily(361, 0), 'en')
    assert warnings == [Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_6_WORK_HOURS]


def test_eight_hour_rule_replaces_six_hour_rule():
    warnings = validate_daily(CountryCode.JAPAN, daily(481, 0), 'en')
    assert warnings == [Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_8_WORK_HOURS]


def test_eight_hour_rule_with_short_break():
    warnings = validate_daily(CountryCode.JAPAN, daily(481, 45), 'en')
    assert warnings == [Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_8_WORK_HOURS]


@pytest.mark.parametrize('work, break_time', [(360, 0), (400, 45), (481, 60)])
def test_enough_break(work, break_time):
    assert validate_daily(CountryCode.JAPAN, daily(work, break_time), 'en') == []


def test_other_countries_have_no_rules():
    assert validate_daily(CountryCode.UNITED_STATES, daily(600, 0), 'en') == []
    assert validate_daily(None, daily(600, 0), 'en') == []


def test_warnings_are_localized():
    warnings = LaborLawComplianceValidator(CountryCode.JAPAN).validate_daily_report(daily(361, 0), 'ja')
    assert warnings == ['労働時間が 6 時間を超える場合 45 分間の休憩をとることができます。']


def test_monthly_rules_are_empty():
    assert validate_monthly(CountryCode.JAPAN, object(), 'en') == []


def test_overtime():
    assert overtime_work_minutes(480) is None
    assert overtime_work_minutes(481) == 1
    assert overtime_work_minutes(600) == 120


@pytest.mark.parametrize('start, end, minutes', [
    ('20:00', '23:30', 90),
    ('22:30', '23:30', 60),
    ('03:00', '07:00', 120),
    ('04:00', '04:30', 30),
    ('09:00', '18:00', None),
])
def test_night_shift_on_past_days(start, end, minutes):
    assert night_shift_work_minutes(CountryCode.JAPAN, start, end, False, '12:00') == minutes


def test_night_shift_is_capped_at_now_today():
    assert night_shift_work_minutes(CountryCode.JAPAN, '00:00', '03:00', True, '03:00') == 180
    assert night_shift_work_minutes(CountryCode.JAPAN, '00:00', '06:00', False, '12:00') == 300


def test_night_shift_without_rule():
    assert night_shift_work_minutes(CountryCode.UNITED_STATES, '20:00', '23:30', False, '12:00') is None
    assert night_shift_work_minutes(None, '20:00', '23:30', False, '12:00') is None
