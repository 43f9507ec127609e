import logging
from dataclasses import dataclass

from .constants import CountryCode, Label
from .i18n import i18n
from .time_utils import minutes_between, time_to_number

logger = logging.getLogger(__name__)

# Work beyond this many minutes in a day is overtime (gross work, breaks not deducted)
STANDARD_DAILY_WORK_MINUTES = 8 * 60


@dataclass(frozen=True)
class NightShiftRule:
    """Late-night window: from `starts_at` until midnight and from midnight until `ends_at`"""
    starts_at: str
    ends_at: str


NIGHT_SHIFT_RULES = {
    CountryCode.JAPAN: NightShiftRule(starts_at='22:00', ends_at='05:00'),
}


def overtime_work_minutes(work_minutes):
    if work_minutes > STANDARD_DAILY_WORK_MINUTES:
        return work_minutes - STANDARD_DAILY_WORK_MINUTES
    return None


def night_shift_work_minutes(country, start, end, is_today, now):
    """
    Portion of one closed work interval inside the country's night window.

    Returns None when the country has no rule or the interval never touches the
    window. On the current day the early-morning portion is capped at `now`.
    """
    rule = NIGHT_SHIFT_RULES.get(country)
    if rule is None or not end:
        return None

    minutes = None
    if time_to_number(end) > time_to_number(rule.starts_at):
        late_start = start if time_to_number(start) > time_to_number(rule.starts_at) else rule.starts_at
        minutes = (minutes or 0) + minutes_between(late_start, end)

    if time_to_number(start) < time_to_number(rule.ends_at):
        early_end = rule.ends_at
        if is_today and now and time_to_number(now) < time_to_number(rule.ends_at):
            early_end = now
        if time_to_number(end) <= time_to_number(early_end):
            early_end = end
        minutes = (minutes or 0) + max(0, minutes_between(start, early_end))
    return minutes


class LaborLawComplianceValidator:
    """Country-keyed advisory checks; warnings never block a submission"""

    def __init__(self, country):
        self.country = country

    def validate_daily_report(self, report, language):
        warnings = []
        if self.country == CountryCode.JAPAN:
            if report.work_minutes > 8 * 60 and report.break_time_minutes < 60:
                warnings.append(i18n(Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_8_WORK_HOURS, language))
            elif report.work_minutes > 6 * 60 and report.break_time_minutes < 45:
                warnings.append(i18n(Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_6_WORK_HOURS, language))
        return warnings

    def validate_monthly_report(self, report, language):
        # No monthly rules yet
        return []


def validate_daily(country, report, language):
    if not country:
        return []
    return LaborLawComplianceValidator(country).validate_daily_report(report, language)


def validate_monthly(country, report, language):
    if not country:
        return []
    return LaborLawComplianceValidator(country).validate_monthly_report(report, language)
