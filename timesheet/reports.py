"""
Daily and monthly timesheet reports.

A daily report merges the day's work / break time / time off entries into one
chronological timeline (splitting a work entry around breaks taken inside it),
appends lifelogs, and totals the minutes per kind. Monthly reports fold daily
reports together. Hours are always floor(minutes / 6) / 10, never rounded.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .constants import EMOJI_BY_TYPE, LABEL_BY_TYPE, TIME_ENTRY_TYPES, Emoji, EntryType, Label
from .entries import deserialize_entry
from .exceptions import MalformedEntryError
from .i18n import i18n
from .labor_laws import night_shift_work_minutes, overtime_work_minutes, validate_daily, validate_monthly
from .records import split_record_key
from .time_utils import (
    day_duration, format_duration, minutes_between, now_hhmm, time_to_number,
    to_date_format, to_hours, today_yyyymmdd,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportEntry:
    kind: EntryType
    label: str
    emoji: str
    start: str
    end: str
    minutes: int
    project_code: Optional[str] = None
    activity_label: Optional[str] = None

    @property
    def display_label(self):
        if self.kind == EntryType.WORK and self.project_code:
            return f"{self.label} [{self.project_code}]"
        if self.kind == EntryType.LIFELOG and self.activity_label:
            return self.activity_label
        return self.label


@dataclass
class ProjectWork:
    project_code: str
    work_minutes: int
    work_hours: float = field(init=False)

    def __post_init__(self):
        self.work_hours = to_hours(self.work_minutes)


@dataclass
class ActivitySummary:
    activity_label: str
    spent_minutes: int
    spent_hours: float = field(init=False)

    def __post_init__(self):
        self.spent_hours = to_hours(self.spent_minutes)


def _optional_hours(minutes):
    return to_hours(minutes) if minutes is not None else None


@dataclass
class DailyReport:
    date: str
    work_minutes: int = 0
    break_time_minutes: int = 0
    time_off_minutes: int = 0
    overtime_work_minutes: Optional[int] = None
    night_shift_work_minutes: Optional[int] = None
    entries: list = field(default_factory=list)
    projects: Optional[list] = None
    lifelogs: Optional[list] = None
    is_holiday: bool = False
    warnings: list = field(default_factory=list)
    work_hours: float = field(init=False)
    break_time_hours: float = field(init=False)
    time_off_hours: float = field(init=False)
    overtime_work_hours: Optional[float] = field(init=False)
    night_shift_work_hours: Optional[float] = field(init=False)

    def __post_init__(self):
        self.work_hours = to_hours(self.work_minutes)
        self.break_time_hours = to_hours(self.break_time_minutes)
        self.time_off_hours = to_hours(self.time_off_minutes)
        self.overtime_work_hours = _optional_hours(self.overtime_work_minutes)
        self.night_shift_work_hours = _optional_hours(self.night_shift_work_minutes)


@dataclass
class MonthlyReport:
    month: str
    user_id: str
    user_email: Optional[str]
    holidays: int = 0
    num_of_working_days: int = 0
    work_minutes: int = 0
    break_time_minutes: int = 0
    time_off_minutes: int = 0
    overtime_work_minutes: Optional[int] = None
    night_shift_work_minutes: Optional[int] = None
    daily_reports: list = field(default_factory=list)
    projects: Optional[list] = None
    lifelogs: Optional[list] = None
    entry_minutes: int = field(init=False)
    entry_hours: float = field(init=False)
    work_hours: float = field(init=False)
    break_time_hours: float = field(init=False)
    time_off_hours: float = field(init=False)
    overtime_work_hours: Optional[float] = field(init=False)
    night_shift_work_hours: Optional[float] = field(init=False)

    def __post_init__(self):
        self.entry_minutes = self.work_minutes + self.break_time_minutes + self.time_off_minutes
        # Sum of the floored parts so that the total matches what users see per kind
        self.entry_hours = (
            self.work_minutes // 6 + self.break_time_minutes // 6 + self.time_off_minutes // 6
        ) / 10
        self.work_hours = to_hours(self.work_minutes)
        self.break_time_hours = to_hours(self.break_time_minutes)
        self.time_off_hours = to_hours(self.time_off_minutes)
        self.overtime_work_hours = _optional_hours(self.overtime_work_minutes)
        self.night_shift_work_hours = _optional_hours(self.night_shift_work_minutes)


@dataclass
class AdminMonthlyReport:
    month: str
    reports: list
    generated_at: str


# -----------------------------------------
# Daily report
# -----------------------------------------

def _report_entry(kind, start, end, language, project_code=None, activity_label=None):
    return ReportEntry(
        kind=kind,
        label=i18n(LABEL_BY_TYPE[kind], language),
        emoji=EMOJI_BY_TYPE[kind],
        start=start,
        end=end,
        minutes=minutes_between(start, end),
        project_code=project_code if kind == EntryType.WORK else None,
        activity_label=activity_label if kind == EntryType.LIFELOG else None,
    )


def _decode(raw, kind, key, is_today, current_time, language):
    interval = deserialize_entry(raw)
    if interval is None:
        raise MalformedEntryError(raw, key)
    end = interval.end
    if not end and is_today:
        # Display only: an ongoing entry runs until now
        end = current_time
    return _report_entry(
        kind,
        interval.start,
        end,
        language,
        project_code=interval.project_code,
        activity_label=interval.activity_label,
    )


def _ends_after(end, start):
    """True when `end` is a set time later than `start`"""
    return bool(end) and time_to_number(end) > time_to_number(start)


def merge_time_entries(sorted_entries, language):
    """
    Lay out start-sorted entries as one timeline.

    When a break time / time off entry starts before the ongoing work entry
    ends, the work entry is cut at the break's start and, if the break ends
    earlier than the work did, a work continuation is added from the break's
    end to the original work end.
    """
    merged = []
    ongoing_index = None
    ongoing_end = None
    for e in sorted_entries:
        if ongoing_index is None:
            merged.append(e)
            if e.kind == EntryType.WORK:
                ongoing_index, ongoing_end = len(merged) - 1, e.end
        elif e.kind == EntryType.WORK:
            merged.append(e)
            ongoing_index, ongoing_end = len(merged) - 1, e.end
        elif _ends_after(ongoing_end, e.start):
            ongoing = merged[ongoing_index]
            merged[ongoing_index] = replace(
                ongoing, end=e.start, minutes=minutes_between(ongoing.start, e.start),
            )
            merged.append(e)
            if _ends_after(ongoing_end, e.end):
                continuation = _report_entry(
                    EntryType.WORK, e.end, ongoing_end, language, project_code=ongoing.project_code,
                )
                merged.append(continuation)
                ongoing_index = len(merged) - 1
            else:
                ongoing_index, ongoing_end = None, None
        else:
            merged.append(e)
            ongoing_index, ongoing_end = None, None
    return merged


def _summaries(minutes_by_key, cls):
    """Descending by minutes; None (not []) when nothing qualified"""
    if not minutes_by_key:
        return None
    ranked = sorted(minutes_by_key.items(), key=lambda item: item[1], reverse=True)
    return [cls(key, minutes) for key, minutes in ranked]


def generate_daily_report(entry, lifelog=None, offset=0, language='en', country=None,
                          holidays=(), now=None):
    """
    Build the DailyReport for one day record (and optionally its lifelog record).

    Returns None when neither record carries a key. Raises MalformedEntryError
    when a stored entry cannot be decoded.
    """
    key = (entry.user_and_date if entry else None) or (lifelog.user_and_date if lifelog else None)
    if not key:
        return None
    yyyymmdd = split_record_key(key)[1]
    is_today = yyyymmdd == today_yyyymmdd(offset, now)
    current_time = now_hhmm(offset, now)

    raw_entries = []
    if entry:
        for kind in TIME_ENTRY_TYPES:
            for raw in entry.entries_of(kind):
                raw_entries.append(_decode(raw, kind, key, is_today, current_time, language))
    raw_entries.sort(key=lambda e: time_to_number(e.start))
    entries = merge_time_entries(raw_entries, language)

    if lifelog:
        for raw in lifelog.logs:
            entries.append(_decode(raw, EntryType.LIFELOG, key, is_today, current_time, language))
        entries.sort(key=lambda e: time_to_number(e.start))

    work_minutes = break_time_minutes = time_off_minutes = 0
    night_shift_minutes = None
    project_minutes = {}
    activity_minutes = {}
    for e in entries:
        if e.kind == EntryType.WORK:
            if e.project_code:
                project_minutes[e.project_code] = project_minutes.get(e.project_code, 0) + e.minutes
        elif e.kind == EntryType.LIFELOG:
            if e.activity_label:
                activity_minutes[e.activity_label] = activity_minutes.get(e.activity_label, 0) + e.minutes

        # Entries still open on a past day are left out of the totals
        if not e.end:
            continue
        minutes = minutes_between(e.start, e.end)
        if e.kind == EntryType.WORK:
            work_minutes += minutes
            night = night_shift_work_minutes(country, e.start, e.end, is_today, current_time)
            if night is not None:
                night_shift_minutes = (night_shift_minutes or 0) + night
        elif e.kind == EntryType.BREAK_TIME:
            break_time_minutes += minutes
        elif e.kind == EntryType.TIME_OFF:
            time_off_minutes += minutes

    report = DailyReport(
        date=to_date_format(yyyymmdd),
        work_minutes=work_minutes,
        break_time_minutes=break_time_minutes,
        time_off_minutes=time_off_minutes,
        overtime_work_minutes=overtime_work_minutes(work_minutes),
        night_shift_work_minutes=night_shift_minutes,
        entries=entries,
        projects=_summaries(project_minutes, ProjectWork),
        lifelogs=_summaries(activity_minutes, ActivitySummary),
        is_holiday=yyyymmdd in (holidays or ()),
    )
    warnings = validate_daily(country, report, language)
    if warnings:
        report = replace(report, warnings=warnings)
    return report


# -----------------------------------------
# Monthly report
# -----------------------------------------

def aggregate_monthly_report(user_id, user_email, month, daily_reports, holidays=()):
    """Fold pre-computed daily reports of one month ("YYYY/MM" or "YYYYMM") into totals"""
    yyyymm = month.replace('/', '')
    work_minutes = break_time_minutes = time_off_minutes = 0
    overtime_minutes = night_shift_minutes = None
    num_of_working_days = 0
    project_minutes = {}
    activity_minutes = {}
    for daily in daily_reports:
        if daily.work_minutes > 0:
            num_of_working_days += 1
        work_minutes += daily.work_minutes
        break_time_minutes += daily.break_time_minutes
        time_off_minutes += daily.time_off_minutes
        if daily.overtime_work_minutes:
            overtime_minutes = (overtime_minutes or 0) + daily.overtime_work_minutes
        if daily.night_shift_work_minutes:
            night_shift_minutes = (night_shift_minutes or 0) + daily.night_shift_work_minutes
        for p in daily.projects or []:
            project_minutes[p.project_code] = project_minutes.get(p.project_code, 0) + p.work_minutes
        for a in daily.lifelogs or []:
            activity_minutes[a.activity_label] = activity_minutes.get(a.activity_label, 0) + a.spent_minutes

    return MonthlyReport(
        month=month,
        user_id=user_id,
        user_email=user_email,
        holidays=len([h for h in holidays or () if h.startswith(yyyymm)]),
        num_of_working_days=num_of_working_days,
        work_minutes=work_minutes,
        break_time_minutes=break_time_minutes,
        time_off_minutes=time_off_minutes,
        overtime_work_minutes=overtime_minutes,
        night_shift_work_minutes=night_shift_minutes,
        daily_reports=list(daily_reports),
        projects=_summaries(project_minutes, ProjectWork),
        lifelogs=_summaries(activity_minutes, ActivitySummary),
    )


def generate_monthly_report(user_id, user_email, month, entries, lifelogs=(), offset=0,
                            language='en', country=None, holidays=(), now=None):
    """Build every daily report present in the month, then aggregate them"""
    entries_by_key = {e.user_and_date: e for e in entries}
    lifelogs_by_key = {log.user_and_date: log for log in lifelogs or ()}
    daily_reports = []
    for key in sorted(set(entries_by_key) | set(lifelogs_by_key)):
        daily = generate_daily_report(
            entries_by_key.get(key),
            lifelogs_by_key.get(key),
            offset=offset,
            language=language,
            country=country,
            holidays=holidays,
            now=now,
        )
        if daily:
            daily_reports.append(daily)
    return aggregate_monthly_report(user_id, user_email, month, daily_reports, holidays)


def generate_admin_report(month, monthly_reports, now=None):
    generated_at = (now or datetime.now(timezone.utc)).isoformat()
    return AdminMonthlyReport(month=month, reports=list(monthly_reports), generated_at=generated_at)


# -----------------------------------------
# Presentation
# -----------------------------------------

def report_to_json(report, indent=2):
    return json.dumps(asdict(report), ensure_ascii=False, indent=indent)


def _summary_lines(report, language, bold_labels=True):
    def line(emoji, label, duration):
        name = i18n(label, language)
        return f"{emoji} *{name}:* {duration}" if bold_labels else f"{emoji} {name}: {duration}"

    lines = []
    work = format_duration(report.work_hours, report.work_minutes, language)
    if work:
        lines.append(line(Emoji.WORK, Label.WORK, work))
    if report.overtime_work_minutes:
        lines.append(line(Emoji.WORK, Label.OVERTIME_WORK, format_duration(
            report.overtime_work_hours, report.overtime_work_minutes, language)))
    if report.night_shift_work_minutes:
        lines.append(line(Emoji.WORK, Label.NIGHT_SHIFT_WORK, format_duration(
            report.night_shift_work_hours, report.night_shift_work_minutes, language)))
    break_time = format_duration(report.break_time_hours, report.break_time_minutes, language)
    if break_time:
        lines.append(line(Emoji.BREAK_TIME, Label.BREAK_TIME, break_time))
    time_off = format_duration(report.time_off_hours, report.time_off_minutes, language)
    if time_off:
        lines.append(line(Emoji.TIME_OFF, Label.TIME_OFF, time_off))
    return lines


def _breakdown_lines(report, language):
    lines = []
    if report.projects:
        lines.append('')
        lines.append(f"*{i18n(Label.PROJECT_SUMMARY, language)}*")
        for p in report.projects:
            duration = format_duration(p.work_hours, p.work_minutes, language, show_zero_minutes=True)
            lines.append(f"*{p.project_code}*: {duration}")
    if report.lifelogs:
        lines.append('')
        lines.append(f"*{Emoji.LIFELOG} {i18n(Label.LIFELOG_SUMMARY, language)}*")
        for a in report.lifelogs:
            duration = format_duration(a.spent_hours, a.spent_minutes, language, show_zero_minutes=True)
            lines.append(f"*{a.activity_label}*: {duration}")
    return lines


def timeline_lines(report):
    return [f"{e.emoji} {e.display_label}: {e.start} - {e.end}" for e in report.entries]


def to_daily_summary_text(report, language):
    """Plain mrkdwn summary of one day, used for slash command responses"""
    header = f"*{report.date}*"
    if report.is_holiday:
        header = f"{Emoji.HOLIDAY} {header}"
    lines = _summary_lines(report, language) + _breakdown_lines(report, language)
    if not lines and not report.entries:
        lines = [i18n(Label.NO_ENTRIES_YET, language)]
    timeline = timeline_lines(report)
    text = header + '\n' + '\n'.join(lines)
    if timeline:
        text += '\n\n' + '\n'.join(timeline)
    return text


def to_daily_report_blocks(report, language):
    blocks = [{"type": "section", "text": {"type": "mrkdwn", "text": to_daily_summary_text(report, language)}}]
    if report.warnings:
        blocks.append({
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f"{Emoji.WARNING} {w}"} for w in report.warnings],
        })
    return blocks


def to_report_result_blocks(report, country, language):
    """Block Kit summary of a monthly report followed by each day's timeline"""
    summary = [
        f"{Emoji.WORK} {i18n(Label.NUM_OF_WORKING_DAYS, language)}: "
        f"{day_duration(report.num_of_working_days, language)}"
    ]
    summary += _summary_lines(report, language, bold_labels=False)
    if report.holidays > 0:
        summary.append(
            f"{Emoji.HOLIDAY} {i18n(Label.HOLIDAY, language)}: {day_duration(report.holidays, language)}"
        )
    summary += _breakdown_lines(report, language)

    blocks = [{
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": f"*{report.month} {i18n(Label.MONTHLY_REPORT, language)} <@{report.user_id}>*\n\n"
                    + '\n'.join(summary),
        },
    }]
    warnings = validate_monthly(country, report, language)
    if warnings:
        blocks.append({
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": f"{Emoji.WARNING} {w}"} for w in warnings],
        })
    for daily in report.daily_reports:
        blocks.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*{daily.date}*\n" + '\n'.join(timeline_lines(daily))},
        })
    return blocks
