import json
from datetime import datetime, timezone

import pytest

from timesheet.constants import CountryCode, EntryType, Label
from timesheet.exceptions import MalformedEntryError
from timesheet.records import DayRecord, LifelogRecord
from timesheet.reports import (
    ActivitySummary, ProjectWork, generate_daily_report, report_to_json, to_daily_report_blocks,
    to_daily_summary_text,
)

KEY = 'U1-20231101'


def w(start, end, project_code=None):
    data = {'start': start, 'end': end}
    if project_code:
        data['project_code'] = project_code
    return json.dumps(data)


def timeline(report):
    return [(e.kind, e.start, e.end, e.minutes) for e in report.entries]


def test_work_is_split_around_a_break(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '18:00')], break_time_entries=[w('12:00', '13:00')])
    report = generate_daily_report(record, now=later)
    assert timeline(report) == [
        (EntryType.WORK, '09:00', '12:00', 180),
        (EntryType.BREAK_TIME, '12:00', '13:00', 60),
        (EntryType.WORK, '13:00', '18:00', 300),
    ]
    assert report.work_minutes == 480
    assert report.break_time_minutes == 60
    assert report.overtime_work_minutes is None
    assert report.date == '2023/11/01'


def test_continuation_keeps_the_project_code(later):
    record = DayRecord(KEY, work_entries=['09:00,18:00,X'], break_time_entries=['12:00,13:00'])
    report = generate_daily_report(record, now=later)
    assert [e.project_code for e in report.entries] == ['X', None, 'X']
    assert report.projects == [ProjectWork('X', 480)]


def test_two_breaks_inside_one_work_entry(later):
    record = DayRecord(
        KEY,
        work_entries=[w('09:00', '18:00')],
        break_time_entries=[w('10:00', '10:15'), w('12:00', '13:00')],
    )
    report = generate_daily_report(record, now=later)
    assert timeline(report) == [
        (EntryType.WORK, '09:00', '10:00', 60),
        (EntryType.BREAK_TIME, '10:00', '10:15', 15),
        (EntryType.WORK, '10:15', '12:00', 105),
        (EntryType.BREAK_TIME, '12:00', '13:00', 60),
        (EntryType.WORK, '13:00', '18:00', 300),
    ]
    assert report.work_minutes == 465
    assert report.break_time_minutes == 75


def test_time_off_running_past_the_work_end(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '15:00')], time_off_entries=[w('14:00', '18:00')])
    report = generate_daily_report(record, now=later)
    assert timeline(report) == [
        (EntryType.WORK, '09:00', '14:00', 300),
        (EntryType.TIME_OFF, '14:00', '18:00', 240),
    ]
    assert report.time_off_minutes == 240


def test_break_ending_with_the_work_adds_no_continuation(later):
    record = DayRecord(
        KEY,
        work_entries=[w('09:00', '18:00')],
        break_time_entries=[w('17:00', '18:00'), w('18:00', '18:30')],
    )
    report = generate_daily_report(record, now=later)
    assert timeline(report) == [
        (EntryType.WORK, '09:00', '17:00', 480),
        (EntryType.BREAK_TIME, '17:00', '18:00', 60),
        (EntryType.BREAK_TIME, '18:00', '18:30', 30),
    ]
    assert report.work_minutes == 480


def test_break_outside_work_is_kept_as_is(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '12:00')], break_time_entries=[w('12:00', '13:00')])
    report = generate_daily_report(record, now=later)
    assert timeline(report) == [
        (EntryType.WORK, '09:00', '12:00', 180),
        (EntryType.BREAK_TIME, '12:00', '13:00', 60),
    ]


def test_overtime(later):
    report = generate_daily_report(DayRecord(KEY, work_entries=[w('08:00', '18:00')]), now=later)
    assert report.work_minutes == 600
    assert report.overtime_work_minutes == 120
    assert report.overtime_work_hours == 2.0


def test_night_shift_in_japan(later):
    record = DayRecord(KEY, work_entries=[w('20:00', '23:30')])
    report = generate_daily_report(record, country=CountryCode.JAPAN, now=later)
    assert report.night_shift_work_minutes == 90
    assert report.night_shift_work_hours == 1.5
    assert generate_daily_report(record, country=CountryCode.UNITED_STATES, now=later).night_shift_work_minutes is None


def test_hours_are_rounded_down(later):
    report = generate_daily_report(DayRecord(KEY, work_entries=[w('09:00', '15:05')]), now=later)
    assert report.work_minutes == 365
    assert report.work_hours == 6.0


def test_open_entry_runs_until_now_today():
    now = datetime(2023, 11, 1, 10, 30, tzinfo=timezone.utc)
    record = DayRecord(KEY, work_entries=[w('09:00', '')])
    report = generate_daily_report(record, now=now)
    assert timeline(report) == [(EntryType.WORK, '09:00', '10:30', 90)]
    assert report.work_minutes == 90
    # display only
    assert record.work_entries == [w('09:00', '')]


def test_open_entry_uses_the_users_offset():
    now = datetime(2023, 10, 31, 16, 0, tzinfo=timezone.utc)
    record = DayRecord(KEY, work_entries=[w('00:30', '')])
    report = generate_daily_report(record, offset=9 * 60 * 60, now=now)
    assert timeline(report) == [(EntryType.WORK, '00:30', '01:00', 30)]


def test_open_entry_on_a_past_day_is_left_out(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '12:00'), w('13:00', '')])
    report = generate_daily_report(record, now=later)
    assert report.work_minutes == 180
    assert timeline(report)[-1] == (EntryType.WORK, '13:00', '', 0)


def test_project_breakdown_is_sorted(later):
    record = DayRecord(KEY, work_entries=[
        w('09:00', '12:00', 'X'), w('13:00', '15:00', 'Y'), w('15:00', '18:00', 'Y'), w('18:00', '19:00'),
    ])
    report = generate_daily_report(record, now=later)
    assert report.projects == [ProjectWork('Y', 300), ProjectWork('X', 180)]
    assert report.projects[0].work_hours == 5.0


def test_breakdowns_are_omitted_when_empty(later):
    report = generate_daily_report(DayRecord(KEY, work_entries=[w('09:00', '12:00')]), now=later)
    assert report.projects is None
    assert report.lifelogs is None


def test_lifelogs_join_the_timeline(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '12:00')])
    lifelog = LifelogRecord(KEY, logs=[
        '{"start":"07:00","end":"08:00","activity_label":"Running"}',
        '{"start":"20:00","end":"20:30","what_to_do":"Reading"}',
        '{"start":"21:00","end":"22:00","activity_label":"Running"}',
    ])
    report = generate_daily_report(record, lifelog, now=later)
    assert [e.kind for e in report.entries] == [
        EntryType.LIFELOG, EntryType.WORK, EntryType.LIFELOG, EntryType.LIFELOG,
    ]
    assert report.lifelogs == [ActivitySummary('Running', 120), ActivitySummary('Reading', 30)]
    assert report.work_minutes == 180


def test_lifelogs_do_not_split_work(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '18:00')])
    lifelog = LifelogRecord(KEY, logs=['{"start":"12:00","end":"13:00","activity_label":"Lunch"}'])
    report = generate_daily_report(record, lifelog, now=later)
    assert report.work_minutes == 540


def test_lifelog_only_day(later):
    lifelog = LifelogRecord(KEY, logs=['07:00,08:00'])
    report = generate_daily_report(None, lifelog, now=later)
    assert report.date == '2023/11/01'
    assert report.work_minutes == 0
    assert len(report.entries) == 1


def test_no_record_at_all():
    assert generate_daily_report(None, None) is None


@pytest.mark.parametrize('raw', [
    'garbage', ',10:00', '09:00,abc', '{"start":"9am","end":"10:00"}',
])
def test_malformed_entry_aborts_the_report(later, raw):
    record = DayRecord(KEY, work_entries=[w('09:00', '12:00'), raw])
    with pytest.raises(MalformedEntryError) as e:
        generate_daily_report(record, now=later)
    assert e.value.raw == raw
    assert e.value.record_key == KEY
    assert KEY in str(e.value)


def test_holiday_flag(later):
    record = DayRecord(KEY)
    assert generate_daily_report(record, holidays=['20231103'], now=later).is_holiday is False
    assert generate_daily_report(record, holidays=['20231101'], now=later).is_holiday is True


def test_labor_law_warnings(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '16:30')])
    report = generate_daily_report(record, country=CountryCode.JAPAN, now=later)
    assert report.warnings == [Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_6_WORK_HOURS]
    assert generate_daily_report(record, now=later).warnings == []


def test_labels_follow_the_language(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '12:00')])
    report = generate_daily_report(record, language='ja', now=later)
    assert report.entries[0].label == '勤務'


def test_summary_text(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '18:00', 'X')], break_time_entries=[w('12:00', '13:00')])
    report = generate_daily_report(record, now=later)
    text = to_daily_summary_text(report, 'en')
    assert text.startswith('*2023/11/01*')
    assert '*Work:* 8 hours' in text
    assert '*Break time:* 1 hour' in text
    assert '*X*: 8 hours 0 minutes' in text
    assert 'Work [X]: 09:00 - 12:00' in text


def test_summary_text_without_entries(later):
    report = generate_daily_report(DayRecord(KEY), now=later)
    assert Label.NO_ENTRIES_YET in to_daily_summary_text(report, 'en')


def test_blocks_carry_warnings(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '16:30')])
    report = generate_daily_report(record, country=CountryCode.JAPAN, now=later)
    blocks = to_daily_report_blocks(report, 'en')
    assert [b['type'] for b in blocks] == ['section', 'context']


def test_report_to_json(later):
    record = DayRecord(KEY, work_entries=[w('09:00', '18:00', 'X')])
    data = json.loads(report_to_json(generate_daily_report(record, now=later)))
    assert data['work_minutes'] == 540
    assert data['work_hours'] == 9.0
    assert data['overtime_work_minutes'] == 60
    assert data['projects'] == [{'project_code': 'X', 'work_minutes': 540, 'work_hours': 9.0}]
    assert data['entries'][0]['kind'] == 'work'
