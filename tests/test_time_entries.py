from unittest.mock import patch

import pytest
from django.db import DatabaseError

from timesheet.components import build_request_context
from timesheet.constants import BlockId, EntryType, Label, OrganizationPolicyKey, OrganizationPolicyValue
from timesheet.entries import Interval
from timesheet.exceptions import TimesheetOperationError
from timesheet.time_entries import (
    add_entry, add_lifelog, delete_entry, delete_lifelog, edit_entry, finish_break_time,
    finish_lifelog, finish_work, start_break_time, start_lifelog, start_work, suggest_projects,
)

KEY = 'U1-20231101'


def saved(stores, field='work_entries'):
    return stores.time_entries.get(KEY)[field]


def test_add_entry(ctx, stores):
    assert add_entry(ctx, EntryType.WORK, '09:00', '12:00', project_code='X') == {}
    assert saved(stores) == ['{"start":"09:00","end":"12:00","project_code":"X"}']


def test_add_entry_rejects_conflicts(ctx, stores):
    add_entry(ctx, EntryType.WORK, '09:00', '12:00')
    errors = add_entry(ctx, EntryType.WORK, '11:00', '13:00')
    assert errors == {BlockId.START: Label.CONFLICT_ERROR_MESSAGE}
    assert len(saved(stores)) == 1


def test_project_code_is_only_kept_for_work(ctx, stores):
    add_entry(ctx, EntryType.BREAK_TIME, '12:00', '13:00', project_code='X')
    assert saved(stores, 'break_time_entries') == ['{"start":"12:00","end":"13:00"}']


def test_manual_entries_can_be_restricted(ctx, stores):
    stores.organization_policies.put(
        OrganizationPolicyKey.IS_MANUAL_ENTRY_PERMITTED, {'value': OrganizationPolicyValue.RESTRICTED},
    )
    errors = add_entry(ctx, EntryType.WORK, '09:00', '12:00')
    assert errors == {BlockId.TYPE: Label.MANUAL_ENTRY_RESTRICTED}
    assert stores.time_entries.get(KEY) is None


def test_edit_a_legacy_entry(ctx, stores):
    stores.time_entries.put(KEY, {
        'work_entries': ['09:00,12:00,X', '13:00,18:00'],
        'break_time_entries': ['12:00,13:00'],
        'time_off_entries': [],
    })
    errors = edit_entry(
        ctx, EntryType.WORK, Interval('09:00', '12:00', project_code='X'), '09:30', '12:00', project_code='Y',
    )
    assert errors == {}
    assert saved(stores) == [
        '{"start":"09:30","end":"12:00","project_code":"Y"}',
        '{"start":"13:00","end":"18:00"}',
    ]
    # the whole record is written back in the canonical format
    assert saved(stores, 'break_time_entries') == ['{"start":"12:00","end":"13:00"}']


def test_edit_validates_against_the_other_entries(ctx, stores):
    add_entry(ctx, EntryType.WORK, '09:00', '12:00')
    add_entry(ctx, EntryType.WORK, '13:00', '18:00')
    errors = edit_entry(ctx, EntryType.WORK, Interval('09:00', '12:00'), '09:00', '14:00')
    assert errors == {BlockId.END: Label.CONFLICT_ERROR_MESSAGE}


def test_delete_entry(ctx, stores):
    add_entry(ctx, EntryType.TIME_OFF, '14:00', '18:00')
    assert delete_entry(ctx, EntryType.TIME_OFF, Interval('14:00', '18:00'))
    assert saved(stores, 'time_off_entries') == []
    assert not delete_entry(ctx, EntryType.TIME_OFF, Interval('14:00', '18:00'))


def test_start_and_finish_work(ctx, stores):
    with patch('timesheet.time_entries.now_hhmm', return_value='09:00'):
        start_work(ctx, project_code='X')
    assert saved(stores) == ['{"start":"09:00","end":"","project_code":"X"}']
    with patch('timesheet.time_entries.now_hhmm', return_value='18:00'):
        finish_work(ctx)
    assert saved(stores) == ['{"start":"09:00","end":"18:00","project_code":"X"}']
    # nothing open any more
    assert finish_work(ctx) is None


def test_finish_work_only_closes_the_last_entry(ctx, stores):
    stores.time_entries.put(KEY, {'work_entries': ['08:00,', '09:00,10:00'], 'break_time_entries': [], 'time_off_entries': []})
    assert finish_work(ctx) is None
    assert saved(stores) == ['08:00,', '09:00,10:00']


def test_finish_break_time_closes_every_open_break(ctx, stores):
    stores.time_entries.put(KEY, {
        'work_entries': [],
        'break_time_entries': ['10:00,', '{"start":"10:30","end":"10:45"}', '{"start":"12:00","end":""}'],
        'time_off_entries': [],
    })
    with patch('timesheet.time_entries.now_hhmm', return_value='12:30'):
        finish_break_time(ctx)
    assert saved(stores, 'break_time_entries') == [
        '{"start":"10:00","end":"12:30"}',
        '{"start":"10:30","end":"10:45"}',
        '{"start":"12:00","end":"12:30"}',
    ]


def test_start_break_time(ctx, stores):
    with patch('timesheet.time_entries.now_hhmm', return_value='12:00'):
        start_break_time(ctx)
    assert saved(stores, 'break_time_entries') == ['{"start":"12:00","end":""}']


def test_lifelogs(ctx, stores):
    assert add_lifelog(ctx, '07:00', '08:00', 'Running') == {}
    assert add_lifelog(ctx, '07:00', '08:00', 'x' * 51) == {BlockId.WHAT_TO_DO: Label.TOO_LONG_INPUT}
    with patch('timesheet.time_entries.now_hhmm', return_value='20:00'):
        start_lifelog(ctx, 'Reading')
    with patch('timesheet.time_entries.now_hhmm', return_value='21:00'):
        finish_lifelog(ctx)
    assert stores.lifelogs.get(KEY)['logs'] == [
        '{"start":"07:00","end":"08:00","activity_label":"Running"}',
        '{"start":"20:00","end":"21:00","activity_label":"Reading"}',
    ]
    assert delete_lifelog(ctx, Interval('07:00', '08:00', activity_label='Running'))
    assert len(stores.lifelogs.get(KEY)['logs']) == 1


def test_suggest_projects_ranks_recently_used_codes(ctx, stores):
    for code in ('ALPHA', 'BETA', 'GAMMA'):
        stores.projects.put(code, {'name': code.title(), 'is_active': True})
    stores.projects.put('BETA-OLD', {'name': 'Retired', 'is_active': False})
    stores.time_entries.put('U1-20231020', {'work_entries': ['09:00,10:00,BETA', '10:00,11:00,BETA']})
    stores.time_entries.put('U1-20231101', {'work_entries': ['09:00,10:00,GAMMA']})
    assert [p['code'] for p in suggest_projects(ctx, '')] == ['BETA', 'GAMMA', 'ALPHA']
    assert [p['code'] for p in suggest_projects(ctx, 'BET')] == ['BETA']


class BrokenStore:
    def get(self, key):
        raise DatabaseError('database is locked')


def test_store_failures_carry_user_and_action(ctx, stores):
    stores.time_entries = BrokenStore()
    with pytest.raises(TimesheetOperationError) as e:
        start_work(ctx)
    assert str(e.value) == 'Failed to start work (user: U1, error: database is locked)'


def test_request_context_store_failures(stores):
    stores.user_settings = BrokenStore()
    with pytest.raises(TimesheetOperationError) as e:
        build_request_context('U1', stores=stores, user_details={'offset': 0, 'locale': 'en-US'})
    assert e.value.action == 'load user settings'
    assert e.value.user == 'U1'
