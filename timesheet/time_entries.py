"""
User-facing time entry operations.

Every operation fetches the day record for ctx.user / ctx.yyyymmdd, changes it
in memory and saves it back (last write wins). Lists are re-serialized on
write, so legacy strings in a record are upgraded whenever that record changes.
"""

import logging

from .constants import TIME_ENTRY_TYPES, BlockId, EntryType, Label
from .datastore import (
    fetch_all_active_projects, fetch_lifelog, fetch_recent_time_entries, fetch_time_entry,
    is_manual_entry_permitted, save_lifelog, save_time_entry, store_operation,
)
from .entries import Interval, comparable_key_of, deserialize_entry, serialize_entry, to_comparable
from .exceptions import MalformedEntryError
from .i18n import i18n
from .time_utils import now_hhmm
from .validation import validate_lifelog, validate_time_entry_submission

logger = logging.getLogger(__name__)


def _canonical(values):
    result = []
    for value in values:
        try:
            result.append(serialize_entry(value))
        except MalformedEntryError as e:
            # Keep the original so the corruption stays visible in reports
            logger.error(f"Kept a malformed entry as is: {e}")
            result.append(value)
    return result


def _save(ctx, day_record, kind, entries):
    day_record.set_entries(kind, entries)
    for other in TIME_ENTRY_TYPES:
        day_record.set_entries(other, _canonical(day_record.entries_of(other)))
    return save_time_entry(ctx.stores.time_entries, day_record)


def _index_of(values, kind, target):
    key = to_comparable(target.with_kind(kind))
    for i, raw in enumerate(values):
        if comparable_key_of(raw, kind) == key:
            return i
    return None


def _manual_entry_errors(ctx):
    if is_manual_entry_permitted(ctx.stores.organization_policies):
        return {}
    return {BlockId.TYPE: i18n(Label.MANUAL_ENTRY_RESTRICTED, ctx.language)}


# -----------------------------------------
# Work / break time / time off
# -----------------------------------------

def add_entry(ctx, kind, start, end, project_code=None):
    """Validate and append one entry; returns field errors ({} when saved)"""
    with store_operation('add an entry', ctx.user):
        errors = _manual_entry_errors(ctx)
        if errors:
            return errors
        day_record = fetch_time_entry(ctx.stores.time_entries, ctx.user, yyyymmdd=ctx.yyyymmdd)
        errors = validate_time_entry_submission(kind, start, end, day_record, language=ctx.language)
        if errors:
            return errors
        entries = day_record.entries_of(kind)
        entries.append(serialize_entry(Interval(
            start=start,
            end=end or '',
            project_code=project_code if kind == EntryType.WORK else None,
        )))
        _save(ctx, day_record, kind, entries)
        logger.info(f"Added a {kind.value} entry {start}-{end} for {ctx.user}")
        return {}


def edit_entry(ctx, kind, edit_target, start, end, project_code=None):
    """Replace `edit_target` (matched across storage formats); returns field errors"""
    with store_operation('edit an entry', ctx.user):
        errors = _manual_entry_errors(ctx)
        if errors:
            return errors
        day_record = fetch_time_entry(ctx.stores.time_entries, ctx.user, yyyymmdd=ctx.yyyymmdd)
        errors = validate_time_entry_submission(
            kind, start, end, day_record, edit_target=edit_target, language=ctx.language,
        )
        if errors:
            return errors
        entries = day_record.entries_of(kind)
        index = _index_of(entries, kind, edit_target)
        replacement = serialize_entry(Interval(
            start=start,
            end=end or '',
            project_code=project_code if kind == EntryType.WORK else None,
        ))
        if index is None:
            logger.warning(f"Edit target not found, appending instead: {edit_target}")
            entries.append(replacement)
        else:
            entries[index] = replacement
        _save(ctx, day_record, kind, entries)
        return {}


def delete_entry(ctx, kind, target):
    """Remove `target`; returns False when nothing matched"""
    with store_operation('delete an entry', ctx.user):
        day_record = fetch_time_entry(ctx.stores.time_entries, ctx.user, yyyymmdd=ctx.yyyymmdd)
        entries = day_record.entries_of(kind)
        index = _index_of(entries, kind, target)
        if index is None:
            return False
        del entries[index]
        _save(ctx, day_record, kind, entries)
        return True


def _start(ctx, kind, action, project_code=None):
    with store_operation(action, ctx.user):
        day_record = fetch_time_entry(ctx.stores.time_entries, ctx.user, yyyymmdd=ctx.yyyymmdd)
        entries = day_record.entries_of(kind)
        entries.append(serialize_entry(Interval(start=now_hhmm(ctx.offset), project_code=project_code)))
        return _save(ctx, day_record, kind, entries)


def start_work(ctx, project_code=None):
    return _start(ctx, EntryType.WORK, 'start work', project_code=project_code)


def finish_work(ctx):
    """Close the last work entry if it is still open; returns None when there was nothing to close"""
    with store_operation('finish work', ctx.user):
        day_record = fetch_time_entry(ctx.stores.time_entries, ctx.user, yyyymmdd=ctx.yyyymmdd)
        entries = day_record.work_entries
        if not entries:
            return None
        last = deserialize_entry(entries[-1])
        if last is None or not last.is_open:
            return None
        entries[-1] = serialize_entry(Interval(
            start=last.start, end=now_hhmm(ctx.offset), project_code=last.project_code,
        ))
        return _save(ctx, day_record, EntryType.WORK, entries)


def start_break_time(ctx):
    return _start(ctx, EntryType.BREAK_TIME, 'start break time')


def finish_break_time(ctx):
    """Close every open break time entry"""
    with store_operation('finish break time', ctx.user):
        day_record = fetch_time_entry(ctx.stores.time_entries, ctx.user, yyyymmdd=ctx.yyyymmdd)
        entries = day_record.break_time_entries
        end = now_hhmm(ctx.offset)
        closed = False
        for i, raw in enumerate(entries):
            entry = deserialize_entry(raw)
            if entry and entry.is_open:
                entries[i] = serialize_entry(Interval(start=entry.start, end=end))
                closed = True
        if not closed:
            return None
        return _save(ctx, day_record, EntryType.BREAK_TIME, entries)


# -----------------------------------------
# Lifelogs
# -----------------------------------------

def add_lifelog(ctx, start, end, activity_label):
    with store_operation('add a lifelog', ctx.user):
        errors = validate_lifelog(start, end, activity_label, language=ctx.language)
        if errors:
            return errors
        lifelog = fetch_lifelog(ctx.stores.lifelogs, ctx.user, yyyymmdd=ctx.yyyymmdd)
        lifelog.logs = _canonical(lifelog.logs)
        lifelog.logs.append(serialize_entry(Interval(
            start=start, end=end or '', activity_label=activity_label or None,
        )))
        save_lifelog(ctx.stores.lifelogs, lifelog)
        return {}


def start_lifelog(ctx, activity_label):
    with store_operation('start a lifelog', ctx.user):
        lifelog = fetch_lifelog(ctx.stores.lifelogs, ctx.user, yyyymmdd=ctx.yyyymmdd)
        lifelog.logs = _canonical(lifelog.logs)
        lifelog.logs.append(serialize_entry(Interval(
            start=now_hhmm(ctx.offset), activity_label=activity_label or None,
        )))
        return save_lifelog(ctx.stores.lifelogs, lifelog)


def finish_lifelog(ctx):
    """Close every open lifelog"""
    with store_operation('finish a lifelog', ctx.user):
        lifelog = fetch_lifelog(ctx.stores.lifelogs, ctx.user, yyyymmdd=ctx.yyyymmdd)
        end = now_hhmm(ctx.offset)
        closed = False
        for i, raw in enumerate(lifelog.logs):
            entry = deserialize_entry(raw)
            if entry and entry.is_open:
                lifelog.logs[i] = serialize_entry(Interval(
                    start=entry.start, end=end, activity_label=entry.activity_label,
                ))
                closed = True
        if not closed:
            return None
        lifelog.logs = _canonical(lifelog.logs)
        return save_lifelog(ctx.stores.lifelogs, lifelog)


def delete_lifelog(ctx, target):
    with store_operation('delete a lifelog', ctx.user):
        lifelog = fetch_lifelog(ctx.stores.lifelogs, ctx.user, yyyymmdd=ctx.yyyymmdd)
        index = _index_of(lifelog.logs, EntryType.LIFELOG, target)
        if index is None:
            return False
        del lifelog.logs[index]
        lifelog.logs = _canonical(lifelog.logs)
        save_lifelog(ctx.stores.lifelogs, lifelog)
        return True


# -----------------------------------------
# Project suggestions
# -----------------------------------------

def suggest_projects(ctx, keyword, limit=100):
    """Active projects matching `keyword`, the ones this user logged most recently first"""
    with store_operation('search projects', ctx.user):
        ranking = {}
        for day_record in fetch_recent_time_entries(ctx.stores.time_entries, ctx.user, ctx.yyyymm):
            for raw in day_record.work_entries:
                entry = deserialize_entry(raw)
                if entry and entry.project_code:
                    ranking[entry.project_code] = ranking.get(entry.project_code, 0) + 1
        keyword = keyword or ''
        matched = [
            p for p in fetch_all_active_projects(ctx.stores.projects)
            if keyword in p['code'] or keyword in (p.get('name') or '')
            or keyword in (p.get('description') or '')
        ]
        matched.sort(key=lambda p: ranking.get(p['code'], 0), reverse=True)
        return matched[:limit]
