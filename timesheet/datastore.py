import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass

from django.db import DatabaseError

from .constants import AppModeCode, OrganizationPolicyKey, OrganizationPolicyValue
from .entries import is_legacy_entry, serialize_entry
from .exceptions import MalformedEntryError, TimesheetOperationError
from .models import (
    ActiveView, AdminUser, Lifelog, OrganizationPolicy, Project, PublicHoliday,
    TimeEntry, UserSettings,
)
from .records import DayRecord, LifelogRecord, record_key, split_record_key
from .time_utils import previous_month, today_yyyymmdd

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(action, user):
    """Re-raise datastore failures with the user and action attached"""
    try:
        yield
    except DatabaseError as e:
        logger.error(f"Failed to {action} (user: {user}, error: {e})")
        raise TimesheetOperationError(action, user, e) from e


# -----------------------------------------
# Record store contract
# -----------------------------------------

class RecordStore:
    """Key-value access to one datastore; records are plain dicts"""

    key_field = None

    def get(self, key):
        raise NotImplementedError

    def put(self, key, record):
        raise NotImplementedError

    def query_by_prefix(self, prefix):
        raise NotImplementedError

    def query_by_contains(self, substring):
        raise NotImplementedError

    def delete_by_key(self, key):
        raise NotImplementedError


class ModelRecordStore(RecordStore):
    """RecordStore over a Django model whose primary key is the record key"""

    def __init__(self, model):
        self.model = model
        self.key_field = model._meta.pk.name
        # auto-managed timestamps are not part of the record
        self.fields = [
            f.name for f in model._meta.concrete_fields
            if not getattr(f, 'auto_now', False)
        ]

    def get(self, key):
        return self.model.objects.filter(pk=key).values(*self.fields).first()

    def put(self, key, record):
        defaults = {
            name: value for name, value in record.items()
            if name in self.fields and name != self.key_field
        }
        self.model.objects.update_or_create(pk=key, defaults=defaults)
        return self.get(key)

    def query_by_prefix(self, prefix):
        lookup = {f"{self.key_field}__startswith": prefix}
        return list(self.model.objects.filter(**lookup).order_by(self.key_field).values(*self.fields))

    def query_by_contains(self, substring):
        lookup = {f"{self.key_field}__contains": substring}
        return list(self.model.objects.filter(**lookup).order_by(self.key_field).values(*self.fields))

    def delete_by_key(self, key):
        self.model.objects.filter(pk=key).delete()


class InMemoryRecordStore(RecordStore):
    """Dict-backed RecordStore for local runs and tests"""

    def __init__(self, key_field, records=None):
        self.key_field = key_field
        self._records = {}
        for record in records or []:
            self.put(record[key_field], record)

    def get(self, key):
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    def put(self, key, record):
        stored = copy.deepcopy(record)
        stored[self.key_field] = key
        self._records[key] = stored
        return copy.deepcopy(stored)

    def query_by_prefix(self, prefix):
        return [copy.deepcopy(self._records[k]) for k in sorted(self._records) if k.startswith(prefix)]

    def query_by_contains(self, substring):
        return [copy.deepcopy(self._records[k]) for k in sorted(self._records) if substring in k]

    def delete_by_key(self, key):
        self._records.pop(key, None)


@dataclass
class Datastores:
    time_entries: RecordStore
    lifelogs: RecordStore
    user_settings: RecordStore
    public_holidays: RecordStore
    admin_users: RecordStore
    projects: RecordStore
    organization_policies: RecordStore
    active_views: RecordStore


def model_datastores():
    return Datastores(
        time_entries=ModelRecordStore(TimeEntry),
        lifelogs=ModelRecordStore(Lifelog),
        user_settings=ModelRecordStore(UserSettings),
        public_holidays=ModelRecordStore(PublicHoliday),
        admin_users=ModelRecordStore(AdminUser),
        projects=ModelRecordStore(Project),
        organization_policies=ModelRecordStore(OrganizationPolicy),
        active_views=ModelRecordStore(ActiveView),
    )


def in_memory_datastores():
    return Datastores(
        time_entries=InMemoryRecordStore('user_and_date'),
        lifelogs=InMemoryRecordStore('user_and_date'),
        user_settings=InMemoryRecordStore('user'),
        public_holidays=InMemoryRecordStore('country_id_and_year'),
        admin_users=InMemoryRecordStore('user'),
        projects=InMemoryRecordStore('code'),
        organization_policies=InMemoryRecordStore('key'),
        active_views=InMemoryRecordStore('view_id'),
    )


# -----------------------------------------
# Time entries
# -----------------------------------------

def fetch_time_entry(te, user, offset=0, yyyymmdd=None):
    """Fetch one day record; an empty record is returned when nothing is saved yet"""
    key = record_key(user, yyyymmdd or today_yyyymmdd(offset))
    return DayRecord.from_record(te.get(key), key)


def save_time_entry(te, day_record):
    saved = te.put(day_record.user_and_date, day_record.to_record())
    return DayRecord.from_record(saved, day_record.user_and_date)


def fetch_month_time_entries(te, user, yyyymm):
    records = te.query_by_prefix(record_key(user, yyyymm))
    return [DayRecord.from_record(r) for r in records]


def fetch_recent_time_entries(te, user, yyyymm, limit=100):
    """Day records of this month and the previous one, oldest first"""
    records = te.query_by_prefix(record_key(user, yyyymm))
    records += te.query_by_prefix(record_key(user, previous_month(yyyymm)))
    records.sort(key=lambda r: r['user_and_date'])
    return [DayRecord.from_record(r) for r in records[-limit:]]


def fetch_all_member_month_time_entries(te, yyyymm):
    """Group every user's day records for a month by user id"""
    result = {}
    for record in te.query_by_contains(f"-{yyyymm}"):
        day_record = DayRecord.from_record(record)
        user, yyyymmdd = split_record_key(day_record.user_and_date)
        # "-YYYYMM" could also match inside a user id
        if not yyyymmdd.startswith(yyyymm):
            continue
        result.setdefault(user, []).append(day_record)
    return result


# -----------------------------------------
# Lifelogs
# -----------------------------------------

def fetch_lifelog(lifelogs, user, offset=0, yyyymmdd=None):
    key = record_key(user, yyyymmdd or today_yyyymmdd(offset))
    return LifelogRecord.from_record(lifelogs.get(key), key)


def save_lifelog(lifelogs, lifelog_record):
    saved = lifelogs.put(lifelog_record.user_and_date, lifelog_record.to_record())
    return LifelogRecord.from_record(saved, lifelog_record.user_and_date)


def fetch_month_lifelogs(lifelogs, user, yyyymm):
    records = lifelogs.query_by_prefix(record_key(user, yyyymm))
    return [LifelogRecord.from_record(r) for r in records]


def fetch_all_member_month_lifelogs(lifelogs, yyyymm):
    result = {}
    for record in lifelogs.query_by_contains(f"-{yyyymm}"):
        lifelog = LifelogRecord.from_record(record)
        user, yyyymmdd = split_record_key(lifelog.user_and_date)
        if not yyyymmdd.startswith(yyyymm):
            continue
        result.setdefault(user, []).append(lifelog)
    return result


# -----------------------------------------
# User settings / reference data
# -----------------------------------------

def fetch_user_settings(us, user):
    """Saved settings for a user, or {} when the user has not saved any yet"""
    return us.get(user) or {}


def save_user_settings(us, user, attributes):
    return us.put(user, {**attributes, 'user': user})


def is_lifelog_enabled(settings):
    return settings.get('app_mode') == AppModeCode.WORK_AND_LIFELOGS


def fetch_holidays(ph, country_id, year):
    """Holidays as YYYYMMDD strings; no data for the country/year means no holidays"""
    if not country_id:
        return []
    record = ph.get(f"{country_id}-{year}")
    if not record:
        return []
    return list(record.get('holidays') or [])


def is_admin_user(au, user):
    """Everyone is an admin until at least one admin user is registered"""
    if not au.query_by_prefix(''):
        return True
    return au.get(user) is not None


def is_manual_entry_permitted(op):
    record = op.get(OrganizationPolicyKey.IS_MANUAL_ENTRY_PERMITTED)
    if record and record.get('value'):
        return record['value'] != OrganizationPolicyValue.RESTRICTED
    return True


def fetch_organization_country_id(op):
    record = op.get(OrganizationPolicyKey.COUNTRY)
    return record.get('value') if record else None


# -----------------------------------------
# Projects
# -----------------------------------------

def fetch_all_active_projects(p):
    return [project for project in p.query_by_prefix('') if project.get('is_active')]


# -----------------------------------------
# Legacy format upgrade
# -----------------------------------------

def _upgrade_list(values):
    upgraded = []
    for value in values:
        if is_legacy_entry(value):
            try:
                value = serialize_entry(value)
            except MalformedEntryError as e:
                # Left untouched so that reports keep surfacing the corruption
                logger.error(f"Skipped upgrading a malformed entry: {e}")
        upgraded.append(value)
    return upgraded, upgraded != list(values)


def upgrade_legacy_entries(stores):
    """
    Rewrite legacy comma separated entries as JSON.

    Reads never do this on their own; run it explicitly (see upgrade_legacy_entries.py).
    Returns the number of records rewritten.
    """
    upgraded_count = 0
    for record in stores.time_entries.query_by_prefix(''):
        day_record = DayRecord.from_record(record)
        changed = False
        for name in ('work_entries', 'break_time_entries', 'time_off_entries'):
            values, list_changed = _upgrade_list(getattr(day_record, name))
            if list_changed:
                setattr(day_record, name, values)
                changed = True
        if changed:
            save_time_entry(stores.time_entries, day_record)
            upgraded_count += 1
            logger.info(f"Upgraded legacy entries in {day_record.user_and_date}")

    for record in stores.lifelogs.query_by_prefix(''):
        lifelog = LifelogRecord.from_record(record)
        values, changed = _upgrade_list(lifelog.logs)
        if changed:
            lifelog.logs = values
            save_lifelog(stores.lifelogs, lifelog)
            upgraded_count += 1
            logger.info(f"Upgraded legacy lifelogs in {lifelog.user_and_date}")
    return upgraded_count
