from dataclasses import dataclass, field

from .constants import EntryType

_LIST_FIELDS = {
    EntryType.WORK: 'work_entries',
    EntryType.BREAK_TIME: 'break_time_entries',
    EntryType.TIME_OFF: 'time_off_entries',
}


def record_key(user, yyyymmdd):
    return f"{user}-{yyyymmdd}"


def split_record_key(key):
    """'U0123456789-20231101' -> ('U0123456789', '20231101')"""
    user, yyyymmdd = key.rsplit('-', 1)
    return user, yyyymmdd


@dataclass
class DayRecord:
    """One user's work / break time / time off entries for one day"""
    user_and_date: str
    work_entries: list = field(default_factory=list)
    break_time_entries: list = field(default_factory=list)
    time_off_entries: list = field(default_factory=list)

    @property
    def user(self):
        return split_record_key(self.user_and_date)[0]

    @property
    def yyyymmdd(self):
        return split_record_key(self.user_and_date)[1]

    def entries_of(self, kind):
        if kind not in _LIST_FIELDS:
            raise ValueError(f"{kind} entries are not stored in a day record")
        return getattr(self, _LIST_FIELDS[kind])

    def set_entries(self, kind, entries):
        if kind not in _LIST_FIELDS:
            raise ValueError(f"{kind} entries are not stored in a day record")
        setattr(self, _LIST_FIELDS[kind], list(entries))

    def is_empty(self):
        return not (self.work_entries or self.break_time_entries or self.time_off_entries)

    @classmethod
    def from_record(cls, record, key=None):
        record = record or {}
        return cls(
            user_and_date=record.get('user_and_date') or key,
            work_entries=list(record.get('work_entries') or []),
            break_time_entries=list(record.get('break_time_entries') or []),
            time_off_entries=list(record.get('time_off_entries') or []),
        )

    def to_record(self):
        return {
            'user_and_date': self.user_and_date,
            'work_entries': list(self.work_entries),
            'break_time_entries': list(self.break_time_entries),
            'time_off_entries': list(self.time_off_entries),
        }


@dataclass
class LifelogRecord:
    """One user's lifelogs for one day, stored separately from time entries"""
    user_and_date: str
    logs: list = field(default_factory=list)

    @property
    def user(self):
        return split_record_key(self.user_and_date)[0]

    @property
    def yyyymmdd(self):
        return split_record_key(self.user_and_date)[1]

    @classmethod
    def from_record(cls, record, key=None):
        record = record or {}
        return cls(
            user_and_date=record.get('user_and_date') or key,
            logs=list(record.get('logs') or []),
        )

    def to_record(self):
        return {'user_and_date': self.user_and_date, 'logs': list(self.logs)}
