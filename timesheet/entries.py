"""
Entry codec for a single time interval.

Stored grammar, newest first:

    v2  JSON object      {"start":"09:00","end":"18:00","project_code":"X"}
                         lifelogs use "activity_label" ("what_to_do" is read too)
    v1  comma separated  start,end | start,end,project_code | start,end,project_code,type

Decoding accepts every version. Encoding always produces v2 and never carries
the kind, which is implied by the list (or store) holding the string.
"""

import json
import logging
from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import quote

from .constants import EntryType
from .exceptions import MalformedEntryError
from .time_utils import is_valid_time

logger = logging.getLogger(__name__)

# Same unreserved set as JavaScript's encodeURIComponent
_URI_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class Interval:
    start: str
    end: str = ''
    kind: Optional[EntryType] = None
    project_code: Optional[str] = None
    activity_label: Optional[str] = None

    @property
    def is_open(self):
        return not self.end

    def with_kind(self, kind):
        return replace(self, kind=kind)


def serialize_entry(entry):
    """Encode an Interval (or re-encode a stored string) in the canonical JSON form"""
    if isinstance(entry, str):
        decoded = deserialize_entry(entry)
        if decoded is None:
            raise MalformedEntryError(entry)
        entry = decoded
    data = {'start': entry.start, 'end': entry.end or ''}
    if entry.project_code:
        data['project_code'] = entry.project_code
    if entry.activity_label:
        data['activity_label'] = entry.activity_label
    return json.dumps(data, ensure_ascii=False, separators=(',', ':'))


def deserialize_entry(value):
    """Decode a stored entry string; returns None when the value is malformed"""
    if not value:
        return None
    if value.startswith('{'):
        return _checked(_deserialize_json(value), value)

    # Legacy comma separated format
    elems = value.split(',')
    if len(elems) not in (2, 3, 4):
        return None
    project_code = elems[2] if len(elems) >= 3 and elems[2] else None
    kind = EntryType.parse(elems[3]) if len(elems) == 4 else None
    return _checked(Interval(
        start=elems[0],
        end=elems[1] or '',
        kind=kind,
        project_code=project_code,
    ), value)


def _checked(interval, value):
    """None unless start is HH:MM and end is HH:MM or empty"""
    if interval is None:
        return None
    if not is_valid_time(interval.start) or (interval.end and not is_valid_time(interval.end)):
        logger.warning(f"Stored entry has an invalid time: {value!r}")
        return None
    return interval


def _deserialize_json(value):
    try:
        data = json.loads(value)
    except ValueError as e:
        logger.warning(f"Failed to parse a JSON entry {value!r}: {e}")
        return None
    if not isinstance(data, dict) or not data.get('start'):
        return None
    return Interval(
        start=data['start'],
        end=data.get('end') or '',
        kind=EntryType.parse(data.get('type')),
        project_code=data.get('project_code') or None,
        activity_label=data.get('activity_label') or data.get('what_to_do') or None,
    )


def is_legacy_entry(value):
    return bool(value) and not value.startswith('{')


def to_comparable(entry):
    """
    Build a normalized key for matching an edit/delete target against stored strings.

    Stored strings may be in either format, so comparing raw strings is unreliable.
    """
    if entry is None:
        return ''
    kind = entry.kind.value if entry.kind else ''
    project_code = quote(entry.project_code, safe=_URI_SAFE) if entry.project_code else ''
    activity_label = quote(entry.activity_label, safe=_URI_SAFE) if entry.activity_label else ''
    return '\t'.join([
        f"type:{kind}",
        f"start:{entry.start or ''}",
        f"end:{entry.end or ''}",
        f"project_code:{project_code}",
        f"activity_label:{activity_label}",
    ])


def comparable_key_of(raw, kind):
    """Comparable key of a stored string, with the kind taken from its list"""
    entry = deserialize_entry(raw)
    if entry is None:
        return None
    return to_comparable(entry.with_kind(kind))
