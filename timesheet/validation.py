import logging
import re

from .constants import BlockId, Label
from .entries import comparable_key_of, deserialize_entry, to_comparable
from .i18n import i18n
from .time_utils import is_valid_time, time_to_number

logger = logging.getLogger(__name__)

MAX_WHAT_TO_DO_LENGTH = 50
MAX_PROJECT_CODE_LENGTH = 20
MAX_PROJECT_NAME_LENGTH = 50
MAX_PROJECT_DESCRIPTION_LENGTH = 500

PROJECT_CODE_PATTERN = re.compile(r'[a-zA-Z0-9_-]*')


def _validate_start_and_end(start, end, language):
    """Format and ordering checks shared by every kind of submission"""
    errors = {}
    if not is_valid_time(start):
        errors[BlockId.START] = i18n(Label.INVALID_TIME_FORMAT, language)
    if end and not is_valid_time(end):
        errors[BlockId.END] = i18n(Label.INVALID_TIME_FORMAT, language)
    if errors:
        return errors
    if end and time_to_number(start) >= time_to_number(end):
        errors[BlockId.END] = i18n(Label.INVALID_START_AND_END, language)
    return errors


# -----------------------------------------
# Conflict detection
# -----------------------------------------

def detect_time_entry_conflicts(start, end, raw_entries, kind, edit_target_key=None, language='en'):
    """
    Check a candidate interval against the stored entries of the same kind.

    An existing [s, e) conflicts when the candidate's start falls in [s, e) or
    its end falls in (s, e]. Stops at the first conflicting entry. Open or
    undecodable stored entries never conflict.
    """
    errors = {}
    if not end:
        return errors
    if time_to_number(start) >= time_to_number(end):
        errors[BlockId.END] = i18n(Label.INVALID_START_AND_END, language)
        return errors

    _start, _end = time_to_number(start), time_to_number(end)
    for raw in raw_entries:
        if edit_target_key and comparable_key_of(raw, kind) == edit_target_key:
            continue
        existing = deserialize_entry(raw)
        if existing is None or existing.is_open:
            continue
        s, e = time_to_number(existing.start), time_to_number(existing.end)
        if s <= _start < e:
            errors[BlockId.START] = i18n(Label.CONFLICT_ERROR_MESSAGE, language)
        if s < _end <= e:
            errors[BlockId.END] = i18n(Label.CONFLICT_ERROR_MESSAGE, language)
        if errors:
            logger.info(f"Conflict detected between {start}-{end} and {raw}")
            return errors
    return errors


def validate_time_entry_submission(kind, start, end, day_record, edit_target=None, language='en'):
    """Field errors for a work / break time / time off submission ({} when valid)"""
    errors = _validate_start_and_end(start, end, language)
    if errors:
        return errors
    edit_target_key = to_comparable(edit_target.with_kind(kind)) if edit_target else None
    return detect_time_entry_conflicts(
        start,
        end,
        day_record.entries_of(kind),
        kind,
        edit_target_key=edit_target_key,
        language=language,
    )


def validate_lifelog(start, end, what_to_do, language='en'):
    errors = _validate_start_and_end(start, end, language)
    if errors:
        return errors
    if what_to_do and len(what_to_do) > MAX_WHAT_TO_DO_LENGTH:
        errors[BlockId.WHAT_TO_DO] = i18n(Label.TOO_LONG_INPUT, language)
    return errors


# -----------------------------------------
# Projects
# -----------------------------------------

def are_all_chars_allowed_for_project_code(code):
    return PROJECT_CODE_PATTERN.fullmatch(code) is not None


def validate_project_submission(code, name, description, projects, language='en', is_new=True):
    errors = {}
    if code is not None and len(code) > MAX_PROJECT_CODE_LENGTH:
        errors[BlockId.PROJECT_CODE] = i18n(Label.TOO_LONG_INPUT, language)
    elif code is not None and not are_all_chars_allowed_for_project_code(code):
        errors[BlockId.PROJECT_CODE] = i18n(Label.PROJECT_CODE_TEXT_VALIDATION_ERROR, language)
    elif code and is_new and projects.get(code) is not None:
        errors[BlockId.PROJECT_CODE] = i18n(Label.CODE_ALREADY_EXISTS, language)
    if name and len(name) > MAX_PROJECT_NAME_LENGTH:
        errors[BlockId.PROJECT_NAME] = i18n(Label.TOO_LONG_INPUT, language)
    if description and len(description) > MAX_PROJECT_DESCRIPTION_LENGTH:
        errors[BlockId.PROJECT_DESCRIPTION] = i18n(Label.TOO_LONG_INPUT, language)
    return errors
