from enum import Enum


class EntryType(str, Enum):
    WORK = 'work'
    BREAK_TIME = 'break_time'
    TIME_OFF = 'time_off'
    LIFELOG = 'lifelog'

    @classmethod
    def parse(cls, value):
        """Return the matching EntryType or None for empty/unknown values"""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# Kinds stored in the time entry record (lifelogs live in their own store)
TIME_ENTRY_TYPES = (EntryType.WORK, EntryType.BREAK_TIME, EntryType.TIME_OFF)


class Emoji:
    WORK = ':briefcase:'
    BREAK_TIME = ':knife_fork_plate:'
    TIME_OFF = ':no_bell:'
    HOLIDAY = ':palm_tree:'
    LIFELOG = ':ledger:'
    WARNING = ':warning:'


class Label:
    APP_NAME = 'Timesheet'
    WORK = 'Work'
    OVERTIME_WORK = 'Overtime Work'
    NIGHT_SHIFT_WORK = 'Night Shift Work'
    BREAK_TIME = 'Break time'
    TIME_OFF = 'Time off'
    HOLIDAY = 'Holiday'
    LIFELOG = 'Lifelog'
    NUM_OF_WORKING_DAYS = '# of Working Days'
    MONTHLY_REPORT = 'Monthly Report'
    PROJECT_SUMMARY = 'Projects'
    LIFELOG_SUMMARY = 'Lifelogs'
    DAYS = 'days'
    HOURS = 'hours'
    MINUTES = 'minutes'
    DAY = 'day'
    HOUR = 'hour'
    MINUTE = 'minute'

    # Countries
    JAPAN = 'Japan'
    UNITED_STATES = 'United States'

    # Report messages
    HERE_IS_THE_REPORT_YOU_REQUESTED = 'Here is the monthly report you requested!'
    REPORT_HAS_BEEN_SENT_IN_DM = ':wave: The report file has been sent to you in DM!'
    FAILED_TO_GENERATE_REPORT = (
        ':x: Failed to generate a report for you! Please contact the maintainers of this app.'
    )
    ADMIN_ONLY = 'Sorry, only admins can use this command.'
    NO_ENTRIES_YET = 'No entries yet.'

    # Error messages
    INVALID_START_AND_END = 'The combination of start and end seems to be incorrect'
    INVALID_TIME_FORMAT = 'Time must be in the HH:MM format'
    CONFLICT_ERROR_MESSAGE = 'There may be a conflict with existing entries'
    TOO_LONG_INPUT = 'Too long input'
    PROJECT_CODE_TEXT_VALIDATION_ERROR = (
        'A project code can consist of alphanumeric characters, dashes (-), and underscores(_).'
    )
    CODE_ALREADY_EXISTS = 'The code already exists'
    MANUAL_ENTRY_RESTRICTED = 'Manual entries are restricted by your organization'

    # Labor laws
    LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_6_WORK_HOURS = (
        'Under the Labor Laws of Japan, you are entitled to a 45-minute break '
        'if your working time exceeds 6 hours.'
    )
    LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_8_WORK_HOURS = (
        'Under the Labor Laws of Japan, you are entitled to a 1-hour break '
        'if your working time exceeds 8 hours.'
    )


EMOJI_BY_TYPE = {
    EntryType.WORK: Emoji.WORK,
    EntryType.BREAK_TIME: Emoji.BREAK_TIME,
    EntryType.TIME_OFF: Emoji.TIME_OFF,
    EntryType.LIFELOG: Emoji.LIFELOG,
}

LABEL_BY_TYPE = {
    EntryType.WORK: Label.WORK,
    EntryType.BREAK_TIME: Label.BREAK_TIME,
    EntryType.TIME_OFF: Label.TIME_OFF,
    EntryType.LIFELOG: Label.LIFELOG,
}


class CountryCode:
    UNITED_STATES = 'us'
    JAPAN = 'jp'


class AppModeCode:
    WORK = 'work'
    WORK_AND_LIFELOGS = 'work_and_lifelogs'


class BlockId:
    TYPE = 'type'
    START = 'start'
    END = 'end'
    WHAT_TO_DO = 'what_to_do'
    PROJECT_CODE = 'code'
    PROJECT_NAME = 'name'
    PROJECT_DESCRIPTION = 'description'


class CallbackId:
    MAIN_VIEW = 'main_view'
    ADD_ENTRY = 'add_entry'
    EDIT_ENTRY = 'edit_entry'
    ADD_LIFELOG = 'add_lifelog'


class OrganizationPolicyKey:
    IS_MANUAL_ENTRY_PERMITTED = 'is_manual_entry_permitted'
    COUNTRY = 'country'


class OrganizationPolicyValue:
    PERMITTED = 'permitted'
    RESTRICTED = 'restricted'
