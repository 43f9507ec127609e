class MalformedEntryError(ValueError):
    """A stored entry string could not be decoded (data corruption)"""

    def __init__(self, raw, record_key=None):
        self.raw = raw
        self.record_key = record_key
        message = f"Unexpected entry detected (entry: {raw!r}"
        if record_key:
            message += f", record: {record_key}"
        super().__init__(message + ")")


class TimesheetOperationError(Exception):
    """A store or Slack API call failed while serving a user action"""

    def __init__(self, action, user, cause):
        self.action = action
        self.user = user
        self.cause = cause
        super().__init__(f"Failed to {action} (user: {user}, error: {cause})")
