class ReminderError(Exception):
    """Base class for reminder engine errors."""


class ReminderConfigError(ReminderError):
    """A stored settings blob does not validate."""

    def __init__(self, key, message):
        self.key = key
        super().__init__(f"Invalid setting '{key}': {message}")


class ReminderDataError(ReminderError):
    """A read from a collaborator data source failed."""


class UnknownModuleError(ReminderError):
    """No reminder module is registered under the given key."""
