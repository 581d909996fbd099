class WeeklyRemindersError(Exception):
    """Base class for errors raised by the reminders pipeline"""


class AcquisitionError(WeeklyRemindersError):
    """The scrape could not reach the point of harvesting document links"""


class ScrapeCancelled(AcquisitionError):
    """The caller cancelled the scrape between two steps"""


class ResponseValidationError(WeeklyRemindersError):
    """A provider answered with text that is not a usable artifact"""


class ProviderNotConfiguredError(WeeklyRemindersError):
    """A provider was called without its credentials"""


class InvalidRunTransition(WeeklyRemindersError):
    """A scrape run was finalized twice or moved to an unknown status"""
