"""
Domain-specific exception hierarchy for the slot scheduler.
"""


class SchedulerError(Exception):
    """Base class for all application-level errors."""


class InvalidRequestError(SchedulerError):
    """Raised when a scheduling request is malformed."""


class InvalidParticipantsError(InvalidRequestError):
    """Raised when one or more participant ids are unknown."""


class InvalidTimeWindowError(InvalidRequestError):
    """Raised when the earliest start is not before the latest end."""


class InvalidDurationError(InvalidRequestError):
    """Raised when the requested duration is not a positive number of minutes."""


class StoreUnavailableError(SchedulerError):
    """Raised when the participant directory or meeting store cannot be reached."""
