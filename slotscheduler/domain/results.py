"""
Tagged outcome of a scheduling call.

A request can be scheduled, well-formed but infeasible (no slot), malformed,
or fail on the store side. Each case is an explicit status so callers never
have to infer "infeasible" from the absence of an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import (
    InvalidDurationError,
    InvalidParticipantsError,
    InvalidTimeWindowError,
    StoreUnavailableError,
)
from .models import ScheduledMeeting


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    NO_SLOT = "no_slot"
    INVALID_PARTICIPANTS = "invalid_participants"
    INVALID_WINDOW = "invalid_window"
    INVALID_DURATION = "invalid_duration"
    STORE_ERROR = "store_error"


_ERRORS = {
    ScheduleStatus.INVALID_PARTICIPANTS: InvalidParticipantsError,
    ScheduleStatus.INVALID_WINDOW: InvalidTimeWindowError,
    ScheduleStatus.INVALID_DURATION: InvalidDurationError,
    ScheduleStatus.STORE_ERROR: StoreUnavailableError,
}


@dataclass(frozen=True)
class ScheduleResult:
    status: ScheduleStatus
    meeting: Optional[ScheduledMeeting] = None
    reason: str = ""

    @classmethod
    def scheduled(cls, meeting: ScheduledMeeting) -> "ScheduleResult":
        return cls(status=ScheduleStatus.SCHEDULED, meeting=meeting)

    @classmethod
    def no_slot(cls, reason: str = "No available time slot found") -> "ScheduleResult":
        return cls(status=ScheduleStatus.NO_SLOT, reason=reason)

    @classmethod
    def invalid_participants(cls, reason: str) -> "ScheduleResult":
        return cls(status=ScheduleStatus.INVALID_PARTICIPANTS, reason=reason)

    @classmethod
    def invalid_window(cls, reason: str) -> "ScheduleResult":
        return cls(status=ScheduleStatus.INVALID_WINDOW, reason=reason)

    @classmethod
    def invalid_duration(cls, reason: str) -> "ScheduleResult":
        return cls(status=ScheduleStatus.INVALID_DURATION, reason=reason)

    @classmethod
    def store_error(cls, reason: str) -> "ScheduleResult":
        return cls(status=ScheduleStatus.STORE_ERROR, reason=reason)

    @property
    def is_error(self) -> bool:
        return self.status in _ERRORS

    def raise_for_status(self) -> Optional[ScheduledMeeting]:
        """
        Raise the matching ``SchedulerError`` for error outcomes.

        Returns the meeting when scheduled and ``None`` when no slot was
        found, since that is a normal outcome.
        """
        error_cls = _ERRORS.get(self.status)
        if error_cls is not None:
            raise error_cls(self.reason)
        return self.meeting
