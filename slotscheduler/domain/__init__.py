"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    BusinessHours,
    MeetingDetails,
    Participant,
    ScheduledMeeting,
    SchedulingRequest,
    TimeRange,
)
from .results import ScheduleResult, ScheduleStatus
from .slot_finder import SlotFinder, merge_intervals

__all__ = [
    "BusinessHours",
    "MeetingDetails",
    "Participant",
    "ScheduledMeeting",
    "SchedulingRequest",
    "TimeRange",
    "ScheduleResult",
    "ScheduleStatus",
    "SlotFinder",
    "merge_intervals",
]
