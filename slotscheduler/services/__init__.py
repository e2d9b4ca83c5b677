"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .locks import ParticipantLockRegistry
from .scheduler import (
    BusyIntervalCollector,
    MeetingScheduler,
    MeetingStoreProtocol,
    ParticipantDirectoryProtocol,
)

__all__ = [
    "BusyIntervalCollector",
    "MeetingScheduler",
    "MeetingStoreProtocol",
    "ParticipantDirectoryProtocol",
    "ParticipantLockRegistry",
]
