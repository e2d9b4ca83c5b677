"""
In-memory participant directory and meeting store.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

import pendulum
from pendulum import DateTime

from ..domain.exceptions import StoreUnavailableError
from ..domain.models import Participant, ScheduledMeeting, TimeRange


class InMemoryStore:
    """
    Keeps participants and meetings in dictionaries with auto-increment ids.

    Implements both ``ParticipantDirectoryProtocol`` and
    ``MeetingStoreProtocol``. Handy for tests and as the base for the
    JSON-file store.
    """

    def __init__(
        self,
        participants: Iterable[Participant] = (),
        meetings: Iterable[ScheduledMeeting] = (),
    ):
        self._participants: Dict[int, Participant] = {}
        self._meetings: Dict[int, ScheduledMeeting] = {}

        for participant in participants:
            self._participants[participant.id] = participant
        for meeting in meetings:
            self._meetings[meeting.id] = meeting

    @staticmethod
    def _next_id(existing: Dict[int, object]) -> int:
        return max(existing, default=0) + 1

    # Participant directory

    async def participants_exist(self, participant_ids: Iterable[int]) -> bool:
        return all(pid in self._participants for pid in participant_ids)

    async def get_participants(self, participant_ids: Iterable[int]) -> List[Participant]:
        return [
            self._participants[pid]
            for pid in dict.fromkeys(participant_ids)
            if pid in self._participants
        ]

    async def get_participant(self, participant_id: int) -> Optional[Participant]:
        return self._participants.get(participant_id)

    async def add_participant(self, name: str) -> Participant:
        name = name.strip()
        if not 1 <= len(name) <= 100:
            raise ValueError("Name must be between 1 and 100 characters")

        participant = Participant(id=self._next_id(self._participants), name=name)
        self._participants[participant.id] = participant
        try:
            self._changed()
        except StoreUnavailableError:
            del self._participants[participant.id]
            raise
        return participant

    async def list_participants(self) -> List[Participant]:
        return sorted(self._participants.values(), key=lambda p: p.id)

    # Meeting store

    async def find_overlapping_meetings(
        self,
        participant_ids: Iterable[int],
        window_start: DateTime,
        window_end: DateTime,
    ) -> List[ScheduledMeeting]:
        wanted = set(participant_ids)
        return [
            meeting
            for meeting in self._meetings.values()
            if meeting.start < window_end
            and meeting.end > window_start
            and meeting.includes_any(wanted)
        ]

    async def insert_meeting(
        self,
        start: DateTime,
        end: DateTime,
        participant_ids: Sequence[int],
    ) -> ScheduledMeeting:
        meeting = ScheduledMeeting(
            id=self._next_id(self._meetings),
            time_range=TimeRange(start=start, end=end),
            participant_ids=tuple(participant_ids),
        )
        self._meetings[meeting.id] = meeting
        try:
            self._changed()
        except StoreUnavailableError:
            del self._meetings[meeting.id]
            raise
        return meeting

    async def list_meetings(self) -> List[ScheduledMeeting]:
        return sorted(self._meetings.values(), key=lambda m: m.id)

    async def get_meeting(self, meeting_id: int) -> Optional[ScheduledMeeting]:
        return self._meetings.get(meeting_id)

    async def meetings_for_participant(self, participant_id: int) -> List[ScheduledMeeting]:
        return sorted(
            (m for m in self._meetings.values() if participant_id in m.participant_ids),
            key=lambda m: m.start,
        )

    def _changed(self) -> None:
        """Hook for subclasses that persist after every write."""


SAMPLE_PARTICIPANTS = [
    "Alice Johnson",
    "Bob Smith",
    "Charlie Brown",
    "Diana Prince",
    "Eve Wilson",
]


async def seed_sample_data(store: InMemoryStore, day: DateTime | None = None) -> bool:
    """
    Seed five sample participants and two meetings on ``day``.

    Does nothing if the store already has participants. Returns True when
    data was added.
    """
    if await store.list_participants():
        return False

    day = (day or pendulum.today()).start_of("day")

    people = [await store.add_participant(name) for name in SAMPLE_PARTICIPANTS]

    await store.insert_meeting(day.set(hour=10), day.set(hour=11), [people[0].id, people[1].id])
    await store.insert_meeting(day.set(hour=14), day.set(hour=15), [people[1].id, people[2].id])
    return True
