"""
Application services for scheduling meetings.

The scheduler coordinates reading busy meetings from a store adapter and
delegates the actual slot search to the domain-level ``SlotFinder``. Both
the participant directory and the meeting store are described by simple
protocols so they can be replaced by in-memory stubs in tests.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..domain.exceptions import StoreUnavailableError
from ..domain.models import (
    BusinessHours,
    MeetingDetails,
    Participant,
    ScheduledMeeting,
    SchedulingRequest,
    TimeRange,
)
from ..domain.results import ScheduleResult
from ..domain.slot_finder import SlotFinder, merge_intervals
from .locks import ParticipantLockRegistry

logger = logging.getLogger(__name__)


class ParticipantDirectoryProtocol(Protocol):
    """Protocol describing the participant lookups needed by the scheduler."""

    async def participants_exist(self, participant_ids: Iterable[int]) -> bool:
        """Return True iff every id resolves to a known participant."""

    async def get_participants(self, participant_ids: Iterable[int]) -> List[Participant]:
        """Return the known participants among the given ids."""

    async def get_participant(self, participant_id: int) -> Optional[Participant]:
        """Return one participant, or None if the id is unknown."""

    async def add_participant(self, name: str) -> Participant:
        """Create a participant and return it with its new id."""

    async def list_participants(self) -> List[Participant]:
        """Return all participants."""


class MeetingStoreProtocol(Protocol):
    """Protocol describing the meeting persistence needed by the scheduler."""

    async def find_overlapping_meetings(
        self,
        participant_ids: Iterable[int],
        window_start: DateTime,
        window_end: DateTime,
    ) -> List[ScheduledMeeting]:
        """Return meetings of any given participant that overlap the window."""

    async def insert_meeting(
        self,
        start: DateTime,
        end: DateTime,
        participant_ids: Sequence[int],
    ) -> ScheduledMeeting:
        """Persist a meeting and return it with its new id."""

    async def list_meetings(self) -> List[ScheduledMeeting]:
        """Return all meetings."""

    async def get_meeting(self, meeting_id: int) -> Optional[ScheduledMeeting]:
        """Return a meeting by id, or None."""

    async def meetings_for_participant(self, participant_id: int) -> List[ScheduledMeeting]:
        """Return the meetings a participant attends, ordered by start."""


class BusyIntervalCollector:
    """Turns the store's overlapping meetings into busy time ranges."""

    def __init__(self, store: MeetingStoreProtocol) -> None:
        self._store = store

    async def collect(
        self,
        participant_ids: Iterable[int],
        window_start: DateTime,
        window_end: DateTime,
    ) -> List[TimeRange]:
        """
        Fetch busy ranges for the participants inside ``[window_start, window_end)``.

        One range per meeting, unordered; shared meetings may repeat.
        """
        meetings = await self._store.find_overlapping_meetings(
            participant_ids=list(participant_ids),
            window_start=window_start,
            window_end=window_end,
        )

        logger.debug(
            "Found %d existing meeting(s) between %s and %s",
            len(meetings),
            window_start,
            window_end,
        )

        return [meeting.time_range for meeting in meetings]


class MeetingScheduler:
    """
    Orchestrates validation, busy-time retrieval, slot search and insert.

    Calls that share a participant are serialized through a
    ``ParticipantLockRegistry`` so two concurrent requests cannot both see
    the same gap and double-book it.
    """

    def __init__(
        self,
        directory: ParticipantDirectoryProtocol,
        store: MeetingStoreProtocol,
        business_hours: BusinessHours,
        locks: ParticipantLockRegistry | None = None,
    ) -> None:
        self._directory = directory
        self._store = store
        self._collector = BusyIntervalCollector(store)
        self._slot_finder = SlotFinder(business_hours=business_hours)
        self._locks = locks or ParticipantLockRegistry()

    @property
    def business_hours(self) -> BusinessHours:
        return self._slot_finder.business_hours

    async def schedule_meeting(
        self,
        participant_ids: Iterable[int],
        duration_minutes: int,
        earliest_start: DateTime,
        latest_end: DateTime,
    ) -> ScheduleResult:
        """Build a request from plain arguments and schedule it."""
        request = SchedulingRequest.create(
            participant_ids=participant_ids,
            duration_minutes=duration_minutes,
            earliest_start=earliest_start,
            latest_end=latest_end,
        )
        return await self.schedule(request)

    async def schedule(self, request: SchedulingRequest) -> ScheduleResult:
        """
        Schedule a meeting at the earliest slot all participants share.

        Malformed requests come back as ``INVALID_PARTICIPANTS``,
        ``INVALID_WINDOW`` or ``INVALID_DURATION``. A well-formed request that simply does not fit
        comes back as ``NO_SLOT``. Store failures come back as
        ``STORE_ERROR`` and leave nothing behind.
        """
        try:
            return await self._schedule(request)
        except StoreUnavailableError as exc:
            logger.error("Store unavailable while scheduling for %s: %s", request.participant_ids, exc)
            return ScheduleResult.store_error(str(exc))

    async def _schedule(self, request: SchedulingRequest) -> ScheduleResult:
        participant_ids = request.participant_ids

        if not participant_ids:
            logger.warning("Rejected meeting request without participants")
            return ScheduleResult.invalid_participants("At least one participant is required")

        if not await self._directory.participants_exist(participant_ids):
            logger.warning("Rejected meeting request with unknown participants %s", participant_ids)
            return ScheduleResult.invalid_participants("One or more participant IDs are invalid")

        if request.earliest_start >= request.latest_end:
            logger.warning(
                "Rejected meeting request with empty window %s - %s",
                request.earliest_start,
                request.latest_end,
            )
            return ScheduleResult.invalid_window("Earliest start time must be before latest end time")

        if request.duration_minutes < 1:
            logger.warning("Rejected meeting request with duration of %d min", request.duration_minutes)
            return ScheduleResult.invalid_duration("Duration must be at least one minute")

        if request.earliest_start + request.duration > request.latest_end:
            logger.info("Duration of %d min exceeds the requested window", request.duration_minutes)
            return ScheduleResult.no_slot("Duration exceeds the requested time window")

        async with self._locks.hold(participant_ids):
            busy = await self._collector.collect(
                participant_ids,
                request.earliest_start,
                request.latest_end,
            )

            slot = self._slot_finder.find_earliest_slot(
                merged_busy=merge_intervals(busy),
                duration=request.duration,
                earliest_start=request.earliest_start,
                latest_end=request.latest_end,
            )

            if slot is None:
                logger.info("No available time slot found for participants %s", participant_ids)
                return ScheduleResult.no_slot()

            meeting = await self._store.insert_meeting(
                start=slot.start,
                end=slot.end,
                participant_ids=participant_ids,
            )

        logger.info(
            "Scheduled meeting %s from %s to %s with participants %s",
            meeting.id,
            meeting.start,
            meeting.end,
            participant_ids,
        )
        return ScheduleResult.scheduled(meeting)

    async def list_meetings(self) -> List[MeetingDetails]:
        """Return all meetings with their participants' names."""
        meetings = await self._store.list_meetings()
        return [await self._with_names(meeting) for meeting in meetings]

    async def get_meeting(self, meeting_id: int) -> Optional[MeetingDetails]:
        """Return one meeting with participant names, or None if unknown."""
        meeting = await self._store.get_meeting(meeting_id)
        if meeting is None:
            return None
        return await self._with_names(meeting)

    async def get_participant(self, participant_id: int) -> Optional[Participant]:
        return await self._directory.get_participant(participant_id)

    async def participant_meetings(self, participant_id: int) -> Optional[List[MeetingDetails]]:
        """
        Return a participant's meetings with names, ordered by start.

        Returns None when the participant is unknown so callers can tell
        "no meetings" apart from "no such participant".
        """
        if await self._directory.get_participant(participant_id) is None:
            return None
        meetings = await self._store.meetings_for_participant(participant_id)
        return [await self._with_names(meeting) for meeting in meetings]

    async def _with_names(self, meeting: ScheduledMeeting) -> MeetingDetails:
        participants = await self._directory.get_participants(meeting.participant_ids)
        names_by_id = {participant.id: participant.name for participant in participants}
        return MeetingDetails(
            meeting=meeting,
            participant_names=[
                names_by_id[pid] for pid in meeting.participant_ids if pid in names_by_id
            ],
        )
