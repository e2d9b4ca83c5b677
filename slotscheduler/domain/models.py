"""
Domain models for time ranges, business hours and scheduled meetings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time, timedelta
from typing import Iterable, List, Tuple

import pendulum
from pendulum import DateTime


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def touches(self, other: "TimeRange") -> bool:
        """Check if the ranges overlap or meet back-to-back."""
        return self.start <= other.end and self.end >= other.start

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class BusinessHours:
    """
    Daily window during which meetings may be scheduled.

    The same window applies to every participant. Instances are passed
    explicitly to whatever needs them; there is no module-level default.
    """
    start_of_day: time = time(9, 0)
    end_of_day: time = time(17, 0)

    def __post_init__(self):
        if self.start_of_day >= self.end_of_day:
            raise ValueError(
                f"Start of day {self.start_of_day} must be before end of day {self.end_of_day}"
            )

    @classmethod
    def from_config(cls, config) -> "BusinessHours":
        """Build from a ``BusinessHoursConfig``."""
        return cls(start_of_day=config.get_start_time(), end_of_day=config.get_end_time())

    def opening(self, day: DateTime) -> DateTime:
        """Business start on the calendar day of ``day``."""
        return day.set(
            hour=self.start_of_day.hour,
            minute=self.start_of_day.minute,
            second=self.start_of_day.second,
            microsecond=0,
        )

    def clamp(self, instant: DateTime) -> DateTime:
        """
        Move an instant forward to the nearest point inside business hours.

        Before opening snaps to opening on the same day, after closing snaps
        to opening on the next day. Closing time itself is left alone.
        """
        time_of_day = instant.time()

        if time_of_day < self.start_of_day:
            return self.opening(instant)

        if time_of_day > self.end_of_day:
            return self.opening(instant.add(days=1))

        return instant

    def contains(self, start: DateTime, end: DateTime) -> bool:
        """
        Check that ``[start, end)`` sits inside business hours of one day.

        Ranges crossing midnight or running past closing are rejected.
        """
        if start.date() != end.date():
            return False

        return start.time() >= self.start_of_day and end.time() <= self.end_of_day


@dataclass(frozen=True)
class Participant:
    """A person that can be invited to meetings."""
    id: int
    name: str


@dataclass(frozen=True)
class SchedulingRequest:
    """
    Input to the scheduler.

    Participant ids are de-duplicated while keeping the caller's order.
    """
    participant_ids: Tuple[int, ...]
    duration_minutes: int
    earliest_start: DateTime
    latest_end: DateTime

    def __post_init__(self):
        object.__setattr__(
            self, "participant_ids", tuple(dict.fromkeys(self.participant_ids))
        )

    @classmethod
    def create(
        cls,
        participant_ids: Iterable[int],
        duration_minutes: int,
        earliest_start: DateTime,
        latest_end: DateTime,
    ) -> "SchedulingRequest":
        return cls(
            participant_ids=tuple(participant_ids),
            duration_minutes=duration_minutes,
            earliest_start=earliest_start,
            latest_end=latest_end,
        )

    @property
    def duration(self) -> timedelta:
        return pendulum.duration(minutes=self.duration_minutes)


@dataclass(frozen=True)
class ScheduledMeeting:
    """
    A meeting that has been committed to the store.

    Meetings own the list of participant ids; participants hold no
    reference back to their meetings.
    """
    id: int
    time_range: TimeRange
    participant_ids: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end

    def duration_minutes(self) -> int:
        return self.time_range.duration_minutes()

    def includes_any(self, participant_ids: Iterable[int]) -> bool:
        """Check whether any of the given participants attend this meeting."""
        return not set(self.participant_ids).isdisjoint(participant_ids)

    def format_display(self) -> str:
        """
        Format the meeting for display.
        Format: Weekday, YYYY-MM-DD | HH:mm – HH:mm
        """
        start = self.time_range.start
        end = self.time_range.end

        weekday = start.format("dddd")
        date_str = start.format("YYYY-MM-DD")
        time_str = f"{start.format('HH:mm')} – {end.format('HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes()} min)"


@dataclass(frozen=True)
class MeetingDetails:
    """Read model pairing a meeting with its participants' names."""
    meeting: ScheduledMeeting
    participant_names: List[str] = field(default_factory=list)
