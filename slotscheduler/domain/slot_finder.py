"""
Core business logic for finding the earliest common free slot.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from datetime import timedelta
from typing import Iterable, List, Union

import pendulum
from pendulum import DateTime

from .models import BusinessHours, TimeRange


def merge_intervals(intervals: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping or adjacent time ranges.

    The result is sorted and every pair of neighbours is separated by a
    real gap.

    Example: [09:00-10:00, 10:00-11:00, 10:30-12:00] -> [09:00-12:00]
    """
    sorted_ranges = sorted(intervals, key=lambda r: (r.start, r.end))

    if not sorted_ranges:
        return []

    merged: List[TimeRange] = []
    current = sorted_ranges[0]

    for following in sorted_ranges[1:]:
        if current.touches(following):
            if following.end > current.end:
                current = TimeRange(start=current.start, end=following.end)
        else:
            merged.append(current)
            current = following

    merged.append(current)
    return merged


class SlotFinder:
    """
    Finds the earliest slot that is free for everyone and inside business hours.

    Algorithm:
    1. Clamp the search window into business hours
    2. Walk the merged busy ranges in order with a cursor
    3. Propose ``[cursor, cursor + duration)`` in each gap before a busy range
    4. After each busy range move the cursor past it and clamp again
    5. Finally try the gap between the last busy range and the window end

    The cursor only ever moves forward, so the first candidate that fits is
    the earliest one. A candidate that would run past closing moves the
    cursor to the next opening inside the same gap instead of skipping the
    gap.
    """

    def __init__(self, business_hours: BusinessHours):
        self.business_hours = business_hours

    def find_slot(
        self,
        busy_ranges: Iterable[TimeRange],
        duration: Union[int, timedelta],
        earliest_start: DateTime,
        latest_end: DateTime,
    ) -> TimeRange | None:
        """Merge raw busy ranges and search them."""
        return self.find_earliest_slot(
            merged_busy=merge_intervals(busy_ranges),
            duration=duration,
            earliest_start=earliest_start,
            latest_end=latest_end,
        )

    def find_earliest_slot(
        self,
        merged_busy: List[TimeRange],
        duration: Union[int, timedelta],
        earliest_start: DateTime,
        latest_end: DateTime,
    ) -> TimeRange | None:
        """
        Find the earliest available slot.

        Args:
            merged_busy: Sorted, non-overlapping busy ranges (see ``merge_intervals``)
            duration: Meeting length in minutes or as a timedelta
            earliest_start: Start of the search window
            latest_end: End of the search window

        Returns:
            The slot as a TimeRange, or None if nothing fits
        """
        length = _as_timedelta(duration)
        if length <= timedelta(0):
            raise ValueError(f"Duration must be positive, got {duration}")

        search_start = self.business_hours.clamp(earliest_start)
        search_end = self.business_hours.clamp(latest_end)

        if search_start >= search_end or search_start + length > search_end:
            return None

        cursor = search_start

        for busy in merged_busy:
            if cursor + length <= busy.start:
                slot = self._first_fit(cursor, min(busy.start, search_end), length)
                if slot:
                    return slot

            cursor = max(cursor, self.business_hours.clamp(busy.end))

            if cursor >= search_end:
                return None

        return self._first_fit(cursor, search_end, length)

    def _first_fit(
        self,
        cursor: DateTime,
        gap_end: DateTime,
        length: timedelta,
    ) -> TimeRange | None:
        """
        Earliest ``[start, start + length)`` with ``start >= cursor`` that ends
        by ``gap_end`` and stays inside business hours of a single day.
        """
        while cursor + length <= gap_end:
            proposed_end = cursor + length

            if self.business_hours.contains(cursor, proposed_end):
                return TimeRange(start=cursor, end=proposed_end)

            # Runs past closing. Retry this gap from the next opening rather
            # than skipping to the following busy range.
            cursor = self.business_hours.opening(cursor.add(days=1))

        return None


def _as_timedelta(duration: Union[int, timedelta]) -> timedelta:
    if isinstance(duration, timedelta):
        return duration
    return pendulum.duration(minutes=duration)
