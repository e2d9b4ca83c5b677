"""
Tests for interval merging and the earliest-slot search.
"""

import random
from datetime import time, timedelta

import pendulum
import pytest

from slotscheduler.domain.models import BusinessHours, TimeRange
from slotscheduler.domain.slot_finder import SlotFinder, merge_intervals

TZ = "Europe/Berlin"


def _at(value: str):
    return pendulum.parse(value, tz=TZ)


def _range(start: str, end: str) -> TimeRange:
    return TimeRange(start=_at(start), end=_at(end))


@pytest.fixture
def finder() -> SlotFinder:
    return SlotFinder(business_hours=BusinessHours(start_of_day=time(9, 0), end_of_day=time(17, 0)))


class TestMergeIntervals:
    """Tests for merge_intervals."""

    def test_empty_input(self):
        assert merge_intervals([]) == []

    def test_overlapping_ranges_merge(self):
        merged = merge_intervals([
            _range("2024-11-25 09:30", "2024-11-25 11:00"),
            _range("2024-11-25 09:00", "2024-11-25 10:00"),
        ])

        assert merged == [_range("2024-11-25 09:00", "2024-11-25 11:00")]

    def test_back_to_back_ranges_merge(self):
        merged = merge_intervals([
            _range("2024-11-25 09:00", "2024-11-25 10:00"),
            _range("2024-11-25 10:00", "2024-11-25 11:00"),
        ])

        assert merged == [_range("2024-11-25 09:00", "2024-11-25 11:00")]

    def test_contained_range_is_absorbed(self):
        merged = merge_intervals([
            _range("2024-11-25 09:00", "2024-11-25 12:00"),
            _range("2024-11-25 10:00", "2024-11-25 11:00"),
        ])

        assert merged == [_range("2024-11-25 09:00", "2024-11-25 12:00")]

    def test_separated_ranges_stay_apart_and_sorted(self):
        merged = merge_intervals([
            _range("2024-11-25 14:00", "2024-11-25 15:00"),
            _range("2024-11-25 09:00", "2024-11-25 10:00"),
            _range("2024-11-25 09:00", "2024-11-25 10:00"),
        ])

        assert merged == [
            _range("2024-11-25 09:00", "2024-11-25 10:00"),
            _range("2024-11-25 14:00", "2024-11-25 15:00"),
        ]


class TestFindEarliestSlot:
    """Tests for SlotFinder.find_earliest_slot."""

    def test_no_busy_times(self, finder):
        slot = finder.find_earliest_slot([], 60, _at("2024-11-25 09:00"), _at("2024-11-25 17:00"))

        assert slot == _range("2024-11-25 09:00", "2024-11-25 10:00")

    def test_slot_after_busy_range(self, finder):
        busy = [_range("2024-11-25 09:00", "2024-11-25 10:00")]

        slot = finder.find_earliest_slot(busy, 60, _at("2024-11-25 09:00"), _at("2024-11-25 17:00"))

        assert slot == _range("2024-11-25 10:00", "2024-11-25 11:00")

    def test_gap_between_busy_ranges(self, finder):
        busy = [
            _range("2024-11-25 09:00", "2024-11-25 10:00"),
            _range("2024-11-25 10:30", "2024-11-25 12:00"),
        ]

        assert finder.find_earliest_slot(
            busy, 30, _at("2024-11-25 09:00"), _at("2024-11-25 17:00")
        ) == _range("2024-11-25 10:00", "2024-11-25 10:30")

        # 45 minutes do not fit into the 30 minute gap
        assert finder.find_earliest_slot(
            busy, 45, _at("2024-11-25 09:00"), _at("2024-11-25 17:00")
        ) == _range("2024-11-25 12:00", "2024-11-25 12:45")

    def test_window_outside_business_hours_is_clamped(self, finder):
        slot = finder.find_earliest_slot([], 60, _at("2024-11-25 08:00"), _at("2024-11-25 18:00"))

        assert slot == _range("2024-11-25 09:00", "2024-11-25 10:00")

    def test_busy_whole_day(self, finder):
        busy = [_range("2024-11-25 09:00", "2024-11-25 17:00")]

        assert finder.find_earliest_slot(busy, 60, _at("2024-11-25 09:00"), _at("2024-11-25 17:00")) is None

    def test_duration_longer_than_business_day(self, finder):
        assert finder.find_earliest_slot([], 600, _at("2024-11-25 09:00"), _at("2024-11-25 17:00")) is None

    def test_slot_never_runs_past_closing(self, finder):
        busy = [_range("2024-11-25 09:00", "2024-11-25 16:30")]

        slot = finder.find_earliest_slot(busy, 60, _at("2024-11-25 09:00"), _at("2024-11-26 17:00"))

        assert slot == _range("2024-11-26 09:00", "2024-11-26 10:00")

    def test_next_morning_gap_before_busy_range_is_used(self, finder):
        """A slot that cannot finish today still finds tomorrow's free morning."""
        busy = [
            _range("2024-11-25 09:00", "2024-11-25 16:30"),
            _range("2024-11-26 11:00", "2024-11-26 12:00"),
        ]

        slot = finder.find_earliest_slot(busy, 60, _at("2024-11-25 09:00"), _at("2024-11-26 17:00"))

        assert slot == _range("2024-11-26 09:00", "2024-11-26 10:00")

    def test_window_ending_before_business_hours(self, finder):
        assert finder.find_earliest_slot([], 30, _at("2024-11-25 06:00"), _at("2024-11-25 08:00")) is None

    def test_slot_must_end_inside_window(self, finder):
        assert finder.find_earliest_slot([], 60, _at("2024-11-25 09:00"), _at("2024-11-25 09:45")) is None

    def test_busy_ranges_before_window_are_ignored(self, finder):
        busy = [_range("2024-11-25 09:00", "2024-11-25 09:30")]

        slot = finder.find_earliest_slot(busy, 30, _at("2024-11-25 11:00"), _at("2024-11-25 17:00"))

        assert slot == _range("2024-11-25 11:00", "2024-11-25 11:30")

    def test_accepts_timedelta(self, finder):
        slot = finder.find_earliest_slot([], timedelta(minutes=15), _at("2024-11-25 10:00"), _at("2024-11-25 17:00"))

        assert slot == _range("2024-11-25 10:00", "2024-11-25 10:15")

    def test_rejects_non_positive_duration(self, finder):
        with pytest.raises(ValueError):
            finder.find_earliest_slot([], 0, _at("2024-11-25 09:00"), _at("2024-11-25 17:00"))

    def test_find_slot_merges_raw_ranges(self, finder):
        busy = [
            _range("2024-11-25 09:30", "2024-11-25 11:00"),
            _range("2024-11-25 09:00", "2024-11-25 10:00"),
        ]

        slot = finder.find_slot(busy, 60, _at("2024-11-25 09:00"), _at("2024-11-25 17:00"))

        assert slot == _range("2024-11-25 11:00", "2024-11-25 12:00")


# Randomised checks against a brute-force search on a 15 minute grid.

STEP = pendulum.duration(minutes=15)
DAY = pendulum.datetime(2024, 11, 25, tz="UTC")
HOURS = BusinessHours(start_of_day=time(9, 0), end_of_day=time(17, 0))


def _random_ranges(rng: random.Random, count: int):
    ranges = []
    for _ in range(count):
        start = DAY.add(minutes=15 * rng.randrange(0, 4 * 48))
        ranges.append(TimeRange(start=start, end=start.add(minutes=15 * rng.randint(1, 16))))
    return ranges


def _covered(ranges, instant) -> bool:
    return any(r.start <= instant < r.end for r in ranges)


def _is_valid_start(start, length, busy, earliest, latest) -> bool:
    end = start + length
    return (
        start >= earliest
        and end <= latest
        and start.date() == end.date()
        and start.time() >= HOURS.start_of_day
        and end.time() <= HOURS.end_of_day
        and not any(start < b.end and end > b.start for b in busy)
    )


@pytest.mark.parametrize("seed", range(40))
def test_merge_properties(seed):
    rng = random.Random(seed)
    ranges = _random_ranges(rng, rng.randint(0, 8))

    merged = merge_intervals(ranges)

    for a, b in zip(merged, merged[1:]):
        assert a.end < b.start

    instant = DAY
    while instant < DAY.add(days=3):
        assert _covered(ranges, instant) == _covered(merged, instant)
        instant = instant + STEP

    assert merge_intervals(merged) == merged


@pytest.mark.parametrize("seed", range(150))
def test_earliest_slot_matches_brute_force(seed):
    rng = random.Random(seed)
    busy = _random_ranges(rng, rng.randint(0, 6))
    length = pendulum.duration(minutes=15 * rng.randint(1, 16))
    earliest = DAY.add(minutes=15 * rng.randrange(0, 4 * 40))
    latest = earliest.add(minutes=15 * rng.randint(1, 4 * 30))

    slot = SlotFinder(HOURS).find_earliest_slot(merge_intervals(busy), length, earliest, latest)

    expected = None
    instant = earliest
    while instant + length <= latest:
        if _is_valid_start(instant, length, busy, earliest, latest):
            expected = instant
            break
        instant = instant + STEP

    if expected is None:
        assert slot is None
    else:
        assert slot is not None
        assert slot.start == expected
        assert slot.end == expected + length
        assert HOURS.contains(slot.start, slot.end)
