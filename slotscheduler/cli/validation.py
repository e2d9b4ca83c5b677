"""
Validation of raw scheduling input before it reaches the scheduler.
"""

from typing import List

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, Field, field_validator

from ..domain.models import SchedulingRequest


class MeetingRequestModel(BaseModel):
    """Raw meeting request as typed on the command line."""
    participant_ids: List[int] = Field(min_length=1)
    duration_minutes: int = Field(ge=1, le=480)
    earliest_start: str
    latest_end: str
    timezone: str = "UTC"

    @field_validator("earliest_start", "latest_end")
    @classmethod
    def validate_instant(cls, value: str) -> str:
        """Accept 'YYYY-MM-DD HH:mm' or ISO 8601."""
        _parse_instant(value, "UTC")
        return value

    def to_request(self) -> SchedulingRequest:
        return SchedulingRequest.create(
            participant_ids=self.participant_ids,
            duration_minutes=self.duration_minutes,
            earliest_start=_parse_instant(self.earliest_start, self.timezone),
            latest_end=_parse_instant(self.latest_end, self.timezone),
        )


def _parse_instant(value: str, timezone: str) -> DateTime:
    try:
        parsed = pendulum.parse(value, tz=timezone)
    except (ValueError, KeyError) as exc:
        raise ValueError(f"Could not parse time {value!r}: {exc}") from exc

    if not isinstance(parsed, DateTime):
        raise ValueError(f"Expected a date and time, got {value!r}")
    return parsed
