"""
JSON-file backed participant directory and meeting store.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum

from ..domain.exceptions import StoreUnavailableError
from ..domain.models import Participant, ScheduledMeeting, TimeRange
from .memory_store import InMemoryStore

logger = logging.getLogger(__name__)


class JsonFileStore(InMemoryStore):
    """
    In-memory store that loads from and saves to a JSON document.

    File format:
    {
        "participants": [{"id": 1, "name": "Alice"}],
        "meetings": [
            {
                "id": 1,
                "start": "2024-11-25T10:00:00+01:00",
                "end": "2024-11-25T11:00:00+01:00",
                "participant_ids": [1, 2]
            }
        ]
    }

    A missing file is an empty store; it is created on the first write.
    """

    def __init__(self, path: Path, timezone: str = "UTC"):
        self.path = Path(path)
        self.timezone = timezone
        super().__init__(*self._load())

    def _load(self):
        if not self.path.exists():
            logger.debug("No data file at %s, starting empty", self.path)
            return [], []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreUnavailableError(f"Could not read data file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StoreUnavailableError(f"Data file {self.path} must contain a JSON object")

        try:
            participants = [
                Participant(id=int(item["id"]), name=str(item["name"]))
                for item in data.get("participants", [])
            ]
            meetings = [self._parse_meeting(item) for item in data.get("meetings", [])]
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailableError(f"Invalid record in data file {self.path}: {exc}") from exc

        logger.debug(
            "Loaded %d participant(s) and %d meeting(s) from %s",
            len(participants),
            len(meetings),
            self.path,
        )
        return participants, meetings

    def _parse_meeting(self, item: Dict[str, Any]) -> ScheduledMeeting:
        return ScheduledMeeting(
            id=int(item["id"]),
            time_range=TimeRange(
                start=pendulum.parse(item["start"], tz=self.timezone),
                end=pendulum.parse(item["end"], tz=self.timezone),
            ),
            participant_ids=tuple(int(pid) for pid in item.get("participant_ids", [])),
        )

    def _dump(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "participants": [
                {"id": p.id, "name": p.name}
                for p in sorted(self._participants.values(), key=lambda p: p.id)
            ],
            "meetings": [
                {
                    "id": m.id,
                    "start": m.start.to_iso8601_string(),
                    "end": m.end.to_iso8601_string(),
                    "participant_ids": list(m.participant_ids),
                }
                for m in sorted(self._meetings.values(), key=lambda m: m.id)
            ],
        }

    def _changed(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._dump(), f, indent=2)
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StoreUnavailableError(f"Could not write data file {self.path}: {exc}") from exc
