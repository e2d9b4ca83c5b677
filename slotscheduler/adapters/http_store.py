"""
REST client for a remote participant directory and meeting store.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import StoreUnavailableError
from ..domain.models import Participant, ScheduledMeeting, TimeRange

logger = logging.getLogger(__name__)


class HttpMeetingStore:
    """
    Client for a store service exposing participants and meetings over HTTP.

    Endpoints used:
        GET  /participants[?ids=1,2]
        GET  /participants/{id}
        GET  /participants/{id}/meetings
        POST /participants
        GET  /meetings[?participant_ids=1,2&start=...&end=...]
        GET  /meetings/{id}
        POST /meetings

    ``requests`` is blocking, so every call runs in a worker thread.
    """

    def __init__(
        self,
        base_url: str,
        timezone: str = "UTC",
        timeout: float = 10,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timezone = timezone
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            if response.status_code == 404 and method == "GET":
                return None
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            raise StoreUnavailableError(f"Store request {method} {url} failed: {exc}") from exc

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    def _parse_meeting(self, item: Dict[str, Any]) -> ScheduledMeeting:
        try:
            return ScheduledMeeting(
                id=int(item["id"]),
                time_range=TimeRange(
                    start=pendulum.parse(item["start"], tz=self.timezone),
                    end=pendulum.parse(item["end"], tz=self.timezone),
                ),
                participant_ids=tuple(int(pid) for pid in item.get("participant_ids", [])),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailableError(f"Malformed meeting payload {item!r}: {exc}") from exc

    @staticmethod
    def _parse_participant(item: Dict[str, Any]) -> Participant:
        try:
            return Participant(id=int(item["id"]), name=str(item["name"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailableError(f"Malformed participant payload {item!r}: {exc}") from exc

    @staticmethod
    def _ids_param(ids: Iterable[int]) -> str:
        return ",".join(str(pid) for pid in ids)

    # Participant directory

    async def participants_exist(self, participant_ids: Iterable[int]) -> bool:
        wanted = set(participant_ids)
        found = await self.get_participants(wanted)
        return wanted <= {participant.id for participant in found}

    async def get_participants(self, participant_ids: Iterable[int]) -> List[Participant]:
        ids = list(dict.fromkeys(participant_ids))
        if not ids:
            return []
        data = await self._call("GET", "/participants", params={"ids": self._ids_param(ids)})
        return [self._parse_participant(item) for item in data or []]

    async def get_participant(self, participant_id: int) -> Optional[Participant]:
        data = await self._call("GET", f"/participants/{participant_id}")
        if data is None:
            return None
        return self._parse_participant(data)

    async def add_participant(self, name: str) -> Participant:
        data = await self._call("POST", "/participants", json={"name": name})
        return self._parse_participant(data)

    async def list_participants(self) -> List[Participant]:
        data = await self._call("GET", "/participants")
        return [self._parse_participant(item) for item in data or []]

    # Meeting store

    async def find_overlapping_meetings(
        self,
        participant_ids: Iterable[int],
        window_start: DateTime,
        window_end: DateTime,
    ) -> List[ScheduledMeeting]:
        params = {
            "participant_ids": self._ids_param(participant_ids),
            "start": window_start.to_iso8601_string(),
            "end": window_end.to_iso8601_string(),
        }
        data = await self._call("GET", "/meetings", params=params)
        meetings = [self._parse_meeting(item) for item in data or []]
        logger.debug("Store returned %d overlapping meeting(s)", len(meetings))
        return meetings

    async def insert_meeting(
        self,
        start: DateTime,
        end: DateTime,
        participant_ids: Sequence[int],
    ) -> ScheduledMeeting:
        payload = {
            "start": start.to_iso8601_string(),
            "end": end.to_iso8601_string(),
            "participant_ids": list(participant_ids),
        }
        data = await self._call("POST", "/meetings", json=payload)
        return self._parse_meeting(data)

    async def list_meetings(self) -> List[ScheduledMeeting]:
        data = await self._call("GET", "/meetings")
        return [self._parse_meeting(item) for item in data or []]

    async def get_meeting(self, meeting_id: int) -> Optional[ScheduledMeeting]:
        data = await self._call("GET", f"/meetings/{meeting_id}")
        if data is None:
            return None
        return self._parse_meeting(data)

    async def meetings_for_participant(self, participant_id: int) -> List[ScheduledMeeting]:
        data = await self._call("GET", f"/participants/{participant_id}/meetings")
        meetings = [self._parse_meeting(item) for item in data or []]
        return sorted(meetings, key=lambda m: m.start)
