"""
Store contract shared by every persistence backend.

A backend keeps two things per country: the current ``HeadlineEntry``
and a newest-first history of entries. ``record()`` writes both;
``get_current()`` and ``recent()`` read them back. Backends raise
``StoreUnavailable`` when the underlying medium fails and
``CorruptState`` when what they read cannot be decoded. Turning those
into fail-soft reads / fail-loud writes is the service layer's job.
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Optional

from headlines.errors import CorruptState


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class HeadlineEntry:
    """One headline written for one country at one instant."""

    country: str
    headline: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(
        cls, data: Any, country: Optional[str] = None
    ) -> "HeadlineEntry":
        """Build an entry from a decoded mapping.

        ``country`` fills in the key for layouts that store it outside the
        record (the file backend's ``headlines`` mapping).

        Raises:
            CorruptState: If a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise CorruptState(f"Entry is not an object: {data!r}")
        country = data.get("country", country)
        headline = data.get("headline")
        timestamp = data.get("timestamp")
        if not isinstance(country, str) or not isinstance(headline, str):
            raise CorruptState(f"Entry has invalid country/headline: {data!r}")
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise CorruptState(f"Entry has invalid timestamp: {data!r}")
        return cls(country=country, headline=headline, timestamp=timestamp)

    @classmethod
    def from_json(
        cls, raw: str | bytes, country: Optional[str] = None
    ) -> "HeadlineEntry":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise CorruptState(f"Entry is not valid JSON: {exc}") from exc
        return cls.from_dict(data, country=country)


class HeadlineStore(ABC):
    """Persistence contract for current headlines and their history."""

    #: Short backend identifier reported by the health endpoint.
    name: str = "abstract"

    @abstractmethod
    async def get_current(self, country: str) -> Optional[HeadlineEntry]:
        """Return the current entry for ``country``, or None if never set."""

    @abstractmethod
    async def record(self, entry: HeadlineEntry) -> None:
        """Make ``entry`` the current headline and prepend it to history."""

    @abstractmethod
    async def recent(self, country: str, limit: int) -> list[HeadlineEntry]:
        """Return up to ``limit`` entries for ``country``, newest first."""

    @abstractmethod
    async def ping(self) -> str:
        """Probe the backend; return a short status detail or raise."""

    async def close(self) -> None:
        """Release connections held by the backend."""
        return None
