"""
Key/hash/list backend speaking Redis command verbs.

Layout:
    ``headlines``             hash, field = country, value = entry JSON
    ``history:<country>``     list of entry JSON, index 0 = newest

The transport is a ``CommandClient``: ``RestCommandClient`` for HTTP
endpoints (Upstash-style REST) and ``RedisCommandClient`` for a Redis
server. Both run the current-value write and the history push in one
transaction, so the two never diverge.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Optional

from headlines.errors import CorruptState
from headlines.store.base import HeadlineEntry, HeadlineStore

logger = logging.getLogger(__name__)

HEADLINES_KEY: str = "headlines"

Command = Sequence[Any]


def history_key(country: str) -> str:
    """Return the per-country history list key: ``"history:{country}"``."""
    return f"history:{country}"


class CommandClient(ABC):
    """Transport that executes Redis-style commands.

    Implementations raise ``StoreUnavailable`` for every transport,
    protocol or server-side failure.
    """

    @abstractmethod
    async def command(self, verb: str, *args: Any) -> Any:
        """Run one command and return its result."""

    @abstractmethod
    async def transaction(self, *commands: Command) -> list[Any]:
        """Run ``commands`` atomically and return their results in order."""

    async def close(self) -> None:
        return None


class CommandHeadlineStore(HeadlineStore):
    """Headline store on top of hash + list primitives.

    Args:
        client: Command transport.
        history_limit: If set, each country's history list is trimmed to
            this many entries on every write. None keeps history unbounded.
        name: Backend identifier for health reporting.
    """

    def __init__(
        self,
        client: CommandClient,
        history_limit: Optional[int] = None,
        name: str = "rest",
    ) -> None:
        self._client = client
        self.history_limit = history_limit
        self.name = name

    async def get_current(self, country: str) -> Optional[HeadlineEntry]:
        raw = await self._client.command("HGET", HEADLINES_KEY, country)
        if raw is None:
            return None
        return HeadlineEntry.from_json(raw, country=country)

    async def record(self, entry: HeadlineEntry) -> None:
        payload = entry.to_json()
        key = history_key(entry.country)
        commands: list[Command] = [
            ("HSET", HEADLINES_KEY, entry.country, payload),
            ("LPUSH", key, payload),
        ]
        if self.history_limit is not None:
            commands.append(("LTRIM", key, 0, self.history_limit - 1))
        await self._client.transaction(*commands)

    async def recent(self, country: str, limit: int) -> list[HeadlineEntry]:
        if limit <= 0:
            return []
        raw_items = await self._client.command("LRANGE", history_key(country), 0, limit - 1)
        if raw_items is None:
            return []
        if not isinstance(raw_items, list):
            raise CorruptState(f"LRANGE returned {type(raw_items).__name__}, expected list")

        entries: list[HeadlineEntry] = []
        for raw in raw_items:
            try:
                entries.append(HeadlineEntry.from_json(raw, country=country))
            except CorruptState as exc:
                logger.warning("Skipping unreadable history entry for %r: %s", country, exc)
        return entries

    async def ping(self) -> str:
        reply = await self._client.command("PING")
        return f"PING -> {reply}"

    async def close(self) -> None:
        await self._client.close()
