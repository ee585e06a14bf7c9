"""
HeadlineService -- business rules on top of a ``HeadlineStore``.

Responsibility:
    1. Validate, trim and truncate submitted headlines
    2. Stamp entries with server time and persist them
    3. Shape store results into ``HeadlineResponse`` DTOs

Failure policy: reads fail soft (store errors and corrupt data become
null/empty results, logged), writes fail loud (``StoreUnavailable``
propagates so the caller can report a 500). Every store call is bounded
by ``timeout`` seconds; a timeout counts as ``StoreUnavailable``. A store
may finish work it has already started past the deadline (the file backend
does), in which case its real outcome is reported instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from headlines.api.schemas.headline import HeadlineResponse
from headlines.errors import CorruptState, InvalidInput, StoreUnavailable
from headlines.store.base import HeadlineEntry, HeadlineStore, now_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_LENGTH: int = 500
DEFAULT_RECENT_LIMIT: int = 10
DEFAULT_TIMEOUT: float = 5.0


def normalize_headline(raw: Any, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Trim and truncate a submitted headline.

    Raises:
        InvalidInput: If ``raw`` is not a string or is blank after trimming.
    """
    if not isinstance(raw, str):
        raise InvalidInput("Headline is required")
    headline = raw.strip()
    if not headline:
        raise InvalidInput("Headline is required")
    return headline[:max_length]


def _to_response(entry: HeadlineEntry) -> HeadlineResponse:
    return HeadlineResponse(
        country=entry.country, headline=entry.headline, timestamp=entry.timestamp
    )


class HeadlineService:
    """Get, set and list per-country headlines.

    Args:
        store: Persistence backend.
        max_length: Character cap applied after trimming.
        timeout: Seconds allowed for each store call.
        clock: Millisecond clock used to stamp new entries.
    """

    def __init__(
        self,
        store: HeadlineStore,
        max_length: int = DEFAULT_MAX_LENGTH,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.max_length = max_length
        self.timeout = timeout
        self._clock = clock

    async def _bounded(self, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise StoreUnavailable(
                f"{self.store.name} store timed out after {self.timeout}s"
            ) from exc

    async def get_headline(self, country: str) -> HeadlineResponse:
        """Return the current headline for ``country``; nulls if absent."""
        try:
            entry = await self._bounded(self.store.get_current(country))
        except (StoreUnavailable, CorruptState) as exc:
            logger.warning(
                "Headline read for %r degraded to empty: %s",
                country,
                exc,
                extra={"country": country},
            )
            entry = None

        if entry is None:
            return HeadlineResponse(country=country)
        return _to_response(entry)

    async def set_headline(self, country: str, raw_headline: Any) -> HeadlineResponse:
        """Validate and store a new headline for ``country``.

        Raises:
            InvalidInput: Headline missing, non-string or blank. Nothing is
                written.
            StoreUnavailable: The store failed or timed out.
        """
        headline = normalize_headline(raw_headline, self.max_length)
        entry = HeadlineEntry(country=country, headline=headline, timestamp=self._clock())

        try:
            await self._bounded(self.store.record(entry))
        except StoreUnavailable as exc:
            logger.error(
                "Headline write for %r failed: %s", country, exc, extra={"country": country}
            )
            raise

        logger.info(
            "Headline set for %r (%d chars)",
            country,
            len(headline),
            extra={"country": country},
        )
        return _to_response(entry)

    async def get_recent(
        self, country: str, limit: int = DEFAULT_RECENT_LIMIT
    ) -> list[HeadlineResponse]:
        """Return up to ``limit`` headlines for ``country``, newest first."""
        try:
            entries = await self._bounded(self.store.recent(country, limit))
        except (StoreUnavailable, CorruptState) as exc:
            logger.warning(
                "History read for %r degraded to empty: %s",
                country,
                exc,
                extra={"country": country},
            )
            return []
        return [_to_response(entry) for entry in entries[:limit]]
