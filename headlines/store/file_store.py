"""
Local JSON document backend.

The whole headline state lives in one document::

    {
      "version": 2,
      "headlines": {"France": {"headline": "...", "timestamp": 1700000000000}},
      "history": [{"country": "France", "headline": "...", "timestamp": ...}]
    }

History is a single list shared by all countries, newest first, capped at
``history_limit`` entries. Every write is a full load-mutate-save cycle;
the store serializes those cycles with an ``asyncio.Lock`` so writers in
the same process never overwrite each other. Separate processes sharing
the file are not coordinated.

Older deployments wrote a flat ``{"France": "headline"}`` mapping. Such a
document is migrated on load (entries stamped with the load time) and
written back in the current shape so the stamp sticks.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, TypeVar

from headlines.errors import CorruptState, StoreUnavailable
from headlines.store.base import HeadlineEntry, HeadlineStore, now_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA_VERSION: int = 2
DEFAULT_HISTORY_LIMIT: int = 50


@dataclass
class HeadlineState:
    """In-memory form of the document: current entries plus global history."""

    headlines: dict[str, HeadlineEntry] = field(default_factory=dict)
    history: list[HeadlineEntry] = field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return {
            "version": SCHEMA_VERSION,
            "headlines": {
                country: {"headline": entry.headline, "timestamp": entry.timestamp}
                for country, entry in self.headlines.items()
            },
            "history": [entry.to_dict() for entry in self.history],
        }


def _decode_v1(raw: dict[str, Any], loaded_at: int) -> HeadlineState:
    """Legacy flat mapping: country -> plain headline string."""
    state = HeadlineState()
    for country, value in raw.items():
        if not isinstance(value, str):
            continue
        entry = HeadlineEntry(country=country, headline=value, timestamp=loaded_at)
        state.headlines[country] = entry
        state.history.append(entry)
    return state


def _decode_v2(raw: dict[str, Any], loaded_at: int) -> HeadlineState:
    headlines = raw.get("headlines", {})
    history = raw.get("history", [])
    if not isinstance(headlines, dict) or not isinstance(history, list):
        raise CorruptState("'headlines' must be an object and 'history' a list")

    state = HeadlineState()
    for country, value in headlines.items():
        try:
            state.headlines[country] = HeadlineEntry.from_dict(value, country=country)
        except CorruptState as exc:
            logger.warning("Skipping unreadable current headline for %r: %s", country, exc)
    for item in history:
        try:
            state.history.append(HeadlineEntry.from_dict(item))
        except CorruptState as exc:
            logger.warning("Skipping unreadable history entry: %s", exc)
    return state


_DECODERS: dict[int, Callable[[dict[str, Any], int], HeadlineState]] = {
    1: _decode_v1,
    2: _decode_v2,
}


def decode_document(raw: Any, loaded_at: int) -> tuple[HeadlineState, bool]:
    """Decode a parsed document into a ``HeadlineState``.

    Documents whose ``version`` is an integer dispatch on it. Anything else
    predates the tag: a non-string ``headlines`` member means version 2,
    otherwise the document is the legacy flat mapping. A string ``version``
    or ``headlines`` is a legacy country of that name, not a tag.

    Args:
        raw: The parsed JSON document.
        loaded_at: Timestamp (ms) given to migrated legacy entries.

    Returns:
        ``(state, migrated)`` where ``migrated`` is True when the document
        was in the legacy shape and should be saved back.

    Raises:
        CorruptState: If the document is not an object or has an unknown
            version.
    """
    if not isinstance(raw, dict):
        raise CorruptState(f"Document root must be an object, got {type(raw).__name__}")

    version = raw.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        # Legacy maps may hold countries named "version" or "headlines", whose
        # values are always headline strings.
        headlines = raw.get("headlines")
        version = SCHEMA_VERSION if headlines is not None and not isinstance(headlines, str) else 1

    decoder = _DECODERS.get(version)
    if decoder is None:
        raise CorruptState(f"Unknown document version: {version!r}")
    return decoder(raw, loaded_at), version < SCHEMA_VERSION


class FileHeadlineStore(HeadlineStore):
    """Headline store backed by a single JSON file on local disk."""

    name = "file"

    def __init__(
        self,
        path: str | os.PathLike[str],
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.path = Path(path)
        self.history_limit = history_limit
        self._clock = clock
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Synchronous document I/O (run in a worker thread by the async API)
    # ------------------------------------------------------------------

    def load(self) -> HeadlineState:
        """Read the document, falling back to an empty state.

        A missing file is an empty state. An unreadable or unparsable file
        is logged and also treated as empty; it is never raised.
        """
        if not self.path.exists():
            return HeadlineState()

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            state, migrated = decode_document(raw, self._clock())
        except (OSError, ValueError, CorruptState) as exc:
            logger.error("Could not load %s, treating as empty: %s", self.path, exc)
            return HeadlineState()

        if migrated:
            logger.info(
                "Migrated legacy document %s (%d headlines)",
                self.path,
                len(state.headlines),
            )
            try:
                self.save(state)
            except StoreUnavailable as exc:
                logger.warning("Could not persist migrated document: %s", exc)
        return state

    def save(self, state: HeadlineState) -> None:
        """Replace the document with ``state``.

        Writes to a sibling temp file then renames it over the target, so a
        crash mid-write leaves the previous document intact.

        Raises:
            StoreUnavailable: If the file cannot be written.
        """
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(state.to_document(), fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreUnavailable(f"Could not write {self.path}: {exc}") from exc

    def _apply(self, entry: HeadlineEntry) -> None:
        state = self.load()
        state.headlines[entry.country] = entry
        state.history.insert(0, entry)
        del state.history[self.history_limit :]
        self.save(state)

    # ------------------------------------------------------------------
    # HeadlineStore API
    # ------------------------------------------------------------------

    async def _run_locked(self, func: Callable[..., T], *args: Any) -> T:
        """Run ``func`` in a worker thread while holding the store lock.

        Cancellation is honoured only while waiting for the lock, before
        anything touches the disk. Once the worker has started, the call
        waits for it and reports its real outcome, so the lock is never
        released under a running load-mutate-save cycle and a write that
        lands is never reported as failed.
        """
        async with self._lock:
            worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
            while not worker.done():
                try:
                    await asyncio.shield(worker)
                except asyncio.CancelledError:
                    if worker.done():
                        break
                    logger.warning("%s outlived its deadline, waiting for it", func.__name__)
            return worker.result()

    async def get_current(self, country: str) -> Optional[HeadlineEntry]:
        state = await self._run_locked(self.load)
        return state.headlines.get(country)

    async def record(self, entry: HeadlineEntry) -> None:
        await self._run_locked(self._apply, entry)

    async def recent(self, country: str, limit: int) -> list[HeadlineEntry]:
        if limit <= 0:
            return []
        state = await self._run_locked(self.load)
        return [entry for entry in state.history if entry.country == country][:limit]

    async def ping(self) -> str:
        if self.path.exists():
            return f"{self.path} ({self.path.stat().st_size} bytes)"
        return f"{self.path} not created yet"
