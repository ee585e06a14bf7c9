"""
Headline persistence backends.

``create_store(settings)`` builds the backend selected by
``Settings.backend``:

    file   -- ``FileHeadlineStore`` on ``Settings.data_file``
    rest   -- ``CommandHeadlineStore`` over ``RestCommandClient``
    redis  -- ``CommandHeadlineStore`` over ``RedisCommandClient``
"""

from __future__ import annotations

import logging
from typing import Optional

import aiohttp

from headlines.settings import Settings
from headlines.store.base import HeadlineEntry, HeadlineStore, now_ms
from headlines.store.command_store import (
    HEADLINES_KEY,
    CommandClient,
    CommandHeadlineStore,
    history_key,
)
from headlines.store.file_store import FileHeadlineStore, HeadlineState, decode_document
from headlines.store.redis_client import RedisCommandClient
from headlines.store.rest_client import RestCommandClient

logger = logging.getLogger(__name__)


def create_store(
    settings: Settings, session: Optional[aiohttp.ClientSession] = None
) -> HeadlineStore:
    """Build the configured headline store.

    Args:
        settings: Application settings.
        session: Optional shared HTTP session for the REST backend.

    Raises:
        ValueError: If the REST backend is selected without URL and token.
    """
    if settings.backend == "rest":
        if not settings.rest_url or not settings.rest_token:
            raise ValueError(
                "REST backend requires HEADLINES_REST_URL and HEADLINES_REST_TOKEN "
                "(or KV_REST_API_URL / KV_REST_API_TOKEN)"
            )
        client: CommandClient = RestCommandClient(
            settings.rest_url,
            settings.rest_token,
            session=session,
            timeout=settings.store_timeout,
        )
        store: HeadlineStore = CommandHeadlineStore(
            client, history_limit=settings.remote_history_limit, name="rest"
        )
    elif settings.backend == "redis":
        client = RedisCommandClient.from_url(settings.redis_url, timeout=settings.store_timeout)
        store = CommandHeadlineStore(
            client, history_limit=settings.remote_history_limit, name="redis"
        )
    else:
        store = FileHeadlineStore(settings.data_file, history_limit=settings.history_limit)

    logger.info("Headline store: %s", store.name)
    return store


__all__ = [
    "HEADLINES_KEY",
    "CommandClient",
    "CommandHeadlineStore",
    "FileHeadlineStore",
    "HeadlineEntry",
    "HeadlineState",
    "HeadlineStore",
    "RedisCommandClient",
    "RestCommandClient",
    "create_store",
    "decode_document",
    "history_key",
    "now_ms",
]
