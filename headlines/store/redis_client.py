"""Native Redis command transport via ``redis.asyncio``."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from headlines.errors import StoreUnavailable
from headlines.store.command_store import Command, CommandClient

logger = logging.getLogger(__name__)


class RedisCommandClient(CommandClient):
    """``CommandClient`` backed by an async Redis connection pool.

    Transactions use a ``MULTI``/``EXEC`` pipeline.
    """

    def __init__(self, client: aioredis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str, timeout: float = 5.0) -> "RedisCommandClient":
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=timeout,
            socket_timeout=timeout,
        )
        return cls(client)

    async def command(self, verb: str, *args: Any) -> Any:
        try:
            return await self._redis.execute_command(verb, *args)
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            raise StoreUnavailable(f"Redis {verb} failed: {exc!r}") from exc

    async def transaction(self, *commands: Command) -> list[Any]:
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                for cmd in commands:
                    pipe.execute_command(*cmd)
                return await pipe.execute()
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            raise StoreUnavailable(f"Redis transaction failed: {exc!r}") from exc

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except (RedisError, OSError) as exc:
            logger.warning("Error closing Redis: %s", exc)
