"""
HTTP command transport for Upstash-style Redis REST endpoints.

Wire contract:
    POST <url>              body ``["HGET", "headlines", "France"]``
    POST <url>/multi-exec   body ``[["HSET", ...], ["LPUSH", ...]]``

Both carry ``Authorization: Bearer <token>``. A single command answers
``{"result": ...}`` or ``{"error": "..."}``; a transaction answers a list
of those, one per command.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from headlines.errors import StoreUnavailable
from headlines.store.command_store import Command, CommandClient

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 5.0


def _unwrap(reply: Any) -> Any:
    """Extract ``result`` from one command reply, raising on ``error``."""
    if not isinstance(reply, dict):
        raise StoreUnavailable(f"Malformed reply: {reply!r}")
    if "error" in reply:
        raise StoreUnavailable(f"Store error: {reply['error']}")
    if "result" not in reply:
        raise StoreUnavailable(f"Reply without result: {reply!r}")
    return reply["result"]


class RestCommandClient(CommandClient):
    """``CommandClient`` over authenticated HTTP POSTs.

    Args:
        url: Endpoint base URL.
        token: Bearer token.
        session: Shared ``aiohttp.ClientSession``. When omitted the client
            opens its own on first use and closes it in ``close()``.
        timeout: Total seconds allowed per HTTP call.
    """

    def __init__(
        self,
        url: str,
        token: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._url = url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"}
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _post(self, url: str, body: list[Any]) -> Any:
        session = await self._get_session()
        try:
            async with session.post(
                url,
                json=body,
                headers=self._headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError as exc:
                    raise StoreUnavailable(
                        f"Unparsable reply (HTTP {resp.status}): {exc}"
                    ) from exc
                if resp.status >= 400 and not (isinstance(data, dict) and "error" in data):
                    raise StoreUnavailable(f"Store returned HTTP {resp.status}")
                return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise StoreUnavailable(f"Store request failed: {exc!r}") from exc

    async def command(self, verb: str, *args: Any) -> Any:
        return _unwrap(await self._post(self._url, [verb, *args]))

    async def transaction(self, *commands: Command) -> list[Any]:
        data = await self._post(f"{self._url}/multi-exec", [list(c) for c in commands])
        if isinstance(data, dict):
            # Whole-transaction failure comes back as a single error object.
            _unwrap(data)
            raise StoreUnavailable(f"Malformed transaction reply: {data!r}")
        if not isinstance(data, list) or len(data) != len(commands):
            raise StoreUnavailable(f"Malformed transaction reply: {data!r}")
        return [_unwrap(reply) for reply in data]

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None
