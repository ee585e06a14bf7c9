"""
Visitor country lookup via the ip-api.com JSON endpoint.

The lookup never raises: any failure (HTTP error, timeout, non-success
status, malformed body) resolves to ``"Unknown"`` and is logged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from headlines.api.schemas.location import UNKNOWN_COUNTRY

logger = logging.getLogger(__name__)

DEFAULT_GEO_URL: str = "http://ip-api.com/json/"

# Loopback peers are looked up as "" so the service geolocates the
# server's own public address instead.
_LOOPBACK: frozenset[str] = frozenset({"::1", "127.0.0.1", "::ffff:127.0.0.1"})


def client_ip(forwarded_for: Optional[str], peer: Optional[str]) -> str:
    """Pick the address to geolocate.

    The first hop of ``X-Forwarded-For`` wins over the socket peer.
    """
    ip = forwarded_for or peer or ""
    if "," in ip:
        ip = ip.split(",")[0]
    ip = ip.strip()
    if ip in _LOOPBACK:
        return ""
    return ip


class GeoLocator:
    """Resolve IP addresses to country names.

    Args:
        session: Shared ``aiohttp.ClientSession``; one is opened lazily
            (and closed in ``close()``) when omitted.
        base_url: Lookup endpoint; the IP is appended to it.
        timeout: Total seconds allowed per lookup.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = DEFAULT_GEO_URL,
        timeout: float = 5.0,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def resolve_country(self, ip: str) -> str:
        session = await self._get_session()
        try:
            async with session.get(
                f"{self.base_url}{ip}",
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if resp.status != 200:
                    logger.warning("Geolocation returned HTTP %d", resp.status)
                    return UNKNOWN_COUNTRY
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.warning("Geolocation lookup failed for %r: %s", ip, exc)
            return UNKNOWN_COUNTRY

        if not isinstance(data, dict) or data.get("status") != "success":
            logger.info("Geolocation could not resolve %r: %s", ip, data)
            return UNKNOWN_COUNTRY
        country = data.get("country")
        return country if isinstance(country, str) and country else UNKNOWN_COUNTRY

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None
