"""
Shared test doubles.

``FakeCommandClient`` is an in-memory stand-in for a Redis-style command
endpoint supporting the verbs the command store uses. No Redis server or
network access is needed anywhere in the suite.
"""

from __future__ import annotations

from typing import Any

import pytest

from headlines.errors import StoreUnavailable
from headlines.store import CommandClient, CommandHeadlineStore, FileHeadlineStore


class FakeCommandClient(CommandClient):
    """Dict-backed command client that records every command it runs."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.lists: dict[str, list[str]] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.transactions: list[list[tuple[Any, ...]]] = []
        self.fail = False

    def _run(self, verb: str, *args: Any) -> Any:
        if verb == "HGET":
            key, field = args
            return self.hashes.get(key, {}).get(field)
        if verb == "HSET":
            key, field, value = args
            self.hashes.setdefault(key, {})[field] = value
            return 1
        if verb == "LPUSH":
            key, value = args
            self.lists.setdefault(key, []).insert(0, value)
            return len(self.lists[key])
        if verb == "LRANGE":
            key, start, stop = args
            return self.lists.get(key, [])[int(start) : int(stop) + 1]
        if verb == "LTRIM":
            key, start, stop = args
            self.lists[key] = self.lists.get(key, [])[int(start) : int(stop) + 1]
            return "OK"
        if verb == "PING":
            return "PONG"
        raise AssertionError(f"unexpected verb {verb}")

    async def command(self, verb: str, *args: Any) -> Any:
        if self.fail:
            raise StoreUnavailable("fake store down")
        self.calls.append((verb, *args))
        return self._run(verb, *args)

    async def transaction(self, *commands: Any) -> list[Any]:
        if self.fail:
            raise StoreUnavailable("fake store down")
        self.transactions.append([tuple(c) for c in commands])
        return [self._run(*c) for c in commands]


@pytest.fixture
def command_client() -> FakeCommandClient:
    return FakeCommandClient()


@pytest.fixture(params=["file", "command"])
def store(request: pytest.FixtureRequest, tmp_path, command_client):
    """Each headline store backend, fresh and empty."""
    if request.param == "file":
        return FileHeadlineStore(tmp_path / "headlines.json")
    return CommandHeadlineStore(command_client)
