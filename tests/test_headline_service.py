"""
Behavioural tests for HeadlineService, run against every store backend
via the parametrized ``store`` fixture (see conftest.py).
"""

from __future__ import annotations

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from headlines.api.services.headline_service import HeadlineService, normalize_headline
from headlines.errors import CorruptState, InvalidInput, StoreUnavailable
from headlines.store import FileHeadlineStore, HeadlineEntry, now_ms


class TestNormalizeHeadline:
    def test_trims_whitespace(self) -> None:
        assert normalize_headline("  Big news \n") == "Big news"

    def test_truncates_after_trimming(self) -> None:
        assert normalize_headline("   " + "x" * 20, max_length=5) == "xxxxx"

    @pytest.mark.parametrize("raw", [None, "", "   ", "\t\n", 42, ["x"], {"h": "x"}])
    def test_rejects_missing_blank_or_non_string(self, raw) -> None:
        with pytest.raises(InvalidInput, match="Headline is required"):
            normalize_headline(raw)


class TestHeadlineService:
    @pytest.mark.asyncio
    async def test_round_trip(self, store) -> None:
        service = HeadlineService(store)
        before = now_ms()

        written = await service.set_headline("Brazil", "  Carnival starts  ")
        read = await service.get_headline("Brazil")

        assert written.headline == "Carnival starts"
        assert read == written
        assert read.timestamp >= before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_length", [280, 500])
    async def test_truncation(self, store, max_length: int) -> None:
        service = HeadlineService(store, max_length=max_length)
        raw = "x" * 1000

        result = await service.set_headline("US", raw)

        assert len(result.headline) == max_length
        assert raw.startswith(result.headline)
        assert (await service.get_headline("US")).headline == result.headline

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["", "   "])
    async def test_validation_leaves_state_untouched(self, store, raw: str) -> None:
        service = HeadlineService(store)
        original = await service.set_headline("US", "keep me")

        with pytest.raises(InvalidInput):
            await service.set_headline("US", raw)

        assert await service.get_headline("US") == original
        assert [r.headline for r in await service.get_recent("US")] == ["keep me"]

    @pytest.mark.asyncio
    async def test_history_newest_first(self, store) -> None:
        service = HeadlineService(store)
        await service.set_headline("FR", "a")
        await service.set_headline("FR", "b")

        recent = await service.get_recent("FR", 10)

        assert [r.headline for r in recent] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_history_window(self, store) -> None:
        service = HeadlineService(store)
        for i in range(15):
            await service.set_headline("Japan", f"headline {i}")

        recent = await service.get_recent("Japan", 10)

        assert [r.headline for r in recent] == [f"headline {i}" for i in range(14, 4, -1)]

    @pytest.mark.asyncio
    async def test_absent_country(self, store) -> None:
        service = HeadlineService(store)

        current = await service.get_headline("ZZ")

        assert current.model_dump() == {"country": "ZZ", "headline": None, "timestamp": None}
        assert await service.get_recent("ZZ", 10) == []

    @pytest.mark.asyncio
    async def test_countries_are_isolated(self, store) -> None:
        service = HeadlineService(store)
        fr = await service.set_headline("FR", "Paris")
        fr_history = await service.get_recent("FR")

        await service.set_headline("US", "Washington")
        await service.set_headline("US", "New York")

        assert await service.get_headline("FR") == fr
        assert await service.get_recent("FR") == fr_history
        assert all(r.country == "FR" for r in await service.get_recent("FR"))

    @pytest.mark.asyncio
    async def test_country_keys_are_case_sensitive(self, store) -> None:
        service = HeadlineService(store)
        await service.set_headline("France", "upper")

        assert (await service.get_headline("france")).headline is None

    @pytest.mark.asyncio
    async def test_timestamp_comes_from_server_clock(self, store) -> None:
        service = HeadlineService(store, clock=lambda: 1_700_000_000_000)

        result = await service.set_headline("Chile", "Hola")

        assert result.timestamp == 1_700_000_000_000
        assert (await service.get_recent("Chile"))[0].timestamp == 1_700_000_000_000


# -----------------------------------------------------------------------
# Failure policy: reads fail soft, writes fail loud
# -----------------------------------------------------------------------


def _failing_store(exc: Exception) -> MagicMock:
    store = MagicMock()
    store.name = "mock"
    store.get_current = AsyncMock(side_effect=exc)
    store.record = AsyncMock(side_effect=exc)
    store.recent = AsyncMock(side_effect=exc)
    return store


class TestFailurePolicy:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc", [StoreUnavailable("down"), CorruptState("bad json")])
    async def test_reads_degrade_to_empty(self, exc: Exception) -> None:
        service = HeadlineService(_failing_store(exc))

        current = await service.get_headline("FR")

        assert current.headline is None and current.timestamp is None
        assert await service.get_recent("FR") == []

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self) -> None:
        service = HeadlineService(_failing_store(StoreUnavailable("disk full")))

        with pytest.raises(StoreUnavailable):
            await service.set_headline("FR", "lost")

    @pytest.mark.asyncio
    async def test_invalid_input_never_reaches_store(self) -> None:
        store = _failing_store(StoreUnavailable("down"))
        service = HeadlineService(store)

        with pytest.raises(InvalidInput):
            await service.set_headline("FR", "   ")

        store.record.assert_not_called()

    @pytest.mark.asyncio
    async def test_slow_store_times_out(self) -> None:
        async def _hang(*_args):
            await asyncio.sleep(10)

        store = _failing_store(StoreUnavailable("unused"))
        store.record = _hang
        store.recent = _hang
        service = HeadlineService(store, timeout=0.01)

        with pytest.raises(StoreUnavailable, match="timed out"):
            await service.set_headline("FR", "slow")
        assert await service.get_recent("FR") == []


class _SlowFileStore(FileHeadlineStore):
    def _apply(self, entry: HeadlineEntry) -> None:
        time.sleep(0.3)
        super()._apply(entry)


class TestFileWriteDeadline:
    @pytest.mark.asyncio
    async def test_late_write_is_reported_as_success(self, tmp_path) -> None:
        store = _SlowFileStore(tmp_path / "headlines.json")
        service = HeadlineService(store, timeout=0.05)

        result = await service.set_headline("FR", "late")

        assert result.headline == "late"
        assert [e.headline for e in store.load().history] == ["late"]
        assert not store._lock.locked()

    @pytest.mark.asyncio
    async def test_write_queued_behind_slow_write_fails_without_landing(self, tmp_path) -> None:
        store = _SlowFileStore(tmp_path / "headlines.json")
        service = HeadlineService(store, timeout=0.05)

        results = await asyncio.gather(
            service.set_headline("FR", "first"),
            service.set_headline("FR", "second"),
            return_exceptions=True,
        )

        assert results[0].headline == "first"
        assert isinstance(results[1], StoreUnavailable)
        assert [e.headline for e in store.load().history] == ["first"]

    @pytest.mark.asyncio
    async def test_retry_after_timeout_does_not_duplicate_history(self, tmp_path) -> None:
        store = FileHeadlineStore(tmp_path / "headlines.json")
        service = HeadlineService(store, timeout=0.05)

        async with store._lock:
            with pytest.raises(StoreUnavailable, match="timed out"):
                await service.set_headline("FR", "once")
        await service.set_headline("FR", "once")

        assert [e.headline for e in store.load().history] == ["once"]
