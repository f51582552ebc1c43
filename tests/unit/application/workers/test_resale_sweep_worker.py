"""Tests for the resale notification sweep.

Hey future me - the important properties here:
1. A row is marked notified only after the email succeeded
2. A second pass right after a successful one sends nothing and writes nothing
3. Resale without event details skips the row (no result entry, stays pending)
"""

import asyncio
import datetime as dt
from unittest.mock import AsyncMock

import httpx
import pytest

from ticketalert.application.services.concert_catalog_service import ConcertCatalogService
from ticketalert.application.workers.resale_sweep_worker import (
    ResaleSweep,
    ResaleSweepWorker,
)
from ticketalert.config import TicketmasterSettings
from ticketalert.domain.entities import (
    Concert,
    ResaleStatus,
    SweepReport,
    TrackedSubscription,
)
from ticketalert.domain.ports import EmailResult
from ticketalert.infrastructure.integrations import TicketmasterClient
from ticketalert.infrastructure.persistence import DatabaseSubscriptionStore

DETAILS = Concert(
    id="evt-1",
    name="Aurora - Live",
    date=dt.date(2026, 3, 15),
    venue="Oslo Spektrum",
    city="Oslo",
    image_url="https://img/a.jpg",
    url="https://www.ticketmaster.no/event/evt-1",
)


def subscription(sub_id: str, event_id: str = "evt-1") -> TrackedSubscription:
    return TrackedSubscription(
        id=sub_id, event_id=event_id, event_name="Aurora", email=f"{sub_id}@example.no"
    )


@pytest.fixture
def checker() -> AsyncMock:
    checker = AsyncMock()
    checker.check_resale.return_value = ResaleStatus(has_resale=True, info="yes")
    return checker


@pytest.fixture
def catalog() -> AsyncMock:
    catalog = AsyncMock()
    catalog.get_event_details.return_value = DETAILS
    return catalog


@pytest.fixture
def sender() -> AsyncMock:
    sender = AsyncMock()
    sender.send_resale_alert.return_value = EmailResult(success=True, provider_name="fake")
    return sender


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


class TestResaleSweep:
    async def test_empty_store(self, checker, catalog, sender, sleep) -> None:
        store = AsyncMock()
        store.list_pending.return_value = []

        report = await ResaleSweep(store, checker, catalog, sender, sleep=sleep).run_once()

        assert report.checked == 0
        assert report.notified == 0
        assert report.results == []
        checker.check_resale.assert_not_awaited()
        sleep.assert_not_awaited()

    async def test_notifies_with_fresh_event_details(
        self, checker, catalog, sender, sleep
    ) -> None:
        store = AsyncMock()
        store.list_pending.return_value = [subscription("s1")]

        report = await ResaleSweep(
            store, checker, catalog, sender, delay_seconds=0.2, sleep=sleep
        ).run_once()

        alert = sender.send_resale_alert.await_args.args[0]
        assert alert.to == "s1@example.no"
        assert alert.event_name == "Aurora - Live"
        assert alert.event_date == dt.date(2026, 3, 15)
        assert alert.venue == "Oslo Spektrum, Oslo"
        assert alert.purchase_url == DETAILS.url
        store.mark_notified.assert_awaited_once_with("s1")
        assert report.notified == 1
        assert [r.to_dict() for r in report.results] == [
            {"eventId": "evt-1", "hasResale": True, "notified": True}
        ]
        sleep.assert_awaited_once_with(0.2)

    async def test_no_resale_is_reported_not_notified(
        self, checker, catalog, sender, sleep
    ) -> None:
        store = AsyncMock()
        store.list_pending.return_value = [subscription("s1")]
        checker.check_resale.return_value = ResaleStatus(has_resale=False, info="no")

        report = await ResaleSweep(store, checker, catalog, sender, sleep=sleep).run_once()

        assert report.results[0].to_dict() == {
            "eventId": "evt-1",
            "hasResale": False,
            "notified": False,
        }
        catalog.get_event_details.assert_not_awaited()
        sender.send_resale_alert.assert_not_awaited()
        store.mark_notified.assert_not_awaited()

    async def test_failed_email_leaves_row_pending(self, checker, catalog, sender, sleep) -> None:
        store = AsyncMock()
        store.list_pending.return_value = [subscription("s1")]
        sender.send_resale_alert.return_value = EmailResult(
            success=False, provider_name="fake", error="rejected"
        )

        report = await ResaleSweep(store, checker, catalog, sender, sleep=sleep).run_once()

        store.mark_notified.assert_not_awaited()
        assert report.notified == 0
        assert report.results[0].has_resale is True
        assert report.results[0].notified is False

    async def test_missing_details_skips_row(self, checker, catalog, sender, sleep) -> None:
        store = AsyncMock()
        store.list_pending.return_value = [subscription("s1"), subscription("s2", "evt-2")]
        catalog.get_event_details.side_effect = [None, DETAILS]

        report = await ResaleSweep(store, checker, catalog, sender, sleep=sleep).run_once()

        assert report.checked == 2
        assert [r.event_id for r in report.results] == ["evt-2"]
        store.mark_notified.assert_awaited_once_with("s2")
        assert sleep.await_count == 2

    async def test_rows_processed_in_order(self, checker, catalog, sender, sleep) -> None:
        store = AsyncMock()
        store.list_pending.return_value = [
            subscription("s1", "a"),
            subscription("s2", "b"),
            subscription("s3", "c"),
        ]
        checker.check_resale.return_value = ResaleStatus(has_resale=False, info="no")

        await ResaleSweep(store, checker, catalog, sender, sleep=sleep).run_once()

        assert [c.args[0] for c in checker.check_resale.await_args_list] == ["a", "b", "c"]

    async def test_malformed_upstream_event_skips_only_that_row(
        self, checker, sender, sleep, tm_event_factory
    ) -> None:
        events = {
            "bad": tm_event_factory("bad", priceRanges=[{"min": "ukjent", "max": 10}]),
            "good": tm_event_factory("good"),
        }

        def handler(request: httpx.Request) -> httpx.Response:
            event_id = request.url.path.rsplit("/", 1)[-1].removesuffix(".json")
            return httpx.Response(200, json=events[event_id])

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        catalog = ConcertCatalogService(
            TicketmasterClient(TicketmasterSettings(api_key="tm-key"), client=client)
        )
        store = AsyncMock()
        store.list_pending.return_value = [subscription("s1", "bad"), subscription("s2", "good")]

        report = await ResaleSweep(store, checker, catalog, sender, sleep=sleep).run_once()

        assert [r.event_id for r in report.results] == ["good"]
        store.mark_notified.assert_awaited_once_with("s2")
        sender.send_resale_alert.assert_awaited_once()

    async def test_store_failure_propagates(self, checker, catalog, sender, sleep) -> None:
        store = AsyncMock()
        store.list_pending.side_effect = RuntimeError("db down")
        with pytest.raises(RuntimeError):
            await ResaleSweep(store, checker, catalog, sender, sleep=sleep).run_once()


class TestResaleSweepWithDatabase:
    async def test_end_to_end_then_idempotent(
        self, database, checker, catalog, sender, sleep, mocker
    ) -> None:
        store = DatabaseSubscriptionStore(database)
        created = await store.create("evt-1", "Aurora", "ola@example.no")
        mark_spy = mocker.spy(store, "mark_notified")
        sweep = ResaleSweep(store, checker, catalog, sender, sleep=sleep)

        first = await sweep.run_once()

        assert first.notified == 1
        mark_spy.assert_called_once_with(created.id)
        assert await store.list_pending() == []

        second = await sweep.run_once()

        assert second.checked == 0
        assert second.notified == 0
        assert sender.send_resale_alert.await_count == 1
        assert mark_spy.call_count == 1

    async def test_no_resale_passes_change_nothing(
        self, database, checker, catalog, sender, sleep, mocker
    ) -> None:
        store = DatabaseSubscriptionStore(database)
        await store.create("evt-1", "Aurora", "ola@example.no")
        await store.create("evt-2", "Sigrid", "kari@example.no")
        checker.check_resale.return_value = ResaleStatus(has_resale=False, info="no")
        mark_spy = mocker.spy(store, "mark_notified")
        sweep = ResaleSweep(store, checker, catalog, sender, sleep=sleep)
        before = [s.id for s in await store.list_pending()]

        first = await sweep.run_once()
        second = await sweep.run_once()

        assert first.checked == second.checked == 2
        assert first.notified == second.notified == 0
        sender.send_resale_alert.assert_not_awaited()
        assert mark_spy.call_count == 0
        assert [s.id for s in await store.list_pending()] == before


class TestResaleSweepWorker:
    async def test_runs_until_stopped(self) -> None:
        sweep = AsyncMock()
        sweep.run_once.return_value = SweepReport(checked=2, notified=1)
        worker = ResaleSweepWorker(sweep, interval_seconds=3600)

        task = asyncio.create_task(worker.start())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        worker.stop()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        stats = worker.get_stats()
        assert stats["passes"] == 1
        assert stats["total_notified"] == 1
        assert stats["last_checked"] == 2
        assert stats["running"] is False

    async def test_sweep_error_is_recorded_not_raised(self) -> None:
        sweep = AsyncMock()
        sweep.run_once.side_effect = RuntimeError("db down")
        worker = ResaleSweepWorker(sweep, interval_seconds=3600)

        task = asyncio.create_task(worker.start())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        worker.stop()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert worker.get_stats()["last_error"] == "db down"
