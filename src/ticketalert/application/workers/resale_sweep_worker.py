"""Resale Sweep Worker - emails subscribers when resale tickets show up.

Hey future me - one sweep pass goes like this, strictly one subscription at a time:

    list_pending()
      -> for each row:
           check_resale(event_id)
             no resale  -> result {hasResale: false, notified: false}
             resale     -> get_event_details(event_id)
                             none  -> row skipped (no result entry, retried next pass)
                             found -> send email
                                        ok   -> mark_notified(row.id), notified += 1
                                        fail -> result {hasResale: true, notified: false}
           sleep(delay_seconds)   # flat pause between rows, keeps Ticketmaster happy

Two things to know:
- A subscription is only marked notified AFTER the email succeeded. A failed send
  leaves it pending and the next pass tries again. There's no attempt counter, so a
  permanently broken address or a deleted event retries forever. Known, accepted.
- Running a second pass right after a successful one sends nothing: the row is no
  longer pending.

Triggers: GET /api/check-and-notify (external cron) and, if SWEEP_INTERVAL_SECONDS
> 0, the in-process loop in ResaleSweepWorker.start(). A lock serializes passes so
the two triggers can't double-send.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from ticketalert.application.services.concert_catalog_service import ConcertCatalogService
from ticketalert.application.services.resale_checker import ResaleChecker
from ticketalert.domain.entities import ResaleAlert, SweepItemResult, SweepReport
from ticketalert.domain.ports import IEmailSender, ISubscriptionStore

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 0.2


class ResaleSweep:
    """One notification pass over all pending subscriptions."""

    def __init__(
        self,
        store: ISubscriptionStore,
        resale_checker: ResaleChecker,
        catalog: ConcertCatalogService,
        email_sender: IEmailSender,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.resale_checker = resale_checker
        self.catalog = catalog
        self.email_sender = email_sender
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def run_once(self) -> SweepReport:
        """Check every pending subscription and notify where resale exists.

        Returns:
            SweepReport with checked/notified counts and per-row results

        Raises:
            Exception: Only store failures propagate; checker, catalog and email
                sender report failures through their return values
        """
        async with self._lock:
            return await self._sweep()

    async def _sweep(self) -> SweepReport:
        report = SweepReport()
        pending = await self.store.list_pending()
        report.checked = len(pending)

        if not pending:
            logger.debug("[SWEEP] No pending subscriptions")
            report.finished_at = datetime.now(UTC)
            return report

        logger.info("[SWEEP] Checking %d pending subscriptions", len(pending))

        for subscription in pending:
            status = await self.resale_checker.check_resale(subscription.event_id)

            if not status.has_resale:
                report.results.append(
                    SweepItemResult(subscription.event_id, has_resale=False, notified=False)
                )
            else:
                details = await self.catalog.get_event_details(subscription.event_id)
                if details is None:
                    logger.warning(
                        "[SWEEP] Resale found but details unavailable for event %s",
                        subscription.event_id,
                    )
                else:
                    result = await self.email_sender.send_resale_alert(
                        ResaleAlert(
                            to=subscription.email,
                            event_name=details.name,
                            event_date=details.date,
                            venue=f"{details.venue}, {details.city}",
                            purchase_url=details.url,
                        )
                    )
                    if result.success:
                        await self.store.mark_notified(subscription.id)
                        report.notified += 1
                    else:
                        logger.warning(
                            "[SWEEP] Email for subscription %s failed: %s",
                            subscription.id,
                            result.error,
                        )
                    report.results.append(
                        SweepItemResult(
                            subscription.event_id, has_resale=True, notified=result.success
                        )
                    )

            await self._sleep(self.delay_seconds)

        report.finished_at = datetime.now(UTC)
        logger.info(
            "[SWEEP] Checked %d subscriptions, notified %d", report.checked, report.notified
        )
        return report


class ResaleSweepWorker:
    """Runs ResaleSweep periodically inside the app process.

    Lifecycle:
    - Created in lifecycle.py when SWEEP_INTERVAL_SECONDS > 0
    - Runs as asyncio task via start()
    - Stopped during shutdown via stop() (the task is cancelled too)
    """

    def __init__(self, sweep: ResaleSweep, interval_seconds: int) -> None:
        self._sweep = sweep
        self._interval = interval_seconds
        self._running = False
        self._stats: dict[str, Any] = {
            "passes": 0,
            "total_notified": 0,
            "last_run_at": None,
            "last_checked": 0,
            "last_error": None,
        }

    async def start(self) -> None:
        """Run sweeps until stop() is called."""
        self._running = True
        logger.info("ResaleSweepWorker started (interval=%ss)", self._interval)

        while self._running:
            try:
                report = await self._sweep.run_once()
                self._stats["passes"] += 1
                self._stats["total_notified"] += report.notified
                self._stats["last_checked"] = report.checked
                self._stats["last_error"] = None
            except Exception as e:
                # Log but don't crash - next interval tries again
                logger.exception("ResaleSweepWorker error: %s", e)
                self._stats["last_error"] = str(e)
            self._stats["last_run_at"] = datetime.now(UTC).isoformat()

            await asyncio.sleep(self._interval)

    def stop(self) -> None:
        """Signal the worker to stop."""
        self._running = False
        logger.info("ResaleSweepWorker stopping...")

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats, "running": self._running, "interval_seconds": self._interval}


__all__ = ["DEFAULT_DELAY_SECONDS", "ResaleSweep", "ResaleSweepWorker"]
