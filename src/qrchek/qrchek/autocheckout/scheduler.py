from __future__ import annotations

import logging
import threading
from datetime import tzinfo
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from ..core.exceptions import ConflictError
from .service import AutoCheckoutResult, AutoCheckoutService

logger = logging.getLogger(__name__)

JOB_ID = "auto-checkout"


class AutoCheckoutScheduler:
    """Owns the daily timer and the "sweep is running" flag.

    ``run_now`` and the timer share one non-blocking lock, so the sweep never
    overlaps itself. Nothing is scheduled until ``start`` is called, which keeps
    tests free of timer side effects.
    """

    def __init__(
        self,
        service: AutoCheckoutService,
        *,
        timezone: tzinfo,
        scheduler: Optional[BaseScheduler] = None,
    ):
        self._service = service
        self._timezone = timezone
        self._scheduler = scheduler
        self._running = threading.Lock()

    @property
    def started(self) -> bool:
        return bool(self._scheduler is not None and self._scheduler.running)

    def start(self) -> None:
        if self.started:
            return
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(timezone=self._timezone)

        cutoff = self._service.cutoff
        self._scheduler.add_job(
            self._scheduled_run,
            "cron",
            hour=cutoff.hour,
            minute=cutoff.minute,
            id=JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()
        logger.info(
            "[Auto-Checkout] Scheduled job initialized (runs daily at %s %s)",
            cutoff.strftime("%H:%M"),
            self._timezone,
        )

    def shutdown(self) -> None:
        if self.started:
            self._scheduler.shutdown(wait=False)

    def run_now(self) -> AutoCheckoutResult:
        if not self._running.acquire(blocking=False):
            raise ConflictError("Auto-checkout is already running")
        try:
            return self._service.run()
        finally:
            self._running.release()

    def _scheduled_run(self) -> None:
        logger.info("[Auto-Checkout] Running scheduled auto-checkout")
        try:
            self.run_now()
        except ConflictError:
            logger.warning("[Auto-Checkout] Previous run still in progress, skipping")
        except Exception:
            logger.exception("[Auto-Checkout] Error during auto-checkout")
