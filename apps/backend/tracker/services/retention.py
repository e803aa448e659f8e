from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog
from sqlalchemy.orm import Session

from tracker.services.event_store import delete_events_before

log = structlog.get_logger()


class RetentionSweeper:
    """
    Deletes events older than the retention horizon, at most once per interval.

    Triggered from ingestion rather than a timer, so an idle tracker never
    sweeps. `last_run` is read and written without a lock: two requests racing
    past the check just delete twice.
    """

    def __init__(
        self,
        retention_days: int = 60,
        interval_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.retention_days = retention_days
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.last_run = 0.0

    def claim(self) -> bool:
        now = self.clock()
        if now - self.last_run < self.interval_seconds:
            return False
        # stamp before deleting so concurrent ingests don't re-trigger
        self.last_run = now
        return True

    def cutoff(self) -> datetime:
        now = datetime.fromtimestamp(self.clock(), tz=timezone.utc)
        return now - timedelta(days=self.retention_days)

    def sweep(self, session_factory: Callable[[], Session]) -> Optional[int]:
        log.info("retention_sweep_started", retention_days=self.retention_days)
        try:
            db = session_factory()
            try:
                deleted = delete_events_before(db, self.cutoff())
            finally:
                db.close()
        except Exception:
            log.exception("retention_sweep_failed")
            return None
        log.info("retention_sweep_done", deleted=deleted)
        return deleted

    def maybe_sweep(self, session_factory: Callable[[], Session]) -> bool:
        if not self.claim():
            return False
        self.sweep(session_factory)
        return True
