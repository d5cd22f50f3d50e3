# services/sweeper.py - Periodic transition of lapsed reservations to OVERDUE
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from sqlalchemy.orm import Session
from config import SessionLocal, SWEEP_INTERVAL_SECONDS, OVERDUE_THRESHOLD_MINUTES
from repository.reservations import ReservationRepo
from services.state_machine import ACTIVE_STATUSES
from utils.clock import Clock, system_clock

logger = logging.getLogger(__name__)

def sweep_overdue(db: Session, now: datetime) -> int:
    """Move every PENDING/APPROVED reservation starting before now + 10 minutes to OVERDUE.

    One UPDATE statement, so rows touched concurrently by users or partners
    are either swept or not, never half-written. Re-running with the same
    clock changes nothing.
    """
    threshold = now + timedelta(minutes=OVERDUE_THRESHOLD_MINUTES)
    updated = ReservationRepo.update_to_overdue(db, threshold, ACTIVE_STATUSES, now)
    db.commit()
    return updated

class OverdueSweeper:
    """Runs ``sweep_overdue`` on a fixed period from an asyncio task.

    A failed tick is logged and the next tick tries again; only cancelling the
    task (application shutdown) ends the loop.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        clock: Clock = system_clock,
        interval_seconds: float = SWEEP_INTERVAL_SECONDS,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    def run_once(self) -> int:
        db = self.session_factory()
        try:
            updated = sweep_overdue(db, self.clock.now())
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        logger.info(f"Updated {updated} reservations to OVERDUE status.")
        return updated

    async def run_forever(self):
        while True:
            try:
                # The sweep uses a blocking session; keep it off the event loop
                await asyncio.to_thread(self.run_once)
            except Exception:
                logger.exception("Overdue sweep failed, retrying on next tick")
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever(), name="overdue-sweeper")
            logger.info(f"Overdue sweeper started (every {self.interval_seconds}s)")
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Overdue sweeper stopped")
