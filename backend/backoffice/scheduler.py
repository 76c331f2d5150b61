# Overview: Background timer that runs the attendance end-of-day closer once per day.

"""
End-of-day scheduler

WHY: Staff forget to clock out. Once a day at a fixed local time every open
attendance session for that day is closed by the same service call an admin
can trigger by hand. The job runs on its own daemon thread with its own app
context; a failed run is logged and skipped, never re-raised.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta

from backoffice.time_utils import local_now


logger = logging.getLogger(__name__)


def seconds_until(now: datetime, at: time) -> float:
    """Seconds from now to the next occurrence of `at` (strictly in the future)."""
    target = datetime.combine(now.date(), at)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class EndOfDayScheduler:
    def __init__(self, app, at: time = time(23, 59)):
        self.app = app
        self.at = at
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="attendance-auto-close",
            daemon=True,
        )
        self._thread.start()
        logger.info("Attendance auto-close scheduled daily at %s", self.at.strftime("%H:%M"))

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> int | None:
        """Run the closer now. Returns rows closed, or None if the run failed."""
        from backoffice.services import attendance_service

        with self.app.app_context():
            try:
                closed = attendance_service.auto_time_out_at_end_of_day()
                logger.info("Scheduled auto time-out closed %d attendances", closed)
                return closed
            except Exception:
                logger.exception("Scheduled auto time-out failed; skipping this run")
                return None

    def _loop(self) -> None:
        while not self._stop.is_set():
            delay = seconds_until(local_now(), self.at)
            if self._stop.wait(delay):
                break
            self.run_once()
