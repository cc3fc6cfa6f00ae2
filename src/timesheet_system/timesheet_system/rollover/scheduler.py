from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..common.datetime_utils import NY_TZ, add_days, as_utc, civil_date_of, format_ny_datetime, now_utc, start_of_civil_day
from ..core.constants import MIN_SCHEDULER_DELAY_SECONDS
from .engine import RolloverEngine, RolloverResult

logger = logging.getLogger(__name__)


def _build_background_scheduler() -> BackgroundScheduler:
    return BackgroundScheduler(
        timezone=NY_TZ,
        job_defaults={
            "coalesce": True,
            "misfire_grace_time": 3600,
        },
    )


class MidnightScheduler:
    """Fire the rollover once per New York civil day, right after midnight.

    Each run is a one-shot ``date`` job whose run time is recomputed from the
    wall clock, so drift never accumulates. A failed run is logged and the
    next midnight is scheduled anyway.
    """

    def __init__(
        self,
        engine: RolloverEngine,
        *,
        min_delay_seconds: float = MIN_SCHEDULER_DELAY_SECONDS,
        clock: Callable[[], datetime] = now_utc,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self._engine = engine
        self._min_delay = float(min_delay_seconds)
        self._clock = clock
        self._scheduler = scheduler if scheduler is not None else _build_background_scheduler()
        self._job = None
        self._lock = threading.Lock()
        self._running = False
        self.last_result: Optional[RolloverResult] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def next_run_at(self) -> Optional[datetime]:
        return self._job.trigger.run_date if self._job is not None else None

    def next_midnight(self, now: Optional[datetime] = None) -> datetime:
        """Later of the next local midnight and the next day's boundary.

        The two differ by an hour on DST-change days.
        """

        now = as_utc(now or self._clock())
        tomorrow = add_days(civil_date_of(now), 1)
        wall_midnight = as_utc(datetime.combine(tomorrow, time(0), tzinfo=NY_TZ))
        return max(wall_midnight, start_of_civil_day(tomorrow))

    def seconds_until_next_midnight(self, now: Optional[datetime] = None) -> float:
        now = as_utc(now or self._clock())
        delay = (self.next_midnight(now) - now).total_seconds()
        return max(self._min_delay, delay)

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            if not self._scheduler.running:
                self._scheduler.start()
            self._arm()

    def stop(self) -> None:
        with self._lock:
            self._running = False
            self._job = None
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)

    def run_once(self, now: Optional[datetime] = None) -> RolloverResult:
        result = self._engine.run_rollover_for_now(now or self._clock())
        self.last_result = result
        return result

    def _arm(self) -> None:
        now = as_utc(self._clock())
        run_at = now + timedelta(seconds=self.seconds_until_next_midnight(now))
        self._job = self._scheduler.add_job(self._fire, "date", run_date=run_at, name="midnight-rollover")
        logger.info(
            "Midnight rollover armed for %s (NY), in %.0f seconds",
            format_ny_datetime(run_at),
            (run_at - now).total_seconds(),
        )

    def _fire(self) -> None:
        try:
            result = self.run_once()
            logger.info("Midnight rollover done, affected=%d", result.affected)
        except Exception:
            logger.exception("Midnight rollover failed")
        finally:
            with self._lock:
                if self._running:
                    self._arm()
