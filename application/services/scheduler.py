import asyncio
import contextlib
import logging
from enum import Enum

from application.services.rate_service import RateService

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class RateUpdateScheduler:
    """
    Runs the rate update once per interval, never two runs at a time.

    A tick that arrives while a run is in progress is dropped, not queued.
    Errors inside a run are logged and the scheduler goes back to idle.
    """

    def __init__(self, rate_service: RateService, interval_seconds: float = 3600.0):
        """
        Args:
            rate_service: Service performing the fetch and aggregation
            interval_seconds: Seconds between ticks (default: one hour)
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.rate_service = rate_service
        self.interval_seconds = interval_seconds
        self._run_lock = asyncio.Lock()
        self._ticker: asyncio.Task | None = None
        self._runs: set[asyncio.Task] = set()

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.RUNNING if self._run_lock.locked() else SchedulerState.IDLE

    @property
    def is_started(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    async def trigger(self) -> bool:
        """Run one update unless one is already running. Returns whether it ran."""
        logger.info("Scheduler triggered to update average rates.")

        # Nothing awaits between the check and the acquire, so this is a try-lock.
        if self._run_lock.locked():
            logger.warning("Scheduled task is already running, skipping execution.")
            return False

        async with self._run_lock:
            logger.debug("Acquired lock for scheduled task.")
            try:
                rates = await self.rate_service.update_average_rates()
                logger.info(
                    f"Average currency rates successfully updated: {[r.currency for r in rates]}"
                )
            except Exception as e:
                logger.error(f"Error during scheduled task execution: {e}", exc_info=True)
        logger.debug("Lock released after scheduled task.")
        return True

    def spawn_trigger(self) -> asyncio.Task:
        """Start a run in the background without waiting for it."""
        task = asyncio.create_task(self.trigger())
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)
        return task

    async def _tick(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            self.spawn_trigger()
            next_tick += self.interval_seconds
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    def start(self) -> None:
        if self.is_started:
            return
        logger.info(f"Starting rate update scheduler, interval={self.interval_seconds}s")
        self._ticker = asyncio.create_task(self._tick())

    async def stop(self) -> None:
        logger.info("Stopping rate update scheduler...")
        tasks = [t for t in [self._ticker, *self._runs] if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._ticker = None
        logger.info("Rate update scheduler stopped")
