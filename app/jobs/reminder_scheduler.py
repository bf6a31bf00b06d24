"""
Fixed-interval scheduler for the day-before reminder sweep.

The web app starts one ReminderScheduler on startup. A tick that fires while
the previous sweep is still running is skipped (single-flight).

One-off run (cron friendly): python -m app.jobs.reminder_scheduler [--verbose]
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from contextlib import suppress

from app.core.config import Settings
from app.services.reminders import run_reminder_sweep_job

logger = logging.getLogger(__name__)

SweepFn = Callable[[Settings], Awaitable[dict]]

DEFAULT_INTERVAL_SECONDS = 3600


class ReminderScheduler:
    """Runs the reminder sweep every `interval_seconds` on the running event loop."""

    def __init__(
        self,
        settings: Settings,
        sweep: SweepFn = run_reminder_sweep_job,
        interval_seconds: float | None = None,
    ):
        self.settings = settings
        interval = settings.reminder_interval_seconds if interval_seconds is None else interval_seconds
        if not interval or interval <= 0:
            logger.warning(
                f"Invalid reminder interval {interval!r} - using {DEFAULT_INTERVAL_SECONDS}s"
            )
            interval = DEFAULT_INTERVAL_SECONDS
        self.interval_seconds = interval
        self._sweep = sweep
        self._loop_task: asyncio.Task | None = None
        self._sweep_task: asyncio.Task | None = None
        self.skipped_ticks = 0

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def sweep_in_progress(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._loop_task = asyncio.create_task(self._run_forever())
        logger.info(f"Reminder scheduler started (interval={self.interval_seconds}s)")

    async def stop(self) -> None:
        for task in (self._loop_task, self._sweep_task):
            if task is not None and not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        self._loop_task = None
        self._sweep_task = None
        logger.info("Reminder scheduler stopped")

    def tick(self) -> asyncio.Task | None:
        """
        Start a sweep unless one is already in flight.

        Returns:
            The sweep task, or None if the tick was skipped
        """
        if self.sweep_in_progress:
            self.skipped_ticks += 1
            logger.warning("Previous reminder sweep still running - skipping this tick")
            return None
        self._sweep_task = asyncio.create_task(self._run_sweep())
        return self._sweep_task

    async def _run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.tick()

    async def _run_sweep(self) -> dict | None:
        try:
            return await self._sweep(self.settings)
        except Exception as e:
            logger.error(f"Reminder scheduler error: {e}", exc_info=True)
            return None


def main() -> None:
    """CLI entrypoint: run a single reminder sweep and exit."""
    import argparse

    from app.core.config import get_settings

    parser = argparse.ArgumentParser(description="Send reminders for tomorrow's bookings")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        results = asyncio.run(run_reminder_sweep_job(get_settings()))
    except Exception as e:
        logger.error(f"Reminder sweep failed: {e}", exc_info=True)
        sys.exit(1)

    logger.info(f"Reminder sweep finished: {results}")
    if results.get("status") == "error" or results.get("failed", 0) > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
