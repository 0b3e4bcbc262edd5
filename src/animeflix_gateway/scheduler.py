"""Scheduler Thread Module

This module provides a scheduler thread that runs alongside the web server.
It uses the schedule library to run periodic maintenance such as pruning
stale cache entries.

The module exposes global functions for scheduling jobs that can be called from any context:
- schedule_every(): Schedule a job to run at regular intervals
- clear_jobs(): Clear all scheduled jobs
- get_jobs(): Get all currently scheduled jobs
"""

import threading
import logging
import schedule
from typing import Callable

logger = logging.getLogger(__name__)

VALID_UNITS = ['seconds', 'minutes', 'hours', 'days', 'weeks']


def schedule_every(interval: int, unit: str, job: Callable, job_name: str = ""):
    """
    Schedule a job to run at regular intervals (globally accessible)

    Args:
        interval: The interval value (e.g., 5 for "every 5 minutes")
        unit: The unit of time ('seconds', 'minutes', 'hours', 'days', 'weeks')
        job: The callable function to execute
        job_name: Optional name for the job (for logging purposes)

    Returns:
        The scheduled job object
    """
    if unit not in VALID_UNITS:
        raise ValueError(f"Invalid unit '{unit}'. Must be one of: {VALID_UNITS}")

    name = job_name or job.__name__
    logger.info("Scheduling job '%s' to run every %d %s", name, interval, unit)

    # Wrap the job to catch exceptions and add logging
    def wrapped_job():
        try:
            logger.debug("Running scheduled job: %s", name)
            job()
            logger.debug("Completed scheduled job: %s", name)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Error in scheduled job '%s': %s", name, e, exc_info=True)

    wrapped_job.__name__ = name
    return getattr(schedule.every(interval), unit).do(wrapped_job)


def clear_jobs():
    """Clear all scheduled jobs (globally accessible)"""
    logger.info("Clearing all scheduled jobs")
    schedule.clear()


def get_jobs():
    """Get all currently scheduled jobs (globally accessible)"""
    return schedule.get_jobs()


class SchedulerThread:
    """Daemon thread running the jobs registered with schedule_every()."""

    def __init__(self, max_idle_seconds: float = 300):
        self.max_idle_seconds = max_idle_seconds
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True, name="SchedulerThread")

    def start(self):
        self._thread.start()
        logger.info("Scheduler thread started")

    def stop(self, timeout: float = 5.0):
        """Signal the loop to end and wait for the thread."""
        self._stop_event.set()
        if self._thread.is_alive():
            self._thread.join(timeout=timeout)

    def _run(self):
        while not self._stop_event.is_set():
            try:
                schedule.run_pending()
            except Exception as e:  # pylint: disable=broad-except
                logger.error("Error in scheduler thread: %s", e, exc_info=True)
            idle = schedule.idle_seconds()
            if idle is None:
                idle = self.max_idle_seconds
            # wait() returns early on stop()
            self._stop_event.wait(min(max(idle, 0), self.max_idle_seconds))
