"""Tests for the scheduler helpers"""

import threading

import pytest
from animeflix_gateway.scheduler import schedule_every, clear_jobs, get_jobs, SchedulerThread


class TestScheduler:
    """Test suite for scheduler functions"""

    def teardown_method(self):
        clear_jobs()

    def test_schedule_every(self):
        job = schedule_every(10, 'minutes', lambda: None, 'cache-prune')
        assert job in get_jobs()
        assert job.interval == 10
        assert job.unit == 'minutes'

    def test_invalid_unit(self):
        with pytest.raises(ValueError):
            schedule_every(1, 'fortnights', lambda: None)

    def test_job_errors_are_contained(self):
        def broken():
            raise RuntimeError('boom')

        job = schedule_every(1, 'seconds', broken)
        job.run()

    def test_thread_runs_due_jobs_and_stops(self):
        ran = threading.Event()
        schedule_every(1, 'seconds', ran.set, 'tick')

        scheduler = SchedulerThread(max_idle_seconds=0.05)
        scheduler.start()
        try:
            assert ran.wait(timeout=5)
        finally:
            scheduler.stop()

        assert not scheduler._thread.is_alive()
