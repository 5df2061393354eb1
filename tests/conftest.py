"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from bgsched.core.scheduler import JobScheduler, reset_scheduler
from bgsched.core.timer import ManualTimerSource


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, now=None):
        self.now = now or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds=0, minutes=0):
        self.now = self.now + timedelta(seconds=seconds, minutes=minutes)
        return self.now


class EventRecorder:
    """Collects every event emitted by a scheduler."""

    def __init__(self):
        self.events = []

    def __call__(self, args):
        self.events.append(args)

    def kinds(self):
        return [e.event for e in self.events]

    def pairs(self):
        return [(e.event, e.job_name) for e in self.events]

    def of(self, event):
        return [e for e in self.events if e.event is event]

    def clear(self):
        self.events = []


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timer():
    return ManualTimerSource()


@pytest.fixture
def scheduler(timer, clock):
    """Scheduler driven by a manual timer and a fake clock."""
    sched = JobScheduler(timer=timer, tick_seconds=60, clock=clock)
    yield sched
    sched.stop()


@pytest.fixture
def recorder(scheduler):
    rec = EventRecorder()
    scheduler.events.subscribe_all(rec)
    return rec


@pytest.fixture
def tick(scheduler, timer):
    """Fire one tick; fails the test if no tick was pending."""

    def _tick():
        assert timer.fire(), "no tick was armed"

    return _tick


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("BGSCHED_TICK_SECONDS", raising=False)
    monkeypatch.delenv("BGSCHED_MAX_WORKERS", raising=False)


@pytest.fixture
def shared_scheduler():
    """Reset the process-wide scheduler around a test."""
    reset_scheduler()
    yield
    reset_scheduler()
