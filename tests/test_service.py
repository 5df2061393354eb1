"""Tests for the scheduler service."""

import signal
import threading
from datetime import datetime, timezone

import pytest

from bgsched.core.events import SchedulerEvent, SchedulerEventArgs
from bgsched.core.scheduler import RunState
from bgsched.core.service import SchedulerService, format_event


@pytest.fixture
def no_signals(monkeypatch):
    """Keep the service from replacing pytest's signal handlers."""
    calls = []

    def fake_signal(signum, handler):
        calls.append((signum, handler))
        return f"previous-{signum}"

    monkeypatch.setattr(signal, "signal", fake_signal)
    return calls


class TestSchedulerService:
    """Tests for SchedulerService."""

    def test_runs_for_duration_then_stops(self, scheduler, no_signals):
        scheduler.add_job("a", lambda: None, repeat=True, interval=5)
        service = SchedulerService(scheduler=scheduler, duration=0.01)

        service.start()

        assert service.running is False
        assert scheduler.state is RunState.STOPPED
        assert scheduler.job_queue == []
        assert {signum for signum, _ in no_signals} == {signal.SIGINT, signal.SIGTERM}
        assert service.final_status["state"] == "running"
        assert [job["name"] for job in service.final_status["jobs"]] == ["a"]

    def test_request_stop_from_another_thread(self, scheduler, no_signals):
        service = SchedulerService(scheduler=scheduler)
        started = threading.Event()
        scheduler.subscribe(SchedulerEvent.STARTED, lambda e: started.set())

        thread = threading.Thread(target=service.start, daemon=True)
        thread.start()
        assert started.wait(timeout=2.0)

        service.request_stop()
        thread.join(timeout=2.0)

        assert not thread.is_alive()
        assert scheduler.state is RunState.STOPPED

    def test_status(self, scheduler, clock):
        scheduler.add_job("a", lambda: None, repeat=True, interval=2)
        scheduler.start()
        service = SchedulerService(scheduler=scheduler, log_events=False)

        status = service.status()

        assert status["running"] is True
        assert status["state"] == "running"
        assert status["tick_seconds"] == 60
        assert status["jobs"][0]["name"] == "a"
        assert status["jobs"][0]["repeat"] is True
        assert status["jobs"][0]["interval"] == 2
        assert status["jobs"][0]["last_run"] == clock.now.isoformat()

    def test_logs_every_event(self, scheduler):
        SchedulerService(scheduler=scheduler)

        for event in SchedulerEvent:
            assert scheduler.events.handler_count(event) == 1

    def test_log_events_disabled(self, scheduler):
        SchedulerService(scheduler=scheduler, log_events=False)

        assert scheduler.events.handler_count(SchedulerEvent.STARTED) == 0

    def test_stop_without_start_is_noop(self, scheduler):
        scheduler.add_job("a", lambda: None)
        service = SchedulerService(scheduler=scheduler)

        service.stop()

        assert len(scheduler.job_queue) == 1

    def test_stop_restores_signal_handlers(self, scheduler, no_signals):
        service = SchedulerService(scheduler=scheduler, duration=0.01)

        service.start()

        assert no_signals[-2:] == [
            (signal.SIGINT, f"previous-{signal.SIGINT}"),
            (signal.SIGTERM, f"previous-{signal.SIGTERM}"),
        ]

    def test_stop_detaches_event_logging(self, scheduler, no_signals):
        service = SchedulerService(scheduler=scheduler, duration=0.01)

        service.start()

        for event in SchedulerEvent:
            assert scheduler.events.handler_count(event) == 0

    def test_hosting_twice_logs_each_event_once(self, scheduler, no_signals):
        first = SchedulerService(scheduler=scheduler, duration=0.01)
        first.start()

        second = SchedulerService(scheduler=scheduler, duration=0.01)
        counts = []
        scheduler.subscribe(
            SchedulerEvent.STARTED,
            lambda e: counts.append(scheduler.events.handler_count(SchedulerEvent.STARTED)),
        )
        second.start()

        # the service's log handler plus the counting handler
        assert counts == [2]

    def test_restart_reattaches_event_logging(self, scheduler, no_signals):
        service = SchedulerService(scheduler=scheduler, duration=0.01)
        service.start()
        counts = []
        scheduler.subscribe(
            SchedulerEvent.STARTED,
            lambda e: counts.append(scheduler.events.handler_count(SchedulerEvent.STARTED)),
        )

        service.start()

        assert counts == [2]
        assert service.running is False


class TestFormatEvent:
    """Tests for event log lines."""

    def test_job_event(self):
        args = SchedulerEventArgs(
            event=SchedulerEvent.JOB_ADDED,
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            job_name="cleanup",
        )

        assert format_event(args) == 'job scheduler added job "cleanup" at 2024-01-01T00:00:00+00:00'

    def test_failure_includes_error(self):
        args = SchedulerEventArgs(
            event=SchedulerEvent.JOB_FAILED,
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            job_name="cleanup",
            error=ValueError("bad"),
        )

        line = format_event(args)

        assert '"cleanup"' in line
        assert "ValueError('bad')" in line

    def test_every_event_has_a_message(self):
        for event in SchedulerEvent:
            args = SchedulerEventArgs(event=event, timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc))
            assert format_event(args)
