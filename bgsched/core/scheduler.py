#!/usr/bin/env python3
"""
In-process background job scheduler.

This module provides a self-rearming scheduler that wakes up every tick,
scans its job table and runs the jobs that are due, without any external
cron or OS service.

Provides:
- Job registration and removal by name
- Start / pause / stop lifecycle
- Due-job selection on whole-minute intervals
- Failure containment (a failing job is evicted, never retried)
- Event notifications for every state change
"""

import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from decologr import Logger as log, log_exception

from bgsched.config import get_tick_seconds
from bgsched.core.events import EventHandler, EventHub, SchedulerEvent, SchedulerEventArgs
from bgsched.core.job import Job, as_utc, utc_now
from bgsched.core.timer import ThreadTimerSource, TimerSource

class RunState(Enum):
    """Run states of the scheduler"""

    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"

class JobScheduler:
    """
    Self-rearming in-process job scheduler.

    Every ``tick_seconds`` the timer source fires, the scheduler re-arms it
    and runs every due job synchronously on the ticking thread. Jobs are
    zero-argument callables keyed by name.

    The job table is guarded by a single lock, held for the whole of a tick
    pass. A job that calls back into ``add_job``/``remove_job``/
    ``clear_job_queue`` from the tick thread will deadlock; dispatch such
    work elsewhere (see ``WorkerPool``).
    """

    def __init__(
        self,
        timer: Optional[TimerSource] = None,
        tick_seconds: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the job scheduler.

        :param timer: Timer source driving the ticks (default: ThreadTimerSource)
        :param tick_seconds: Seconds between ticks (default: BGSCHED_TICK_SECONDS or 60)
        :param clock: Callable returning the current aware UTC datetime
        """
        self.timer = timer or ThreadTimerSource()
        self.tick_seconds = get_tick_seconds(tick_seconds)
        self.clock = clock or utc_now
        self.events = EventHub()

        self.lock = threading.Lock()
        self._jobs: Dict[str, Job] = {}
        self._state = RunState.STOPPED
        # Guards the run state together with arming/disarming the timer
        self._state_lock = threading.Lock()

    # Lifecycle

    @property
    def is_running(self) -> bool:
        """True while a tick is pending on the timer source."""
        return self.timer.is_armed()

    @property
    def state(self) -> RunState:
        return self._state

    def start(self):
        """Start ticking. Calling start while running leaves the pending tick alone."""
        with self._state_lock:
            self._state = RunState.RUNNING
        self._rearm()
        log.info(f"Job scheduler started (tick every {self.tick_seconds:g}s)")
        self._emit(SchedulerEvent.STARTED)

    def pause(self):
        """Stop ticking until start() is called again; the job queue is preserved."""
        with self._state_lock:
            self._state = RunState.PAUSED
            self.timer.disarm()
        log.info("Job scheduler paused")
        self._emit(SchedulerEvent.PAUSED)

    def stop(self):
        """Pause and remove every job from the queue."""
        self.pause()
        self.clear_job_queue()
        with self._state_lock:
            self._state = RunState.STOPPED
        log.info("Job scheduler stopped")
        self._emit(SchedulerEvent.STOPPED)

    # Job management

    def add_job(
        self,
        name: str,
        work: Callable[[], Any],
        repeat: bool = False,
        start: Union[int, float, datetime] = 0,
        interval: int = 0,
    ) -> bool:
        """
        Add a job to the queue.

        :param name: Job name, unique within the queue
        :param work: Zero-argument callable to run
        :param repeat: Whether the job stays queued after a successful run
        :param start: Delay in minutes from now, or an absolute start datetime (naive = UTC)
        :param interval: Minimum whole minutes between runs
        :return: True if added, False if a job with this name already exists
        """
        if not name:
            raise ValueError("Job name must be a non-empty string")
        if not callable(work):
            raise TypeError(f"Job work must be callable, got {work!r}")
        if interval < 0:
            raise ValueError(f"Job interval must be >= 0, got {interval}")

        now = self.clock()
        if isinstance(start, datetime):
            start_time = as_utc(start)
        else:
            start_time = now + timedelta(minutes=start)

        with self.lock:
            if name in self._jobs:
                log.debug(f"Job {name} already queued, ignoring")
                return False
            self._jobs[name] = Job(
                name=name,
                work=work,
                repeat=repeat,
                start_time=start_time,
                interval=int(interval),
                last_run=now,
            )

        log.debug(f"Added job {name} (repeat={repeat}, interval={interval}m, start={start_time.isoformat()})")
        self._emit(SchedulerEvent.JOB_ADDED, job_name=name)
        return True

    def remove_job(self, name: str) -> bool:
        """
        Remove a job from the queue.

        :param name: Job name
        :return: True if a job was removed
        """
        with self.lock:
            if self._jobs.pop(name, None) is None:
                return False

        log.debug(f"Removed job {name}")
        self._emit(SchedulerEvent.JOB_REMOVED, job_name=name)
        return True

    def clear_job_queue(self):
        """Remove every job from the queue without touching the run state."""
        with self.lock:
            self._jobs = {}

        log.debug("Cleared job queue")
        self._emit(SchedulerEvent.JOB_QUEUE_CLEARED)

    @property
    def job_queue(self) -> List[Job]:
        """Snapshot of the queue; changing it does not affect the scheduler."""
        with self.lock:
            return [job.copy() for job in self._jobs.values()]

    def get_job(self, name: str) -> Optional[Job]:
        """
        Get a copy of a queued job.

        :param name: Job name
        :return: Job copy or None if not queued
        """
        with self.lock:
            job = self._jobs.get(name)
            return job.copy() if job else None

    # Events

    def subscribe(self, event: SchedulerEvent, handler: EventHandler) -> EventHandler:
        """Shortcut for ``events.subscribe``."""
        return self.events.subscribe(event, handler)

    def unsubscribe(self, event: SchedulerEvent, handler: EventHandler) -> bool:
        """Shortcut for ``events.unsubscribe``."""
        return self.events.unsubscribe(event, handler)

    def _emit(self, event: SchedulerEvent, job_name: Optional[str] = None, error: Optional[BaseException] = None):
        self.events.emit(
            SchedulerEventArgs(
                event=event,
                timestamp=self.clock(),
                job_name=job_name,
                sender=self,
                error=error,
            )
        )

    # Ticking

    def _rearm(self):
        """Arm the next tick unless one is pending or the scheduler is not running."""
        with self._state_lock:
            if self._state is not RunState.RUNNING or self.timer.is_armed():
                return
            self.timer.arm(self.tick_seconds, self._run_jobs)

    def _run_jobs(self):
        """Tick handler: re-arm, then run every due job."""
        if self._state is not RunState.RUNNING:
            return

        self._emit(SchedulerEvent.JOB_QUEUE_START)
        self._rearm()

        with self.lock:
            for job in list(self._jobs.values()):
                now = self.clock()
                if not job.is_due(now):
                    continue
                self._run_job(job)

        self._emit(SchedulerEvent.JOB_QUEUE_END)

    def _run_job(self, job: Job):
        """Run one due job. Caller holds the lock."""
        self._emit(SchedulerEvent.JOB_START, job_name=job.name)
        log.debug(f"Running job {job.name}")
        try:
            job.work()
        except BaseException as ex:
            self._jobs.pop(job.name, None)
            log_exception(ex, f"Job {job.name} failed and was removed from the queue")
            self._emit(SchedulerEvent.JOB_FAILED, job_name=job.name, error=ex)
            return

        self._emit(SchedulerEvent.JOB_END, job_name=job.name)
        if not job.repeat:
            self._jobs.pop(job.name, None)
        else:
            job.last_run = max(job.last_run, self.clock())

# Process-wide scheduler instance
_scheduler_instance: Optional[JobScheduler] = None
_scheduler_instance_lock = threading.Lock()

def get_scheduler() -> JobScheduler:
    """
    Get or create the process-wide scheduler.

    The scheduler is created stopped; the host decides when to start it.

    :return: JobScheduler instance
    """
    global _scheduler_instance
    with _scheduler_instance_lock:
        if _scheduler_instance is None:
            _scheduler_instance = JobScheduler()
        return _scheduler_instance

def reset_scheduler():
    """Stop the process-wide scheduler, if any, and forget it."""
    global _scheduler_instance
    with _scheduler_instance_lock:
        scheduler = _scheduler_instance
        _scheduler_instance = None
    if scheduler is not None:
        scheduler.stop()
