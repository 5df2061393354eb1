#!/usr/bin/env python3
"""
Foreground service that hosts a job scheduler.

The service logs every scheduler event, handles SIGINT/SIGTERM, and keeps
the process alive while the scheduler ticks in the background.
"""

import signal
import threading
from typing import Any, Dict, Optional

from decologr import Logger as log

from bgsched.core.events import SchedulerEvent, SchedulerEventArgs
from bgsched.core.scheduler import JobScheduler

EVENT_MESSAGES = {
    SchedulerEvent.STARTED: "job scheduler started at {timestamp}",
    SchedulerEvent.STOPPED: "job scheduler stopped at {timestamp}",
    SchedulerEvent.PAUSED: "job scheduler paused at {timestamp}",
    SchedulerEvent.JOB_ADDED: "job scheduler added job \"{job_name}\" at {timestamp}",
    SchedulerEvent.JOB_REMOVED: "job scheduler removed job \"{job_name}\" at {timestamp}",
    SchedulerEvent.JOB_QUEUE_CLEARED: "job scheduler cleared the job queue at {timestamp}",
    SchedulerEvent.JOB_QUEUE_START: "job scheduler started running job queue at {timestamp}",
    SchedulerEvent.JOB_QUEUE_END: "job scheduler finished running job queue at {timestamp}",
    SchedulerEvent.JOB_START: "job scheduler started running job \"{job_name}\" at {timestamp}",
    SchedulerEvent.JOB_END: "job scheduler finished running job \"{job_name}\" at {timestamp}",
    SchedulerEvent.JOB_FAILED: "job \"{job_name}\" raised {error!r} and was removed from the job queue at {timestamp}",
}

def format_event(args: SchedulerEventArgs) -> str:
    """Render an event as a single log line."""
    return EVENT_MESSAGES[args.event].format(
        timestamp=args.timestamp.isoformat(),
        job_name=args.job_name,
        error=args.error,
    )

class SchedulerService:
    """
    Standalone scheduler service.

    Usage:
        scheduler = JobScheduler()
        scheduler.add_job("cleanup", cleanup, repeat=True, interval=5)
        SchedulerService(scheduler).start()  # blocks until SIGINT/SIGTERM
    """

    def __init__(
        self,
        scheduler: Optional[JobScheduler] = None,
        duration: Optional[float] = None,
        log_events: bool = True,
    ):
        """
        Initialize the scheduler service.

        :param scheduler: Scheduler to host (default: a new JobScheduler)
        :param duration: Stop automatically after this many seconds (default: run until signalled)
        :param log_events: Log a line for every scheduler event
        """
        self.scheduler = scheduler or JobScheduler()
        self.duration = duration
        self.running = False
        self.final_status: Optional[Dict[str, Any]] = None
        self.log_events = log_events
        self._stop_requested = threading.Event()
        self._logging_attached = False
        self._previous_handlers: Dict[int, Any] = {}

        if log_events:
            self._attach_logging()

    def _attach_logging(self):
        if not self._logging_attached:
            self.scheduler.events.subscribe_all(self._log_event)
            self._logging_attached = True

    def _detach_logging(self):
        if self._logging_attached:
            self.scheduler.events.unsubscribe_all(self._log_event)
            self._logging_attached = False

    def _install_signal_handlers(self):
        # Signal handlers can only be registered in the main thread
        try:
            for signum in (signal.SIGINT, signal.SIGTERM):
                self._previous_handlers[signum] = signal.signal(signum, self._signal_handler)
        except ValueError:
            log.debug("Signal handlers not registered (not in main thread)")

    def _restore_signal_handlers(self):
        try:
            for signum, previous in self._previous_handlers.items():
                if previous is not None:
                    signal.signal(signum, previous)
        except ValueError:
            log.debug("Signal handlers not restored (not in main thread)")
        self._previous_handlers = {}

    @staticmethod
    def _log_event(args: SchedulerEventArgs):
        if args.event in (SchedulerEvent.JOB_QUEUE_START, SchedulerEvent.JOB_QUEUE_END):
            log.debug(format_event(args))
        elif args.event is SchedulerEvent.JOB_FAILED:
            log.warning(format_event(args))
        else:
            log.info(format_event(args))

    def start(self):
        """Start the scheduler and block until stopped."""
        if self.running:
            log.warning("Scheduler service already running")
            return

        log.info("Starting scheduler service...")

        if self.log_events:
            self._attach_logging()
        self._install_signal_handlers()

        self._stop_requested.clear()
        self.scheduler.start()
        self.running = True
        log.info("Scheduler service started")

        try:
            self._stop_requested.wait(timeout=self.duration)
        except KeyboardInterrupt:
            log.info("Received interrupt signal")
        finally:
            self.stop()

    def request_stop(self):
        """Ask a blocking start() to return; safe from any thread."""
        self._stop_requested.set()

    def stop(self):
        """Stop the scheduler service."""
        self._stop_requested.set()
        if not self.running:
            return

        log.info("Stopping scheduler service...")
        self.running = False
        self.final_status = self.status()
        self.scheduler.stop()
        log.info("Scheduler service stopped")
        self._detach_logging()
        self._restore_signal_handlers()

    def _signal_handler(self, signum, frame):
        log.info(f"Received signal {signum}, shutting down...")
        self.request_stop()

    def status(self) -> Dict[str, Any]:
        """
        Get service status.

        :return: Dictionary with service status information
        """
        return {
            "running": self.scheduler.is_running,
            "state": self.scheduler.state.value,
            "tick_seconds": self.scheduler.tick_seconds,
            "jobs": [job.to_dict() for job in self.scheduler.job_queue],
        }
