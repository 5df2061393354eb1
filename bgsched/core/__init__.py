"""Core scheduler components."""

from bgsched.core.events import EventHub, SchedulerEvent, SchedulerEventArgs
from bgsched.core.job import Job
from bgsched.core.scheduler import JobScheduler, RunState, get_scheduler, reset_scheduler
from bgsched.core.service import SchedulerService
from bgsched.core.timer import ManualTimerSource, ThreadTimerSource, TimerSource
from bgsched.core.worker_pool import WorkerPool

__all__ = [
    "JobScheduler",
    "RunState",
    "Job",
    "EventHub",
    "SchedulerEvent",
    "SchedulerEventArgs",
    "SchedulerService",
    "TimerSource",
    "ThreadTimerSource",
    "ManualTimerSource",
    "WorkerPool",
    "get_scheduler",
    "reset_scheduler",
]
