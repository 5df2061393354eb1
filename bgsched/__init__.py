"""
bgsched - In-process background job scheduler.

A self-rearming scheduler that periodically scans a queue of named,
zero-argument jobs and runs those that are due, inside the running
process and without an external cron or OS service.
"""

from bgsched.core.events import SchedulerEvent, SchedulerEventArgs
from bgsched.core.job import Job
from bgsched.core.scheduler import JobScheduler, RunState, get_scheduler, reset_scheduler
from bgsched.core.service import SchedulerService
from bgsched.core.timer import ManualTimerSource, ThreadTimerSource, TimerSource
from bgsched.core.worker_pool import WorkerPool
from bgsched.task import job

__all__ = [
    "JobScheduler",
    "RunState",
    "Job",
    "SchedulerEvent",
    "SchedulerEventArgs",
    "SchedulerService",
    "TimerSource",
    "ThreadTimerSource",
    "ManualTimerSource",
    "WorkerPool",
    "get_scheduler",
    "reset_scheduler",
    "job",
]
