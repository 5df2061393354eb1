#!/usr/bin/env python3
"""
@bgsched.job decorator for registering functions with a scheduler.
"""

from datetime import datetime
from typing import Callable, Optional, Union

from decologr import Logger as log

from bgsched.core.scheduler import JobScheduler, get_scheduler

def job(
    name: Optional[str] = None,
    repeat: bool = True,
    start: Union[int, float, datetime] = 0,
    interval: int = 0,
    scheduler: Optional[JobScheduler] = None,
):
    """
    Decorator that queues a zero-argument function as a scheduler job.

    The function is registered when the decorator is applied and is
    returned unchanged, so it can still be called directly.

    :param name: Job name (default: the function's qualified name)
    :param repeat: Whether the job stays queued after a successful run
    :param start: Delay in minutes, or an absolute start datetime
    :param interval: Minimum whole minutes between runs
    :param scheduler: Scheduler to register with (default: the process-wide one)

    Usage:
        @bgsched.job(interval=15)
        def refresh_cache():
            ...

        bgsched.get_scheduler().start()
    """

    def decorator(func: Callable) -> Callable:
        job_name = name or f"{func.__module__}.{func.__qualname__}"
        target = scheduler or get_scheduler()
        if not target.add_job(job_name, func, repeat=repeat, start=start, interval=interval):
            log.warning(f"Job {job_name} already queued, decorator registration ignored")
        return func

    return decorator
