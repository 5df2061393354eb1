#!/usr/bin/env python3
"""
Job record held in the scheduler's job table.
"""

import copy
from datetime import datetime, timezone
from typing import Any, Callable, Dict

def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    """Normalise a datetime to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

class Job:
    """
    A named, zero-argument unit of work.

    The name is the job's key in the scheduler; only the tick handler
    mutates a job once it is in the table (``last_run`` after a successful
    repeat).
    """

    def __init__(
        self,
        name: str,
        work: Callable[[], Any],
        repeat: bool,
        start_time: datetime,
        interval: int,
        last_run: datetime,
    ):
        self.name = name
        self.work = work
        self.repeat = repeat
        self.start_time = start_time
        self.interval = interval
        self.last_run = last_run

    def elapsed_minutes(self, now: datetime) -> int:
        """Whole minutes since ``last_run``, truncated toward zero."""
        return int((now - self.last_run).total_seconds() / 60)

    def is_due(self, now: datetime) -> bool:
        """True once ``start_time`` has passed and ``interval`` minutes have elapsed."""
        if now < self.start_time:
            return False
        return self.elapsed_minutes(now) >= self.interval

    def copy(self) -> "Job":
        return copy.copy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "work": getattr(self.work, "__qualname__", repr(self.work)),
            "repeat": self.repeat,
            "start_time": self.start_time.isoformat(),
            "interval": self.interval,
            "last_run": self.last_run.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"Job(name={self.name!r}, repeat={self.repeat}, interval={self.interval}, "
            f"start_time={self.start_time.isoformat()}, last_run={self.last_run.isoformat()})"
        )
