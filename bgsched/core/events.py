#!/usr/bin/env python3
"""
Event notifications emitted by the job scheduler.

Hosts subscribe handlers per event type (or to every event) and receive a
``SchedulerEventArgs`` payload. Handlers run synchronously on the thread
that emitted the event.
"""

import threading
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from decologr.logger import log_exception

class SchedulerEvent(Enum):
    """Events in the scheduler's lifecycle"""

    STARTED = "started"
    STOPPED = "stopped"
    PAUSED = "paused"
    JOB_ADDED = "job_added"
    JOB_REMOVED = "job_removed"
    JOB_QUEUE_CLEARED = "job_queue_cleared"
    JOB_QUEUE_START = "job_queue_start"
    JOB_QUEUE_END = "job_queue_end"
    JOB_START = "job_start"
    JOB_END = "job_end"
    JOB_FAILED = "job_failed"

class SchedulerEventArgs:
    """Payload delivered to event handlers."""

    def __init__(
        self,
        event: SchedulerEvent,
        timestamp: datetime,
        job_name: Optional[str] = None,
        sender: Any = None,
        error: Optional[BaseException] = None,
    ):
        self.event = event
        self.timestamp = timestamp
        self.job_name = job_name
        self.sender = sender
        self.error = error

    def __repr__(self) -> str:
        return (
            f"SchedulerEventArgs(event={self.event.value}, job_name={self.job_name!r}, "
            f"timestamp={self.timestamp.isoformat()})"
        )

EventHandler = Callable[[SchedulerEventArgs], None]

class EventHub:
    """
    Registry of event subscribers.

    A handler that raises is logged and skipped so that neither the other
    subscribers nor the emitting operation are affected.
    """

    def __init__(self):
        self._handlers: Dict[SchedulerEvent, List[EventHandler]] = {
            event: [] for event in SchedulerEvent
        }
        self._lock = threading.Lock()

    def subscribe(self, event: SchedulerEvent, handler: EventHandler) -> EventHandler:
        """
        Attach a handler to one event type.

        :param event: Event to listen for
        :param handler: Callable receiving a SchedulerEventArgs
        :return: The handler, so it can be used as a decorator
        """
        if not callable(handler):
            raise TypeError(f"Event handler must be callable, got {handler!r}")
        with self._lock:
            self._handlers[event].append(handler)
        return handler

    def subscribe_all(self, handler: EventHandler) -> EventHandler:
        """Attach a handler to every event type."""
        for event in SchedulerEvent:
            self.subscribe(event, handler)
        return handler

    def unsubscribe(self, event: SchedulerEvent, handler: EventHandler) -> bool:
        """
        Detach a handler from one event type.

        :return: True if the handler was attached
        """
        with self._lock:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                return False
        return True

    def unsubscribe_all(self, handler: EventHandler) -> None:
        """Detach a handler from every event type it is attached to."""
        for event in SchedulerEvent:
            self.unsubscribe(event, handler)

    def handler_count(self, event: SchedulerEvent) -> int:
        with self._lock:
            return len(self._handlers[event])

    def emit(self, args: SchedulerEventArgs) -> None:
        """Deliver an event to every handler subscribed to its type."""
        with self._lock:
            handlers = list(self._handlers[args.event])

        for handler in handlers:
            try:
                handler(args)
            except BaseException as ex:
                log_exception(ex, f"Error in {args.event.value} event handler {handler!r}")
