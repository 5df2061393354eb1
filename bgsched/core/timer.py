#!/usr/bin/env python3
"""
Single-shot timer sources that drive the scheduler's ticks.

A timer source, once armed with a delay, invokes its callback exactly once
when the delay elapses unless it is disarmed first. There is no repeating
primitive: the scheduler re-arms on every tick.
"""

import threading
from typing import Callable, Optional

from decologr import Logger as log

TimerCallback = Callable[[], None]

class TimerSource:
    """Interface the scheduler needs from a delayed-callback facility."""

    def arm(self, delay: float, callback: TimerCallback) -> None:
        """Schedule ``callback`` once after ``delay`` seconds, replacing any pending one."""
        raise NotImplementedError

    def disarm(self) -> None:
        """Cancel the pending callback, if any."""
        raise NotImplementedError

    def is_armed(self) -> bool:
        """Whether a callback is currently pending."""
        raise NotImplementedError

class ThreadTimerSource(TimerSource):
    """
    Timer source backed by ``threading.Timer``.

    Each arm starts a daemon timer thread. A firing that lost a race with
    ``disarm`` or a newer ``arm`` is dropped; the pending state is cleared
    before the callback runs so the callback may re-arm.
    """

    def __init__(self, name: str = "bgsched-tick"):
        self.name = name
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._token: Optional[object] = None

    def arm(self, delay: float, callback: TimerCallback) -> None:
        token = object()
        timer = threading.Timer(delay, self._fire, args=(token, callback))
        timer.daemon = True
        timer.name = self.name

        with self._lock:
            previous = self._timer
            self._timer = timer
            self._token = token

        if previous is not None:
            previous.cancel()
        timer.start()

    def disarm(self) -> None:
        with self._lock:
            timer = self._timer
            self._timer = None
            self._token = None

        if timer is not None:
            timer.cancel()

    def is_armed(self) -> bool:
        with self._lock:
            return self._token is not None

    def _fire(self, token: object, callback: TimerCallback) -> None:
        with self._lock:
            if token is not self._token:
                log.debug(f"{self.name}: dropping stale timer firing")
                return
            self._timer = None
            self._token = None
        callback()

class ManualTimerSource(TimerSource):
    """
    Timer source that only fires when told to.

    Useful in tests and for hosts that already own a loop and want to
    drive ticks themselves.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._callback: Optional[TimerCallback] = None
        self.delay: Optional[float] = None
        self.arm_count = 0

    def arm(self, delay: float, callback: TimerCallback) -> None:
        with self._lock:
            self._callback = callback
            self.delay = delay
            self.arm_count += 1

    def disarm(self) -> None:
        with self._lock:
            self._callback = None
            self.delay = None

    def is_armed(self) -> bool:
        with self._lock:
            return self._callback is not None

    def fire(self) -> bool:
        """
        Invoke the pending callback, as if its delay had elapsed.

        :return: True if a callback was pending and was invoked
        """
        with self._lock:
            callback = self._callback
            self._callback = None
            self.delay = None

        if callback is None:
            return False
        callback()
        return True
