#!/usr/bin/env python3
"""
Worker pool for jobs that should not block the scheduler's tick.

The scheduler runs job work synchronously on the ticking thread. Work that
is slow, or that needs to call back into the scheduler, can be wrapped with
``WorkerPool.dispatch`` so the job itself only hands it off and returns.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from decologr import Logger as log, log_exception

from bgsched.config import get_max_workers

class WorkerPool:
    """
    Thread pool that executes dispatched job work in the background.

    - Creates the executor lazily on first dispatch
    - Tracks in-flight work
    - Logs failures of background work (the job has already ended by then)
    """

    def __init__(self, max_workers: Optional[int] = None, name: str = "bgsched-worker"):
        """
        Initialize the worker pool.

        :param max_workers: Maximum number of worker threads (default: BGSCHED_MAX_WORKERS or CPU count)
        :param name: Thread name prefix
        """
        self.max_workers = get_max_workers(max_workers)
        self.name = name

        self.lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._in_flight = 0
        self._completed = 0
        self._failed = 0
        self._shutdown = False

    def _get_executor(self) -> ThreadPoolExecutor:
        with self.lock:
            if self._shutdown:
                raise RuntimeError("Worker pool has been shut down")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix=self.name
                )
                log.info(f"Started worker pool with {self.max_workers} workers")
            self._in_flight += 1
            return self._executor

    def submit(self, work: Callable[[], Any]) -> Future:
        """
        Run ``work`` on a worker thread.

        :param work: Zero-argument callable
        :return: Future for the work's result
        """
        executor = self._get_executor()
        try:
            future = executor.submit(work)
        except BaseException:
            with self.lock:
                self._in_flight -= 1
            raise
        future.add_done_callback(self._on_done)
        return future

    def dispatch(self, work: Callable[[], Any]) -> Callable[[], None]:
        """
        Wrap ``work`` as a job that hands it to the pool and returns at once.

        :param work: Zero-argument callable to run in the background
        :return: Zero-argument callable suitable for JobScheduler.add_job
        """

        def dispatched():
            self.submit(work)

        dispatched.__qualname__ = f"dispatch({getattr(work, '__qualname__', repr(work))})"
        return dispatched

    def _on_done(self, future: Future):
        ex = None if future.cancelled() else future.exception()
        with self.lock:
            self._in_flight -= 1
            if ex is None:
                self._completed += 1
            else:
                self._failed += 1
        if ex is not None:
            log_exception(ex, "Error in dispatched job work")

    def shutdown(self, wait: bool = True):
        """Stop accepting work and release the worker threads."""
        with self.lock:
            self._shutdown = True
            executor = self._executor
            self._executor = None

        if executor is not None:
            log.info("Stopping worker pool...")
            executor.shutdown(wait=wait)
            log.info("Worker pool stopped")

    def get_worker_status(self) -> Dict[str, Any]:
        """
        Get status of the pool.

        :return: Dictionary with worker status information
        """
        with self.lock:
            return {
                "max_workers": self.max_workers,
                "running": self._executor is not None,
                "in_flight": self._in_flight,
                "completed": self._completed,
                "failed": self._failed,
            }
