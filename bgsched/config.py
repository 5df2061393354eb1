#!/usr/bin/env python3
"""
Configuration defaults for bgsched.

Values can be overridden through environment variables; explicit
constructor arguments always take precedence over both.
"""

import multiprocessing
import os
from typing import Optional

from decologr import Logger as log

DEFAULT_TICK_SECONDS = 60.0
TICK_SECONDS_ENV = "BGSCHED_TICK_SECONDS"
MAX_WORKERS_ENV = "BGSCHED_MAX_WORKERS"

def get_tick_seconds(tick_seconds: Optional[float] = None) -> float:
    """
    Resolve the tick period in seconds.

    :param tick_seconds: Explicit value (wins over the environment)
    :return: Tick period, always > 0
    """
    if tick_seconds is not None:
        if tick_seconds <= 0:
            raise ValueError(f"tick_seconds must be positive, got {tick_seconds}")
        return float(tick_seconds)

    raw = os.getenv(TICK_SECONDS_ENV)
    if not raw:
        return DEFAULT_TICK_SECONDS

    try:
        value = float(raw)
    except ValueError:
        log.warning(f"Ignoring invalid {TICK_SECONDS_ENV}={raw!r}")
        return DEFAULT_TICK_SECONDS

    if value <= 0:
        log.warning(f"Ignoring non-positive {TICK_SECONDS_ENV}={raw!r}")
        return DEFAULT_TICK_SECONDS
    return value

def get_max_workers(max_workers: Optional[int] = None) -> int:
    """
    Resolve the default worker pool size.

    :param max_workers: Explicit value (wins over the environment)
    :return: Number of workers (default: CPU count)
    """
    if max_workers is not None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        return max_workers

    raw = os.getenv(MAX_WORKERS_ENV)
    if raw:
        try:
            value = int(raw)
            if value >= 1:
                return value
        except ValueError:
            pass
        log.warning(f"Ignoring invalid {MAX_WORKERS_ENV}={raw!r}")

    return multiprocessing.cpu_count()
