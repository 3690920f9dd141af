"""Timing utilities for the cost aggregation engine."""
import time
import logging
import functools
from typing import Callable

logger = logging.getLogger("unitrate.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that measures and logs execution time at DEBUG level.

    Keeps no counters: the only side effect is the log line.

    Usage::

        @timed
        def explode_project(self, boq_items):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.debug(
                "function timed",
                extra={
                    "function_name": func.__qualname__,
                    "duration_ms": duration_ms,
                },
            )
    return wrapper
