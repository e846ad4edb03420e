"""Reusable decorators for training and tokenizer utilities."""

import time
import functools
import logging
from typing import Callable

log = logging.getLogger(__name__)


def measure_time(func: Callable) -> Callable:
    """Log execution time for the wrapped callable, with merge counts for training results."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        """Call ``func`` and always log elapsed time."""
        start = time.perf_counter()
        result = None
        try:
            result = func(*args, **kwargs)
            return result
        # log execution time even if the decorated function throws error
        finally:
            elapsed = time.perf_counter() - start
            # training results report how many merges were learned
            n_merges = getattr(result, "n_merges_completed", None)
            merges = f", {n_merges} merges learned" if n_merges is not None else ""
            status = "completed" if result is not None else "stopped"
            log.info(
                f"{func.__qualname__} {status} in {elapsed:.2f} s "
                f"({elapsed / 60:.2f} mins){merges}"
            )

    return wrapper
