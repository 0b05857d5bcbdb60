"""Logging and timing utilities for tablestage.

The package logs through one logger, ``tablestage``. Nothing is printed
until an application configures logging, or calls setup_debug_logging()
to get console output while debugging.

Usage:
    from .debug_trace import logger, perf_timer

    # Simple logging
    logger.debug("Reading table %s", table_key)

    # Time a store round-trip (only logs if DEBUG_PERF is True)
    with perf_timer("commit_edits", row_count=120):
        store.commit_edits(edits)
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from typing import TextIO

# Global flag to enable/disable performance tracing
DEBUG_PERF = True

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# Create package logger
logger = logging.getLogger("tablestage")
logger.addHandler(logging.NullHandler())


def setup_debug_logging(level: int = logging.DEBUG, stream: TextIO | None = None) -> None:
    """Send tablestage log records to the console.

    Call this once at startup when debugging. Calling it again is a no-op.

    Args:
        level: Minimum level to emit.
        stream: Destination stream (defaults to stdout).
    """
    # Only configure if not already configured
    if any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        return

    logger.setLevel(level)
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)


@contextmanager
def perf_timer(operation: str, row_count: int | None = None):
    """Context manager for timing operations.

    Args:
        operation: Name of the operation being timed
        row_count: Optional row count for context

    Example:
        with perf_timer("get_editable_table", row_count=snapshot.row_count):
            ...
    """
    if not DEBUG_PERF:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if row_count is not None:
            logger.debug("PERF: %s (%d rows) took %.2fms", operation, row_count, elapsed_ms)
        else:
            logger.debug("PERF: %s took %.2fms", operation, elapsed_ms)
