"""Utility helpers for PDF Assembler."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator


def configure_logging(level: int = logging.INFO) -> None:
    """Configure package-wide logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@contextmanager
def time_block(logger: logging.Logger, message: str) -> Iterator[None]:
    """Context manager that logs the execution time of a code block."""
    start = datetime.now(tz=timezone.utc)
    logger.debug("Starting %s", message)
    try:
        yield
    finally:
        elapsed = (datetime.now(tz=timezone.utc) - start).total_seconds()
        logger.info("%s finished in %.2fs", message, elapsed)


def progress_percent(done: int, total: int) -> int:
    """
    Return ``done / total`` as an integer percentage.

    Halves are rounded away from zero, so 1 of 8 reports 13 rather than the
    12 that Python's banker's rounding would give.
    """
    if total <= 0:
        return 100
    value = Decimal(done) / Decimal(total) * 100
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500 KB")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


__all__ = ["configure_logging", "time_block", "progress_percent", "format_file_size"]
