"""Cooperative cancellation for running jobs."""

from __future__ import annotations

import threading

from .exceptions import OperationCancelled


class CancellationToken:
    """Flag shared between a job's worker and whoever may cancel it."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled()


__all__ = ["CancellationToken", "OperationCancelled"]
