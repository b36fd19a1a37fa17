"""Job execution: running engine work off the caller's thread and finishing it.

A job runs its engine work through an :class:`Executor`, reporting progress
to an optional sink, and then performs exactly one terminal action (save,
return bytes, or return a split pair) in the caller's thread.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, TypeVar

from .cancellation import CancellationToken
from .exceptions import JobInProgressError, OperationCancelled
from .types import ProgressCallback
from .utils import time_block

LOGGER = logging.getLogger("pdf_assembler.execution")

T = TypeVar("T")

Work = Callable[[ProgressCallback, CancellationToken], Any]
Terminal = Callable[[Any], Any]


class JobState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"
    EMPTY = "empty"


class TerminalAction(Enum):
    SAVE = "save"
    RETURN_BYTES = "return-bytes"
    SPLIT = "split"


class ExecutionContext(Enum):
    """Who is waiting on the job.

    ``INTERACTIVE`` forwards progress to the registered sink; ``HEADLESS``
    only records it on the outcome.
    """

    INTERACTIVE = "interactive"
    HEADLESS = "headless"


@dataclass
class JobOutcome:
    """
    Final record of one job.

    Attributes:
        action: Terminal action the job was started for
        state: Terminal state reached
        value: Return value of the terminal action, if it ran
        error: Exception that failed the job, if any
        progress: Percent values reported by the engine
    """
    action: TerminalAction
    state: JobState
    value: Any = None
    error: Optional[BaseException] = None
    progress: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def completed(self) -> bool:
        return self.state is JobState.COMPLETED


class Executor(Protocol):
    """Strategy deciding where a unit of work runs."""

    def run(self, work: Callable[[], T]) -> T:
        """Run ``work`` to completion and return its result or raise its error."""


class SynchronousExecutor:
    """Run work directly in the caller's thread."""

    def run(self, work: Callable[[], T]) -> T:
        return work()


class ThreadExecutor:
    """Run each unit of work on its own dedicated worker thread and wait for it.

    The document library is only ever touched from that one thread. An
    exception raised by the work is re-raised in the caller unchanged, with
    its traceback and cause.
    """

    def __init__(self, thread_name: str = "pdf-assembler-worker") -> None:
        self.thread_name = thread_name

    def run(self, work: Callable[[], T]) -> T:
        box: Dict[str, Any] = {}

        def target() -> None:
            try:
                box["value"] = work()
            except BaseException as exc:  # re-raised in the caller below
                box["error"] = exc

        worker = threading.Thread(target=target, name=self.thread_name, daemon=True)
        worker.start()
        worker.join()

        if "error" in box:
            raise box["error"]
        return box.get("value")


class ProgressRelay:
    """Hand progress reports to a sink on a dedicated notifier thread.

    The worker only enqueues; the notifier delivers reports one at a time,
    in the order they were posted. A sink that raises is logged and skipped.
    """

    def __init__(self, sink: ProgressCallback, thread_name: str = "pdf-assembler-progress") -> None:
        self.sink = sink
        self.thread_name = thread_name
        self._queue: "queue.Queue[int]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

    def post(self, percent: int) -> None:
        with self._start_lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self._drain, name=self.thread_name, daemon=True)
                self._thread.start()
        self._queue.put(percent)

    def flush(self) -> None:
        """Block until every posted report has reached the sink."""

        self._queue.join()

    def _drain(self) -> None:
        while True:
            percent = self._queue.get()
            try:
                self.sink(percent)
            except Exception as exc:
                LOGGER.warning("Progress sink failed at %d%%: %s", percent, exc)
            finally:
                self._queue.task_done()


class Coordinator:
    """Run one job at a time and dispatch its terminal action.

    In an interactive context progress reports are forwarded to the sink
    through a :class:`ProgressRelay`, so the worker never waits on it. Call
    :meth:`flush_progress` to wait for delivery.
    """

    def __init__(
        self,
        *,
        executor: Optional[Executor] = None,
        context: ExecutionContext = ExecutionContext.HEADLESS,
        progress_sink: Optional[ProgressCallback] = None,
    ) -> None:
        self.executor: Executor = executor or ThreadExecutor()
        self.context = context
        self.progress_sink = progress_sink
        self._relay = ProgressRelay(progress_sink) if progress_sink is not None else None
        self._state = JobState.IDLE
        self._lock = threading.Lock()
        self._token: Optional[CancellationToken] = None
        self.last_outcome: Optional[JobOutcome] = None

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is JobState.RUNNING

    def cancel(self) -> None:
        """Request cancellation of the running job, if any."""

        token = self._token
        if token is not None and self.is_running:
            LOGGER.info("Cancellation requested")
            token.cancel()

    def _begin(self) -> CancellationToken:
        with self._lock:
            if self._state is JobState.RUNNING:
                raise JobInProgressError()
            self._state = JobState.RUNNING
            self._token = CancellationToken()
            return self._token

    def _finish(self, outcome: JobOutcome) -> JobOutcome:
        with self._lock:
            self._state = outcome.state
            self._token = None
            self.last_outcome = outcome
        LOGGER.debug("Job %s ended as %s", outcome.action.value, outcome.state.value)
        return outcome

    def flush_progress(self) -> None:
        """Wait until every forwarded progress report has reached the sink."""

        if self._relay is not None:
            self._relay.flush()

    def _notify(self, percent: int) -> None:
        if self.context is not ExecutionContext.INTERACTIVE or self._relay is None:
            return
        self._relay.post(percent)

    def execute(
        self,
        action: TerminalAction,
        work: Work,
        terminal: Terminal,
        *,
        is_empty: Callable[[Any], bool] = lambda result: False,
    ) -> JobOutcome:
        """Run ``work`` through the executor, then ``terminal`` on its result.

        Errors from either step fail the job and propagate to the caller
        unchanged, interrupts included. Cancellation and an empty result are
        returned as outcomes, with no terminal action performed.
        """

        token = self._begin()
        progress: List[int] = []

        def report(percent: int) -> None:
            progress.append(percent)
            self._notify(percent)

        try:
            with time_block(LOGGER, f"{action.value} job"):
                result = self.executor.run(lambda: work(report, token))
        except OperationCancelled:
            LOGGER.info("Job %s cancelled after %d progress report(s)", action.value, len(progress))
            return self._finish(JobOutcome(action, JobState.CANCELLED, progress=tuple(progress)))
        except BaseException as exc:
            LOGGER.error("Job %s failed: %s", action.value, exc)
            self._finish(JobOutcome(action, JobState.FAILED, error=exc, progress=tuple(progress)))
            raise

        if is_empty(result):
            LOGGER.warning("Job %s produced no pages; nothing to %s", action.value, action.value)
            return self._finish(JobOutcome(action, JobState.EMPTY, progress=tuple(progress)))

        try:
            value = terminal(result)
        except BaseException as exc:
            LOGGER.error("Terminal action %s failed: %s", action.value, exc)
            self._finish(JobOutcome(action, JobState.FAILED, error=exc, progress=tuple(progress)))
            raise

        return self._finish(
            JobOutcome(action, JobState.COMPLETED, value=value, progress=tuple(progress))
        )


__all__ = [
    "Coordinator",
    "ExecutionContext",
    "Executor",
    "JobOutcome",
    "JobState",
    "ProgressRelay",
    "SynchronousExecutor",
    "TerminalAction",
    "ThreadExecutor",
]
