"""High-level facade: queue inputs, then save, return, or split them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from .assembly import AssemblyEngine
from .backends import PypdfBackend
from .backends.base import PDFBackend
from .cancellation import CancellationToken
from .config import AssemblyConfig
from .exceptions import InvalidJobError, PersistenceError
from .execution import (
    Coordinator,
    ExecutionContext,
    Executor,
    JobOutcome,
    TerminalAction,
    ThreadExecutor,
)
from .registry import InputRegistry
from .split import SplitEngine, SplitSource, validate_split_request
from .types import AssemblyResult, ProgressCallback, SplitResult

LOGGER = logging.getLogger("pdf_assembler.helper")

PathLike = Union[str, Path]
SaveTarget = Callable[[], Optional[PathLike]]


def get_page_count(data: bytes, *, backend: Optional[PDFBackend] = None) -> int:
    """Return the number of pages in the PDF ``data``."""

    backend = backend or PypdfBackend()
    return backend.page_count(backend.open_import(data))


class PDFHelper:
    """Assemble images and PDFs into one document, or split a PDF in two.

    Inputs are queued with the ``add_*`` methods; one terminal call
    (:meth:`save`, :meth:`return_bytes` or :meth:`split`) then runs the job
    and discards the queued inputs, so the next ``add_*`` starts a new job.

    Example:
        >>> helper = PDFHelper(show_page_numbers=True)
        >>> helper.add_image(png_bytes)
        >>> helper.add_document(pdf_bytes)
        >>> merged = helper.return_bytes()
    """

    def __init__(
        self,
        show_page_numbers: bool = False,
        *,
        backend: Optional[PDFBackend] = None,
        config: Optional[AssemblyConfig] = None,
        context: ExecutionContext = ExecutionContext.HEADLESS,
        progress_sink: Optional[ProgressCallback] = None,
        save_target: Optional[SaveTarget] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.show_page_numbers = show_page_numbers
        self.config = config or AssemblyConfig()
        self.backend: PDFBackend = backend or PypdfBackend(self.config)
        self.save_target = save_target
        self._assembler = AssemblyEngine(self.backend, self.config)
        self._splitter = SplitEngine(self.backend)
        self._coordinator = Coordinator(
            executor=executor or ThreadExecutor(),
            context=context,
            progress_sink=progress_sink,
        )
        self._registry = InputRegistry()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------
    def add_image(self, data: bytes, height: int = 0) -> None:
        """Queue an image; ``height`` > 0 fixes the drawn height."""

        self._registry.add_image(data, height or None)

    def add_document(self, data: bytes) -> None:
        self._registry.add_document(data)

    def add_single_document_with_rotation(self, data: bytes, rotation_code: int) -> None:
        """Start a job whose only input is ``data``, every page rotated per ``rotation_code``."""

        self._registry.add_single_document_with_rotation(data, rotation_code)

    def get_page_count(self, data: bytes) -> int:
        return get_page_count(data, backend=self.backend)

    @property
    def registry(self) -> InputRegistry:
        return self._registry

    @property
    def last_outcome(self) -> Optional[JobOutcome]:
        return self._coordinator.last_outcome

    def cancel(self) -> None:
        self._coordinator.cancel()

    def flush_progress(self) -> None:
        """Wait until every progress report has been delivered to the sink."""

        self._coordinator.flush_progress()

    # ------------------------------------------------------------------
    # Terminal actions
    # ------------------------------------------------------------------
    def save(self) -> Optional[Path]:
        """Assemble and write the document to the path chosen by ``save_target``.

        Returns the written path, or ``None`` if the chooser was dismissed,
        the job was cancelled, or it produced no pages.
        """

        if self.save_target is None:
            raise InvalidJobError("No save target configured.")
        outcome = self._run_assembly(TerminalAction.SAVE, self._persist)
        return outcome.value if outcome.completed else None

    def return_bytes(self) -> bytes:
        """Assemble and return the document; ``b""`` if nothing was produced."""

        outcome = self._run_assembly(TerminalAction.RETURN_BYTES, self._serialize)
        return outcome.value if outcome.completed else b""

    def split(self, start_page: int, end_page: int) -> Optional[SplitResult]:
        """Split the first queued document into ``(remainder, extracted)``.

        The range is validated before any work starts; on failure the queued
        inputs are left as they were.
        """

        entry = self._registry.document_at(1)
        if entry is None:
            raise InvalidJobError("Split requires a document at position 1.")
        request = validate_split_request(start_page, end_page, self.get_page_count(entry.data))

        def work(report: ProgressCallback, token: CancellationToken) -> SplitResult:
            source = SplitSource.open(self.backend, entry.data)
            return self._splitter.split(source, request, progress_callback=report, token=token)

        outcome = self._run(TerminalAction.SPLIT, work, lambda result: result)
        return outcome.value if outcome.completed else None

    # ------------------------------------------------------------------
    def _run_assembly(
        self,
        action: TerminalAction,
        terminal: Callable[[AssemblyResult], object],
    ) -> JobOutcome:
        def work(report: ProgressCallback, token: CancellationToken) -> AssemblyResult:
            return self._assembler.assemble(
                self._registry,
                show_page_numbers=self.show_page_numbers,
                progress_callback=report,
                token=token,
            )

        return self._run(action, work, terminal, is_empty=lambda result: result.is_empty)

    def _run(self, action: TerminalAction, work, terminal, **kwargs) -> JobOutcome:
        try:
            with self._registry.frozen():
                return self._coordinator.execute(action, work, terminal, **kwargs)
        finally:
            if not self._coordinator.is_running:
                self._registry = InputRegistry()

    def _serialize(self, result: AssemblyResult) -> bytes:
        return self.backend.serialize(result.document)

    def _persist(self, result: AssemblyResult) -> Optional[Path]:
        assert self.save_target is not None
        chosen = self.save_target()
        if chosen is None:
            LOGGER.info("Save cancelled; %d page(s) not written", result.page_count)
            return None

        destination = Path(chosen)
        data = self.backend.serialize(result.document)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with destination.open("wb") as handle:
                handle.write(data)
        except OSError as exc:
            raise PersistenceError(f"Failed to write PDF to {destination}. Error: {exc}") from exc

        LOGGER.info("Wrote %d page(s) to %s", result.page_count, destination)
        return destination


__all__ = ["PDFHelper", "get_page_count", "SaveTarget"]
