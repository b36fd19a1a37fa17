"""Assembly of images and documents into one output document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, List, Optional

from .backends import PypdfBackend
from .backends.base import PDFBackend
from .cancellation import CancellationToken
from .config import DEFAULT_CONFIG, AssemblyConfig
from .exceptions import CorruptInputError
from .registry import InputRegistry
from .types import AssemblyResult, DocumentEntry, ImageEntry, ProgressCallback, Rotation
from .utils import progress_percent

LOGGER = logging.getLogger("pdf_assembler.assembly")


@dataclass(frozen=True)
class AssemblyState:
    """Accumulator threaded through the per-position steps."""

    document: Any
    page_number: int = 0

    def next_page(self) -> "AssemblyState":
        return replace(self, page_number=self.page_number + 1)


class AssemblyEngine:
    """Build one output document from an :class:`InputRegistry`.

    Positions are processed in ascending order. Each position contributes
    its image page (if any) followed by every page of its document (if
    any). Progress is reported once per position, including positions that
    hold nothing.
    """

    def __init__(
        self,
        backend: Optional[PDFBackend] = None,
        config: Optional[AssemblyConfig] = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.backend: PDFBackend = backend or PypdfBackend(self.config)

    def assemble(
        self,
        registry: InputRegistry,
        *,
        show_page_numbers: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
    ) -> AssemblyResult:
        """Run the whole assembly and return the finished document.

        Raises:
            CorruptInputError: If an image or document cannot be decoded.
                The partially built document is discarded.
            OperationCancelled: If ``token`` is cancelled; checked before
                each position.
        """

        total = len(registry)
        state = AssemblyState(document=self.backend.new_document())
        reported: List[int] = []

        for position in registry.positions():
            if token is not None:
                token.raise_if_cancelled()

            state = self.step(state, registry, position, show_page_numbers=show_page_numbers)

            percent = progress_percent(position, total)
            reported.append(percent)
            if progress_callback is not None:
                progress_callback(percent)

        LOGGER.info("Assembled %d page(s) from %d position(s)", state.page_number, total)
        return AssemblyResult(
            document=state.document,
            page_count=state.page_number,
            progress=tuple(reported),
        )

    def step(
        self,
        state: AssemblyState,
        registry: InputRegistry,
        position: int,
        *,
        show_page_numbers: bool = False,
    ) -> AssemblyState:
        """Process a single position and return the advanced state."""

        image, document = registry.entries_at(position)
        LOGGER.debug(
            "Position %d: image=%s document=%s",
            position,
            image is not None,
            document is not None,
        )
        if image is not None:
            state = self._add_image(state, image, position, show_page_numbers)
        if document is not None:
            state = self._add_document(state, document, registry.rotation, position, show_page_numbers)
        return state

    # ------------------------------------------------------------------
    def _add_image(
        self,
        state: AssemblyState,
        image: ImageEntry,
        position: int,
        show_page_numbers: bool,
    ) -> AssemblyState:
        try:
            page = self.backend.add_image_page(state.document, image.data, image.target_height)
        except CorruptInputError as exc:
            raise CorruptInputError(
                f"Image at position {position} could not be decoded: {exc.message}",
                position=position,
            ) from exc

        state = state.next_page()
        if show_page_numbers:
            self.backend.stamp_caption(page, self.config.caption(state.page_number))
        return state

    def _add_document(
        self,
        state: AssemblyState,
        document: DocumentEntry,
        rotation: Optional[Rotation],
        position: int,
        show_page_numbers: bool,
    ) -> AssemblyState:
        try:
            source = self.backend.open_import(document.data)
            for page in self.backend.iter_pages(source):
                imported = self.backend.import_page(state.document, page, rotation)
                state = state.next_page()
                if show_page_numbers:
                    self.backend.stamp_caption(imported, self.config.caption(state.page_number))
        except CorruptInputError as exc:
            raise CorruptInputError(
                f"Document at position {position} could not be imported: {exc.message}",
                position=position,
            ) from exc
        return state


__all__ = ["AssemblyEngine", "AssemblyState"]
