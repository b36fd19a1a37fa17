"""Split a document into a remainder and an extracted page range."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .backends import PypdfBackend
from .backends.base import PDFBackend
from .cancellation import CancellationToken
from .exceptions import EmptyDocumentError, InvalidRangeError, PageOutOfBoundsError
from .types import ProgressCallback, SplitRequest, SplitResult
from .utils import progress_percent

LOGGER = logging.getLogger("pdf_assembler.split")


def validate_split_request(start_page: int, end_page: int, page_count: int) -> SplitRequest:
    """Check ``start_page..end_page`` against a document of ``page_count`` pages."""

    if page_count <= 0:
        raise EmptyDocumentError("Cannot split a document with no pages.")
    if start_page > end_page:
        raise InvalidRangeError(
            f"Start page ({start_page}) must be <= end page ({end_page})"
        )
    if start_page < 1 or end_page > page_count:
        raise PageOutOfBoundsError(
            f"Invalid page range: {start_page}-{end_page}. PDF has {page_count} pages."
        )
    return SplitRequest(start_page, end_page)


@dataclass
class SplitSource:
    """Two handles over the same document bytes.

    ``reader`` is the stable-read handle: page indices never move, so the
    pages copied into the extraction keep their original order and content.
    ``writer`` is the mutating handle: it absorbs the removals, and its
    indices shift left by one after each removal. A single handle cannot
    serve both roles.
    """

    reader: Any
    writer: Any
    page_count: int

    @classmethod
    def open(cls, backend: PDFBackend, data: bytes) -> "SplitSource":
        reader = backend.open_import(data)
        writer = backend.open_modify(data)
        return cls(reader=reader, writer=writer, page_count=backend.page_count(reader))


class SplitEngine:
    """Remove a page range from a document and collect it into a new one."""

    def __init__(self, backend: Optional[PDFBackend] = None) -> None:
        self.backend: PDFBackend = backend or PypdfBackend()

    def split(
        self,
        source: SplitSource,
        request: SplitRequest,
        *,
        progress_callback: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
    ) -> SplitResult:
        validate_split_request(request.start_page, request.end_page, source.page_count)

        extracted = self.backend.new_document()
        removed = 0
        for page_number in range(request.start_page, request.end_page + 1):
            if token is not None:
                token.raise_if_cancelled()

            page = self.backend.get_page(source.reader, page_number - 1)
            self.backend.remove_page(source.writer, page_number - 1 - removed)
            self.backend.import_page(extracted, page)
            removed += 1

            if progress_callback is not None:
                progress_callback(progress_percent(removed, request.length))

        LOGGER.info(
            "Split pages %s out of %d page(s)", request, source.page_count
        )
        return SplitResult(
            remainder=self.backend.serialize(source.writer),
            extracted=self.backend.serialize(extracted),
            remainder_pages=source.page_count - removed,
            extracted_pages=removed,
        )

    def split_bytes(
        self,
        data: bytes,
        start_page: int,
        end_page: int,
        *,
        progress_callback: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
    ) -> SplitResult:
        reader = self.backend.open_import(data)
        page_count = self.backend.page_count(reader)
        request = validate_split_request(start_page, end_page, page_count)
        source = SplitSource(reader=reader, writer=self.backend.open_modify(data), page_count=page_count)
        return self.split(source, request, progress_callback=progress_callback, token=token)


__all__ = ["SplitEngine", "SplitSource", "validate_split_request"]
