"""
Type definitions and dataclasses for PDF Assembler.

This module defines data structures used throughout the library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional, Tuple, Union

ProgressCallback = Callable[[int], None]


class Rotation(IntEnum):
    """Page rotation applied to every page of a single-document job."""

    ZERO = 0
    NINETY = 90
    ONE_EIGHTY = 180
    TWO_SEVENTY = 270


@dataclass(frozen=True)
class ImageEntry:
    """
    Raster image queued for assembly.

    Attributes:
        data: Raw image bytes, decoded only when the job runs
        target_height: Height of the drawn image; ``None`` fills the page
    """
    data: bytes
    target_height: Optional[int] = None


@dataclass(frozen=True)
class DocumentEntry:
    """Existing PDF document queued for assembly."""
    data: bytes


InputEntry = Union[ImageEntry, DocumentEntry]


@dataclass(frozen=True)
class SplitRequest:
    """
    Inclusive, 1-based page range to cut out of a document.

    Attributes:
        start_page: First page to extract
        end_page: Last page to extract
    """
    start_page: int
    end_page: int

    @property
    def length(self) -> int:
        return self.end_page - self.start_page + 1

    def __str__(self) -> str:
        return f"{self.start_page}-{self.end_page}"


@dataclass(frozen=True)
class SplitResult:
    """
    Result of a split operation.

    Attributes:
        remainder: The original document without the requested range
        extracted: Exactly the requested range, in original order
        remainder_pages: Page count of ``remainder``
        extracted_pages: Page count of ``extracted``
    """
    remainder: bytes
    extracted: bytes
    remainder_pages: int = 0
    extracted_pages: int = 0

    def __iter__(self):
        return iter((self.remainder, self.extracted))

    def __str__(self) -> str:
        return (
            f"SplitResult(remainder_pages={self.remainder_pages}, "
            f"extracted_pages={self.extracted_pages})"
        )


@dataclass
class AssemblyResult:
    """
    Result of running the assembly engine.

    Attributes:
        document: Backend output document handle
        page_count: Number of pages written to ``document``
        progress: Percent values reported, one per position
    """
    document: Any
    page_count: int
    progress: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return self.page_count == 0
