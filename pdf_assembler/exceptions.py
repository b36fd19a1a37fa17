"""
Custom exceptions for PDF Assembler.

This module defines all custom exceptions used throughout the library.
Precondition failures (bad ranges, empty documents, malformed jobs) are
raised synchronously before any worker starts; decode and persistence
failures surface while a job is running or finishing.
"""

from __future__ import annotations

from typing import Optional


class PDFAssemblerException(Exception):
    """Base exception for all PDF Assembler errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF assembler error occurred."


class InvalidRangeError(PDFAssemblerException):
    """Raised when a split page range is invalid."""

    @property
    def default_message(self) -> str:
        return "Invalid page range specification."


class PageOutOfBoundsError(InvalidRangeError):
    """Raised when a requested page number is outside the document."""

    @property
    def default_message(self) -> str:
        return "Requested page number is out of bounds."


class EmptyDocumentError(PDFAssemblerException):
    """Raised when a document that must have pages has none."""

    @property
    def default_message(self) -> str:
        return "Document has no pages."


class InvalidJobError(PDFAssemblerException):
    """Raised when a job is set up in a way that cannot be executed."""

    @property
    def default_message(self) -> str:
        return "Invalid job setup."


class JobInProgressError(PDFAssemblerException):
    """Raised when a job is started or modified while another one is running."""

    @property
    def default_message(self) -> str:
        return "Another job is already running."


class CorruptInputError(PDFAssemblerException):
    """Raised when image or document bytes cannot be decoded.

    ``position`` is the registry position of the offending entry, or
    ``None`` when the failure happened outside of a job (for example while
    counting pages).
    """

    def __init__(self, message: str = "", *, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.position = position

    @property
    def default_message(self) -> str:
        return "Input could not be decoded."


class PersistenceError(PDFAssemblerException):
    """Raised when the assembled document cannot be written."""

    @property
    def default_message(self) -> str:
        return "Unable to write the output document."


class EmptyResultError(PDFAssemblerException):
    """Raised when a job finished without producing any pages."""

    @property
    def default_message(self) -> str:
        return "The job produced no pages."


class OperationCancelled(Exception):
    """Signals cooperative cancellation of a running job.

    This is not a :class:`PDFAssemblerException`: cancellation is a normal
    terminal outcome and never reaches callers of the public API.
    """
