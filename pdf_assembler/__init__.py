"""
PDF Assembler - Build one PDF from images and PDFs, or split a PDF in two.

Inputs are queued in order and assembled into a single document, with
optional running page numbers and an optional rotation for single-document
jobs. A document can also be split into the pages outside a range and the
pages inside it.

Quick Start:
    >>> from pdf_assembler import PDFHelper
    >>> helper = PDFHelper(show_page_numbers=True)
    >>> helper.add_image(png_bytes)
    >>> helper.add_document(pdf_bytes)
    >>> merged = helper.return_bytes()

Main Classes:
    - PDFHelper: Queue inputs and run save / return / split jobs
    - AssemblyEngine: Build an output document from an InputRegistry
    - SplitEngine: Cut a page range out of a document

Exceptions:
    - PDFAssemblerException: Base exception
    - InvalidRangeError / PageOutOfBoundsError: Bad split range
    - EmptyDocumentError: Document without pages
    - CorruptInputError: Undecodable image or PDF bytes
    - PersistenceError: Output file could not be written

For CLI usage, use the 'pdf-assembler' command after installation.
"""

# Core classes
from pdf_assembler.helper import PDFHelper, get_page_count
from pdf_assembler.assembly import AssemblyEngine
from pdf_assembler.split import SplitEngine, SplitSource, validate_split_request
from pdf_assembler.registry import InputRegistry, rotation_from_code
from pdf_assembler.execution import (
    Coordinator,
    ExecutionContext,
    JobOutcome,
    JobState,
    SynchronousExecutor,
    TerminalAction,
    ThreadExecutor,
)
from pdf_assembler.cancellation import CancellationToken
from pdf_assembler.config import AssemblyConfig

# Data types
from pdf_assembler.types import (
    AssemblyResult,
    DocumentEntry,
    ImageEntry,
    Rotation,
    SplitRequest,
    SplitResult,
)

# Exceptions
from pdf_assembler.exceptions import (
    PDFAssemblerException,
    InvalidRangeError,
    PageOutOfBoundsError,
    EmptyDocumentError,
    InvalidJobError,
    JobInProgressError,
    CorruptInputError,
    PersistenceError,
    EmptyResultError,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Main classes
    "PDFHelper",
    "AssemblyEngine",
    "SplitEngine",
    "SplitSource",
    "InputRegistry",
    "Coordinator",
    "ExecutionContext",
    "JobOutcome",
    "JobState",
    "SynchronousExecutor",
    "TerminalAction",
    "ThreadExecutor",
    "CancellationToken",
    "AssemblyConfig",
    # Data types
    "AssemblyResult",
    "DocumentEntry",
    "ImageEntry",
    "Rotation",
    "SplitRequest",
    "SplitResult",
    # Exceptions
    "PDFAssemblerException",
    "InvalidRangeError",
    "PageOutOfBoundsError",
    "EmptyDocumentError",
    "InvalidJobError",
    "JobInProgressError",
    "CorruptInputError",
    "PersistenceError",
    "EmptyResultError",
    # Functions
    "get_page_count",
    "rotation_from_code",
    "validate_split_request",
    # Version info
    "__version__",
]
