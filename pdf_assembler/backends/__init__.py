"""Backend abstractions for PDF Assembler."""

from .base import PDFBackend
from .pypdf_backend import PypdfBackend

__all__ = [
    "PDFBackend",
    "PypdfBackend",
]
