"""Backend protocol for PDF operations."""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

from ..types import Rotation


class PDFBackend(Protocol):
    """Protocol defining the document library operations the engines call.

    Handles returned by the ``open_*`` and ``new_document`` methods are
    opaque to the engines; only the backend that created them may use them.
    """

    def open_import(self, data: bytes) -> Any:
        """Open ``data`` read-only so its pages can be imported elsewhere."""

    def open_modify(self, data: bytes) -> Any:
        """Open ``data`` for in-place page removal."""

    def new_document(self) -> Any:
        """Return an empty output document."""

    def page_count(self, document: Any) -> int:
        """Return the number of pages in any handle."""

    def get_page(self, document: Any, index: int) -> Any:
        """Return the page at zero-based ``index``."""

    def iter_pages(self, document: Any) -> Iterable[Any]:
        """Iterate pages in document order."""

    def import_page(self, document: Any, page: Any, rotation: Optional[Rotation] = None) -> Any:
        """Append ``page`` to ``document`` and return the appended page."""

    def add_image_page(self, document: Any, image: bytes, target_height: Optional[int] = None) -> Any:
        """Append a new page with ``image`` drawn on it and return the page."""

    def stamp_caption(self, page: Any, text: str) -> None:
        """Draw ``text`` centered at the bottom of ``page``."""

    def remove_page(self, document: Any, index: int) -> None:
        """Remove the page at zero-based ``index`` from a modifiable handle."""

    def serialize(self, document: Any) -> bytes:
        """Return the PDF bytes of ``document``."""
