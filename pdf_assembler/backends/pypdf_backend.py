"""pypdf backend implementation for PDF Assembler."""

from __future__ import annotations

import io
import logging
from typing import Iterable, Optional

from PIL import Image
from pypdf import PageObject, PdfReader, PdfWriter, Transformation
from pypdf.errors import PdfReadError, PyPdfError
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..config import DEFAULT_CONFIG, AssemblyConfig
from ..exceptions import CorruptInputError
from ..types import Rotation
from .base import PDFBackend

LOGGER = logging.getLogger("pdf_assembler.backends")


class PypdfBackend(PDFBackend):
    """Backend implementation that uses `pypdf` under the hood.

    Pages that need drawing (image pages and page-number captions) are
    rendered with reportlab into a one-page PDF and merged onto the target
    page with pypdf.
    """

    def __init__(self, config: Optional[AssemblyConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Opening documents
    # ------------------------------------------------------------------
    def _read(self, data: bytes) -> PdfReader:
        try:
            reader = PdfReader(io.BytesIO(data))
        except PdfReadError as exc:
            raise CorruptInputError(f"Corrupted or invalid PDF data. Error: {exc}") from exc
        except Exception as exc:
            raise CorruptInputError(f"Unexpected error reading PDF data. Error: {exc}") from exc

        if reader.is_encrypted:
            raise CorruptInputError("PDF is encrypted and cannot be imported.")
        return reader

    def open_import(self, data: bytes) -> PdfReader:
        return self._read(data)

    def open_modify(self, data: bytes) -> PdfWriter:
        reader = self._read(data)
        try:
            return PdfWriter(clone_from=reader)
        except PyPdfError as exc:
            raise CorruptInputError(f"Unable to open PDF for modification. Error: {exc}") from exc

    def new_document(self) -> PdfWriter:
        return PdfWriter()

    # ------------------------------------------------------------------
    # Page access
    # ------------------------------------------------------------------
    def page_count(self, document) -> int:
        try:
            return len(document.pages)
        except PyPdfError as exc:
            raise CorruptInputError(f"Unable to read page tree. Error: {exc}") from exc

    def get_page(self, document, index: int) -> PageObject:
        return document.pages[index]

    def iter_pages(self, document) -> Iterable[PageObject]:
        try:
            for page in document.pages:
                yield page
        except PyPdfError as exc:
            raise CorruptInputError(f"Unable to read page tree. Error: {exc}") from exc

    def import_page(
        self,
        document: PdfWriter,
        page: PageObject,
        rotation: Optional[Rotation] = None,
    ) -> PageObject:
        try:
            imported = document.add_page(page)
        except PyPdfError as exc:
            raise CorruptInputError(f"Unable to import page. Error: {exc}") from exc
        if rotation is not None:
            # Sets /Rotate only; the content stream is left untouched.
            imported.rotation = int(rotation)
        return imported

    def remove_page(self, document: PdfWriter, index: int) -> None:
        del document.pages[index]

    def serialize(self, document: PdfWriter) -> bytes:
        buffer = io.BytesIO()
        document.write(buffer)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def add_image_page(
        self,
        document: PdfWriter,
        image: bytes,
        target_height: Optional[int] = None,
    ) -> PageObject:
        try:
            picture = Image.open(io.BytesIO(image))
            picture.load()
        except (OSError, ValueError) as exc:
            raise CorruptInputError(f"Unable to decode image data. Error: {exc}") from exc

        config = self.config
        width, height = config.page_width, config.page_height
        margin = config.image_margin
        draw_width = width - 2 * margin
        draw_height = target_height if target_height and target_height > 0 else height - 2 * margin

        packet = io.BytesIO()
        c = canvas.Canvas(packet, pagesize=(width, height))
        # reportlab's origin is bottom-left; the image hangs from the top margin.
        c.drawImage(
            ImageReader(picture),
            margin,
            height - margin - draw_height,
            width=draw_width,
            height=draw_height,
        )
        c.showPage()
        c.save()

        packet.seek(0)
        rendered = PdfReader(packet).pages[0]
        LOGGER.debug("Drew %sx%s image at %.1fx%.1f", picture.width, picture.height, draw_width, draw_height)
        return document.add_page(rendered)

    def stamp_caption(self, page: PageObject, text: str) -> None:
        config = self.config
        box = page.mediabox
        width, height = float(box.width), float(box.height)
        rotation = page.rotation % 360

        # The overlay is drawn upright in the displayed frame, then turned
        # back into unrotated page space.
        if rotation in (90, 270):
            shown_width, shown_height = height, width
        else:
            shown_width, shown_height = width, height

        # Bottom-aligned: the descender, not the baseline, sits on the inset line.
        descent = pdfmetrics.getDescent(config.caption_font, config.caption_font_size)
        baseline = config.caption_inset - descent

        packet = io.BytesIO()
        c = canvas.Canvas(packet, pagesize=(shown_width, shown_height))
        c.setFont(config.caption_font, config.caption_font_size)
        c.drawCentredString(shown_width / 2.0, baseline, text)
        c.save()

        packet.seek(0)
        overlay = PdfReader(packet).pages[0]
        page.merge_transformed_page(overlay, caption_transformation(page))


def caption_transformation(page: PageObject) -> Transformation:
    """Map the upright displayed frame of ``page`` onto its MediaBox space."""

    box = page.mediabox
    left, bottom = float(box.left), float(box.bottom)
    width, height = float(box.width), float(box.height)
    offsets = {0: (0.0, 0.0), 90: (width, 0.0), 180: (width, height), 270: (0.0, height)}
    rotation = page.rotation % 360
    if rotation not in offsets:
        rotation = 0
    dx, dy = offsets[rotation]
    return Transformation().rotate(rotation).translate(left + dx, bottom + dy)


__all__ = ["PypdfBackend", "caption_transformation"]
