from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, List, Optional
import sys

import pytest
from PIL import Image
from pypdf import PdfReader, PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdf_assembler.execution import SynchronousExecutor  # noqa: E402


def page_widths(data: bytes) -> List[int]:
    """Widths of every page; fixtures give each page a distinct width."""
    return [round(float(page.mediabox.width)) for page in PdfReader(io.BytesIO(data)).pages]


def page_texts(data: bytes) -> List[str]:
    return [page.extract_text() or "" for page in PdfReader(io.BytesIO(data)).pages]


@pytest.fixture()
def pdf_bytes_factory() -> Callable[..., bytes]:
    """Build PDF bytes whose page ``i`` (0-based) is ``base_width + i`` points wide."""

    def _create(pages: int, base_width: int = 100, height: int = 200, title: Optional[str] = None) -> bytes:
        writer = PdfWriter()
        for index in range(pages):
            writer.add_blank_page(width=base_width + index, height=height)
        if title is not None:
            writer.add_metadata({"/Title": title})
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    return _create


@pytest.fixture()
def sample_pdf_bytes(pdf_bytes_factory: Callable[..., bytes]) -> bytes:
    return pdf_bytes_factory(5)


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    buffer = io.BytesIO()
    PdfWriter().write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 30), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def sample_pdf(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(sample_pdf_bytes)
    return pdf_path


@pytest.fixture()
def sample_png(tmp_path: Path, png_bytes: bytes) -> Path:
    path = tmp_path / "picture.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture()
def sync_executor() -> SynchronousExecutor:
    return SynchronousExecutor()


@pytest.fixture()
def read_widths() -> Callable[[bytes], List[int]]:
    return page_widths


@pytest.fixture()
def read_texts() -> Callable[[bytes], List[str]]:
    return page_texts
