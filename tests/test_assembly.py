from __future__ import annotations

import io
from typing import Any, Dict, List, Optional

import pytest
from pypdf import PdfReader

from pdf_assembler.assembly import AssemblyEngine, AssemblyState
from pdf_assembler.backends import PypdfBackend
from pdf_assembler.cancellation import CancellationToken
from pdf_assembler.exceptions import CorruptInputError, OperationCancelled
from pdf_assembler.registry import InputRegistry
from pdf_assembler.types import DocumentEntry, Rotation


class RecordingBackend:
    """In-memory backend; document bytes look like ``b"name:pages"``."""

    def __init__(self) -> None:
        self.opened: List[bytes] = []

    def open_import(self, data: bytes) -> List[str]:
        self.opened.append(data)
        if data.startswith(b"bad"):
            raise CorruptInputError("unreadable")
        name, pages = data.decode().split(":")
        return [f"{name}{index + 1}" for index in range(int(pages))]

    def new_document(self) -> List[Dict[str, Any]]:
        return []

    def page_count(self, document: List[Any]) -> int:
        return len(document)

    def iter_pages(self, document: List[Any]):
        return iter(document)

    def import_page(self, document: List[Dict[str, Any]], page: str, rotation: Optional[Rotation] = None):
        record = {"kind": "document", "source": page, "rotation": rotation}
        document.append(record)
        return record

    def add_image_page(self, document: List[Dict[str, Any]], image: bytes, target_height: Optional[int] = None):
        if image.startswith(b"bad"):
            raise CorruptInputError("not an image")
        record = {"kind": "image", "source": image.decode(), "height": target_height}
        document.append(record)
        return record

    def stamp_caption(self, page: Dict[str, Any], text: str) -> None:
        page["caption"] = text


@pytest.fixture()
def engine() -> AssemblyEngine:
    return AssemblyEngine(backend=RecordingBackend())


def test_pages_follow_position_order(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_document(b"A:2")
    registry.add_image(b"img1")
    registry.add_document(b"B:3")

    result = engine.assemble(registry)

    assert [page["source"] for page in result.document] == ["A1", "A2", "img1", "B1", "B2", "B3"]
    assert result.page_count == 6


def test_page_count_is_images_plus_document_pages(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_image(b"i1")
    registry.add_document(b"A:4")
    registry.add_image(b"i2")
    registry.add_document(b"B:1")

    result = engine.assemble(registry)

    assert result.page_count == 1 + 4 + 1 + 1
    assert len(result.document) == result.page_count


def test_image_before_document_at_same_position(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    position = registry.add_image(b"img")
    registry.place(position, DocumentEntry(b"A:2"))

    result = engine.assemble(registry, show_page_numbers=True)

    assert [page["source"] for page in result.document] == ["img", "A1", "A2"]
    assert [page["caption"] for page in result.document] == ["Page 1", "Page 2", "Page 3"]
    assert result.progress == (100,)


def test_image_height_is_passed_through(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_image(b"tall", 300)
    registry.add_image(b"fill")

    result = engine.assemble(registry)

    assert [page["height"] for page in result.document] == [300, None]


def test_captions_only_when_requested(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_image(b"img")
    registry.add_document(b"A:1")

    result = engine.assemble(registry, show_page_numbers=False)

    assert all("caption" not in page for page in result.document)


def test_rotation_applies_to_every_document_page(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_single_document_with_rotation(b"A:3", 3)

    result = engine.assemble(registry)

    assert [page["rotation"] for page in result.document] == [Rotation.ONE_EIGHTY] * 3


def test_progress_one_value_per_position(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    for _ in range(3):
        registry.add_image(b"img")
    seen: List[int] = []

    result = engine.assemble(registry, progress_callback=seen.append)

    assert seen == [33, 67, 100]
    assert result.progress == (33, 67, 100)


def test_progress_rounds_half_away_from_zero(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    for _ in range(8):
        registry.add_image(b"img")

    result = engine.assemble(registry)

    assert result.progress == (13, 25, 38, 50, 63, 75, 88, 100)


def test_empty_position_counts_toward_progress(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.reserve()
    registry.add_image(b"img")

    result = engine.assemble(registry, show_page_numbers=True)

    assert result.progress == (50, 100)
    assert result.page_count == 1
    assert result.document[0]["caption"] == "Page 1"


def test_empty_registry_produces_empty_result(engine: AssemblyEngine) -> None:
    result = engine.assemble(InputRegistry())
    assert result.is_empty
    assert result.progress == ()


def test_cancellation_checked_before_each_position(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    for name in "ABCDE":
        registry.add_document(f"{name}:1".encode())
    token = CancellationToken()
    seen: List[int] = []

    def on_progress(percent: int) -> None:
        seen.append(percent)
        if len(seen) == 2:
            token.cancel()

    with pytest.raises(OperationCancelled):
        engine.assemble(registry, progress_callback=on_progress, token=token)

    assert seen == [20, 40]
    assert engine.backend.opened == [b"A:1", b"B:1"]


def test_corrupt_image_reports_position(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_image(b"ok")
    registry.add_image(b"bad image")

    with pytest.raises(CorruptInputError) as excinfo:
        engine.assemble(registry)

    assert excinfo.value.position == 2
    assert isinstance(excinfo.value.__cause__, CorruptInputError)


def test_corrupt_document_aborts_job(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_document(b"bad")
    registry.add_document(b"A:1")
    seen: List[int] = []

    with pytest.raises(CorruptInputError) as excinfo:
        engine.assemble(registry, progress_callback=seen.append)

    assert excinfo.value.position == 1
    assert seen == []


def test_step_folds_page_counter(engine: AssemblyEngine) -> None:
    registry = InputRegistry()
    registry.add_document(b"A:2")
    state = AssemblyState(document=[], page_number=4)

    advanced = engine.step(state, registry, 1, show_page_numbers=True)

    assert state.page_number == 4
    assert advanced.page_number == 6
    assert [page["caption"] for page in advanced.document] == ["Page 5", "Page 6"]


class TestPypdfAssembly:
    """End-to-end assembly with the real pypdf backend."""

    def test_image_then_document_with_page_numbers(self, png_bytes, pdf_bytes_factory, read_texts) -> None:
        registry = InputRegistry()
        registry.add_image(png_bytes)
        registry.add_document(pdf_bytes_factory(2))
        seen: List[int] = []

        engine = AssemblyEngine()
        result = engine.assemble(registry, show_page_numbers=True, progress_callback=seen.append)
        data = engine.backend.serialize(result.document)

        assert seen == [50, 100]
        texts = read_texts(data)
        assert len(texts) == 3
        for number, text in enumerate(texts, start=1):
            assert f"Page {number}" in text

    def test_image_page_uses_default_page_size(self, png_bytes) -> None:
        registry = InputRegistry()
        registry.add_image(png_bytes, 200)

        engine = AssemblyEngine()
        result = engine.assemble(registry)
        reader = PdfReader(io.BytesIO(engine.backend.serialize(result.document)))

        page = reader.pages[0]
        assert round(float(page.mediabox.width)) == 595
        assert round(float(page.mediabox.height)) == 842
        assert "/XObject" in page["/Resources"]

    def test_document_pages_keep_order(self, pdf_bytes_factory, read_widths) -> None:
        registry = InputRegistry()
        registry.add_document(pdf_bytes_factory(3, base_width=100))
        registry.add_document(pdf_bytes_factory(2, base_width=300))

        engine = AssemblyEngine()
        result = engine.assemble(registry)

        assert read_widths(engine.backend.serialize(result.document)) == [100, 101, 102, 300, 301]

    @pytest.mark.parametrize(("code", "angle"), [(1, 0), (6, 90), (3, 180), (8, 270)])
    def test_rotation_sets_rotate_attribute(self, pdf_bytes_factory, code: int, angle: int) -> None:
        registry = InputRegistry()
        registry.add_single_document_with_rotation(pdf_bytes_factory(2), code)

        engine = AssemblyEngine()
        result = engine.assemble(registry)
        reader = PdfReader(io.BytesIO(engine.backend.serialize(result.document)))

        assert [page.get("/Rotate") for page in reader.pages] == [angle, angle]

    def test_unknown_rotation_code_leaves_pages_alone(self, pdf_bytes_factory) -> None:
        registry = InputRegistry()
        registry.add_single_document_with_rotation(pdf_bytes_factory(1), 5)

        engine = AssemblyEngine()
        result = engine.assemble(registry)
        reader = PdfReader(io.BytesIO(engine.backend.serialize(result.document)))

        assert reader.pages[0].get("/Rotate") is None

    def test_undecodable_image(self) -> None:
        registry = InputRegistry()
        registry.add_image(b"definitely not an image")

        with pytest.raises(CorruptInputError) as excinfo:
            AssemblyEngine().assemble(registry)
        assert excinfo.value.position == 1

    def test_unparseable_document(self, png_bytes) -> None:
        registry = InputRegistry()
        registry.add_image(png_bytes)
        registry.add_document(b"%PDF-garbage")

        with pytest.raises(CorruptInputError) as excinfo:
            AssemblyEngine(backend=PypdfBackend()).assemble(registry)
        assert excinfo.value.position == 2
        assert excinfo.value.__cause__ is not None
