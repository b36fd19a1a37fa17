"""Ordered, append-only collection of the inputs of one assembly job."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from .exceptions import InvalidJobError, JobInProgressError
from .types import DocumentEntry, ImageEntry, InputEntry, Rotation

LOGGER = logging.getLogger("pdf_assembler.registry")

# EXIF orientation codes as supplied by the calling applications.
ROTATION_CODES: Dict[int, Rotation] = {
    1: Rotation.ZERO,
    6: Rotation.NINETY,
    3: Rotation.ONE_EIGHTY,
    8: Rotation.TWO_SEVENTY,
}


def rotation_from_code(code: int) -> Optional[Rotation]:
    """Map a raw rotation code to a :class:`Rotation`; unknown codes mean no rotation."""

    return ROTATION_CODES.get(code)


class InputRegistry:
    """Inputs keyed by a 1-based position assigned at insertion time.

    A position holds at most one image and at most one document. Both may
    share a position (see :meth:`place`); the image is then emitted first.
    """

    def __init__(self) -> None:
        self._images: Dict[int, ImageEntry] = {}
        self._documents: Dict[int, DocumentEntry] = {}
        self._position = 0
        self._single_document = False
        self._frozen = False
        self.rotation: Optional[Rotation] = None

    # ------------------------------------------------------------------
    # Adding inputs
    # ------------------------------------------------------------------
    def _check_open(self) -> None:
        if self._frozen:
            raise JobInProgressError("Inputs cannot be added while a job is running.")
        if self._single_document:
            raise InvalidJobError(
                "A single-document job with rotation accepts no further inputs."
            )

    def _next_position(self) -> int:
        self._position += 1
        return self._position

    def add_image(self, data: bytes, target_height: Optional[int] = None) -> int:
        self._check_open()
        if target_height is not None and target_height < 0:
            raise InvalidJobError(f"Image height must be positive, got {target_height}")
        position = self._next_position()
        self._images[position] = ImageEntry(bytes(data), target_height or None)
        LOGGER.debug("Queued image (%d bytes) at position %d", len(data), position)
        return position

    def add_document(self, data: bytes) -> int:
        self._check_open()
        position = self._next_position()
        self._documents[position] = DocumentEntry(bytes(data))
        LOGGER.debug("Queued document (%d bytes) at position %d", len(data), position)
        return position

    def add_single_document_with_rotation(self, data: bytes, rotation_code: int) -> int:
        """Start a fresh job whose only input is ``data``, rotated per ``rotation_code``."""

        if self._frozen:
            raise JobInProgressError("Inputs cannot be added while a job is running.")
        if self._position:
            LOGGER.debug("Discarding %d queued input(s) for a single-document job", self._position)
        self.clear()
        position = self.add_document(data)
        self.rotation = rotation_from_code(rotation_code)
        self._single_document = True
        LOGGER.debug("Rotation code %s maps to %s", rotation_code, self.rotation)
        return position

    def reserve(self) -> int:
        """Assign the next position without storing anything at it."""

        self._check_open()
        return self._next_position()

    def place(self, position: int, entry: InputEntry) -> None:
        """Store ``entry`` at an already-assigned ``position``."""

        self._check_open()
        if position < 1 or position > self._position:
            raise InvalidJobError(
                f"Position {position} has not been assigned (last position is {self._position})."
            )
        target: Dict[int, InputEntry]
        if isinstance(entry, ImageEntry):
            target = self._images  # type: ignore[assignment]
        elif isinstance(entry, DocumentEntry):
            target = self._documents  # type: ignore[assignment]
        else:
            raise InvalidJobError(f"Unsupported entry type: {type(entry).__name__}")
        if position in target:
            raise InvalidJobError(
                f"Position {position} already holds a {type(entry).__name__}."
            )
        target[position] = entry

    def clear(self) -> None:
        self._images.clear()
        self._documents.clear()
        self._position = 0
        self._single_document = False
        self.rotation = None

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return self._position

    def positions(self) -> range:
        return range(1, self._position + 1)

    def entries_at(self, position: int) -> Tuple[Optional[ImageEntry], Optional[DocumentEntry]]:
        return self._images.get(position), self._documents.get(position)

    def document_at(self, position: int) -> Optional[DocumentEntry]:
        return self._documents.get(position)

    @property
    def is_single_document(self) -> bool:
        return self._single_document

    @property
    def image_count(self) -> int:
        return len(self._images)

    @property
    def document_count(self) -> int:
        return len(self._documents)

    # ------------------------------------------------------------------
    @contextmanager
    def frozen(self) -> Iterator["InputRegistry"]:
        """Reject additions for the duration of the block."""

        if self._frozen:
            raise JobInProgressError()
        self._frozen = True
        try:
            yield self
        finally:
            self._frozen = False


__all__ = ["InputRegistry", "ROTATION_CODES", "rotation_from_code"]
