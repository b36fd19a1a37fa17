"""Layout configuration shared by the assembly engine and backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from reportlab.lib.pagesizes import A4


@dataclass(frozen=True)
class AssemblyConfig:
    """
    Fixed layout values used when drawing pages.

    Attributes:
        page_size: Width and height of pages allocated for images, in points
        image_margin: Inset of a drawn image from every page edge
        caption_inset: Distance of the page-number caption from the page box
        caption_font: Font used for the caption
        caption_font_size: Caption font size
        caption_format: Caption template, formatted with ``number``
    """
    page_size: Tuple[float, float] = A4
    image_margin: float = 25.0
    caption_inset: float = 10.0
    caption_font: str = "Helvetica-Bold"
    caption_font_size: float = 10.0
    caption_format: str = "Page {number}"

    @property
    def page_width(self) -> float:
        return float(self.page_size[0])

    @property
    def page_height(self) -> float:
        return float(self.page_size[1])

    def caption(self, number: int) -> str:
        return self.caption_format.format(number=number)


DEFAULT_CONFIG = AssemblyConfig()

__all__ = ["AssemblyConfig", "DEFAULT_CONFIG"]
