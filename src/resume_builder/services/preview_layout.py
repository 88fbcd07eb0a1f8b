"""Pixel layout of the preview, shared by the raster and vector PDF painters.

The preview is laid out on a canvas 794 px wide (an A4 sheet at 96 dpi) with
a fixed padding; the height grows with the content. The result lists every
text run, rule, image and link box in canvas pixels, so painters only have
to scale and offset them onto the page.
"""

from __future__ import annotations

import base64
import binascii
import math
import re
from dataclasses import dataclass, field
from typing import Protocol

from fpdf import FPDF

from resume_builder.services.preview import (
    PreviewDocument,
    PreviewEntry,
    PreviewHeader,
    PreviewLink,
    PreviewSection,
)

__all__ = [
    "CANVAS_WIDTH",
    "FpdfTextMeasurer",
    "ImagePlacement",
    "LinkRegion",
    "PreviewLayout",
    "RuleLine",
    "TextMeasurer",
    "TextRun",
    "decode_data_url",
    "layout_preview",
    "pdf_safe",
    "wrap_text",
]

CANVAS_WIDTH = 794
PADDING = 24
LINE_HEIGHT = 1.4
IMAGE_SIZE = 80
HEADER_GAP = 16
SECTION_GAP = 12
ENTRY_GAP = 6
INLINE_GAP = 12
TAG_GAP = 10
BULLET_INDENT = 16

NAME_SIZE = 24
TITLE_SIZE = 14
HEADING_SIZE = 14
BODY_SIZE = 13
LINK_SIZE = 12
LABEL_SIZE = 11

TEXT_COLOR = (15, 23, 42)
BODY_COLOR = (51, 65, 85)
MUTED_COLOR = (100, 116, 139)
LINK_COLOR = (37, 99, 235)
RULE_COLOR = (51, 65, 85)

FONT_FAMILY = "Helvetica"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)

Color = tuple[int, int, int]


@dataclass(frozen=True)
class TextRun:
    """A single line of text; ``y`` is the top of its line box."""

    x: float
    y: float
    width: float
    height: float
    text: str
    size: float
    bold: bool = False
    color: Color = TEXT_COLOR

    @property
    def baseline(self) -> float:
        return self.y + (self.height - self.size) / 2 + self.size * 0.8


@dataclass(frozen=True)
class LinkRegion:
    x: float
    y: float
    width: float
    height: float
    href: str


@dataclass(frozen=True)
class ImagePlacement:
    x: float
    y: float
    width: float
    height: float
    data: bytes


@dataclass(frozen=True)
class RuleLine:
    x: float
    y: float
    width: float
    color: Color = RULE_COLOR


@dataclass
class PreviewLayout:
    width: int
    height: int = 0
    texts: list[TextRun] = field(default_factory=list)
    links: list[LinkRegion] = field(default_factory=list)
    images: list[ImagePlacement] = field(default_factory=list)
    rules: list[RuleLine] = field(default_factory=list)


class TextMeasurer(Protocol):
    def measure(self, text: str, size: float, bold: bool = False) -> float:
        """Return the width of *text* in pixels at font *size* pixels."""


class FpdfTextMeasurer:
    """Measures text with the metrics of the PDF core font."""

    def __init__(self) -> None:
        self._pdf = FPDF(unit="pt")

    def measure(self, text: str, size: float, bold: bool = False) -> float:
        self._pdf.set_font(FONT_FAMILY, "B" if bold else "", size)
        return self._pdf.get_string_width(text)


def pdf_safe(text: str) -> str:
    """Replace characters the PDF core fonts cannot encode."""
    return text.encode("latin-1", errors="replace").decode("latin-1")


def decode_data_url(url: str | None) -> bytes | None:
    """Return the bytes embedded in a ``data:`` URL, or None if unusable."""
    if not url:
        return None
    match = _DATA_URL_RE.match(url.strip())
    if not match:
        return None
    payload = match.group("data")
    if not match.group("b64"):
        return payload.encode("utf-8")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def _fit_prefix(word: str, size: float, bold: bool, max_width: float, m: TextMeasurer) -> int:
    cut = 1
    while cut < len(word) and m.measure(word[: cut + 1], size, bold) <= max_width:
        cut += 1
    return cut


def wrap_text(
    text: str,
    size: float,
    bold: bool,
    max_width: float,
    measurer: TextMeasurer,
) -> list[str]:
    """Greedy word wrap; words wider than a line are split."""
    if not text.strip():
        return []

    lines: list[str] = []
    for paragraph in text.splitlines():
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if measurer.measure(candidate, size, bold) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            while len(word) > 1 and measurer.measure(word, size, bold) > max_width:
                cut = _fit_prefix(word, size, bold, max_width, measurer)
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


class _LayoutBuilder:
    def __init__(self, measurer: TextMeasurer, width: int) -> None:
        self.m = measurer
        self.left = PADDING
        self.right = width - PADDING
        self.y = float(PADDING)
        self.layout = PreviewLayout(width=width)

    @staticmethod
    def line_height(size: float) -> float:
        return size * LINE_HEIGHT

    def add_text(
        self,
        x: float,
        y: float,
        text: str,
        size: float,
        *,
        bold: bool = False,
        color: Color = TEXT_COLOR,
    ) -> TextRun:
        run = TextRun(
            x=x,
            y=y,
            width=self.m.measure(text, size, bold),
            height=self.line_height(size),
            text=text,
            size=size,
            bold=bold,
            color=color,
        )
        self.layout.texts.append(run)
        return run

    def paragraph(
        self,
        text: str,
        size: float,
        *,
        x: float | None = None,
        bold: bool = False,
        color: Color = BODY_COLOR,
    ) -> None:
        x = self.left if x is None else x
        for line in wrap_text(pdf_safe(text), size, bold, self.right - x, self.m):
            if line:
                self.add_text(x, self.y, line, size, bold=bold, color=color)
            self.y += self.line_height(size)

    def inline_flow(
        self,
        items: list[tuple[str, str | None]],
        size: float,
        *,
        x: float,
        color: Color,
        gap: float = INLINE_GAP,
    ) -> None:
        """Lay runs out left to right, wrapping; runs with an href get a link box."""
        if not items:
            return
        cursor = x
        line_height = self.line_height(size)
        for text, href in items:
            text = pdf_safe(text)
            width = self.m.measure(text, size)
            if cursor > x and cursor + width > self.right:
                cursor = x
                self.y += line_height
            run = self.add_text(
                cursor, self.y, text, size, color=LINK_COLOR if href else color
            )
            if href:
                self.layout.links.append(
                    LinkRegion(run.x, run.y, run.width, run.height, href)
                )
            cursor += width + gap
        self.y += line_height

    # ------------------------------------------------------------------

    def header(self, header: PreviewHeader) -> None:
        top = self.y
        text_x = float(self.left)

        image = decode_data_url(header.image_data_url)
        if image:
            self.layout.images.append(
                ImagePlacement(self.left, top, IMAGE_SIZE, IMAGE_SIZE, image)
            )
            text_x += IMAGE_SIZE + HEADER_GAP

        if header.name:
            self.add_text(text_x, self.y, pdf_safe(header.name), NAME_SIZE, bold=True)
            self.y += self.line_height(NAME_SIZE)

        if header.links:
            self.y += 4
            self.inline_flow(_link_items(header.links), LINK_SIZE, x=text_x, color=BODY_COLOR)

        if image:
            self.y = max(self.y, top + IMAGE_SIZE)

    def section(self, section: PreviewSection) -> None:
        self.y += SECTION_GAP
        self.add_text(
            self.left, self.y, section.title.upper(), TITLE_SIZE, bold=True, color=BODY_COLOR
        )
        self.y += self.line_height(TITLE_SIZE)
        self.layout.rules.append(RuleLine(self.left, self.y, self.right - self.left))
        self.y += 4

        if section.body:
            self.paragraph(section.body, BODY_SIZE)

        for group in section.tag_groups:
            self.add_text(self.left, self.y, group.label.upper(), LABEL_SIZE, color=MUTED_COLOR)
            self.y += self.line_height(LABEL_SIZE)
            self.inline_flow(
                [(tag, None) for tag in group.tags],
                LABEL_SIZE + 1,
                x=self.left,
                color=TEXT_COLOR,
                gap=TAG_GAP,
            )

        if section.links:
            self.inline_flow(_link_items(section.links), LINK_SIZE, x=self.left, color=BODY_COLOR)

        for entry in section.entries:
            self.entry(entry, bulleted=section.bulleted)

    def entry(self, entry: PreviewEntry, *, bulleted: bool) -> None:
        indent = self.left + (BULLET_INDENT if bulleted else 0)
        available = self.right - indent
        if bulleted:
            self.add_text(self.left + 4, self.y, "-", HEADING_SIZE)

        meta = pdf_safe(entry.meta)
        meta_width = self.m.measure(meta, BODY_SIZE) if meta else 0.0
        meta_inline = bool(meta) and meta_width <= available * 0.45
        heading_width = available - (meta_width + INLINE_GAP if meta_inline else 0)

        first_line_y = self.y
        heading_lines = wrap_text(
            pdf_safe(entry.heading), HEADING_SIZE, not bulleted, heading_width, self.m
        )
        for line in heading_lines:
            self.add_text(indent, self.y, line, HEADING_SIZE, bold=not bulleted)
            self.y += self.line_height(HEADING_SIZE)

        if meta_inline:
            self.add_text(self.right - meta_width, first_line_y, meta, BODY_SIZE, color=MUTED_COLOR)
        elif meta:
            self.paragraph(meta, BODY_SIZE, x=indent, color=MUTED_COLOR)

        if entry.links:
            self.inline_flow(_link_items(entry.links), LINK_SIZE, x=indent, color=BODY_COLOR)

        if entry.body:
            self.paragraph(entry.body, BODY_SIZE, x=indent)

        self.y += ENTRY_GAP


def _link_items(links: tuple[PreviewLink, ...]) -> list[tuple[str, str | None]]:
    return [(link.label, link.href) for link in links]


def layout_preview(
    preview: PreviewDocument,
    measurer: TextMeasurer | None = None,
    width: int = CANVAS_WIDTH,
) -> PreviewLayout:
    """Position every element of *preview* on a canvas *width* pixels wide."""
    builder = _LayoutBuilder(measurer or FpdfTextMeasurer(), width)
    builder.header(preview.header)
    for section in preview.sections:
        builder.section(section)

    layout = builder.layout
    layout.height = math.ceil(builder.y + PADDING)
    return layout
