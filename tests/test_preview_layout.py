from __future__ import annotations

import base64

import pytest

from resume_builder.models import ContactInfo, ResumeDocument
from resume_builder.services.preview import render_preview
from resume_builder.services.preview_layout import (
    CANVAS_WIDTH,
    FpdfTextMeasurer,
    decode_data_url,
    layout_preview,
    pdf_safe,
    wrap_text,
)


class FixedWidthMeasurer:
    """Every character is half the font size wide."""

    def measure(self, text: str, size: float, bold: bool = False) -> float:
        return len(text) * size * 0.5


MEASURER = FixedWidthMeasurer()


class TestWrapText:
    def test_breaks_between_words(self) -> None:
        # Size 2 -> one pixel per character.
        assert wrap_text("aaa bbb ccc", 2, False, 7, MEASURER) == ["aaa bbb", "ccc"]

    def test_splits_words_longer_than_a_line(self) -> None:
        assert wrap_text("abcdefghij", 2, False, 4, MEASURER) == ["abcd", "efgh", "ij"]

    def test_keeps_explicit_line_breaks(self) -> None:
        assert wrap_text("one\n\ntwo", 2, False, 50, MEASURER) == ["one", "", "two"]

    def test_blank_text_has_no_lines(self) -> None:
        assert wrap_text("   ", 2, False, 50, MEASURER) == []


class TestDataUrls:
    def test_decodes_base64_payload(self) -> None:
        url = "data:image/png;base64," + base64.b64encode(b"pixels").decode()
        assert decode_data_url(url) == b"pixels"

    @pytest.mark.parametrize(
        "url", [None, "", "https://example.com/a.png", "data:image/png;base64,@@@"]
    )
    def test_unusable_urls(self, url: str | None) -> None:
        assert decode_data_url(url) is None


def test_pdf_safe_replaces_characters_outside_latin1() -> None:
    assert pdf_safe("naïve – ok") == "naïve ? ok"


def test_fpdf_measurer_scales_with_font_size() -> None:
    measurer = FpdfTextMeasurer()

    small = measurer.measure("Resume", 12)
    large = measurer.measure("Resume", 24)

    assert small > 0
    assert large == pytest.approx(small * 2)


def test_layout_has_fixed_width_and_grows_with_content(full_document: ResumeDocument) -> None:
    short = layout_preview(
        render_preview(ResumeDocument(contact=ContactInfo(full_name="A"))), MEASURER
    )
    full = layout_preview(render_preview(full_document), MEASURER)

    assert short.width == full.width == CANVAS_WIDTH
    assert 0 < short.height < full.height


def test_layout_name_is_bold_heading(full_document: ResumeDocument) -> None:
    layout = layout_preview(render_preview(full_document), MEASURER)

    name = layout.texts[0]
    assert name.text == "Asha Rao"
    assert name.bold
    assert name.size == 24
    assert (name.x, name.y) == (24, 24)


def test_layout_link_regions_cover_their_labels(full_document: ResumeDocument) -> None:
    layout = layout_preview(render_preview(full_document), MEASURER)

    hrefs = [link.href for link in layout.links]
    assert hrefs[:5] == [
        "mailto:asha@example.com",
        "tel:+919876543210",
        "https://linkedin.com/in/asha",
        "https://github.com/asha",
        "https://asha.dev",
    ]
    assert "https://drive.example.com/certs" in hrefs
    assert "https://aws.example.com/cert" in hrefs

    runs = {(run.x, run.y): run for run in layout.texts}
    for link in layout.links:
        run = runs[(link.x, link.y)]
        assert (link.width, link.height) == (run.width, run.height)


def test_layout_stays_inside_padding(full_document: ResumeDocument) -> None:
    layout = layout_preview(render_preview(full_document), MEASURER)

    for run in layout.texts:
        assert run.x >= 24
        assert run.x + run.width <= CANVAS_WIDTH - 24 + 1e-6
        assert run.y + run.height <= layout.height


def test_profile_image_shifts_header_text() -> None:
    url = "data:image/png;base64," + base64.b64encode(b"pixels").decode()
    doc = ResumeDocument(contact=ContactInfo(full_name="A"), profile_image_data_url=url)

    layout = layout_preview(render_preview(doc), MEASURER)

    assert len(layout.images) == 1
    assert layout.images[0].data == b"pixels"
    assert layout.texts[0].x == 24 + 80 + 16
    assert layout.height >= 24 + 80 + 24


def test_unreadable_profile_image_is_ignored() -> None:
    doc = ResumeDocument(contact=ContactInfo(full_name="A"), profile_image_data_url="garbage")

    layout = layout_preview(render_preview(doc), MEASURER)

    assert layout.images == []
    assert layout.texts[0].x == 24
