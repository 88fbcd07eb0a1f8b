from __future__ import annotations

import asyncio
import base64
import logging
from io import BytesIO
from pathlib import Path

import pytest
from fpdf import FPDF
from PIL import Image
from pypdf import PdfReader

from resume_builder.models import ContactInfo, ResumeDocument
from resume_builder.services.preview import render_preview
from resume_builder.services.preview_layout import LinkRegion
from resume_builder.utils.export import (
    DEFAULT_FILENAME,
    ExportMode,
    PdfExporter,
    fit_to_page,
    get_download_dir,
    page_rect,
)

A4_WIDTH_PT = 595.28
A4_HEIGHT_PT = 841.89


def _link_annotations(path: Path) -> list[dict]:
    reader = PdfReader(path)
    assert len(reader.pages) == 1
    annots = reader.pages[0].get("/Annots")
    annotations = []
    for ref in annots.get_object() if annots is not None else []:
        annot = ref.get_object()
        annotations.append({"uri": annot["/A"]["/URI"], "rect": [float(v) for v in annot["/Rect"]]})
    return annotations


def _png_data_url() -> str:
    buffer = BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


class TestFitToPage:
    def test_wide_source_fills_width_and_centres_vertically(self) -> None:
        fit = fit_to_page(1588, 2000, 210, 297)

        assert fit.width == pytest.approx(210)
        assert fit.x == pytest.approx(0)
        assert fit.height == pytest.approx(2000 * 210 / 1588)
        # Equal top and bottom margins.
        assert fit.y == pytest.approx(297 - fit.y - fit.height)

    def test_tall_source_fills_height_and_centres_horizontally(self) -> None:
        fit = fit_to_page(100, 1000, 210, 297)

        assert fit.height == pytest.approx(297)
        assert fit.y == pytest.approx(0)
        assert fit.x == pytest.approx(210 - fit.x - fit.width)

    def test_scale_is_uniform(self) -> None:
        fit = fit_to_page(794, 1123)
        assert fit.width / 794 == pytest.approx(fit.height / 1123) == pytest.approx(fit.scale)

    def test_empty_source_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            fit_to_page(0, 100)


def test_page_rect_uses_raster_scale() -> None:
    # 0.5 mm per bitmap pixel, two bitmap pixels per layout pixel.
    fit = fit_to_page(200, 400, 100, 200)
    region = LinkRegion(10, 20, 30, 40, "https://example.com")

    assert page_rect(region, fit, 2.0) == pytest.approx((10, 20, 30, 40))
    assert page_rect(region, fit, 1.0) == pytest.approx((5, 10, 15, 20))


class TestDownloadDir:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("RESUME_BUILDER_DOWNLOAD_DIR", str(tmp_path / "out"))
        assert get_download_dir() == tmp_path / "out"

    def test_downloads_folder(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("RESUME_BUILDER_DOWNLOAD_DIR", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "Downloads").mkdir()

        assert get_download_dir() == tmp_path / "Downloads"

    def test_falls_back_to_cwd(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("RESUME_BUILDER_DOWNLOAD_DIR", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.chdir(tmp_path)

        assert get_download_dir() == tmp_path


def test_missing_preview_is_a_no_op(tmp_path: Path) -> None:
    result = PdfExporter().export(None, tmp_path)

    assert result.skipped
    assert not (tmp_path / DEFAULT_FILENAME).exists()


@pytest.mark.parametrize("mode", [ExportMode.RASTER, ExportMode.VECTOR])
def test_export_writes_single_page_with_links(
    mode: ExportMode, full_document: ResumeDocument, tmp_path: Path
) -> None:
    result = PdfExporter(mode).export(render_preview(full_document), tmp_path)

    assert result.ok
    assert result.value == tmp_path / "resume.pdf"

    annotations = _link_annotations(result.value)
    uris = [a["uri"] for a in annotations]
    assert "mailto:asha@example.com" in uris
    assert "https://linkedin.com/in/asha" in uris
    assert "https://github.com/asha/resume" in uris
    assert "https://drive.example.com/certs" in uris
    for annotation in annotations:
        left, bottom, right, top = annotation["rect"]
        assert 0 <= left < right <= A4_WIDTH_PT
        assert 0 <= bottom < top <= A4_HEIGHT_PT


def test_raster_and_vector_links_land_in_the_same_place(
    full_document: ResumeDocument, tmp_path: Path
) -> None:
    preview = render_preview(full_document)
    raster = PdfExporter().export(preview, tmp_path / "raster").value
    vector = PdfExporter().export(preview, tmp_path / "vector", mode="vector").value

    def email_rect(path: Path) -> list[float]:
        return next(a["rect"] for a in _link_annotations(path) if a["uri"].startswith("mailto:"))

    # Both start at the same padding corner of the header line.
    assert email_rect(raster)[0] == pytest.approx(email_rect(vector)[0], abs=1.0)


def test_export_with_profile_image_and_non_latin_text(tmp_path: Path) -> None:
    doc = ResumeDocument(
        contact=ContactInfo(full_name="Zoë Rao – dev", email="zoe@example.com"),
        about="Builds things ✓",
        profile_image_data_url=_png_data_url(),
    )

    for mode in ExportMode:
        result = PdfExporter(mode).export(render_preview(doc), tmp_path / mode.value)
        assert result.ok, result.error


def test_failing_link_is_skipped(
    full_document: ResumeDocument,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    original_link = FPDF.link

    def flaky_link(self: FPDF, x: float, y: float, w: float, h: float, link, *args, **kwargs):
        if str(link).startswith("mailto:"):
            raise RuntimeError("boom")
        return original_link(self, x, y, w, h, link, *args, **kwargs)

    monkeypatch.setattr(FPDF, "link", flaky_link)

    with caplog.at_level(logging.WARNING):
        result = PdfExporter(ExportMode.VECTOR).export(render_preview(full_document), tmp_path)

    assert result.ok
    uris = [a["uri"] for a in _link_annotations(result.value)]
    assert not any(uri.startswith("mailto:") for uri in uris)
    assert "https://linkedin.com/in/asha" in uris
    assert "Skipping link overlay" in caplog.text


def test_unwritable_output_dir_fails_softly(full_document: ResumeDocument, tmp_path: Path) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("not a directory")

    result = PdfExporter().export(render_preview(full_document), blocker / "sub")

    assert result.failed


def test_export_async(full_document: ResumeDocument, tmp_path: Path) -> None:
    exporter = PdfExporter(ExportMode.VECTOR)

    result = asyncio.run(exporter.export_async(render_preview(full_document), tmp_path))

    assert result.ok
    assert (tmp_path / "resume.pdf").exists()
