"""Export the resume preview to a single-page A4 PDF with clickable links."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from enum import StrEnum
from io import BytesIO
from pathlib import Path

from fpdf import FPDF
from fpdf.errors import FPDFException

from resume_builder.services.preview import PreviewDocument
from resume_builder.services.preview_layout import (
    FONT_FAMILY,
    FpdfTextMeasurer,
    LinkRegion,
    PreviewLayout,
    layout_preview,
)
from resume_builder.services.results import OperationResult
from resume_builder.utils.rasterize import RASTER_SCALE, PillowTextMeasurer, rasterize_layout

logger = logging.getLogger(__name__)

__all__ = [
    "A4_HEIGHT_MM",
    "A4_WIDTH_MM",
    "DEFAULT_FILENAME",
    "ExportMode",
    "PageFit",
    "PdfExporter",
    "fit_to_page",
    "get_download_dir",
    "page_rect",
]

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0
DEFAULT_FILENAME = "resume.pdf"
PT_PER_MM = 72 / 25.4


class ExportMode(StrEnum):
    RASTER = "raster"
    VECTOR = "vector"


@dataclass(frozen=True)
class PageFit:
    """Uniform scale (mm per source unit) and centred placement on the page."""

    scale: float
    x: float
    y: float
    width: float
    height: float


def fit_to_page(
    source_width: float,
    source_height: float,
    page_width: float = A4_WIDTH_MM,
    page_height: float = A4_HEIGHT_MM,
) -> PageFit:
    """Scale a source rectangle to fit the page, preserving aspect ratio.

    Raises:
        ValueError: If the source has no area.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Cannot fit a {source_width}x{source_height} source onto a page")

    scale = min(page_width / source_width, page_height / source_height)
    width = source_width * scale
    height = source_height * scale
    return PageFit(
        scale=scale,
        x=(page_width - width) / 2,
        y=(page_height - height) / 2,
        width=width,
        height=height,
    )


def page_rect(
    region: LinkRegion, fit: PageFit, source_per_layout_px: float = 1.0
) -> tuple[float, float, float, float]:
    """Map a layout-pixel rectangle onto the page, in millimetres.

    ``source_per_layout_px`` is how many fitted source units one layout pixel
    spans (the raster scale when the fitted source is the bitmap).
    """
    mm_per_px = fit.scale * source_per_layout_px
    return (
        fit.x + region.x * mm_per_px,
        fit.y + region.y * mm_per_px,
        region.width * mm_per_px,
        region.height * mm_per_px,
    )


def get_download_dir() -> Path:
    """Return the directory the PDF is "downloaded" to."""
    configured = os.environ.get("RESUME_BUILDER_DOWNLOAD_DIR")
    if configured:
        return Path(configured).expanduser()
    downloads = Path.home() / "Downloads"
    if downloads.is_dir():
        return downloads
    return Path.cwd()


def _paint_vector(pdf: FPDF, layout: PreviewLayout, fit: PageFit) -> None:
    k = fit.scale

    pdf.set_line_width(0.2)
    for rule in layout.rules:
        pdf.set_draw_color(*rule.color)
        y = fit.y + rule.y * k
        pdf.line(fit.x + rule.x * k, y, fit.x + (rule.x + rule.width) * k, y)

    for image in layout.images:
        try:
            pdf.image(
                BytesIO(image.data),
                x=fit.x + image.x * k,
                y=fit.y + image.y * k,
                w=image.width * k,
                h=image.height * k,
            )
        except (OSError, ValueError, FPDFException) as exc:
            logger.warning("Skipping unreadable profile image: %s", exc)

    for run in layout.texts:
        pdf.set_font(FONT_FAMILY, "B" if run.bold else "", run.size * k * PT_PER_MM)
        pdf.set_text_color(*run.color)
        pdf.text(fit.x + run.x * k, fit.y + run.baseline * k, run.text)


class PdfExporter:
    """Writes the preview as ``resume.pdf``.

    Args:
        mode: ``raster`` embeds a 2x bitmap of the preview (what you see is
            what you get); ``vector`` draws native PDF text.
    """

    def __init__(self, mode: ExportMode | str = ExportMode.RASTER) -> None:
        self.mode = ExportMode(mode)

    def build_pdf(self, preview: PreviewDocument, mode: ExportMode | None = None) -> FPDF:
        mode = ExportMode(mode or self.mode)

        pdf = FPDF(orientation="P", unit="mm", format="A4")
        pdf.set_auto_page_break(auto=False)
        pdf.add_page()

        if mode is ExportMode.RASTER:
            layout = layout_preview(preview, PillowTextMeasurer(RASTER_SCALE))
            bitmap = rasterize_layout(layout, RASTER_SCALE)
            fit = fit_to_page(bitmap.width, bitmap.height, pdf.w, pdf.h)
            pdf.image(bitmap, x=fit.x, y=fit.y, w=fit.width, h=fit.height)
            source_per_px = float(RASTER_SCALE)
        else:
            layout = layout_preview(preview, FpdfTextMeasurer())
            fit = fit_to_page(layout.width, layout.height, pdf.w, pdf.h)
            _paint_vector(pdf, layout, fit)
            source_per_px = 1.0

        self._add_links(pdf, layout, fit, source_per_px)
        return pdf

    def _add_links(
        self, pdf: FPDF, layout: PreviewLayout, fit: PageFit, source_per_px: float
    ) -> int:
        added = 0
        for region in layout.links:
            try:
                x, y, w, h = page_rect(region, fit, source_per_px)
                pdf.link(x, y, w, h, region.href)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Skipping link overlay for %s: %s", region.href, exc)
                continue
            added += 1
        logger.debug("Added %d of %d link overlays", added, len(layout.links))
        return added

    def export(
        self,
        preview: PreviewDocument | None,
        output_dir: Path | None = None,
        mode: ExportMode | str | None = None,
    ) -> OperationResult[Path]:
        """Render *preview* to ``output_dir/resume.pdf``.

        A missing preview is a no-op (skipped result).
        """
        if preview is None:
            logger.info("Export requested before the preview was ready; nothing to do")
            return OperationResult.skip("Preview is not available")

        output_dir = output_dir or get_download_dir()
        output_path = output_dir / DEFAULT_FILENAME
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            pdf = self.build_pdf(preview, ExportMode(mode) if mode else None)
            pdf.output(str(output_path))
        except (OSError, ValueError, FPDFException) as exc:
            logger.error("PDF export failed: %s", exc)
            return OperationResult.failure(f"PDF export failed: {exc}")

        logger.info("Exported resume to %s", output_path)
        return OperationResult.success(output_path)

    async def export_async(
        self,
        preview: PreviewDocument | None,
        output_dir: Path | None = None,
        mode: ExportMode | str | None = None,
    ) -> OperationResult[Path]:
        """Run ``export`` in a worker thread."""
        return await asyncio.to_thread(self.export, preview, output_dir, mode)
