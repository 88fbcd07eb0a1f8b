"""Utility functions and helpers"""

from resume_builder.utils.export import ExportMode, PdfExporter, get_download_dir

__all__ = [
    "ExportMode",
    "PdfExporter",
    "get_download_dir",
]
