"""Command-line entry point.

``resume-builder`` with no arguments opens the TUI. The other subcommands
work on the saved document without a UI: ``export`` writes ``resume.pdf``,
``preview`` prints the preview as Markdown, ``reset`` clears the form and
``serve`` runs the enhancement API.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv

from resume_builder.services.form_store import FormStateStore
from resume_builder.services.local_storage import LocalStorage
from resume_builder.services.preview import render_preview
from resume_builder.tui_rendering import render_preview_markdown
from resume_builder.utils.export import ExportMode, PdfExporter

logger = logging.getLogger(__name__)


def configure_logging(for_tui: bool = False) -> None:
    """Configure the root logger from ``LOG_LEVEL`` (default WARNING)."""
    level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    handlers: list[logging.Handler] | None = None
    if for_tui:
        # Writing to stderr would draw over the Textual screen.
        from textual.logging import TextualHandler

        handlers = [TextualHandler()]
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resume-builder",
        description="Build a resume in the terminal, preview it, and export it as a PDF.",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("tui", help="Open the interactive editor (default)")

    serve = subparsers.add_parser("serve", help="Run the text enhancement API")
    serve.add_argument("--host", default=None, help="Bind address (default 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Port (default 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    export = subparsers.add_parser("export", help="Write resume.pdf from the saved resume")
    export.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for resume.pdf (default: RESUME_BUILDER_DOWNLOAD_DIR or ~/Downloads)",
    )
    export.add_argument(
        "--mode",
        choices=[mode.value for mode in ExportMode],
        default=ExportMode.RASTER.value,
        help="raster embeds an image of the preview; vector keeps text selectable",
    )

    subparsers.add_parser("preview", help="Print the saved resume preview as Markdown")
    subparsers.add_parser("reset", help="Clear the saved resume")
    return parser


def _load_store() -> FormStateStore:
    return FormStateStore.load(LocalStorage())


def cmd_export(args: argparse.Namespace) -> int:
    preview = render_preview(_load_store().get())
    result = PdfExporter(args.mode).export(preview, args.output_dir)
    if result.ok:
        print(f"Saved {result.value}")
        return 0
    print(f"Export failed: {result.error}", file=sys.stderr)
    return 1


def cmd_preview(args: argparse.Namespace) -> int:
    preview = render_preview(_load_store().get())
    print(render_preview_markdown(preview), end="")
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    result = _load_store().reset()
    if result.failed:
        print(f"Reset failed: {result.error}", file=sys.stderr)
        return 1
    print("Resume cleared.")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from resume_builder.api.main import main as serve

    serve(host=args.host, port=args.port, reload=args.reload)
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    from resume_builder.tui import ResumeBuilderTUI

    ResumeBuilderTUI().run()
    return 0


COMMANDS = {
    "tui": cmd_tui,
    "serve": cmd_serve,
    "export": cmd_export,
    "preview": cmd_preview,
    "reset": cmd_reset,
}


def run_cli(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    command = args.command or "tui"
    configure_logging(for_tui=command == "tui")
    logger.debug("Running command %s", command)
    return COMMANDS[command](args)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the CLI application."""
    try:
        return run_cli(argv)
    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
