from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator
from contextlib import suppress
from functools import partial
from pathlib import Path

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.widget import Widget
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    Markdown,
    Select,
    Static,
    TextArea,
)
from textual.worker import Worker, WorkerState

from resume_builder.models import SECTION_ITEM_TYPES, ResumeDocument, ThemePreference
from resume_builder.services.enhancement_client import ENHANCEABLE_SECTIONS, EnhancementClient
from resume_builder.services.form_editor import SKILL_CATEGORIES, FormEditor
from resume_builder.services.form_store import FormStateStore, ThemeStore
from resume_builder.services.local_storage import LocalStorage
from resume_builder.services.preview import SECTION_TITLES, render_preview
from resume_builder.services.results import OperationResult
from resume_builder.tui_rendering import render_preview_markdown
from resume_builder.utils.export import ExportMode, PdfExporter

logger = logging.getLogger(__name__)

CONTACT_FIELDS: dict[str, str] = {
    "full_name": "Full Name*",
    "email": "Email",
    "phone": "Phone Number",
    "linkedin": "LinkedIn URL",
    "github": "GitHub URL",
    "website": "Portfolio / Website",
}

# Section -> (field, placeholder) in form order; "description" is multi-line.
ITEM_FIELDS: dict[str, tuple[tuple[str, str], ...]] = {
    "experience": (
        ("role", "Role*"),
        ("company", "Company"),
        ("location", "Location"),
        ("start", "Start"),
        ("end", "End"),
        ("description", "Key contributions / impact"),
    ),
    "projects": (
        ("name", "Project Name*"),
        ("link", "Project Link"),
        ("repo", "Repo Link"),
        ("tech", "Tech Stack (comma-separated)"),
        ("description", "Problem, approach, impact"),
    ),
    "certifications": (
        ("title", "Title*"),
        ("issuer", "Issuer"),
        ("year", "Year"),
        ("link", "Certificate Link"),
    ),
    "education": (
        ("degree", "Degree* (e.g., B.Tech in CSE)"),
        ("school", "Institute"),
        ("start", "Start"),
        ("end", "End"),
        ("score", "Score (CGPA/%)"),
    ),
}

SKILL_LABELS: dict[str, tuple[str, str]] = {
    "tech_tools": ("Tech & Tools", "e.g., React, Node.js, Tailwind, C++"),
    "soft_skills": ("Soft Skills", "e.g., Communication, Leadership, Teamwork"),
}

ADD_LABELS: dict[str, str] = {
    "experience": "Add Experience",
    "projects": "Add Project",
    "certifications": "Add Certification",
    "education": "Add Education",
}

THEME_OPTIONS = [
    ("System", ThemePreference.SYSTEM.value),
    ("Light", ThemePreference.LIGHT.value),
    ("Dark", ThemePreference.DARK.value),
]

_SECTIONS = "|".join(SECTION_ITEM_TYPES)
_FIELD_ID_RE = re.compile(rf"^({_SECTIONS})-(\d+)-(\w+)$")
_ITEM_BUTTON_RE = re.compile(rf"^(remove|enhance)-({_SECTIONS})-(\d+)$")
_TAG_BUTTON_RE = re.compile(r"^tag-(\w+)-(\d+)$")


def parse_field_id(widget_id: str | None) -> tuple[str, int, str] | None:
    """Split an item field id like ``experience-0-role`` into its parts."""
    match = _FIELD_ID_RE.match(widget_id or "")
    if not match:
        return None
    section, index, field = match.groups()
    return section, int(index), field


def detect_prefers_dark(environ: dict[str, str] | None = None) -> bool:
    """Guess whether the terminal background is dark from ``COLORFGBG``."""
    value = (environ if environ is not None else os.environ).get("COLORFGBG", "")
    background = value.rsplit(";", 1)[-1]
    if not background.isdigit():
        return True
    # ANSI colours 0-6 and 8 are the dark ones.
    return int(background) < 7 or int(background) == 8


def resolve_theme(preference: ThemePreference, prefers_dark: bool) -> str:
    """Map the stored preference onto a Textual theme name."""
    if preference is ThemePreference.SYSTEM:
        dark = prefers_dark
    else:
        dark = preference is ThemePreference.DARK
    return "textual-dark" if dark else "textual-light"


def _status_text(result: OperationResult, success: str) -> str:
    if result.ok:
        return success
    if result.skipped:
        return result.error or "Nothing to do."
    return f"Error: {result.error}"


class ResumeBuilderTUI(App[None]):
    """Form on the left, live preview on the right."""

    TITLE = "Resume Builder"

    BINDINGS = [
        ("ctrl+s", "save", "Save progress"),
        ("ctrl+e", "export_pdf", "Download PDF"),
        ("ctrl+q", "quit", "Quit"),
    ]

    CSS = """
Screen {
    layout: vertical;
    background: $background;
}

#middle {
    height: 1fr;
    layout: horizontal;
}

#form {
    width: 1fr;
    padding: 1;
    border: heavy $primary;
    background: $panel;
}

#preview-pane {
    width: 1fr;
    padding: 1;
    border: heavy $primary;
    background: $surface;
}

.section-title {
    text-style: bold;
    margin-top: 1;
}

.item {
    height: auto;
    border: round $secondary;
    padding: 0 1;
    margin-bottom: 1;
}

.row {
    height: auto;
}

#field-about, .description {
    height: 6;
}

#toolbar {
    height: auto;
    padding: 0 1;
    border: heavy $primary;
    background: $panel;
}

#toolbar Button {
    margin-left: 1;
}

#theme-select {
    width: 20;
}

#status {
    width: 1fr;
    padding: 1;
}
"""

    def __init__(
        self,
        store: FormStateStore | None = None,
        theme_store: ThemeStore | None = None,
        client: EnhancementClient | None = None,
        exporter: PdfExporter | None = None,
        download_dir: Path | None = None,
    ) -> None:
        super().__init__()
        storage = LocalStorage()
        self._store = store or FormStateStore.load(storage)
        self._theme_store = theme_store or ThemeStore(storage)
        self._editor = FormEditor(self._store)
        self._client = client or EnhancementClient(self._store)
        self._exporter = exporter or PdfExporter(ExportMode.RASTER)
        self._download_dir = download_dir
        self._export_worker: Worker[OperationResult[Path]] | None = None
        self._unsubscribe = self._store.subscribe(self._on_document_changed)

    # ---------------------------------------------------------------------
    # LAYOUT
    # ---------------------------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            VerticalScroll(*self._form_widgets(), id="form"),
            VerticalScroll(Markdown("", id="preview"), id="preview-pane"),
            id="middle",
        )
        yield Horizontal(
            Label("Ready.", id="status"),
            Select(
                THEME_OPTIONS,
                value=self._theme_store.get().value,
                allow_blank=False,
                id="theme-select",
            ),
            Button("Save Progress", id="btn-save", variant="default"),
            Button("Download PDF", id="btn-export", variant="primary"),
            Button("Reset", id="btn-reset", variant="error"),
            id="toolbar",
        )
        yield Footer()

    def _form_widgets(self) -> Iterator[Widget]:
        doc = self._store.get()

        yield Static("Name & Contact", classes="section-title")
        for field, placeholder in CONTACT_FIELDS.items():
            value = getattr(doc.contact, field) or ""
            yield Input(value=value, placeholder=placeholder, id=f"contact-{field}")
        yield Horizontal(
            Input(placeholder="Path to profile image", id="image-path"),
            Button("Attach", id="btn-image"),
            Button("Remove", id="btn-image-clear"),
            classes="row",
        )

        yield Static(SECTION_TITLES["about"], classes="section-title")
        yield TextArea(doc.about, id="field-about")
        yield Button("Enhance with AI", id="enhance-about")

        yield Static(SECTION_TITLES["skills"], classes="section-title")
        for category in SKILL_CATEGORIES:
            label, placeholder = SKILL_LABELS[category]
            yield Label(label)
            yield Input(placeholder=placeholder, id=f"tags-{category}")
            yield Horizontal(
                *self._tag_widgets(doc, category), id=f"tag-list-{category}", classes="row"
            )

        for section in SECTION_ITEM_TYPES:
            yield Static(SECTION_TITLES[section], classes="section-title")
            if section == "certifications":
                yield Input(
                    value=doc.certificates_link,
                    placeholder="All Certificates Link (Google Drive/Portfolio)",
                    id="field-certificates_link",
                )
            yield Vertical(*self._item_widgets(doc, section), id=f"list-{section}", classes="row")
            yield Button(ADD_LABELS[section], id=f"add-{section}")

    def _tag_widgets(self, doc: ResumeDocument, category: str) -> list[Widget]:
        tags = getattr(doc.skills, category)
        return [Button(f"{tag} x", id=f"tag-{category}-{i}") for i, tag in enumerate(tags)]

    def _item_widgets(self, doc: ResumeDocument, section: str) -> list[Widget]:
        widgets: list[Widget] = []
        for index, item in enumerate(getattr(doc, section)):
            children: list[Widget] = []
            for field, placeholder in ITEM_FIELDS[section]:
                value = getattr(item, field) or ""
                widget_id = f"{section}-{index}-{field}"
                if field == "description":
                    children.append(TextArea(value, id=widget_id, classes="description"))
                else:
                    children.append(Input(value=value, placeholder=placeholder, id=widget_id))
            buttons = [Button("Remove", id=f"remove-{section}-{index}", variant="error")]
            if section in ENHANCEABLE_SECTIONS:
                buttons.insert(0, Button("Enhance with AI", id=f"enhance-{section}-{index}"))
            children.append(Horizontal(*buttons, classes="row"))
            widgets.append(Vertical(*children, classes="item"))
        return widgets

    async def _rebuild_list(self, section: str) -> None:
        container = self.query_one(f"#list-{section}", Vertical)
        await container.remove_children()
        await container.mount_all(self._item_widgets(self._store.get(), section))

    async def _rebuild_tags(self, category: str) -> None:
        container = self.query_one(f"#tag-list-{category}", Horizontal)
        await container.remove_children()
        await container.mount_all(self._tag_widgets(self._store.get(), category))

    def on_mount(self) -> None:
        self._apply_theme(self._theme_store.get())
        self._on_document_changed(self._store.get())

    def on_unmount(self) -> None:
        self._unsubscribe()
        self._client.close()

    # ---------------------------------------------------------------------
    # STORE -> VIEW
    # ---------------------------------------------------------------------

    def _on_document_changed(self, doc: ResumeDocument) -> None:
        with suppress(NoMatches):
            markdown = render_preview_markdown(render_preview(doc))
            self.query_one("#preview", Markdown).update(markdown)

    def _set_status(self, message: str) -> None:
        with suppress(NoMatches):
            self.query_one("#status", Label).update(message)

    def _apply_theme(self, preference: ThemePreference) -> None:
        self.theme = resolve_theme(preference, detect_prefers_dark())

    # ---------------------------------------------------------------------
    # EVENTS: field edits
    # ---------------------------------------------------------------------

    @on(Input.Changed)
    def handle_input_changed(self, event: Input.Changed) -> None:
        widget_id = event.input.id or ""
        if widget_id.startswith("contact-"):
            result = self._editor.update_contact(widget_id.removeprefix("contact-"), event.value)
        elif widget_id == "field-certificates_link":
            result = self._editor.update_text("certificates_link", event.value)
        elif parsed := parse_field_id(widget_id):
            section, index, field = parsed
            result = self._editor.update_item(section, index, field, event.value)
        else:
            return
        if result.failed:
            self._set_status(f"Error: {result.error}")

    @on(TextArea.Changed)
    def handle_text_area_changed(self, event: TextArea.Changed) -> None:
        widget_id = event.text_area.id or ""
        text = event.text_area.text
        if widget_id == "field-about":
            result = self._editor.update_text("about", text)
        elif parsed := parse_field_id(widget_id):
            section, index, field = parsed
            result = self._editor.update_item(section, index, field, text)
        else:
            return
        if result.failed:
            self._set_status(f"Error: {result.error}")

    @on(Input.Submitted)
    async def handle_tags_submitted(self, event: Input.Submitted) -> None:
        widget_id = event.input.id or ""
        if not widget_id.startswith("tags-"):
            return
        category = widget_id.removeprefix("tags-")
        result = self._editor.add_tags(category, event.value)
        event.input.value = ""
        if result.failed:
            self._set_status(f"Error: {result.error}")
        await self._rebuild_tags(category)

    # ---------------------------------------------------------------------
    # EVENTS: list, tag and enhancement buttons
    # ---------------------------------------------------------------------

    @on(Button.Pressed)
    async def handle_dynamic_button(self, event: Button.Pressed) -> None:
        widget_id = event.button.id or ""

        if widget_id.startswith("add-"):
            section = widget_id.removeprefix("add-")
            result = self._editor.add_item(section)
            await self._rebuild_list(section)
            self._set_status(_status_text(result, f"Added {section} entry."))
        elif match := _ITEM_BUTTON_RE.match(widget_id):
            action, section, index = match.group(1), match.group(2), int(match.group(3))
            if action == "remove":
                result = self._editor.remove_item(section, index)
                await self._rebuild_list(section)
                self._set_status(_status_text(result, f"Removed {section} entry."))
            else:
                self._start_enhancement(section, index)
        elif match := _TAG_BUTTON_RE.match(widget_id):
            category, index = match.group(1), int(match.group(2))
            result = self._editor.remove_tag(category, index)
            await self._rebuild_tags(category)
            if result.failed:
                self._set_status(f"Error: {result.error}")
        elif widget_id == "enhance-about":
            self._start_enhancement("about", None)

    def _start_enhancement(self, field: str, index: int | None) -> None:
        self._set_status("Enhancing...")
        self.run_worker(
            self._enhance(field, index),
            name=f"enhance-{field}",
            group="enhance",
            exit_on_error=False,
        )

    async def _enhance(self, field: str, index: int | None) -> None:
        if index is None:
            result = await self._client.enhance_about()
            widget_id = "field-about"
        else:
            result = await self._client.enhance_description(field, index)
            widget_id = f"{field}-{index}-description"

        if result.ok and result.value is not None:
            with suppress(NoMatches):
                self.query_one(f"#{widget_id}", TextArea).load_text(result.value)
        self._set_status(_status_text(result, "Text enhanced."))

    # ---------------------------------------------------------------------
    # EVENTS: profile image, theme, toolbar
    # ---------------------------------------------------------------------

    @on(Button.Pressed, "#btn-image")
    def handle_attach_image(self) -> None:
        path_input = self.query_one("#image-path", Input)
        raw = path_input.value.strip()
        if not raw:
            self._set_status("Enter the path of an image file first.")
            return
        result = self._editor.set_profile_image(Path(raw).expanduser())
        self._set_status(_status_text(result, "Profile image attached."))

    @on(Button.Pressed, "#btn-image-clear")
    def handle_clear_image(self) -> None:
        self.query_one("#image-path", Input).value = ""
        result = self._editor.clear_profile_image()
        self._set_status(_status_text(result, "Profile image removed."))

    @on(Select.Changed, "#theme-select")
    def handle_theme_changed(self, event: Select.Changed) -> None:
        if event.value is Select.BLANK:
            return
        result = self._theme_store.set(str(event.value))
        if result.ok and result.value is not None:
            self._apply_theme(result.value)
        elif result.failed:
            self._set_status(f"Error: {result.error}")

    @on(Button.Pressed, "#btn-save")
    def action_save(self) -> None:
        result = self._store.save()
        self._set_status(_status_text(result, "Saved ✔"))

    @on(Button.Pressed, "#btn-reset")
    async def handle_reset(self) -> None:
        result = self._editor.reset()
        await self.recompose()
        self._on_document_changed(self._store.get())
        self._set_status(_status_text(result, "Form reset."))

    @on(Button.Pressed, "#btn-export")
    def action_export_pdf(self) -> None:
        preview = render_preview(self._store.get())
        self._set_status("Exporting PDF...")
        self._export_worker = self.run_worker(
            partial(self._exporter.export, preview, self._download_dir),
            name="export",
            exclusive=True,
            thread=True,
            exit_on_error=False,
        )

    # ---------------------------------------------------------------------
    # WORKER STATE HANDLER
    # ---------------------------------------------------------------------

    @on(Worker.StateChanged)
    def worker_state(self, event: Worker.StateChanged) -> None:
        if event.worker is not self._export_worker:
            if event.state == WorkerState.ERROR:
                logger.error("Worker %s failed: %s", event.worker.name, event.worker.error)
                self._set_status("Error: enhancement failed.")
            return

        if event.state == WorkerState.SUCCESS:
            result = event.worker.result
            if result is not None:
                self._set_status(_status_text(result, f"Saved PDF to {result.value}"))
        elif event.state == WorkerState.ERROR:
            logger.error("PDF export failed: %s", event.worker.error)
            self._set_status("Error: PDF export failed.")


def main() -> None:
    ResumeBuilderTUI().run()
