"""Tests for the TUI helpers that do not need a running app."""

from __future__ import annotations

import pytest

from resume_builder.models import SECTION_ITEM_TYPES, ResumeDocument, ThemePreference
from resume_builder.services.form_store import FormStateStore
from resume_builder.services.results import OperationResult
from resume_builder.tui import (
    ADD_LABELS,
    ITEM_FIELDS,
    ResumeBuilderTUI,
    _status_text,
    detect_prefers_dark,
    parse_field_id,
    resolve_theme,
)


class TestParseFieldId:
    @pytest.mark.parametrize(
        ("widget_id", "expected"),
        [
            ("experience-0-role", ("experience", 0, "role")),
            ("projects-12-description", ("projects", 12, "description")),
            ("certifications-1-link", ("certifications", 1, "link")),
            ("education-3-score", ("education", 3, "score")),
        ],
    )
    def test_valid_ids(self, widget_id: str, expected: tuple[str, int, str]) -> None:
        assert parse_field_id(widget_id) == expected

    @pytest.mark.parametrize(
        "widget_id",
        [None, "", "contact-email", "field-about", "skills-0-name", "experience-x-role"],
    )
    def test_other_ids(self, widget_id: str | None) -> None:
        assert parse_field_id(widget_id) is None


class TestTheme:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("15;0", True),
            ("0;15", False),
            ("15;default;0", True),
            ("0;7", False),
            ("7;8", True),
            ("", True),
            ("15;default", True),
        ],
    )
    def test_detect_prefers_dark(self, value: str, expected: bool) -> None:
        assert detect_prefers_dark({"COLORFGBG": value}) is expected

    def test_detect_prefers_dark_without_variable(self) -> None:
        assert detect_prefers_dark({}) is True

    @pytest.mark.parametrize("prefers_dark", [True, False])
    def test_explicit_preference_wins(self, prefers_dark: bool) -> None:
        assert resolve_theme(ThemePreference.DARK, prefers_dark) == "textual-dark"
        assert resolve_theme(ThemePreference.LIGHT, prefers_dark) == "textual-light"

    def test_system_follows_environment(self) -> None:
        assert resolve_theme(ThemePreference.SYSTEM, True) == "textual-dark"
        assert resolve_theme(ThemePreference.SYSTEM, False) == "textual-light"


def test_status_text() -> None:
    assert _status_text(OperationResult.success(), "Saved") == "Saved"
    assert _status_text(OperationResult.failure("disk full"), "Saved") == "Error: disk full"
    assert _status_text(OperationResult.skip("Nothing here"), "Saved") == "Nothing here"


def test_every_list_section_has_form_fields() -> None:
    assert set(ITEM_FIELDS) == set(SECTION_ITEM_TYPES)
    assert set(ADD_LABELS) == set(SECTION_ITEM_TYPES)


def test_app_uses_injected_store(store: FormStateStore) -> None:
    app = ResumeBuilderTUI(store=store)

    assert app._store is store
    assert app.TITLE == "Resume Builder"
    assert store.get() == ResumeDocument.default()
