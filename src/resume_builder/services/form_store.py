"""Form state store: the single source of truth for the resume form.

The store keeps the ``ResumeDocument`` in memory and writes the whole
document to local storage after every mutation. Loading never raises: a
missing, unreadable or invalid blob falls back to the defaults.

The theme preference is an independent datum with its own key, handled by
``ThemeStore``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from resume_builder.models import ResumeDocument, ThemePreference
from resume_builder.services.local_storage import LocalStorage, StorageError
from resume_builder.services.results import OperationResult

logger = logging.getLogger(__name__)

__all__ = [
    "STORAGE_KEY",
    "THEME_KEY",
    "FormStateStore",
    "Listener",
    "ThemeStore",
]

STORAGE_KEY = "resume_builder_data_v1"
THEME_KEY = "resume_builder_theme_v1"

Listener = Callable[[ResumeDocument], None]


class FormStateStore:
    """Observable holder of the resume document.

    Args:
        storage: Local storage the document is persisted to.
        document: Initial document; defaults to an empty one.
    """

    def __init__(self, storage: LocalStorage, document: ResumeDocument | None = None) -> None:
        self._storage = storage
        self._document = document or ResumeDocument.default()
        self._listeners: list[Listener] = []

    @classmethod
    def load(cls, storage: LocalStorage) -> FormStateStore:
        """Create a store from the persisted document, or defaults."""
        return cls(storage, _read_document(storage))

    def get(self) -> ResumeDocument:
        return self._document

    def set(self, **changes: Any) -> OperationResult[None]:
        """Replace the given top-level fields and persist the document.

        Keys are the snake_case attribute names of ``ResumeDocument``.
        The in-memory update always applies; the returned result reports
        whether the write to local storage succeeded.

        Raises:
            KeyError: If a key is not a top-level document field.
        """
        unknown = set(changes) - set(ResumeDocument.model_fields)
        if unknown:
            raise KeyError(f"Unknown document fields: {', '.join(sorted(unknown))}")

        merged = {**self._document.model_dump(), **changes}
        self._document = ResumeDocument.model_validate(merged)
        result = self._persist()
        self._notify()
        return result

    def reset(self) -> OperationResult[None]:
        """Restore the hard-coded defaults."""
        self._document = ResumeDocument.default()
        result = self._persist()
        self._notify()
        return result

    def save(self) -> OperationResult[None]:
        """Write the current document again (explicit "save progress")."""
        return self._persist()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for document changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _persist(self) -> OperationResult[None]:
        try:
            self._storage.set_item(STORAGE_KEY, self._document.to_json())
        except StorageError as exc:
            logger.warning("Could not persist resume document: %s", exc)
            return OperationResult.failure(str(exc))
        return OperationResult.success()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._document)


def _read_document(storage: LocalStorage) -> ResumeDocument:
    try:
        raw = storage.get_item(STORAGE_KEY)
    except StorageError as exc:
        logger.warning("Could not read saved resume, using defaults: %s", exc)
        return ResumeDocument.default()

    if not raw:
        return ResumeDocument.default()

    try:
        return ResumeDocument.from_json(raw)
    except (ValidationError, ValueError) as exc:
        logger.warning("Saved resume is unreadable, using defaults: %s", exc)
        return ResumeDocument.default()


class ThemeStore:
    """Persisted theme preference (``system``, ``light`` or ``dark``)."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def get(self) -> ThemePreference:
        try:
            raw = self._storage.get_item(THEME_KEY)
        except StorageError as exc:
            logger.warning("Could not read theme preference: %s", exc)
            return ThemePreference.SYSTEM

        try:
            return ThemePreference(raw) if raw else ThemePreference.SYSTEM
        except ValueError:
            return ThemePreference.SYSTEM

    def set(self, preference: ThemePreference | str) -> OperationResult[ThemePreference]:
        try:
            value = ThemePreference(preference)
        except ValueError:
            return OperationResult.failure(f"Unknown theme {preference!r}")

        try:
            self._storage.set_item(THEME_KEY, value.value)
        except StorageError as exc:
            logger.warning("Could not persist theme preference: %s", exc)
            return OperationResult.failure(str(exc))
        return OperationResult.success(value)
