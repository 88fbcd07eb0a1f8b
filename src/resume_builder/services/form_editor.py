"""Form editing operations bound to the form state store.

Each operation maps one user gesture (typing in a field, adding or removing
a list entry, entering skill tags, picking a profile image) onto a single
``FormStateStore.set`` call. Lists are copied before modification so the
previous document is never mutated in place.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path

from resume_builder.models import SECTION_ITEM_TYPES, ContactInfo, split_tags
from resume_builder.services.form_store import FormStateStore
from resume_builder.services.results import OperationResult

logger = logging.getLogger(__name__)

__all__ = [
    "SKILL_CATEGORIES",
    "TEXT_FIELDS",
    "FormEditor",
    "image_to_data_url",
]

# Top-level plain text fields editable directly.
TEXT_FIELDS = ("about", "certificates_link")

SKILL_CATEGORIES = ("tech_tools", "soft_skills")


def image_to_data_url(path: Path) -> str:
    """Read an image file and return it as a base64 ``data:`` URL.

    Raises:
        ValueError: If the file does not look like an image.
        OSError: If the file cannot be read.
    """
    mime, _ = mimetypes.guess_type(path.name)
    if not mime or not mime.startswith("image/"):
        raise ValueError(f"{path.name} is not an image file")
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


class FormEditor:
    """Translates form edits into store updates."""

    def __init__(self, store: FormStateStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Scalar fields
    # ------------------------------------------------------------------

    def update_contact(self, field: str, value: str) -> OperationResult[None]:
        if field not in ContactInfo.model_fields:
            raise KeyError(f"Unknown contact field: {field}")
        contact = self.store.get().contact.model_copy(update={field: value})
        return self.store.set(contact=contact)

    def update_text(self, field: str, value: str) -> OperationResult[None]:
        if field not in TEXT_FIELDS:
            raise KeyError(f"Unknown text field: {field}")
        return self.store.set(**{field: value})

    # ------------------------------------------------------------------
    # List sections
    # ------------------------------------------------------------------

    def add_item(self, section: str) -> OperationResult[int]:
        """Append a blank entry to *section*; the result holds its index."""
        item_type = _item_type(section)
        items = [*getattr(self.store.get(), section), item_type()]
        result = self.store.set(**{section: items})
        if result.failed:
            return OperationResult.failure(result.error or "write failed")
        return OperationResult.success(len(items) - 1)

    def update_item(
        self, section: str, index: int, field: str, value: str
    ) -> OperationResult[None]:
        item_type = _item_type(section)
        if field not in item_type.model_fields:
            raise KeyError(f"Unknown {section} field: {field}")

        items = list(getattr(self.store.get(), section))
        if not 0 <= index < len(items):
            return OperationResult.failure(f"No {section} entry at index {index}")

        items[index] = items[index].model_copy(update={field: value})
        return self.store.set(**{section: items})

    def remove_item(self, section: str, index: int) -> OperationResult[None]:
        _item_type(section)
        items = list(getattr(self.store.get(), section))
        if not 0 <= index < len(items):
            return OperationResult.failure(f"No {section} entry at index {index}")

        del items[index]
        return self.store.set(**{section: items})

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------

    def add_tags(self, category: str, raw: str) -> OperationResult[list[str]]:
        """Add comma-separated tags to a skill category, ignoring duplicates."""
        _check_category(category)
        parts = split_tags(raw)
        if not parts:
            return OperationResult.skip("No tags entered")

        skills = self.store.get().skills
        current: list[str] = getattr(skills, category)
        tags = list(dict.fromkeys([*current, *parts]))
        result = self.store.set(skills=skills.model_copy(update={category: tags}))
        if result.failed:
            return OperationResult.failure(result.error or "write failed")
        return OperationResult.success(tags)

    def remove_tag(self, category: str, index: int) -> OperationResult[None]:
        _check_category(category)
        skills = self.store.get().skills
        tags = list(getattr(skills, category))
        if not 0 <= index < len(tags):
            return OperationResult.failure(f"No {category} tag at index {index}")

        del tags[index]
        return self.store.set(skills=skills.model_copy(update={category: tags}))

    # ------------------------------------------------------------------
    # Profile image
    # ------------------------------------------------------------------

    def set_profile_image(self, path: Path) -> OperationResult[None]:
        try:
            data_url = image_to_data_url(path)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load profile image %s: %s", path, exc)
            return OperationResult.failure(str(exc))
        return self.store.set(profile_image_data_url=data_url)

    def clear_profile_image(self) -> OperationResult[None]:
        return self.store.set(profile_image_data_url="")

    def reset(self) -> OperationResult[None]:
        return self.store.reset()


def _item_type(section: str) -> type:
    try:
        return SECTION_ITEM_TYPES[section]
    except KeyError:
        raise KeyError(f"Unknown section: {section}") from None


def _check_category(category: str) -> None:
    if category not in SKILL_CATEGORIES:
        raise KeyError(f"Unknown skill category: {category}")
