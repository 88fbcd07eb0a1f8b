"""Data model for the resume document.

The whole resume is one aggregate, ``ResumeDocument``, serialized to a single
JSON blob with camelCase keys. Python code uses snake_case attribute names;
pydantic aliases bridge the two.

``skills`` historically came in two shapes: a mapping of tag lists, or a
single comma-separated string. Both are accepted on read and normalized to
``SkillSet`` so only the mapping shape is ever written back.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

__all__ = [
    "CertificationItem",
    "ContactInfo",
    "EducationItem",
    "ExperienceItem",
    "ProjectItem",
    "REQUIRED_FIELDS",
    "ResumeDocument",
    "SECTION_ITEM_TYPES",
    "SkillSet",
    "ThemePreference",
    "normalize_skills",
    "split_tags",
]


class _CamelModel(BaseModel):
    """Base model serializing with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactInfo(_CamelModel):
    """Name and contact details shown in the resume header."""

    full_name: str = ""
    email: str | None = None
    phone: str | None = None
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None


class ExperienceItem(_CamelModel):
    """A single work-experience entry."""

    role: str = ""
    company: str | None = None
    location: str | None = None
    start: str | None = None
    end: str | None = None
    description: str | None = None


class ProjectItem(_CamelModel):
    """A single project entry."""

    name: str = ""
    link: str | None = None
    repo: str | None = None
    description: str | None = None
    tech: str | None = None


class CertificationItem(_CamelModel):
    """A single certification entry."""

    title: str = ""
    issuer: str | None = None
    year: str | None = None
    link: str | None = None


class EducationItem(_CamelModel):
    """A single education entry."""

    degree: str = ""
    school: str | None = None
    start: str | None = None
    end: str | None = None
    score: str | None = None


class SkillSet(_CamelModel):
    """Canonical skills shape: two ordered tag lists."""

    tech_tools: list[str] = Field(default_factory=list)
    soft_skills: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.tech_tools and not self.soft_skills


class ThemePreference(StrEnum):
    """Persisted colour theme choice."""

    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


# Section name -> item model, in form order.
SECTION_ITEM_TYPES: dict[str, type[_CamelModel]] = {
    "experience": ExperienceItem,
    "projects": ProjectItem,
    "certifications": CertificationItem,
    "education": EducationItem,
}

# Section name -> field that must be non-blank for an item to be shown.
REQUIRED_FIELDS: dict[str, str] = {
    "experience": "role",
    "projects": "name",
    "certifications": "title",
    "education": "degree",
}


def split_tags(raw: str) -> list[str]:
    """Split a comma-separated string into trimmed, non-empty tags."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def normalize_skills(raw: Any) -> SkillSet:
    """Return the canonical ``SkillSet`` for either stored skills shape.

    A legacy string becomes the tech/tools list; it has no way to carry soft
    skills, so that list is empty.

    Raises:
        TypeError: If *raw* is neither a mapping, a string nor ``None``.
    """
    if raw is None:
        return SkillSet()
    if isinstance(raw, SkillSet):
        return raw
    if isinstance(raw, str):
        return SkillSet(tech_tools=split_tags(raw))
    if isinstance(raw, dict):
        return SkillSet.model_validate(raw)
    msg = f"Unsupported skills value of type {type(raw).__name__}"
    raise TypeError(msg)


class ResumeDocument(_CamelModel):
    """The single aggregate holding everything the user typed in."""

    contact: ContactInfo = Field(default_factory=ContactInfo)
    about: str = ""
    experience: list[ExperienceItem] = Field(default_factory=list)
    projects: list[ProjectItem] = Field(default_factory=list)
    certifications: list[CertificationItem] = Field(default_factory=list)
    skills: SkillSet = Field(default_factory=SkillSet)
    education: list[EducationItem] = Field(default_factory=list)
    profile_image_data_url: str = ""
    certificates_link: str = ""

    @field_validator("skills", mode="before")
    @classmethod
    def _coerce_skills(cls, value: Any) -> Any:
        try:
            return normalize_skills(value)
        except TypeError as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def default(cls) -> ResumeDocument:
        """Return a document holding the hard-coded empty defaults."""
        return cls()

    @classmethod
    def from_json(cls, raw: str | bytes) -> ResumeDocument:
        """Parse a stored JSON blob (either skills shape accepted)."""
        return cls.model_validate_json(raw)

    def to_json(self) -> str:
        """Serialize to the canonical camelCase JSON blob."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def to_dict(self) -> dict[str, Any]:
        """Return the canonical camelCase mapping."""
        return self.model_dump(by_alias=True, exclude_none=True)
