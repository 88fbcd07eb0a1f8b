"""Domain models for the resume builder."""

from resume_builder.models.resume_document import (
    REQUIRED_FIELDS,
    SECTION_ITEM_TYPES,
    CertificationItem,
    ContactInfo,
    EducationItem,
    ExperienceItem,
    ProjectItem,
    ResumeDocument,
    SkillSet,
    ThemePreference,
    normalize_skills,
    split_tags,
)

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
