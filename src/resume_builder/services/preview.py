"""Preview renderer.

``render_preview`` is a pure function from the resume document to a
read-only ``PreviewDocument``: a header plus the sections that have
something to show. Sections without content are omitted entirely, and list
entries whose required field is blank are filtered out of the preview (they
stay in the store so they remain editable).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from resume_builder.models import (
    REQUIRED_FIELDS,
    CertificationItem,
    EducationItem,
    ExperienceItem,
    ProjectItem,
    ResumeDocument,
)

__all__ = [
    "PreviewDocument",
    "PreviewEntry",
    "PreviewHeader",
    "PreviewLink",
    "PreviewSection",
    "PreviewTagGroup",
    "SECTION_TITLES",
    "mailto",
    "normalize_url",
    "render_preview",
    "tel",
]

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

SECTION_TITLES: dict[str, str] = {
    "about": "About Me",
    "skills": "Skills",
    "experience": "Work Experience",
    "projects": "Projects",
    "certifications": "Certifications",
    "education": "Education",
}


@dataclass(frozen=True)
class PreviewLink:
    label: str
    href: str


@dataclass(frozen=True)
class PreviewTagGroup:
    label: str
    tags: tuple[str, ...]


@dataclass(frozen=True)
class PreviewEntry:
    """One rendered list item: heading line, right-hand meta, links, body."""

    heading: str
    meta: str = ""
    links: tuple[PreviewLink, ...] = ()
    body: str = ""


@dataclass(frozen=True)
class PreviewSection:
    key: str
    title: str
    body: str = ""
    entries: tuple[PreviewEntry, ...] = ()
    tag_groups: tuple[PreviewTagGroup, ...] = ()
    links: tuple[PreviewLink, ...] = ()
    bulleted: bool = False


@dataclass(frozen=True)
class PreviewHeader:
    name: str | None = None
    image_data_url: str | None = None
    links: tuple[PreviewLink, ...] = ()


@dataclass(frozen=True)
class PreviewDocument:
    header: PreviewHeader = field(default_factory=PreviewHeader)
    sections: tuple[PreviewSection, ...] = ()

    def section(self, key: str) -> PreviewSection | None:
        return next((s for s in self.sections if s.key == key), None)

    def is_empty(self) -> bool:
        header = self.header
        return not (header.name or header.image_data_url or header.links or self.sections)


# ----------------------------------------------------------------------
# Link helpers


def normalize_url(raw: str | None) -> str | None:
    """Return an absolute URL for *raw*, or None when there is no link.

    ``example.com`` becomes ``https://example.com``; values that already
    carry an http(s) scheme are kept as typed.
    """
    if not raw:
        return None
    trimmed = raw.strip()
    if not trimmed:
        return None
    if _SCHEME_RE.match(trimmed):
        return trimmed
    return f"https://{trimmed}"


def mailto(email: str | None) -> str | None:
    email = (email or "").strip()
    return f"mailto:{email}" if email else None


def tel(phone: str | None) -> str | None:
    phone = (phone or "").strip()
    return f"tel:{phone}" if phone else None


def _link(label: str, href: str | None) -> tuple[PreviewLink, ...]:
    return (PreviewLink(label, href),) if href else ()


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _date_range(start: str | None, end: str | None) -> str:
    return " - ".join(part for part in (_clean(start), _clean(end)) if part)


def _has_required(section: str, item: object) -> bool:
    return bool(_clean(getattr(item, REQUIRED_FIELDS[section])))


# ----------------------------------------------------------------------
# Section builders


def _build_header(doc: ResumeDocument) -> PreviewHeader:
    contact = doc.contact
    email = _clean(contact.email)
    phone = _clean(contact.phone)
    links = (
        *_link(email, mailto(email)),
        *_link(phone, tel(phone)),
        *_link("LinkedIn", normalize_url(contact.linkedin)),
        *_link("GitHub", normalize_url(contact.github)),
        *_link("Portfolio", normalize_url(contact.website)),
    )
    return PreviewHeader(
        name=_clean(contact.full_name) or None,
        image_data_url=doc.profile_image_data_url or None,
        links=links,
    )


def _build_about(doc: ResumeDocument) -> PreviewSection | None:
    about = _clean(doc.about)
    if not about:
        return None
    return PreviewSection(key="about", title=SECTION_TITLES["about"], body=about)


def _build_skills(doc: ResumeDocument) -> PreviewSection | None:
    groups: list[PreviewTagGroup] = []
    tech = tuple(t for t in doc.skills.tech_tools if t.strip())
    soft = tuple(t for t in doc.skills.soft_skills if t.strip())
    if tech:
        groups.append(PreviewTagGroup("Tech & Tools", tech))
    if soft:
        groups.append(PreviewTagGroup("Soft Skills", soft))
    if not groups:
        return None
    return PreviewSection(key="skills", title=SECTION_TITLES["skills"], tag_groups=tuple(groups))


def _experience_entry(item: ExperienceItem) -> PreviewEntry:
    heading = _clean(item.role)
    if _clean(item.company):
        heading += f" | {_clean(item.company)}"
    if _clean(item.location):
        heading += f", {_clean(item.location)}"
    return PreviewEntry(
        heading=heading,
        meta=_date_range(item.start, item.end),
        body=_clean(item.description),
    )


def _project_entry(item: ProjectItem) -> PreviewEntry:
    links = (
        *_link("View Project / Live Link", normalize_url(item.link)),
        *_link("GitHub Repo", normalize_url(item.repo)),
    )
    return PreviewEntry(
        heading=_clean(item.name),
        meta=_clean(item.tech),
        links=links,
        body=_clean(item.description),
    )


def _certification_entry(item: CertificationItem) -> PreviewEntry:
    heading = _clean(item.title)
    if _clean(item.issuer):
        heading += f", {_clean(item.issuer)}"
    if _clean(item.year):
        heading += f" ({_clean(item.year)})"
    return PreviewEntry(heading=heading, links=_link("Certificate", normalize_url(item.link)))


def _education_entry(item: EducationItem) -> PreviewEntry:
    heading = _clean(item.degree)
    if _clean(item.school):
        heading += f" | {_clean(item.school)}"
    score = _clean(item.score)
    return PreviewEntry(
        heading=heading,
        meta=_date_range(item.start, item.end),
        body=f"Score: {score}" if score else "",
    )


_ENTRY_BUILDERS = {
    "experience": _experience_entry,
    "projects": _project_entry,
    "certifications": _certification_entry,
    "education": _education_entry,
}


def _build_list_section(doc: ResumeDocument, section: str) -> PreviewSection | None:
    items = [item for item in getattr(doc, section) if _has_required(section, item)]
    if not items:
        return None

    builder = _ENTRY_BUILDERS[section]
    links: tuple[PreviewLink, ...] = ()
    if section == "certifications":
        links = _link("View All Certificates", normalize_url(doc.certificates_link))

    return PreviewSection(
        key=section,
        title=SECTION_TITLES[section],
        entries=tuple(builder(item) for item in items),
        links=links,
        bulleted=section == "certifications",
    )


def render_preview(doc: ResumeDocument) -> PreviewDocument:
    """Derive the read-only preview from *doc*."""
    sections = (
        _build_about(doc),
        _build_skills(doc),
        _build_list_section(doc, "experience"),
        _build_list_section(doc, "projects"),
        _build_list_section(doc, "certifications"),
        _build_list_section(doc, "education"),
    )
    return PreviewDocument(
        header=_build_header(doc),
        sections=tuple(s for s in sections if s is not None),
    )
