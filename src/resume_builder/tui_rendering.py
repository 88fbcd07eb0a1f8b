from __future__ import annotations

from resume_builder.services.preview import PreviewDocument, PreviewLink, PreviewSection

EMPTY_PREVIEW_HINT = "_Start filling in the form to see your resume here._"


def _escape(text: str) -> str:
    # Keep user text from being read as Markdown emphasis or links.
    for ch in ("\\", "*", "_", "[", "]", "`"):
        text = text.replace(ch, f"\\{ch}")
    return text


def _render_links(links: tuple[PreviewLink, ...]) -> str:
    return " · ".join(f"[{_escape(link.label)}]({link.href})" for link in links)


def _render_section(section: PreviewSection) -> list[str]:
    parts: list[str] = [f"\n## {section.title}"]

    if section.body:
        parts.append(_escape(section.body))

    for group in section.tag_groups:
        parts.append(f"**{group.label}**: " + ", ".join(_escape(t) for t in group.tags))

    if section.links:
        parts.append(_render_links(section.links))

    for entry in section.entries:
        line = f"**{_escape(entry.heading)}**"
        if entry.meta:
            line += f"  _{_escape(entry.meta)}_"
        if entry.links:
            line += "  " + _render_links(entry.links)
        if section.bulleted:
            parts.append(f"- {line}")
            continue
        parts.append(line)
        if entry.body:
            parts.append(_escape(entry.body))
        parts.append("")

    return parts


def render_preview_markdown(preview: PreviewDocument) -> str:
    if preview.is_empty():
        return EMPTY_PREVIEW_HINT

    parts: list[str] = []
    header = preview.header
    if header.name:
        parts.append(f"# {_escape(header.name)}")
    if header.image_data_url:
        parts.append("_(profile image attached)_")
    if header.links:
        parts.append(_render_links(header.links))

    for section in preview.sections:
        parts.extend(_render_section(section))

    return "\n".join(parts).strip() + "\n"
