"""Render documents and crate information as chat-flavoured HTML.

The output uses the small tag set chat clients accept (``b``, ``i``,
``code``, ``pre``, ``a``). Button layouts are rows of ``Button``; a
button's ``data`` is the selector sent back by a follow-up.
"""

import html
from dataclasses import dataclass
from datetime import datetime, timedelta

from docsrs_mcp.models import ExtractedDocument, Listing, Prose, Section
from docsrs_mcp.sources.crates import CrateInformation


@dataclass(frozen=True)
class Button:
    label: str
    data: str | None = None
    url: str | None = None


ButtonLayout = list[list[Button]]


def escape(text: str) -> str:
    return html.escape(text, quote=False)


def size_humanize(number: int) -> str:
    """Format a count or byte size like ``1.2M``."""
    if number >= 1_000_000_000:
        return f"{number / 1e9:.1f}G"
    if number >= 1_000_000:
        return f"{number / 1e6:.1f}M"
    if number > 1_000:
        return f"{number / 1e3:.1f}k"
    return str(number)


_UNITS = (
    ("year", 365 * 86400),
    ("month", 30 * 86400),
    ("week", 7 * 86400),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)


def humanize_elapsed(delta: timedelta) -> str:
    """Describe a past time span, e.g. ``3 days ago``."""
    seconds = int(delta.total_seconds())
    for unit, size in _UNITS:
        count = seconds // size
        if count >= 1:
            return f"{count} {unit}{'s' if count > 1 else ''} ago"
    return "now"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def _header(document: ExtractedDocument) -> str:
    parts = [f"<b>{escape(document.path)}</b>"]
    if document.deprecated:
        parts.append(" <b>Deprecated</b>")
    if document.portability_note:
        parts.append(f"\n<i>{escape(document.portability_note)}</i>")
    if document.stability_note:
        parts.append(f"\n<i>{escape(document.stability_note)}</i>")
    if document.definition:
        parts.append(f"\n{document.definition}")
    return "".join(parts)


def render_section_body(section: Section) -> str:
    match section:
        case Prose(text=text):
            return text
        case Listing(items=items):
            lines = []
            for item in items:
                line = f"<code>{escape(item.name)}</code>"
                if item.deprecated:
                    line += " <b>Deprecated</b>"
                if item.portability_note:
                    line += f"\n<i>{escape(item.portability_note)}</i>"
                if item.stability_note:
                    line += f"\n<i>{escape(item.stability_note)}</i>"
                if item.summary:
                    line += f"\n{item.summary}"
                lines.append(line + "\n")
            return "".join(lines)
    raise TypeError(f"Unknown section type: {type(section).__name__}")


def render_document(document: ExtractedDocument) -> str:
    """Initial message for a resolved document."""
    return f"{_header(document)}\n\n{document.description}"


def render_section(document: ExtractedDocument, heading: str, section: Section) -> str:
    """Message for a document after a section was selected."""
    return (
        f"{_header(document)}\n\n"
        f"<b>{escape(heading)}</b>\n"
        f"{render_section_body(section)}\n"
    )


def document_buttons(document: ExtractedDocument) -> ButtonLayout:
    """One button per generic section, then one per promoted listing."""
    rows = [
        [Button(heading, str(index))]
        for index, (heading, _) in enumerate(document.sections)
    ]
    rows += [
        [Button(heading, key)] for key, (heading, _) in document.listings.items()
    ]
    return rows


# ---------------------------------------------------------------------------
# Crate information
# ---------------------------------------------------------------------------


def render_crate(info: CrateInformation, now: datetime) -> str:
    if info.owners:
        primary, *others = info.owners
        authors = f'<a href="{html.escape(primary.url)}">{escape(primary.name or "<anonymous>")}</a>'
        if others:
            authors += f" and {len(others)} others"
    else:
        authors = "&lt;anonymous&gt;"

    license_text = f"{info.license} License" if info.license else "No License"
    keywords = (
        f"\n\n<b>Keywords</b>\n<i>{escape(', '.join(info.keywords))}</i>"
        if info.keywords
        else ""
    )
    categories = (
        f"\n\n<b>Categories</b>\n<i>{escape(chr(10).join(info.categories))}</i>"
        if info.categories
        else ""
    )

    return (
        f"<b>{escape(info.name)}</b> <i>{escape(info.newest_version)}</i> "
        f"({size_humanize(info.crate_size)}B) by {authors}\n"
        f"{escape(license_text)}\n"
        "\n"
        f"{escape(info.description)}{keywords}{categories}\n"
        "\n"
        f"⬇️{size_humanize(info.recent_downloads)} downloads recently "
        f"({size_humanize(info.downloads)} total)\n"
        f"📊{info.dependency_count} dependencies "
        f"({info.dev_dependency_count} for dev)\n"
        f"🕒 updated at {info.updated_at:%Y-%m-%d %Z} "
        f"({humanize_elapsed(now - info.updated_at)})\n"
        f"🕒 created at {info.created_at:%Y-%m-%d %Z} "
        f"({humanize_elapsed(now - info.created_at)})"
    )


def crate_buttons(info: CrateInformation) -> ButtonLayout:
    row = []
    if info.homepage:
        row.append(Button("🏠 Home", url=info.homepage))
    row.append(Button("📚 Docs", url=info.documentation or f"https://docs.rs/{info.name}"))
    if info.repository:
        row.append(Button("📂 Repo", url=info.repository))
    return [row]
