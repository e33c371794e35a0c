"""Turn a rustdoc page into an ExtractedDocument.

One extraction routine serves all six shapes; a small per-shape
``ShapeProfile`` says which promoted listings to collect and whether the
document is the whole page or a single member found by its anchor id.

A page is read as:

- the item declaration (``pre.item-decl``), reflowed into a code block;
- the item-info block with portability/stability/deprecation markers;
- the top-level docblock, split into a leading description and headed
  sections;
- the promoted listings (module item tables, methods, impls, implementors).

Methods share their owner's page. They are located by the exact anchor
id (``method.x`` / ``tymethod.x``); a missing anchor means the candidate
does not exist, even though the page itself was found.

Markup that does not look like rustdoc output yields None rather than
an error.
"""

import copy
import html as htmllib
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag
from loguru import logger

from docsrs_mcp.models import (
    Candidate,
    ExtractedDocument,
    Prose,
    Section,
    Shape,
    SubDocumentSummary,
)

_ROOT = "#main-content, #main"
_DEFINITION = "pre.item-decl, .item-decl pre"
_PAGE_INFO = ":scope > .item-info, :scope > .stability"
_PAGE_DOCBLOCK = (
    ":scope > details.top-doc > .docblock, :scope > .docblock:not(.type-decl)"
)

_INFO_CLASSES = frozenset({"item-info", "stability"})
_HEADINGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_PROSE_TAGS = frozenset({"p", "ul", "ol", "blockquote"})
_CODE_TAGS = frozenset({"div", "pre"})
_DOC_ANCHORS = "a.doc-anchor, a.anchor"

CODE_TEMPLATE = '<pre><code class="language-rust">{}</code></pre>'


@dataclass(frozen=True)
class ListingSpec:
    """A listing promoted out of the page into ``ExtractedDocument.listings``.

    ``member_rows`` rows are method/impl anchors whose notes and summary
    live in the adjacent blocks; other rows are item-table entries.
    """

    key: str
    heading: str
    selector: str
    member_rows: bool = False


@dataclass(frozen=True)
class ShapeProfile:
    member_anchors: tuple[str, ...] = ()
    has_definition: bool = True
    keep_sections: bool = True
    listings: tuple[ListingSpec, ...] = field(default_factory=tuple)


def _item_table(*ids: str) -> str:
    rows = []
    for anchor in ids:
        rows += [
            f"#{anchor} + .item-table > li",
            f"#{anchor} + .item-table > dt",
            f"#{anchor} + .item-table > .item-row",
            f"#{anchor} + table tr",
        ]
    return ", ".join(rows)


_MODULE_LISTINGS = (
    ListingSpec("modules", "Modules", _item_table("modules")),
    ListingSpec("structs", "Structs", _item_table("structs")),
    ListingSpec("traits", "Traits", _item_table("traits")),
    ListingSpec("enums", "Enums", _item_table("enums")),
    ListingSpec("macros", "Macros", _item_table("macros")),
    ListingSpec("functions", "Functions", _item_table("functions")),
    ListingSpec("attributes", "Attribute Macros", _item_table("attributes")),
    ListingSpec("constants", "Constants", _item_table("constants", "consts")),
)

_STRUCT_LISTINGS = (
    ListingSpec(
        "methods",
        "Methods",
        "#implementations-list section.method",
        member_rows=True,
    ),
    ListingSpec(
        "implementations",
        "Implementations",
        "#trait-implementations-list section.impl, "
        "#synthetic-implementations-list section.impl, "
        "#blanket-implementations-list section.impl",
        member_rows=True,
    ),
)

_TRAIT_LISTINGS = (
    ListingSpec(
        "required_methods",
        "Required Methods",
        "#required-methods + .methods section.method",
        member_rows=True,
    ),
    ListingSpec(
        "provided_methods",
        "Provided Methods",
        "#provided-methods + .methods section.method",
        member_rows=True,
    ),
    ListingSpec(
        "implementations",
        "Implementations on Foreign Types",
        "#foreign-impls ~ details > summary > section.impl, "
        "#foreign-impls ~ section.impl",
        member_rows=True,
    ),
    ListingSpec(
        "implementors",
        "Implementors",
        "#implementors-list section.impl, #synthetic-implementors-list section.impl",
        member_rows=True,
    ),
)

PROFILES: dict[Shape, ShapeProfile] = {
    Shape.MODULE: ShapeProfile(
        has_definition=False, keep_sections=False, listings=_MODULE_LISTINGS
    ),
    Shape.FUNCTION: ShapeProfile(),
    Shape.STRUCT: ShapeProfile(listings=_STRUCT_LISTINGS),
    Shape.TRAIT: ShapeProfile(listings=_TRAIT_LISTINGS),
    Shape.METHOD: ShapeProfile(member_anchors=("method",)),
    Shape.TRAIT_METHOD: ShapeProfile(member_anchors=("tymethod", "method")),
}


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _text(element: Tag) -> str:
    """Element text with whitespace runs collapsed."""
    return " ".join(element.get_text().split())


def _has_class(element: Tag, classes: frozenset[str]) -> bool:
    return bool(classes.intersection(element.get("class") or ()))


def wrap_code(text: str) -> str:
    return CODE_TEMPLATE.format(htmllib.escape(text, quote=False))


def code_block(element: Tag) -> str:
    """Render a declaration as a code block.

    A line break is inserted before every ``where`` token and before every
    text fragment that starts with whitespace, so declarations break at
    the same places whatever the source indentation was.
    """
    parts: list[str] = []
    for token in element.strings:
        if token == "where" or token[:1].isspace():
            parts.append("\n")
        parts.append(token)
    return wrap_code("".join(parts))


def clean_html(element: Tag) -> str:
    """Inner HTML of ``element`` with relative links reduced to their text.

    In-page and crate-relative links cannot be followed outside the docs
    site, so only absolute http(s) links survive.
    """
    fragment = copy.copy(element)
    for link in fragment.find_all("a"):
        href = link.get("href") or ""
        if not href.startswith(("http://", "https://")):
            link.unwrap()
    return fragment.decode_contents().strip()


def _heading_text(heading: Tag) -> str:
    heading = copy.copy(heading)
    for anchor in heading.select(_DOC_ANCHORS):
        anchor.decompose()
    return _text(heading)


def _paragraph(element: Tag) -> str | None:
    if element.name in _PROSE_TAGS:
        return clean_html(element)
    if element.name in _CODE_TAGS:
        pre = element if element.name == "pre" else element.find("pre")
        if pre is None:
            # Warning boxes and similar wrappers around prose
            return clean_html(element)
        return wrap_code(pre.get_text().strip("\n"))
    return None


def split_docblock(docblock: Tag | None) -> tuple[str, list[tuple[str, Section]]]:
    """Split a docblock into its leading description and headed sections.

    Children are read back to front: paragraphs accumulate until a heading
    is met, which then owns everything buffered since. Whatever is left
    when the walk ends precedes the first heading and is the description.
    """
    if docblock is None:
        return "", []

    sections: list[tuple[str, Section]] = []
    buffer: list[str] = []
    for child in reversed(docblock.find_all(recursive=False)):
        if child.name in _HEADINGS:
            buffer.reverse()
            sections.append((_heading_text(child), Prose("\n".join(buffer))))
            buffer.clear()
        else:
            text = _paragraph(child)
            if text:
                buffer.append(text)
    buffer.reverse()
    sections.reverse()
    return "\n".join(buffer), sections


# ---------------------------------------------------------------------------
# Notes and listing rows
# ---------------------------------------------------------------------------


def _notes(*scopes: Tag | None) -> tuple[str | None, str | None, bool]:
    """Read (portability, stability, deprecated) markers from ``scopes``."""
    portability = stability = None
    deprecated = False
    for scope in scopes:
        if scope is None:
            continue
        if portability is None and (found := scope.select_one(".portability")):
            portability = _text(found)
        if stability is None and (found := scope.select_one(".unstable")):
            stability = _text(found)
        deprecated = deprecated or scope.select_one(".deprecated") is not None
    return portability, stability, deprecated


def _member_blocks(anchor: Tag) -> tuple[Tag | None, Tag | None]:
    """Find the item-info block and docblock that follow a member anchor.

    Current rustdoc wraps documented members in ``<details><summary>``, so
    the docblock is a sibling of the summary rather than of the anchor.
    """
    following = anchor.find_next_siblings()
    if anchor.parent is not None and anchor.parent.name == "summary":
        following += anchor.parent.find_next_siblings()

    blocks = iter(following)
    block = next(blocks, None)
    info = None
    if block is not None and _has_class(block, _INFO_CLASSES):
        info = block
        block = next(blocks, None)
    if block is not None and _has_class(block, frozenset({"docblock"})):
        return info, block
    return info, None


def _member_header(anchor: Tag) -> Tag:
    return anchor.select_one(".code-header") or anchor.find("code") or anchor


def _summarize_member(anchor: Tag) -> SubDocumentSummary:
    info, docblock = _member_blocks(anchor)
    portability, stability, deprecated = _notes(info)
    summary = None
    if docblock is not None and (first := docblock.find("p")) is not None:
        summary = clean_html(first) or None
    return SubDocumentSummary(
        name=_text(_member_header(anchor)),
        deprecated=deprecated,
        portability_note=portability,
        stability_note=stability,
        summary=summary,
    )


def _summarize_row(row: Tag) -> SubDocumentSummary:
    link = row.find("a")
    name = _text(link if link is not None else row)

    description = row.select_one(".docblock-short")
    if description is None and row.name == "dt":
        sibling = row.find_next_sibling()
        if sibling is not None and sibling.name == "dd":
            description = sibling

    portability, stability, deprecated = _notes(row, description)
    summary = clean_html(description) if description is not None else None
    return SubDocumentSummary(
        name=name,
        deprecated=deprecated,
        portability_note=portability,
        stability_note=stability,
        summary=summary or None,
    )


def _collect_listings(
    root: Tag, profile: ShapeProfile
) -> dict[str, tuple[str, list[SubDocumentSummary]]]:
    listings: dict[str, tuple[str, list[SubDocumentSummary]]] = {}
    for spec in profile.listings:
        summarize = _summarize_member if spec.member_rows else _summarize_row
        items = [summarize(row) for row in root.select(spec.selector)]
        items = [item for item in items if item.name]
        if items:
            listings[spec.key] = (spec.heading, items)
    return listings


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _extract_page(
    root: Tag, candidate: Candidate, profile: ShapeProfile
) -> ExtractedDocument:
    definition = None
    if profile.has_definition:
        decl = root.select_one(_DEFINITION)
        if decl is not None:
            definition = code_block(decl)

    portability, stability, deprecated = _notes(root.select_one(_PAGE_INFO))
    description, sections = split_docblock(root.select_one(_PAGE_DOCBLOCK))

    return ExtractedDocument(
        shape=candidate.shape,
        path=candidate.path,
        definition=definition,
        portability_note=portability,
        stability_note=stability,
        deprecated=deprecated,
        description=description,
        sections=sections if profile.keep_sections else [],
        listings=_collect_listings(root, profile),
    )


def _extract_member(
    root: Tag, candidate: Candidate, profile: ShapeProfile
) -> ExtractedDocument | None:
    anchor = None
    for prefix in profile.member_anchors:
        anchor = root.find(id=f"{prefix}.{candidate.name}")
        if anchor is not None:
            break
    if anchor is None:
        logger.debug(f"No member anchor for {candidate.path} ({candidate.shape})")
        return None

    info, docblock = _member_blocks(anchor)
    portability, stability, deprecated = _notes(info)
    description, sections = split_docblock(docblock)

    return ExtractedDocument(
        shape=candidate.shape,
        path=candidate.path,
        definition=code_block(_member_header(anchor)),
        portability_note=portability,
        stability_note=stability,
        deprecated=deprecated,
        description=description,
        sections=sections,
    )


def extract(html: str, candidate: Candidate) -> ExtractedDocument | None:
    """Extract the document ``candidate`` denotes from a fetched page.

    Returns None when the page is not rustdoc output or when the member
    anchor a method candidate depends on is missing.
    """
    profile = PROFILES[candidate.shape]
    soup = BeautifulSoup(html, "html.parser")
    root = soup.select_one(_ROOT)
    if root is None:
        logger.debug(f"No rustdoc content root on page for {candidate.path}")
        return None
    if profile.member_anchors:
        return _extract_member(root, candidate, profile)
    return _extract_page(root, candidate, profile)
