"""Data model shared by the resolver, the extractor and the session store."""

from dataclasses import dataclass, field
from enum import StrEnum

PATH_SEPARATOR = "::"


class Shape(StrEnum):
    """Kinds of rustdoc entity a path may denote.

    Declaration order is the tie-break priority used by the resolver.
    """

    MODULE = "module"
    FUNCTION = "function"
    STRUCT = "struct"
    TRAIT = "trait"
    METHOD = "method"
    TRAIT_METHOD = "trait_method"

    @property
    def priority(self) -> int:
        return list(Shape).index(self)


class NavigationKind(StrEnum):
    """Tags which interactive flow owns a rendered message."""

    DOCS = "docs"


def parse_path(path: str) -> list[str]:
    """Split an item path like ``serde::de::Deserialize`` into segments.

    Empty segments are dropped, so ``"std::"`` and ``" std "`` both
    yield ``["std"]`` and an empty input yields ``[]``.
    """
    return [seg.strip() for seg in path.split(PATH_SEPARATOR) if seg.strip()]


@dataclass(frozen=True)
class DocumentationOrigin:
    """Root URL of a crate's generated documentation (always ends with ``/``)."""

    base_url: str


@dataclass(frozen=True)
class Candidate:
    """A speculative reading of a path as one entity shape."""

    shape: Shape
    module_path: tuple[str, ...]
    name: str | None = None
    owner: str | None = None

    @property
    def path(self) -> str:
        parts = list(self.module_path)
        if self.owner is not None:
            parts.append(self.owner)
        if self.name is not None:
            parts.append(self.name)
        return PATH_SEPARATOR.join(parts)


@dataclass
class SubDocumentSummary:
    """One row of a listing section."""

    name: str
    deprecated: bool = False
    portability_note: str | None = None
    stability_note: str | None = None
    summary: str | None = None


@dataclass
class Prose:
    text: str


@dataclass
class Listing:
    items: list[SubDocumentSummary]


Section = Prose | Listing


@dataclass
class ExtractedDocument:
    """Structured content of one documentation page or in-page member.

    ``sections`` holds the generic headed sections in page order.
    ``listings`` holds the shape's promoted listings keyed by their fixed
    selector key, each as ``(heading, items)``; empty listings are omitted.
    """

    shape: Shape
    path: str
    definition: str | None = None
    portability_note: str | None = None
    stability_note: str | None = None
    deprecated: bool = False
    description: str = ""
    sections: list[tuple[str, Section]] = field(default_factory=list)
    listings: dict[str, tuple[str, list[SubDocumentSummary]]] = field(
        default_factory=dict
    )


@dataclass
class SessionEntry:
    document: ExtractedDocument
    kind: NavigationKind = NavigationKind.DOCS
