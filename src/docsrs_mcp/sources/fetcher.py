"""Build candidate page URLs and fetch them.

A non-success status means "this candidate does not exist here" and is
reported as None, never raised. This keeps speculative fetching cheap:
false candidates are discarded without disturbing the others. Transport
errors (DNS, connection, TLS, timeout) are not masked.
"""

import httpx
from loguru import logger

from docsrs_mcp.models import Candidate, DocumentationOrigin, Shape

_PAGE_PREFIX: dict[Shape, str] = {
    Shape.FUNCTION: "fn",
    Shape.STRUCT: "struct",
    Shape.TRAIT: "trait",
    Shape.METHOD: "struct",
    Shape.TRAIT_METHOD: "trait",
}

_ANCHOR_PREFIX: dict[Shape, str] = {
    Shape.METHOD: "method",
    Shape.TRAIT_METHOD: "tymethod",
}


def page_path(candidate: Candidate) -> str:
    """Path of the candidate's page relative to the documentation origin.

    The first module segment is the crate itself, which the origin
    already points into.
    """
    tree = "".join(f"{segment}/" for segment in candidate.module_path[1:])
    match candidate.shape:
        case Shape.MODULE:
            return f"{tree}index.html"
        case Shape.METHOD | Shape.TRAIT_METHOD:
            return f"{tree}{_PAGE_PREFIX[candidate.shape]}.{candidate.owner}.html"
        case _:
            return f"{tree}{_PAGE_PREFIX[candidate.shape]}.{candidate.name}.html"


def page_url(origin: DocumentationOrigin, candidate: Candidate) -> str:
    """Absolute URL of the candidate, with the member anchor for methods."""
    url = f"{origin.base_url}{page_path(candidate)}"
    anchor = _ANCHOR_PREFIX.get(candidate.shape)
    if anchor:
        url += f"#{anchor}.{candidate.name}"
    return url


async def fetch_page(
    client: httpx.AsyncClient,
    origin: DocumentationOrigin,
    candidate: Candidate,
) -> str | None:
    """Fetch the candidate's page HTML, or None if it does not exist."""
    url = f"{origin.base_url}{page_path(candidate)}"
    resp = await client.get(url)
    if not resp.is_success:
        logger.debug(
            f"Candidate {candidate.shape} absent at {page_url(origin, candidate)} "
            f"(HTTP {resp.status_code})"
        )
        return None
    return resp.text
