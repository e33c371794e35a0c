"""Resolve an item path to a single documentation page.

A path such as ``serde::de::Deserialize`` does not say which kind of
entity it names. Every plausible reading (see ``candidates``) is fetched
and extracted concurrently; false readings come back as None cheaply, and
the first reading that produces a document wins. Outstanding candidates
are cancelled as soon as a winner is known.

If several candidates finish in the same wake-up with a document each,
the fixed shape priority (module, function, struct, trait, method,
trait method) breaks the tie.

Transport failures are not "not found": the first one aborts the whole
resolution and propagates to the caller.
"""

import asyncio

import httpx
from loguru import logger

from docsrs_mcp.models import (
    Candidate,
    DocumentationOrigin,
    ExtractedDocument,
    parse_path,
)
from docsrs_mcp.sources.candidates import candidates_for
from docsrs_mcp.sources.extractor import extract
from docsrs_mcp.sources.fetcher import fetch_page
from docsrs_mcp.sources.origin import locate


async def try_candidate(
    client: httpx.AsyncClient,
    origin: DocumentationOrigin,
    candidate: Candidate,
) -> ExtractedDocument | None:
    """Fetch and extract one candidate; None when it does not exist."""
    html = await fetch_page(client, origin, candidate)
    if html is None:
        return None
    return extract(html, candidate)


async def _cancel_all(tasks: set[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)


async def first_match(
    client: httpx.AsyncClient,
    origin: DocumentationOrigin,
    candidates: list[Candidate],
) -> ExtractedDocument | None:
    """Race all candidates and return the winning document, if any."""
    tasks = {
        asyncio.create_task(
            try_candidate(client, origin, candidate),
            name=f"candidate:{candidate.shape}",
        ): candidate
        for candidate in candidates
    }
    pending = set(tasks)
    logger.debug(
        f"CandidatesDispatched: {', '.join(c.shape for c in candidates)}"
    )

    try:
        while pending:
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_COMPLETED
            )
            errors = [task.exception() for task in done if task.exception()]
            if errors:
                raise errors[0]
            found = [
                (tasks[task].shape.priority, task.result())
                for task in done
                if task.result() is not None
            ]
            if found:
                _, winner = min(found, key=lambda pair: pair[0])
                logger.debug(f"FirstMatchFound: {winner.shape} {winner.path}")
                return winner
    finally:
        await _cancel_all(pending)

    logger.debug("AllExhausted")
    return None


async def resolve(path: str, client: httpx.AsyncClient) -> ExtractedDocument | None:
    """Resolve ``path`` to a document, or None if nothing matches.

    Raises:
        httpx.HTTPError: on any transport failure while resolving.
    """
    segments = parse_path(path)
    if not segments:
        return None

    logger.debug(f"Started: {path}")
    origin = await locate(segments[0], client)
    if origin is None:
        logger.debug(f"No documentation origin for crate {segments[0]}")
        return None
    logger.debug(f"OriginResolved: {origin.base_url}")

    return await first_match(client, origin, candidates_for(segments))
