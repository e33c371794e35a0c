"""Locate the documentation root of a crate.

Built-in crates (std, core, ...) are served from doc.rust-lang.org and
need no network access. Every other crate is looked up on docs.rs, whose
``/{crate}`` URL answers with a ``302`` pointing at the latest build,
e.g. ``https://docs.rs/serde/1.0.210/serde/``.
"""

from urllib.parse import urljoin

import httpx
from loguru import logger

from docsrs_mcp.config import settings
from docsrs_mcp.models import DocumentationOrigin
from docsrs_mcp.security import is_safe_url


def builtin_origin(crate_name: str) -> DocumentationOrigin | None:
    """Return the static origin of a built-in crate, if it is one."""
    if crate_name not in settings.get_std_crates():
        return None
    return DocumentationOrigin(settings.std_docs_url.format(crate=crate_name))


async def locate(
    crate_name: str, client: httpx.AsyncClient
) -> DocumentationOrigin | None:
    """Resolve the documentation origin of ``crate_name``.

    Returns None when the crate is unknown to the docs host. Transport
    errors are propagated to the caller.
    """
    origin = builtin_origin(crate_name)
    if origin:
        logger.debug(f"Using built-in docs for {crate_name}: {origin.base_url}")
        return origin

    url = f"{settings.get_docs_host()}/{crate_name}"
    resp = await client.get(url, follow_redirects=False)
    if resp.status_code != httpx.codes.FOUND:
        logger.debug(f"No docs for crate {crate_name} (HTTP {resp.status_code})")
        return None

    location = resp.headers.get("location")
    if not location:
        logger.warning(f"Redirect without Location for {url}")
        return None

    # docs.rs answers with a host-relative Location
    location = urljoin(url, location)
    if not is_safe_url(location):
        return None
    if not location.endswith("/"):
        location += "/"

    logger.debug(f"Docs origin for {crate_name}: {location}")
    return DocumentationOrigin(location)
