"""crates.io registry metadata for a single crate."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

import httpx
from loguru import logger

from docsrs_mcp.config import settings


@dataclass
class CrateOwner:
    url: str
    name: str | None = None


@dataclass
class CrateInformation:
    name: str
    newest_version: str
    description: str
    created_at: datetime
    updated_at: datetime
    downloads: int = 0
    recent_downloads: int = 0
    crate_size: int = 0
    license: str | None = None
    homepage: str | None = None
    documentation: str | None = None
    repository: str | None = None
    owners: list[CrateOwner] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    dependency_count: int = 0
    dev_dependency_count: int = 0


def _parse_time(value: str) -> datetime:
    # crates.io timestamps look like 2024-09-06T18:11:41.135470+00:00
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def get_information(
    name: str, client: httpx.AsyncClient
) -> CrateInformation | None:
    """Query crates.io for a crate summary, its owners and dependencies.

    Returns None when the crate does not exist. Transport errors propagate.
    """
    api = settings.crates_api_url.rstrip("/")
    summary_resp, owner_resp = await asyncio.gather(
        client.get(f"{api}/crates/{name}"),
        client.get(f"{api}/crates/{name}/owner_user"),
    )
    if summary_resp.is_client_error or owner_resp.is_client_error:
        logger.debug(
            f"crates.io has no crate {name} "
            f"(HTTP {summary_resp.status_code}/{owner_resp.status_code})"
        )
        return None
    summary_resp.raise_for_status()
    owner_resp.raise_for_status()

    data = summary_resp.json()
    crate = data.get("crate", {})
    newest = crate.get("newest_version") or crate.get("max_version", "")
    version = next(
        (v for v in data.get("versions") or [] if v.get("num") == newest), None
    )
    if version is None:
        logger.debug(f"crates.io lists no version {newest!r} for {name}")
        return None

    deps_resp = await client.get(f"{api}/crates/{name}/{newest}/dependencies")
    deps_resp.raise_for_status()
    dependencies = deps_resp.json().get("dependencies", [])

    return CrateInformation(
        name=crate.get("name", name),
        newest_version=newest,
        description=crate.get("description") or "",
        created_at=_parse_time(crate["created_at"]),
        updated_at=_parse_time(crate["updated_at"]),
        downloads=crate.get("downloads") or 0,
        recent_downloads=crate.get("recent_downloads") or 0,
        crate_size=version.get("crate_size") or 0,
        license=version.get("license"),
        homepage=crate.get("homepage"),
        documentation=crate.get("documentation"),
        repository=crate.get("repository"),
        owners=[
            CrateOwner(url=user.get("url", ""), name=user.get("name"))
            for user in owner_resp.json().get("users", [])
        ],
        keywords=[k["keyword"] for k in data.get("keywords") or []],
        categories=[c["category"] for c in data.get("categories") or []],
        dependency_count=len(dependencies),
        dev_dependency_count=sum(1 for d in dependencies if d.get("kind") == "dev"),
    )
