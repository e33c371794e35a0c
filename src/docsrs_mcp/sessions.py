"""In-memory navigation sessions for rendered documentation messages.

Maps ``(conversation_id, message_id)`` to the document shown in that
message, so a later follow-up can render one of its sections without
fetching anything again.

Entries expire after a TTL and the store keeps at most ``max_entries``,
evicting the least recently used. Expired entries are purged
periodically on write.
"""

import asyncio
import time
from collections import OrderedDict

from loguru import logger

from docsrs_mcp.models import (
    ExtractedDocument,
    Listing,
    NavigationKind,
    Section,
    SessionEntry,
)

# Purge expired entries every N writes
_PURGE_INTERVAL = 50

SessionKey = tuple[str, int]


class SessionStore:
    """TTL + LRU bounded store of navigable documents."""

    def __init__(self, ttl: int = 3600, max_entries: int = 1024):
        self._ttl = ttl
        self._max_entries = max(1, max_entries)
        self._entries: OrderedDict[SessionKey, tuple[SessionEntry, float]] = (
            OrderedDict()
        )
        self._lock = asyncio.Lock()
        self._op_count = 0

    def _expires_at(self, now: float) -> float:
        return now + self._ttl if self._ttl > 0 else float("inf")

    async def put(
        self,
        conversation_id: str,
        message_id: int,
        document: ExtractedDocument,
        kind: NavigationKind = NavigationKind.DOCS,
    ) -> None:
        """Remember ``document`` for a message, replacing any previous entry."""
        key = (conversation_id, message_id)
        now = time.monotonic()
        async with self._lock:
            self._entries[key] = (SessionEntry(document, kind), self._expires_at(now))
            self._entries.move_to_end(key)

            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Session evicted: {evicted}")

            self._op_count += 1
            if self._op_count >= _PURGE_INTERVAL:
                self._purge_expired(now)
                self._op_count = 0

    async def get_entry(
        self, conversation_id: str, message_id: int
    ) -> SessionEntry | None:
        key = (conversation_id, message_id)
        now = time.monotonic()
        async with self._lock:
            stored = self._entries.get(key)
            if stored is None:
                return None
            entry, expires_at = stored
            if expires_at <= now:
                del self._entries[key]
                logger.debug(f"Session expired: {key}")
                return None
            self._entries.move_to_end(key)
            return entry

    async def get(
        self, conversation_id: str, message_id: int
    ) -> ExtractedDocument | None:
        """Get the document shown in a message, if it is still navigable."""
        entry = await self.get_entry(conversation_id, message_id)
        return entry.document if entry else None

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, exp) in self._entries.items() if exp <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired sessions")

    async def active_count(self) -> int:
        """Number of entries still navigable, purging expired ones first."""
        async with self._lock:
            self._purge_expired(time.monotonic())
            return len(self._entries)

    def __len__(self) -> int:
        """Stored entries, including expired ones not purged yet."""
        return len(self._entries)


def select_section(
    document: ExtractedDocument, selector: str
) -> tuple[str, Section] | None:
    """Map a follow-up selector to the part of ``document`` it names.

    Named keys route to the shape's promoted listings and take precedence
    over generic sections; a decimal selector indexes the generic
    sections. Anything else selects nothing.
    """
    if selector in document.listings:
        heading, items = document.listings[selector]
        return heading, Listing(items)
    if selector.isdecimal():
        index = int(selector)
        if index < len(document.sections):
            return document.sections[index]
    return None
