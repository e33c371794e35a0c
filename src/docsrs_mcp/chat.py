"""Conversation flows: docs lookup, section follow-ups and crate info.

The flows talk to the chat side only through ``Transport``, which can
send a message with an optional button layout and edit a message it sent
earlier. ``MessageLog`` is the in-process transport used by the MCP
server.
"""

from datetime import UTC, datetime
from typing import Protocol

import httpx
from loguru import logger

from docsrs_mcp.models import NavigationKind
from docsrs_mcp.render import (
    ButtonLayout,
    crate_buttons,
    document_buttons,
    render_crate,
    render_document,
    render_section,
)
from docsrs_mcp.sessions import SessionStore, select_section
from docsrs_mcp.sources.crates import get_information
from docsrs_mcp.sources.resolver import resolve

DOCS_USAGE = (
    "<code>/docs [path]</code>\n"
    "Show online documentation with specified path in a crate.\n"
    "\n"
    "<code>[path]</code>: the path to the item"
)

CRATE_USAGE = (
    "<code>/crate [crate-name]</code>\n"
    "Show information of a crate.\n"
    "\n"
    "<code>[crate-name]</code>: the name of a crate"
)


def _quote(text: str) -> str:
    return text.replace("`", "\\`")


class Transport(Protocol):
    """Protocol for the chat side of a conversation."""

    async def send(
        self,
        conversation_id: str,
        text: str,
        buttons: ButtonLayout | None = None,
    ) -> int:
        """Send a message and return its id within the conversation."""
        ...

    async def edit(
        self,
        conversation_id: str,
        message_id: int,
        text: str,
        buttons: ButtonLayout | None = None,
    ) -> None:
        """Replace the text (and buttons) of a previously sent message."""
        ...


class MessageLog:
    """Transport that keeps messages in memory.

    Message ids are sequential per conversation, starting at 1.
    """

    def __init__(self):
        self._messages: dict[tuple[str, int], tuple[str, ButtonLayout]] = {}
        self._last_id: dict[str, int] = {}

    async def send(
        self,
        conversation_id: str,
        text: str,
        buttons: ButtonLayout | None = None,
    ) -> int:
        message_id = self._last_id.get(conversation_id, 0) + 1
        self._last_id[conversation_id] = message_id
        self._messages[(conversation_id, message_id)] = (text, buttons or [])
        return message_id

    async def edit(
        self,
        conversation_id: str,
        message_id: int,
        text: str,
        buttons: ButtonLayout | None = None,
    ) -> None:
        key = (conversation_id, message_id)
        if key not in self._messages:
            raise KeyError(f"Unknown message {message_id} in {conversation_id!r}")
        self._messages[key] = (text, buttons or [])

    def message(
        self, conversation_id: str, message_id: int
    ) -> tuple[str, ButtonLayout] | None:
        return self._messages.get((conversation_id, message_id))


class DocsConversation:
    """Docs lookups and their follow-up navigation for one transport."""

    def __init__(
        self,
        transport: Transport,
        sessions: SessionStore,
        client: httpx.AsyncClient,
    ):
        self.transport = transport
        self.sessions = sessions
        self.client = client

    async def lookup(self, conversation_id: str, path: str) -> int:
        """Resolve ``path`` and send the document as a navigable message.

        Returns the id of the message sent. A network failure is logged and
        answered with a generic failure message; the session store is only
        written after the document message was sent.
        """
        path = path.strip()
        if not path:
            return await self.transport.send(conversation_id, DOCS_USAGE)

        try:
            document = await resolve(path, self.client)
        except httpx.HTTPError as e:
            logger.error(f"Failed to get information with path `{path}`: {e}")
            return await self.transport.send(
                conversation_id,
                f"Error: failed to fetch documentation for `{_quote(path)}`",
            )

        if document is None:
            return await self.transport.send(
                conversation_id, f"Could not find `{_quote(path)}`"
            )

        logger.info(f"Docs {{ Path = {path} }}")
        message_id = await self.transport.send(
            conversation_id,
            render_document(document),
            document_buttons(document),
        )
        await self.sessions.put(
            conversation_id, message_id, document, NavigationKind.DOCS
        )
        return message_id

    async def follow_up(
        self, conversation_id: str, message_id: int, selector: str
    ) -> bool:
        """Render the section ``selector`` names into an earlier message.

        Returns False (and leaves the message untouched) when the message
        is not a docs message or the selector matches nothing.
        """
        entry = await self.sessions.get_entry(conversation_id, message_id)
        if entry is None or entry.kind is not NavigationKind.DOCS:
            logger.debug(f"No docs session for message {message_id}")
            return False

        document = entry.document
        selected = select_section(document, selector)
        if selected is None:
            logger.debug(f"Selector {selector!r} matches nothing in {document.path}")
            return False

        heading, section = selected
        logger.info(f"Docs {{ Title = {document.path}, Data = {selector} }}")
        await self.transport.edit(
            conversation_id,
            message_id,
            render_section(document, heading, section),
            document_buttons(document),
        )
        return True

    async def crate_information(self, conversation_id: str, name: str) -> int:
        """Send the crates.io summary of crate ``name``."""
        name = name.strip()
        if not name:
            return await self.transport.send(conversation_id, CRATE_USAGE)

        try:
            info = await get_information(name, self.client)
        except httpx.HTTPError as e:
            logger.error(f"Failed to get information of crate `{name}`: {e}")
            return await self.transport.send(
                conversation_id,
                f"Error: failed to fetch crate `{_quote(name)}`",
            )

        if info is None:
            return await self.transport.send(
                conversation_id, f"No crate `{_quote(name)}` has found"
            )

        logger.info(f"CrateInfo {{ Name = {name} }}")
        return await self.transport.send(
            conversation_id,
            render_crate(info, datetime.now(UTC)),
            crate_buttons(info),
        )
