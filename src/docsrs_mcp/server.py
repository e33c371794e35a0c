"""docsrs MCP Server - Main server definition."""

import asyncio
import functools
import json
import sys
from contextlib import asynccontextmanager
from importlib.resources import files

import httpx
from loguru import logger
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from docsrs_mcp.chat import DocsConversation, MessageLog
from docsrs_mcp.config import settings
from docsrs_mcp.render import ButtonLayout
from docsrs_mcp.security import wrap_external_content
from docsrs_mcp.sessions import SessionStore

# Configure logging
logger.remove()
logger.add(sys.stderr, level=settings.log_level)

# Grace period for a timed-out tool to release its connections
_CANCEL_GRACE_PERIOD = 2

# Module-level state (set during lifespan, or lazily on first use)
_client: httpx.AsyncClient | None = None
_sessions: SessionStore | None = None
_messages: MessageLog | None = None
_conversation: DocsConversation | None = None


def _get_conversation() -> DocsConversation:
    """Return the shared conversation, creating its resources if needed."""
    global _client, _sessions, _messages, _conversation
    if _conversation is None:
        _client = _client or settings.make_client()
        _sessions = SessionStore(
            ttl=settings.session_ttl, max_entries=settings.session_max_entries
        )
        _messages = MessageLog()
        _conversation = DocsConversation(_messages, _sessions, _client)
    return _conversation


@asynccontextmanager
async def _lifespan(_server: FastMCP):
    """Server lifespan: create the HTTP client and session store, close on exit."""
    global _client, _sessions, _messages, _conversation

    logger.info("Starting docsrs MCP Server...")
    _get_conversation()
    logger.info(
        f"Sessions: ttl={settings.session_ttl}s, "
        f"max_entries={settings.session_max_entries}"
    )

    yield

    logger.info("Shutting down docsrs MCP Server...")
    if _client:
        await _client.aclose()
    _client = _sessions = _messages = _conversation = None


mcp = FastMCP(
    name="docsrs",
    instructions=(
        "Rust documentation MCP Server. "
        "Use `docs` to look up a crate item by path (e.g. serde::Deserialize), "
        "then `docs_section` with a selector from the result to drill into it. "
        "Use `crate` for crates.io metadata."
    ),
    lifespan=_lifespan,
)


def _wrap_tool(tool_name: str):
    """Decorator to wrap tool results with XPIA safety markers.

    Error responses are passed through unwrapped.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)
            return wrap_external_content(tool_name, result)

        return wrapper

    return decorator


async def _with_timeout(coro, action: str):
    """Run ``coro`` under the TOOL_TIMEOUT hard limit.

    Returns the coroutine's result, or an ``Error: ...`` string on timeout.
    """
    timeout = settings.tool_timeout
    if timeout <= 0:
        return await coro

    task = asyncio.create_task(coro)
    done, _pending = await asyncio.wait({task}, timeout=timeout)

    if done:
        return task.result()

    task.cancel()
    logger.warning(f"Tool '{action}' timed out after {timeout}s, cancelling...")
    try:
        await asyncio.wait_for(asyncio.shield(task), timeout=_CANCEL_GRACE_PERIOD)
    except (asyncio.CancelledError, TimeoutError, Exception):
        pass

    logger.error(f"Tool '{action}' timed out after {timeout}s")
    return (
        f"Error: '{action}' timed out after {timeout}s. "
        "Increase TOOL_TIMEOUT or try again later."
    )


def _format_message(
    conversation_id: str, message_id: int, with_selectors: bool = True
) -> str:
    """Format a sent message plus its id and selectors as tool output."""
    if _messages is None:
        return "Error: no conversation is active"
    message = _messages.message(conversation_id, message_id)
    if message is None:
        return "Error: message not found"

    text, buttons = message
    if text.startswith(("Could not find", "No crate", "Error", "<code>/")):
        return text

    return f"{text}\n\n---\nmessage_id: {message_id}{_format_buttons(buttons, with_selectors)}"


def _format_buttons(buttons: ButtonLayout, with_selectors: bool) -> str:
    lines = []
    for row in buttons:
        for button in row:
            if button.url:
                lines.append(f"- {button.label}: {button.url}")
            elif with_selectors and button.data is not None:
                lines.append(f"- `{button.data}`: {button.label}")
    if not lines:
        return ""
    return "\n" + ("selectors:\n" if with_selectors else "links:\n") + "\n".join(lines)


# ---------------------------------------------------------------------------
# docs tools
# ---------------------------------------------------------------------------


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
        idempotentHint=True,
    ),
)
@_wrap_tool("docs")
async def docs(path: str, conversation_id: str = "default") -> str:
    """Look up a Rust item by path, e.g. `std`, `serde::Deserialize`,
    `tokio::sync::Mutex::lock`. Returns the summary, a message_id and the
    selectors accepted by `docs_section`.
    """
    conversation = _get_conversation()
    result = await _with_timeout(conversation.lookup(conversation_id, path), "docs")
    if isinstance(result, str):
        return result
    return _format_message(conversation_id, result)


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
        idempotentHint=True,
    ),
)
@_wrap_tool("docs")
async def docs_section(
    message_id: int, selector: str, conversation_id: str = "default"
) -> str:
    """Show one section of a document returned by `docs`.
    Selector is a section number (`0`, `1`, ...) or a listing key
    such as `methods`, `implementors` or `structs`.
    """
    conversation = _get_conversation()
    shown = await conversation.follow_up(conversation_id, message_id, selector)
    if not shown:
        return (
            f"Error: nothing to show for selector '{selector}' "
            f"on message {message_id}"
        )
    return _format_message(conversation_id, message_id)


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
        idempotentHint=True,
    ),
)
@_wrap_tool("crate")
async def crate(name: str, conversation_id: str = "default") -> str:
    """Show crates.io information of a crate: version, owners, license,
    downloads, dependencies and links.
    """
    conversation = _get_conversation()
    result = await _with_timeout(
        conversation.crate_information(conversation_id, name), "crate"
    )
    if isinstance(result, str):
        return result
    return _format_message(conversation_id, result, with_selectors=False)


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
        idempotentHint=True,
    ),
)
async def help(tool_name: str = "docs") -> str:
    """Get full documentation for a tool.
    Valid tool names: docs, docs_section, crate, config.
    """
    try:
        doc_file = files("docsrs_mcp.docs").joinpath(f"{tool_name}.md")
        return doc_file.read_text()
    except FileNotFoundError:
        return f"Error: No documentation found for tool '{tool_name}'"
    except Exception as e:
        return f"Error loading documentation: {e}"


@mcp.tool(
    description=(
        "Server config. Actions: status|set. "
        "Use help tool with tool_name='config' for full docs."
    ),
    annotations=ToolAnnotations(
        title="Config",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def config(
    action: str,
    key: str | None = None,
    value: str | None = None,
) -> str:
    """Server configuration.

    Actions:
    - status: Show current config and session count
    - set: Update runtime setting (key + value required)
    """
    match action:
        case "status":
            status = {
                "docs_host": settings.docs_host,
                "std_crates": sorted(settings.get_std_crates()),
                "sessions": {
                    "active": (
                        await _sessions.active_count() if _sessions is not None else 0
                    ),
                    "ttl": settings.session_ttl,
                    "max_entries": settings.session_max_entries,
                },
                "settings": {
                    "log_level": settings.log_level,
                    "tool_timeout": settings.tool_timeout,
                    "http_timeout": settings.http_timeout,
                },
            }
            return json.dumps(status, indent=2)

        case "set":
            if not key or value is None:
                return json.dumps({"error": "key and value are required for set"})
            valid_keys = {"log_level", "tool_timeout"}
            if key not in valid_keys:
                return json.dumps(
                    {
                        "error": f"Invalid key: {key}",
                        "valid_keys": sorted(valid_keys),
                    }
                )
            if key == "log_level":
                settings.log_level = value.upper()
                logger.remove()
                logger.add(sys.stderr, level=settings.log_level)
            elif key == "tool_timeout":
                try:
                    settings.tool_timeout = int(value)
                except ValueError:
                    return json.dumps({"error": "tool_timeout must be an integer"})
            return json.dumps(
                {"status": "updated", "key": key, "value": getattr(settings, key)}
            )

        case _:
            return json.dumps(
                {
                    "error": f"Unknown action: {action}",
                    "valid_actions": ["status", "set"],
                }
            )


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
