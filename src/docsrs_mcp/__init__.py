"""docsrs MCP Server - Rust documentation lookups for AI Agents."""

from importlib.metadata import version

from docsrs_mcp.__main__ import _cli as main
from docsrs_mcp.server import mcp

__version__ = version("docsrs-mcp")
__all__ = ["mcp", "main", "__version__"]
