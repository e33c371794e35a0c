"""docsrs MCP Server entry point."""

import sys


def _lookup(path: str) -> None:
    """Resolve one path and print the rendered document.

    Handy for checking a path before asking an agent about it:
        uvx docsrs-mcp lookup serde::Deserialize
    """
    import asyncio

    from docsrs_mcp.config import settings
    from docsrs_mcp.render import render_document
    from docsrs_mcp.sources.resolver import resolve

    async def run() -> int:
        async with settings.make_client() as client:
            document = await resolve(path, client)
        if document is None:
            print(f"Could not find `{path}`")
            return 1
        print(render_document(document))
        return 0

    sys.exit(asyncio.run(run()))


def _cli() -> None:
    """CLI dispatcher: server (default) or lookup subcommand."""
    if len(sys.argv) >= 3 and sys.argv[1] == "lookup":
        _lookup(sys.argv[2])
    else:
        from docsrs_mcp.server import main

        main()


if __name__ == "__main__":
    _cli()
