"""Configuration settings for docsrs MCP Server."""

import httpx
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """docsrs MCP Server configuration.

    Environment variables:
    - DOCS_HOST: Documentation redirector (default: https://docs.rs)
    - STD_DOCS_URL: URL template for built-in crates, ``{crate}`` is substituted
    - STD_CRATES: Comma-separated built-in crate names served from STD_DOCS_URL
    - CRATES_API_URL: crates.io API root (default: https://crates.io/api/v1)
    - HTTP_TIMEOUT: Per-request timeout in seconds (default: 15)
    - USER_AGENT: User-Agent header sent with every request
    - SESSION_TTL: Seconds a rendered document stays navigable (0 = forever)
    - SESSION_MAX_ENTRIES: Maximum number of navigable documents kept in memory
    - TOOL_TIMEOUT: Hard timeout for a tool call in seconds (0 = no timeout)
    - LOG_LEVEL: Loguru level (default: INFO)
    """

    # Documentation hosts
    docs_host: str = "https://docs.rs"
    std_docs_url: str = "https://doc.rust-lang.org/stable/{crate}/"
    std_crates: str = "alloc,core,proc_macro,std,test"

    # Registry
    crates_api_url: str = "https://crates.io/api/v1"

    # HTTP
    http_timeout: int = 15
    user_agent: str = "docsrs-mcp (+https://github.com/docsrs-mcp/docsrs-mcp)"

    # Navigation sessions
    session_ttl: int = 3600
    session_max_entries: int = 1024

    # Tool execution timeout (seconds, 0 = no timeout)
    tool_timeout: int = 60

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "case_sensitive": False}

    def get_std_crates(self) -> frozenset[str]:
        """Parse STD_CRATES into a set of crate names."""
        return frozenset(
            name.strip() for name in self.std_crates.split(",") if name.strip()
        )

    def get_docs_host(self) -> str:
        """Get the redirector host without a trailing slash."""
        return self.docs_host.rstrip("/")

    def make_client(self) -> httpx.AsyncClient:
        """Create the HTTP client shared by one server lifetime.

        Redirects are never followed: the origin locator reads the
        ``Location`` header itself and a redirected item page is treated
        as absent.
        """
        return httpx.AsyncClient(
            timeout=self.http_timeout,
            headers={"User-Agent": self.user_agent},
            follow_redirects=False,
        )


settings = Settings()
