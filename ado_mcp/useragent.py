"""
User-Agent composition for outbound Azure DevOps requests.
"""
from typing import Optional

from . import __version__

BASE_USER_AGENT = f"ado-mcp/{__version__}"


class UserAgentComposer:
    """Builds the User-Agent header, including the MCP client once known."""

    def __init__(self, base: str = BASE_USER_AGENT):
        self._base = base
        self._client_info: Optional[str] = None

    @property
    def user_agent(self) -> str:
        if self._client_info:
            return f"{self._base} ({self._client_info})"
        return self._base

    def append_mcp_client_info(self, name: Optional[str], version: Optional[str] = None) -> None:
        """Record the connected MCP client; only the first call has an effect."""
        if self._client_info or not name:
            return
        self._client_info = f"MCPClient/{name}/{version}" if version else f"MCPClient/{name}"

    def __call__(self) -> str:
        return self.user_agent
