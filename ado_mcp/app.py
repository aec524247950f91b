"""
Azure DevOps MCP Server application
The FastMCP instance, its lifespan and the shared service manager
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastmcp import Context, FastMCP

from .auth import AzureDevOpsAuth
from .config import Settings, load_settings
from .http_client import AzureDevOpsHttpClient
from .service_manager import ServiceManager
from .useragent import UserAgentComposer

logger = logging.getLogger(__name__)

SERVER_NAME = "Azure DevOps MCP"

# Global state for settings, authentication and service manager
# Settings are set by the CLI; the rest is initialized during lifespan startup
_settings: Optional[Settings] = None
_auth: Optional[AzureDevOpsAuth] = None
_service_manager: Optional[ServiceManager] = None


def configure(settings: Settings) -> None:
    """Use these settings instead of reading them from the environment at startup."""
    global _settings
    _settings = settings


@asynccontextmanager
async def lifespan(app):
    """Authenticate and build services on startup, release them on shutdown"""
    global _settings, _auth, _service_manager

    settings = _settings or load_settings()
    _settings = settings

    _auth = AzureDevOpsAuth(settings.organization_url, pat=settings.pat)
    await _auth.initialize()

    user_agent = UserAgentComposer()
    http_client = AzureDevOpsHttpClient(_auth.get_authorization_header, user_agent)
    _service_manager = ServiceManager(_auth, http_client, user_agent)
    logger.info(f"Connected to {settings.organization_url}")

    try:
        yield  # Server runs
    finally:
        await http_client.aclose()
        await _auth.close()
        _service_manager = None
        _auth = None


mcp = FastMCP(
    name=SERVER_NAME,
    lifespan=lifespan
)


def _note_client_info(ctx: Optional[Context], user_agent: UserAgentComposer) -> None:
    """Add the connected MCP client's name and version to the User-Agent."""
    if ctx is None:
        return
    try:
        client_params = ctx.session.client_params
    except (AttributeError, RuntimeError):
        return
    client_info = getattr(client_params, 'clientInfo', None)
    if client_info is not None:
        user_agent.append_mcp_client_info(client_info.name, client_info.version)


async def get_service_manager(ctx: Optional[Context] = None) -> ServiceManager:
    """
    Return the service manager for a tool call

    Refreshes credential tokens close to expiry so SDK clients handed out
    afterwards carry a valid token.

    Raises:
        RuntimeError: If the server has not finished starting up
    """
    if _service_manager is None or _auth is None:
        raise RuntimeError("Service manager not initialized")

    await _auth.refresh_if_expiring()
    _note_client_info(ctx, _service_manager.user_agent)
    return _service_manager


def get_auth() -> Optional[AzureDevOpsAuth]:
    return _auth
