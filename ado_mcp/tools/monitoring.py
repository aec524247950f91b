"""
Monitoring tools (health and statistics)
Always registered, whatever domains are enabled
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastmcp import Context

from .. import __version__
from ..app import SERVER_NAME, get_auth, get_service_manager, mcp


@mcp.tool()
async def health_check(ctx: Context = None) -> Dict[str, Any]:
    """
    Get server health status for monitoring.

    Returns server health, authentication status, and version information.

    Returns:
        Dictionary with health status, authentication info, and version
    """
    auth = get_auth()
    if auth is None:
        return {
            "status": "unhealthy",
            "service": SERVER_NAME,
            "version": __version__,
            "error": "Not authenticated"
        }

    auth_info = auth.get_auth_info()
    return {
        "status": "healthy" if auth_info.get("authenticated") else "unhealthy",
        "service": SERVER_NAME,
        "version": __version__,
        "authenticated": auth_info.get("authenticated"),
        "auth_method": auth_info.get("method"),
        "organization": auth_info.get("organization_url"),
        "auth_failure_stats": auth.get_auth_failure_stats()
    }


@mcp.tool()
async def get_service_statistics(ctx: Context = None) -> Dict[str, Any]:
    """
    Get service manager statistics.

    Returns:
        Dictionary with service manager stats and loaded services
    """
    services = await get_service_manager(ctx)
    return {
        "service_manager": services.get_statistics(),
        "loaded_services": services.get_loaded_services(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
