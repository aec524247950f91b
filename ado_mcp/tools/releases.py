"""Release tools"""
from typing import Optional

from fastmcp import Context

from ..app import get_service_manager, mcp
from ..domains import Domains
from ..responses import deliver, run_tool


@mcp.tool(tags={Domains.RELEASES})
async def release_get_definitions(
    project: Optional[str] = None,
    search_text: Optional[str] = None,
    path: Optional[str] = None,
    top: Optional[int] = None,
    continuation_token: Optional[str] = None,
    is_exact_name_match: bool = False,
    ctx: Context = None
) -> str:
    """
    List release definitions.

    Args:
        project: Project name or id
        search_text: Text the definition name contains
        path: Folder path of the definitions
        top: Maximum number of definitions
        continuation_token: Token from a previous page
        is_exact_name_match: Match search_text against the whole name
    """
    services = await get_service_manager(ctx)
    await ctx.info("Listing release definitions...")
    return deliver(await run_tool(
        lambda: services.releases.get_definitions(
            project,
            search_text=search_text,
            path=path,
            top=top,
            continuation_token=continuation_token,
            is_exact_name_match=is_exact_name_match
        ),
        "Error fetching release definitions"
    ))


@mcp.tool(tags={Domains.RELEASES})
async def release_get_releases(
    project: Optional[str] = None,
    definition_id: Optional[int] = None,
    search_text: Optional[str] = None,
    status_filter: Optional[str] = None,
    min_created_time: Optional[str] = None,
    max_created_time: Optional[str] = None,
    query_order: Optional[str] = None,
    top: int = 100,
    continuation_token: Optional[int] = None,
    ctx: Context = None
) -> str:
    """
    List releases.

    Args:
        project: Project name or id
        definition_id: Only releases of this definition
        search_text: Text the release name contains
        status_filter: e.g. active, abandoned, draft
        min_created_time: ISO date lower bound
        max_created_time: ISO date upper bound
        query_order: ascending or descending
        top: Maximum number of releases
        continuation_token: Release id to continue from
    """
    services = await get_service_manager(ctx)
    await ctx.info("Listing releases...")
    return deliver(await run_tool(
        lambda: services.releases.get_releases(
            project,
            definition_id=definition_id,
            search_text=search_text,
            status_filter=status_filter,
            min_created_time=min_created_time,
            max_created_time=max_created_time,
            query_order=query_order,
            top=top,
            continuation_token=continuation_token
        ),
        "Error fetching releases"
    ))
