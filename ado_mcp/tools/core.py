"""Core tools: projects, teams and identities"""
from typing import Optional

from fastmcp import Context

from ..app import get_service_manager, mcp
from ..domains import Domains
from ..responses import deliver, run_tool


@mcp.tool(tags={Domains.CORE})
async def core_list_project_teams(
    project: str,
    mine: Optional[bool] = None,
    top: Optional[int] = None,
    skip: Optional[int] = None,
    ctx: Context = None
) -> str:
    """
    List teams of a project.

    Args:
        project: Project name or id
        mine: Only teams the current user belongs to
        top: Maximum number of teams to return
        skip: Number of teams to skip
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing teams of project {project}...")
    return deliver(await run_tool(
        lambda: services.core.list_project_teams(project, mine=mine, top=top, skip=skip),
        "Error fetching project teams"
    ))


@mcp.tool(tags={Domains.CORE})
async def core_list_projects(
    state_filter: str = "wellFormed",
    top: Optional[int] = None,
    skip: Optional[int] = None,
    continuation_token: Optional[int] = None,
    project_name_filter: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List projects in the organization.

    Args:
        state_filter: Project state (wellFormed, createPending, deleting, new, all)
        top: Maximum number of projects to return
        skip: Number of projects to skip
        continuation_token: Token from a previous page
        project_name_filter: Case-insensitive substring of the project name
    """
    services = await get_service_manager(ctx)
    await ctx.info("Listing projects...")
    return deliver(await run_tool(
        lambda: services.core.list_projects(
            state_filter=state_filter,
            top=top,
            skip=skip,
            continuation_token=continuation_token,
            project_name_filter=project_name_filter
        ),
        "Error fetching projects"
    ))


@mcp.tool(tags={Domains.CORE})
async def core_get_identity_ids(search_filter: str, ctx: Context = None) -> str:
    """
    Look up identity ids by name or email.

    Args:
        search_filter: Display name, email or account name to search for
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Searching identities matching '{search_filter}'...")
    return deliver(await run_tool(
        lambda: services.core.get_identity_ids(search_filter),
        "Error fetching identities"
    ))
