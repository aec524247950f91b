"""Work tools: team iterations"""
from typing import List, Optional

from fastmcp import Context

from ..app import get_service_manager, mcp
from ..domains import Domains
from ..models import IterationAssignment, IterationSpec
from ..responses import deliver, run_tool


@mcp.tool(tags={Domains.WORK})
async def work_list_team_iterations(
    project: str,
    team: str,
    timeframe: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List the iterations assigned to a team.

    Args:
        project: Project name or id
        team: Team name or id
        timeframe: Use "current" to get only the current iteration
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing iterations of team {team}...")
    return deliver(await run_tool(
        lambda: services.work.list_team_iterations(project, team, timeframe),
        "Error fetching team iterations"
    ))


@mcp.tool(tags={Domains.WORK})
async def work_create_iterations(
    project: str,
    iterations: List[IterationSpec],
    ctx: Context = None
) -> str:
    """
    Create new iterations in a project.

    Args:
        project: Project name or id
        iterations: Iterations to create, each with iteration_name and
            optional start_date / finish_date (ISO dates)
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Creating {len(iterations)} iteration(s) in {project}...")
    return deliver(await run_tool(
        lambda: services.work.create_iterations(project, iterations),
        "Error creating iterations"
    ))


@mcp.tool(tags={Domains.WORK})
async def work_assign_iterations(
    project: str,
    team: str,
    iterations: List[IterationAssignment],
    ctx: Context = None
) -> str:
    """
    Assign existing iterations to a team.

    Args:
        project: Project name or id
        team: Team name or id
        iterations: Iterations to assign, each with identifier (the iteration id) and path
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Assigning {len(iterations)} iteration(s) to team {team}...")
    return deliver(await run_tool(
        lambda: services.work.assign_iterations(project, team, iterations),
        "Error assigning iterations"
    ))
