"""
Work item tools: reads, creates, updates, links and $batch mutations
"""
from typing import List, Optional, Union

from fastmcp import Context

from ..app import get_service_manager, mcp
from ..constants import ArtifactLinkNames, QueryLimits
from ..domains import Domains
from ..models import BatchUpdate, ChildWorkItem, FieldValue, LinkUpdate, WorkItemPatch
from ..responses import deliver, run_tool


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_my_work_items(
    project: str,
    include_completed: bool = False,
    top: int = QueryLimits.DEFAULT_TOP,
    ctx: Context = None
) -> str:
    """
    Get work items assigned to the current user.

    Args:
        project: Project name or id
        include_completed: Include work items in completed states
        top: Maximum number of work items to return
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching work items assigned to you in {project}...")
    return deliver(await run_tool(
        lambda: services.work_items.get_my_work_items(project, include_completed, top),
        "Error fetching work items"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_list_backlogs(project: str, team: str, ctx: Context = None) -> str:
    """
    List the backlogs of a team.

    Args:
        project: Project name or id
        team: Team name or id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing backlogs of team {team}...")
    return deliver(await run_tool(
        lambda: services.work_items.list_backlogs(project, team),
        "Error listing backlogs"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_list_backlog_work_items(
    project: str,
    team: str,
    backlog_id: str,
    ctx: Context = None
) -> str:
    """
    List the work items on one backlog level of a team.

    Args:
        project: Project name or id
        team: Team name or id
        backlog_id: Backlog level id, e.g. Microsoft.RequirementCategory
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing work items of backlog {backlog_id}...")
    return deliver(await run_tool(
        lambda: services.work_items.list_backlog_work_items(project, team, backlog_id),
        "Error listing backlog work items"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_get_work_item(
    id: int,
    project: str,
    fields: Optional[List[str]] = None,
    as_of: Optional[str] = None,
    expand: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Get a single work item by id.

    Args:
        id: Work item id
        project: Project name or id
        fields: Reference names of the fields to return
        as_of: ISO date to read the work item as of
        expand: none, relations, fields, links or all
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching work item {id}...")
    return deliver(await run_tool(
        lambda: services.work_items.get_work_item(id, project, fields=fields, as_of=as_of, expand=expand),
        "Error fetching work item"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_get_work_items_batch_by_ids(
    project: str,
    ids: Union[List[int], str],
    fields: Optional[List[str]] = None,
    ctx: Context = None
) -> str:
    """
    Get several work items by id.

    Args:
        project: Project name or id
        ids: Work item ids, as a list or a comma-separated string
        fields: Reference names of the fields to return; defaults to id, title,
            type, state, assigned to, changed date and tags
    """
    services = await get_service_manager(ctx)
    await ctx.info("Fetching work items by id...")
    return deliver(await run_tool(
        lambda: services.work_items.get_work_items_batch_by_ids(project, ids, fields),
        "Error fetching work items"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_create_work_item(
    project: str,
    work_item_type: str,
    fields: List[FieldValue],
    ctx: Context = None
) -> str:
    """
    Create a new work item.

    Args:
        project: Project name or id
        work_item_type: Work item type, e.g. "Task", "Bug" or "User Story"
        fields: Field values, each with name (reference or display name),
            value and an optional format ("Html" or "Markdown") for long text
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Creating {work_item_type} in {project}...")
    return deliver(await run_tool(
        lambda: services.work_items.create_work_item(project, work_item_type, fields),
        "Error creating work item"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_update_work_item(
    id: int,
    updates: List[WorkItemPatch],
    project: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Update a work item with JSON-Patch operations.

    Args:
        id: Work item id
        updates: Operations, each with op ("Add", "Replace" or "Remove"),
            path (e.g. "/fields/System.Title"), value and an optional format
        project: Project name or id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Updating work item {id}...")
    return deliver(await run_tool(
        lambda: services.work_items.update_work_item(id, updates, project),
        "Error updating work item"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_list_work_item_comments(
    project: str,
    work_item_id: int,
    top: int = QueryLimits.DEFAULT_TOP,
    ctx: Context = None
) -> str:
    """
    List comments of a work item.

    Args:
        project: Project name or id
        work_item_id: Work item id
        top: Maximum number of comments to return
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing comments of work item {work_item_id}...")
    return deliver(await run_tool(
        lambda: services.work_items.list_work_item_comments(work_item_id, project, top),
        "Error listing work item comments"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_add_work_item_comment(
    project: str,
    work_item_id: int,
    comment: str,
    ctx: Context = None
) -> str:
    """
    Add a comment to a work item.

    Args:
        project: Project name or id
        work_item_id: Work item id
        comment: Comment text
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Adding comment to work item {work_item_id}...")
    return deliver(await run_tool(
        lambda: services.work_items.add_work_item_comment(work_item_id, project, comment),
        "Error adding work item comment"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_get_work_items_for_iteration(
    project: str,
    iteration_id: str,
    team: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List work items in an iteration.

    Args:
        project: Project name or id
        iteration_id: Iteration id
        team: Team name or id; the project's default team when omitted
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing work items of iteration {iteration_id}...")
    return deliver(await run_tool(
        lambda: services.work_items.get_work_items_for_iteration(project, iteration_id, team),
        "Error fetching iteration work items"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_add_child_work_items(
    parent_id: int,
    project: str,
    work_item_type: str,
    items: List[ChildWorkItem],
    ctx: Context = None
) -> str:
    """
    Create child work items under a parent work item.

    Items are created one at a time, in order. If one fails, the ids of the
    children already created are reported with the error.

    Args:
        parent_id: Id of the parent work item
        project: Project name or id
        work_item_type: Type of the children, e.g. "Task"
        items: Children (at most 50), each with title, description,
            format ("Html" or "Markdown"), area_path and iteration_path
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Creating {len(items)} child work item(s) under {parent_id}...")
    return deliver(await run_tool(
        lambda: services.work_items.add_child_work_items(parent_id, project, work_item_type, items),
        "Error creating child work items"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_link_work_item_to_pull_request(
    project_id: str,
    repository_id: str,
    pull_request_id: int,
    work_item_id: int,
    pull_request_project_id: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Link a work item to a pull request.

    Args:
        project_id: Project id of the work item
        repository_id: Repository id
        pull_request_id: Pull request id
        work_item_id: Work item id
        pull_request_project_id: Project id of the pull request, when it lives
            in a different project
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Linking work item {work_item_id} to pull request {pull_request_id}...")
    return deliver(await run_tool(
        lambda: services.work_items.link_work_item_to_pull_request(
            work_item_id,
            project_id,
            repository_id,
            pull_request_id,
            pull_request_project_id
        ),
        "Error linking work item to pull request"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_work_items_link(
    project: str,
    updates: List[LinkUpdate],
    ctx: Context = None
) -> str:
    """
    Link work items to each other in one batch.

    Args:
        project: Project name or id
        updates: Links, each with id, link_to_id, type and an optional comment.
            Types: parent, child, duplicate, duplicate of, related, successor,
            predecessor, tested by, tests, affects, affected by, artifact
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Creating {len(updates)} work item link(s)...")
    return deliver(await run_tool(
        lambda: services.work_items.link_work_items(project, updates),
        "Error linking work items"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_work_item_unlink(
    project: str,
    id: int,
    type: str = "related",
    url: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Remove links of one type from a work item.

    Args:
        project: Project name or id
        id: Work item id
        type: Link type, same names as wit_work_items_link
        url: Only remove links pointing at this URL
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Removing '{type}' links from work item {id}...")
    return deliver(await run_tool(
        lambda: services.work_items.unlink_work_item(id, project, type, url),
        "Error unlinking work item"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_add_artifact_link(
    work_item_id: int,
    project: str,
    link_type: str = ArtifactLinkNames.BRANCH,
    artifact_uri: Optional[str] = None,
    project_id: Optional[str] = None,
    repository_id: Optional[str] = None,
    branch_name: Optional[str] = None,
    commit_id: Optional[str] = None,
    pull_request_id: Optional[int] = None,
    build_id: Optional[int] = None,
    comment: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Link a work item to a branch, commit, pull request, build or other artifact.

    Pass artifact_uri directly, or the components for the link type:
    Branch needs project_id, repository_id and branch_name; Fixed in Commit
    needs project_id, repository_id and commit_id; Pull Request needs
    project_id, repository_id and pull_request_id; Build, Found in build and
    Integrated in build need build_id. Other link types need artifact_uri.

    Args:
        work_item_id: Work item id
        project: Project name or id
        link_type: Artifact link type name
        artifact_uri: Full vstfs:/// artifact URI
        project_id: Project id of the artifact
        repository_id: Repository id
        branch_name: Branch name without refs/heads/
        commit_id: Commit SHA
        pull_request_id: Pull request id
        build_id: Build id
        comment: Link comment
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Adding '{link_type}' link to work item {work_item_id}...")
    return deliver(await run_tool(
        lambda: services.work_items.add_artifact_link(
            work_item_id,
            project,
            link_type=link_type,
            artifact_uri=artifact_uri,
            project_id=project_id,
            repository_id=repository_id,
            branch_name=branch_name,
            commit_id=commit_id,
            pull_request_id=pull_request_id,
            build_id=build_id,
            comment=comment
        ),
        "Error adding artifact link"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_get_work_item_type(project: str, work_item_type: str, ctx: Context = None) -> str:
    """
    Get a work item type definition.

    Args:
        project: Project name or id
        work_item_type: Type name, e.g. "Bug"
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching work item type {work_item_type}...")
    return deliver(await run_tool(
        lambda: services.work_items.get_work_item_type(project, work_item_type),
        "Error fetching work item type"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_get_query(
    project: str,
    query: str,
    expand: Optional[str] = None,
    depth: int = 0,
    include_deleted: bool = False,
    ctx: Context = None
) -> str:
    """
    Get a saved query by id or path.

    Args:
        project: Project name or id
        query: Query id or path, e.g. "Shared Queries/Active Bugs"
        expand: none, wiql, clauses, all or minimal
        depth: Depth of child queries to return for folders
        include_deleted: Include deleted queries and folders
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching query {query}...")
    return deliver(await run_tool(
        lambda: services.work_items.get_query(project, query, expand, depth, include_deleted),
        "Error fetching query"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_get_query_results_by_id(
    id: str,
    project: Optional[str] = None,
    team: Optional[str] = None,
    top: int = QueryLimits.DEFAULT_TOP,
    ctx: Context = None
) -> str:
    """
    Run a saved query and return its results.

    Args:
        id: Query id
        project: Project name or id
        team: Team name or id
        top: Maximum number of results
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Running query {id}...")
    return deliver(await run_tool(
        lambda: services.work_items.get_query_results_by_id(id, project, team, top),
        "Error running query"
    ))


@mcp.tool(tags={Domains.WORK_ITEMS})
async def wit_update_work_items_batch(
    project: str,
    updates: List[BatchUpdate],
    ctx: Context = None
) -> str:
    """
    Update several work items in one batch request.

    Args:
        project: Project name or id
        updates: Operations, each with op ("Add", "Replace" or "Remove"), id,
            path, value and an optional format for long text
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Updating work items with {len(updates)} operation(s)...")
    return deliver(await run_tool(
        lambda: services.work_items.update_work_items_batch(project, updates),
        "Error updating work items in batch"
    ))
