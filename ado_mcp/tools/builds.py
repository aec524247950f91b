"""Build and pipeline tools"""
from typing import Dict, List, Optional

from fastmcp import Context

from ..app import get_service_manager, mcp
from ..domains import Domains
from ..responses import deliver, run_tool


@mcp.tool(tags={Domains.BUILDS})
async def build_get_definitions(
    project: str,
    name: Optional[str] = None,
    repository_id: Optional[str] = None,
    repository_type: Optional[str] = None,
    path: Optional[str] = None,
    top: Optional[int] = None,
    continuation_token: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List build definitions of a project.

    Args:
        project: Project name or id
        name: Definition name filter, wildcards allowed
        repository_id: Only definitions building this repository
        repository_type: Repository type, e.g. TfsGit or GitHub
        path: Folder path of the definitions
        top: Maximum number of definitions
        continuation_token: Token from a previous page
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing build definitions in {project}...")
    return deliver(await run_tool(
        lambda: services.builds.get_definitions(
            project,
            name=name,
            repository_id=repository_id,
            repository_type=repository_type,
            path=path,
            top=top,
            continuation_token=continuation_token
        ),
        "Error fetching build definitions"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def build_get_definition_revisions(project: str, definition_id: int, ctx: Context = None) -> str:
    """
    List the revisions of a build definition.

    Args:
        project: Project name or id
        definition_id: Build definition id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing revisions of definition {definition_id}...")
    return deliver(await run_tool(
        lambda: services.builds.get_definition_revisions(project, definition_id),
        "Error fetching build definition revisions"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def build_get_builds(
    project: str,
    definitions: Optional[List[int]] = None,
    top: int = 100,
    status_filter: Optional[str] = None,
    result_filter: Optional[str] = None,
    branch_name: Optional[str] = None,
    continuation_token: Optional[str] = None,
    query_order: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List builds of a project.

    Args:
        project: Project name or id
        definitions: Only builds of these definition ids
        top: Maximum number of builds
        status_filter: e.g. inProgress, completed, notStarted
        result_filter: e.g. succeeded, failed, canceled
        branch_name: e.g. refs/heads/main
        continuation_token: Token from a previous page
        query_order: e.g. finishTimeDescending, queueTimeAscending
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing builds in {project}...")
    return deliver(await run_tool(
        lambda: services.builds.get_builds(
            project,
            definitions=definitions,
            top=top,
            status_filter=status_filter,
            result_filter=result_filter,
            branch_name=branch_name,
            continuation_token=continuation_token,
            query_order=query_order
        ),
        "Error fetching builds"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def build_get_log(project: str, build_id: int, ctx: Context = None) -> str:
    """
    List the logs of a build.

    Args:
        project: Project name or id
        build_id: Build id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching logs of build {build_id}...")
    return deliver(await run_tool(
        lambda: services.builds.get_log(project, build_id),
        "Error fetching build logs"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def build_get_log_by_id(
    project: str,
    build_id: int,
    log_id: int,
    start_line: Optional[int] = None,
    end_line: Optional[int] = None,
    ctx: Context = None
) -> str:
    """
    Get the lines of one build log.

    Args:
        project: Project name or id
        build_id: Build id
        log_id: Log id
        start_line: First line to return
        end_line: Last line to return
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching log {log_id} of build {build_id}...")
    return deliver(await run_tool(
        lambda: services.builds.get_log_by_id(project, build_id, log_id, start_line, end_line),
        "Error fetching build log"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def build_get_changes(
    project: str,
    build_id: int,
    continuation_token: Optional[str] = None,
    top: int = 100,
    include_source_change: Optional[bool] = None,
    ctx: Context = None
) -> str:
    """
    List the source changes associated with a build.

    Args:
        project: Project name or id
        build_id: Build id
        continuation_token: Token from a previous page
        top: Maximum number of changes
        include_source_change: Include the source change details
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching changes of build {build_id}...")
    return deliver(await run_tool(
        lambda: services.builds.get_changes(project, build_id, continuation_token, top, include_source_change),
        "Error fetching build changes"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def build_get_status(project: str, build_id: int, ctx: Context = None) -> str:
    """
    Get the status report of a build.

    Args:
        project: Project name or id
        build_id: Build id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching status of build {build_id}...")
    return deliver(await run_tool(
        lambda: services.builds.get_status(project, build_id),
        "Error fetching build status"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def build_update_build_stage(
    project: str,
    build_id: int,
    stage_name: str,
    status: str,
    force_retry_all_jobs: bool = False,
    ctx: Context = None
) -> str:
    """
    Cancel, retry or run a stage of a build.

    Args:
        project: Project name or id
        build_id: Build id
        stage_name: Stage name
        status: Cancel, Retry or Run
        force_retry_all_jobs: Retry every job of the stage, not just failed ones
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Updating stage {stage_name} of build {build_id}...")
    return deliver(await run_tool(
        lambda: services.builds.update_build_stage(project, build_id, stage_name, status, force_retry_all_jobs),
        "Error updating build stage"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def pipelines_get_run(project: str, pipeline_id: int, run_id: int, ctx: Context = None) -> str:
    """
    Get a pipeline run.

    Args:
        project: Project name or id
        pipeline_id: Pipeline id
        run_id: Run id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching run {run_id} of pipeline {pipeline_id}...")
    return deliver(await run_tool(
        lambda: services.builds.get_run(project, pipeline_id, run_id),
        "Error fetching pipeline run"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def pipelines_list_runs(project: str, pipeline_id: int, ctx: Context = None) -> str:
    """
    List the runs of a pipeline.

    Args:
        project: Project name or id
        pipeline_id: Pipeline id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing runs of pipeline {pipeline_id}...")
    return deliver(await run_tool(
        lambda: services.builds.list_runs(project, pipeline_id),
        "Error listing pipeline runs"
    ))


@mcp.tool(tags={Domains.BUILDS})
async def pipelines_run_pipeline(
    project: str,
    pipeline_id: int,
    pipeline_version: Optional[int] = None,
    branch: Optional[str] = None,
    preview_run: bool = False,
    stages_to_skip: Optional[List[str]] = None,
    template_parameters: Optional[Dict[str, str]] = None,
    variables: Optional[Dict[str, str]] = None,
    yaml_override: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Start a pipeline run.

    Args:
        project: Project name or id
        pipeline_id: Pipeline id
        pipeline_version: Pipeline version; the latest when omitted
        branch: Branch to run, e.g. main or refs/heads/main
        preview_run: Only render the final YAML without running
        stages_to_skip: Names of stages to skip
        template_parameters: Runtime parameters
        variables: Pipeline variables
        yaml_override: YAML to use instead of the pipeline's; needs preview_run
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Running pipeline {pipeline_id}...")
    return deliver(await run_tool(
        lambda: services.builds.run_pipeline(
            project,
            pipeline_id,
            pipeline_version=pipeline_version,
            branch=branch,
            preview_run=preview_run,
            stages_to_skip=stages_to_skip,
            template_parameters=template_parameters,
            variables=variables,
            yaml_override=yaml_override
        ),
        "Error running pipeline"
    ))
