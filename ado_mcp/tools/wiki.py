"""Wiki tools"""
from typing import Optional

from fastmcp import Context

from ..app import get_service_manager, mcp
from ..domains import Domains
from ..responses import deliver, run_tool


@mcp.tool(tags={Domains.WIKI})
async def wiki_list_wikis(project: Optional[str] = None, ctx: Context = None) -> str:
    """
    List wikis in the organization or in one project.

    Args:
        project: Project name or id
    """
    services = await get_service_manager(ctx)
    await ctx.info("Listing wikis...")
    return deliver(await run_tool(
        lambda: services.wiki.list_wikis(project),
        "Error fetching wikis"
    ))


@mcp.tool(tags={Domains.WIKI})
async def wiki_get_wiki(wiki_identifier: str, project: Optional[str] = None, ctx: Context = None) -> str:
    """
    Get a wiki by name or id.

    Args:
        wiki_identifier: Wiki name or id
        project: Project name or id
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching wiki {wiki_identifier}...")
    return deliver(await run_tool(
        lambda: services.wiki.get_wiki(wiki_identifier, project),
        "Error fetching wiki"
    ))


@mcp.tool(tags={Domains.WIKI})
async def wiki_list_pages(
    wiki_identifier: str,
    project: str,
    top: int = 20,
    continuation_token: Optional[str] = None,
    page_views_for_days: Optional[int] = None,
    ctx: Context = None
) -> str:
    """
    List pages of a wiki.

    Args:
        wiki_identifier: Wiki name or id
        project: Project name or id
        top: Maximum number of pages
        continuation_token: Token from a previous page
        page_views_for_days: Include view counts for this many days
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Listing pages of wiki {wiki_identifier}...")
    return deliver(await run_tool(
        lambda: services.wiki.list_pages(wiki_identifier, project, top, continuation_token, page_views_for_days),
        "Error fetching wiki pages"
    ))


@mcp.tool(tags={Domains.WIKI})
async def wiki_get_page_content(wiki_identifier: str, project: str, path: str, ctx: Context = None) -> str:
    """
    Get the markdown content of a wiki page.

    Args:
        wiki_identifier: Wiki name or id
        project: Project name or id
        path: Page path, e.g. /Home
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Fetching wiki page {path}...")
    return deliver(await run_tool(
        lambda: services.wiki.get_page_content(wiki_identifier, project, path),
        "Error fetching wiki page content"
    ))


@mcp.tool(tags={Domains.WIKI})
async def wiki_create_or_update_page(
    wiki_identifier: str,
    project: str,
    path: str,
    content: str,
    version: Optional[str] = None,
    comment: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Create a wiki page, or update it when version is given.

    Args:
        wiki_identifier: Wiki name or id
        project: Project name or id
        path: Page path, e.g. /Team/Onboarding
        content: Markdown content
        version: ETag of the existing page, required to update it
        comment: Revision comment
    """
    services = await get_service_manager(ctx)
    await ctx.info(f"Saving wiki page {path}...")
    return deliver(await run_tool(
        lambda: services.wiki.create_or_update_page(wiki_identifier, project, path, content, version, comment),
        "Error saving wiki page"
    ))
