"""
Azure DevOps MCP Server entry point
Registers the tools, trims them to the enabled domains and starts the transport
"""
import asyncio
import logging
from typing import AbstractSet, List

import click
from fastmcp import FastMCP

from . import __version__, tools  # noqa: F401  (registers tools)
from .app import configure, mcp
from .config import DEFAULT_TRANSPORT, HTTP_TRANSPORT, TRANSPORTS, configure_logging, load_settings

logger = logging.getLogger(__name__)


async def apply_domain_filter(server: FastMCP, domains: AbstractSet[str]) -> List[str]:
    """
    Remove tools tagged only with domains that are not enabled.

    Untagged tools (health and statistics) are always kept.

    Returns:
        Names of the removed tools
    """
    removed = []
    registered = await server.get_tools()
    for name, tool in list(registered.items()):
        if tool.tags and not (tool.tags & domains):
            server.remove_tool(name)
            removed.append(name)

    if removed:
        logger.info(f"Disabled {len(removed)} tool(s) outside domains: {', '.join(sorted(domains))}")
    return removed


@click.command()
@click.argument('organization', required=False)
@click.option('--domains', '-d', multiple=True,
              help='Domains to enable (core, work, work-items, builds, releases, wiki, test-plans or all). '
                   'Repeat or comma-separate.')
@click.option('--pat', envvar='ADO_PAT', help='Personal access token')
@click.option('--transport', type=click.Choice(TRANSPORTS, case_sensitive=False), default=None,
              help=f'MCP transport (default: {DEFAULT_TRANSPORT})')
@click.option('--port', type=int, default=None, help='Port for the streamable-http transport')
@click.option('--log-level', default=None, help='Log level (DEBUG, INFO, WARNING, ERROR)')
@click.version_option(__version__)
def main(organization, domains, pat, transport, port, log_level):
    """Run the Azure DevOps MCP server for ORGANIZATION."""
    try:
        settings = load_settings(
            organization=organization,
            pat=pat,
            domains=domains or None,
            transport=transport,
            port=port,
            log_level=log_level
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    configure_logging(settings.log_level)
    configure(settings)
    asyncio.run(apply_domain_filter(mcp, settings.domains))

    if settings.transport == HTTP_TRANSPORT:
        logger.info(f"Starting MCP server with HTTP streaming on port {settings.port}")
        mcp.run(transport=HTTP_TRANSPORT, host="0.0.0.0", port=settings.port)
    else:
        logger.info("Starting MCP server in STDIO mode")
        mcp.run()


if __name__ == "__main__":
    main()
