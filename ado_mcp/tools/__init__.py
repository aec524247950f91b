"""
MCP tool registrations, one module per domain

Importing this package registers every tool on the shared FastMCP instance.
"""
from . import builds, core, monitoring, releases, test_plans, wiki, work, work_items

__all__ = ["builds", "core", "monitoring", "releases", "test_plans", "wiki", "work", "work_items"]
