#!/usr/bin/env python
"""Link work items in one $batch call, then remove one of the links"""
import asyncio
import os
import sys

from dotenv import load_dotenv

from ado_mcp.auth import AzureDevOpsAuth
from ado_mcp.http_client import AzureDevOpsHttpClient
from ado_mcp.models import LinkUpdate
from ado_mcp.services import WorkItemService
from ado_mcp.useragent import UserAgentComposer


async def main(source_id: int, target_id: int, predecessor_id: int):
    load_dotenv()
    org_url = os.getenv('AZURE_DEVOPS_ORG_URL')
    project = os.getenv('AZURE_DEVOPS_PROJECT')

    auth = AzureDevOpsAuth(org_url)
    await auth.initialize()
    http_client = AzureDevOpsHttpClient(auth.get_authorization_header, UserAgentComposer())
    service = WorkItemService(auth, http_client)

    try:
        results = await service.link_work_items(project, [
            LinkUpdate(id=source_id, link_to_id=target_id, type="related", comment="Same customer report"),
            LinkUpdate(id=source_id, link_to_id=predecessor_id, type="predecessor"),
        ])
        print(f"Updated {len(results)} work item(s)")

        print(await service.unlink_work_item(source_id, project, "related"))
    finally:
        await http_client.aclose()
        await auth.close()


if __name__ == '__main__':
    if len(sys.argv) != 4:
        sys.exit("usage: link_work_items.py SOURCE_ID TARGET_ID PREDECESSOR_ID")
    asyncio.run(main(*(int(arg) for arg in sys.argv[1:])))
