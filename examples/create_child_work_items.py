#!/usr/bin/env python
"""Create a parent user story with two child tasks"""
import asyncio
import os

from dotenv import load_dotenv

from ado_mcp.auth import AzureDevOpsAuth
from ado_mcp.http_client import AzureDevOpsHttpClient
from ado_mcp.models import ChildWorkItem, FieldValue
from ado_mcp.services import WorkItemService
from ado_mcp.useragent import UserAgentComposer


async def main():
    # Load environment
    load_dotenv()
    org_url = os.getenv('AZURE_DEVOPS_ORG_URL')
    project = os.getenv('AZURE_DEVOPS_PROJECT')

    print(f"Organization: {org_url}")
    print(f"Project: {project}\n")

    auth = AzureDevOpsAuth(org_url)
    await auth.initialize()
    http_client = AzureDevOpsHttpClient(auth.get_authorization_header, UserAgentComposer())
    service = WorkItemService(auth, http_client)

    try:
        story = await service.create_work_item(project, "User Story", [
            FieldValue("System.Title", "Export reports as CSV"),
            FieldValue(
                "System.Description",
                "## Goal\nUsers can download any report as a CSV file from the report toolbar.",
                "Markdown"
            ),
        ])
        print(f"Created story {story.id}")

        children = await service.add_child_work_items(story.id, project, "Task", [
            ChildWorkItem(title="Add CSV serializer"),
            ChildWorkItem(title="Add toolbar button", description="<p>Next to <b>Print</b></p>"),
        ])
        for child in children:
            print(f"  Created task {child.id}: {child.fields['System.Title']}")
    finally:
        await http_client.aclose()
        await auth.close()


if __name__ == '__main__':
    asyncio.run(main())
