"""
Wiki service: wikis and wiki pages
"""
from typing import Any, Optional

from azure.devops.v7_1.wiki.models import WikiPageCreateOrUpdateParameters, WikiPagesBatchRequest

from ..decorators import azure_devops_operation
from ..validation import validate_required


class WikiService:
    """Service for wiki content"""

    def __init__(self, auth):
        self.auth = auth

    @property
    def wiki_client(self):
        return self.auth.get_client('wiki')

    @azure_devops_operation()
    async def list_wikis(self, project: Optional[str] = None) -> Any:
        return self.wiki_client.get_all_wikis(project=project)

    @azure_devops_operation()
    async def get_wiki(self, wiki_identifier: str, project: Optional[str] = None) -> Any:
        validate_required(wiki_identifier, "wiki_identifier")
        return self.wiki_client.get_wiki(wiki_identifier=wiki_identifier, project=project)

    @azure_devops_operation()
    async def list_pages(
        self,
        wiki_identifier: str,
        project: str,
        top: int = 20,
        continuation_token: Optional[str] = None,
        page_views_for_days: Optional[int] = None
    ) -> Any:
        validate_required(wiki_identifier, "wiki_identifier")
        return self.wiki_client.get_pages_batch(
            WikiPagesBatchRequest(
                top=top,
                continuation_token=continuation_token,
                page_views_for_days=page_views_for_days
            ),
            project=project,
            wiki_identifier=wiki_identifier
        )

    @azure_devops_operation()
    async def get_page_content(self, wiki_identifier: str, project: str, path: str) -> str:
        """Return the page's markdown; the SDK streams it as byte chunks."""
        validate_required(wiki_identifier, "wiki_identifier")
        validate_required(path, "path")
        chunks = self.wiki_client.get_page_text(
            project=project,
            wiki_identifier=wiki_identifier,
            path=path
        )
        return b"".join(chunks).decode("utf-8")

    @azure_devops_operation()
    async def create_or_update_page(
        self,
        wiki_identifier: str,
        project: str,
        path: str,
        content: str,
        version: Optional[str] = None,
        comment: Optional[str] = None
    ) -> Any:
        """
        Create a page, or update it when version (the page ETag) is given

        Args:
            wiki_identifier: Wiki name or id
            project: Project name
            path: Page path, e.g. /Home
            content: Markdown content
            version: ETag of the page being replaced
            comment: Revision comment
        """
        validate_required(path, "path")
        return self.wiki_client.create_or_update_page(
            WikiPageCreateOrUpdateParameters(content=content),
            project=project,
            wiki_identifier=wiki_identifier,
            path=path,
            version=version,
            comment=comment
        )
