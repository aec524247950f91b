"""
Release service: classic release definitions and releases
"""
from typing import Any, Optional

from ..decorators import azure_devops_operation


class ReleaseService:
    """Service for release management"""

    def __init__(self, auth):
        self.auth = auth

    @property
    def release_client(self):
        return self.auth.get_client('release')

    @azure_devops_operation()
    async def get_definitions(
        self,
        project: Optional[str] = None,
        search_text: Optional[str] = None,
        path: Optional[str] = None,
        top: Optional[int] = None,
        continuation_token: Optional[str] = None,
        is_exact_name_match: bool = False
    ) -> Any:
        return self.release_client.get_release_definitions(
            project=project,
            search_text=search_text,
            top=top,
            continuation_token=continuation_token,
            path=path,
            is_exact_name_match=is_exact_name_match
        )

    @azure_devops_operation()
    async def get_releases(
        self,
        project: Optional[str] = None,
        definition_id: Optional[int] = None,
        search_text: Optional[str] = None,
        status_filter: Optional[str] = None,
        min_created_time: Optional[str] = None,
        max_created_time: Optional[str] = None,
        query_order: Optional[str] = None,
        top: int = 100,
        continuation_token: Optional[int] = None
    ) -> Any:
        """
        List releases

        Args:
            project: Project name
            definition_id: Only releases of this definition
            search_text: Release name contains this text
            status_filter: e.g. active, abandoned
            min_created_time: ISO date lower bound
            max_created_time: ISO date upper bound
            query_order: ascending or descending
            top: Page size
            continuation_token: Release id to continue from
        """
        return self.release_client.get_releases(
            project=project,
            definition_id=definition_id,
            search_text=search_text,
            status_filter=status_filter,
            min_created_time=min_created_time,
            max_created_time=max_created_time,
            query_order=query_order,
            top=top,
            continuation_token=continuation_token
        )
