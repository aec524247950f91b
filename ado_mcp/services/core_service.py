"""
Core service: projects, teams and identities
"""
import logging
from typing import Any, Dict, List, Optional

from ..constants import ApiVersions
from ..decorators import azure_devops_operation
from ..errors import EmptyResultError
from ..validation import validate_required

logger = logging.getLogger(__name__)


class CoreService:
    """Service for project, team and identity lookups"""

    def __init__(self, auth, http_client):
        self.auth = auth
        self.http_client = http_client

    @property
    def core_client(self):
        return self.auth.get_client('core')

    @azure_devops_operation()
    async def list_project_teams(
        self,
        project: str,
        mine: Optional[bool] = None,
        top: Optional[int] = None,
        skip: Optional[int] = None
    ) -> List[Any]:
        validate_required(project, "project")
        teams = self.core_client.get_teams(project_id=project, mine=mine, top=top, skip=skip)
        if not teams:
            raise EmptyResultError("No teams found")
        return teams

    @azure_devops_operation()
    async def list_projects(
        self,
        state_filter: str = "wellFormed",
        top: Optional[int] = None,
        skip: Optional[int] = None,
        continuation_token: Optional[int] = None,
        project_name_filter: Optional[str] = None
    ) -> Any:
        """
        List projects in the organization

        Args:
            state_filter: all, wellFormed, createPending or deleted
            top: Page size
            skip: Number of projects to skip
            continuation_token: Token from a previous page
            project_name_filter: Case-insensitive substring the name must contain

        Returns:
            Matching projects; paged responses keep their continuation token
        """
        result = self.core_client.get_projects(
            state_filter=state_filter,
            top=top,
            skip=skip,
            continuation_token=continuation_token
        )

        # Newer SDKs wrap the page in an object carrying the continuation token
        projects = getattr(result, 'value', result) or []
        next_token = getattr(result, 'continuation_token', None)

        if project_name_filter:
            needle = project_name_filter.lower()
            projects = [p for p in projects if needle in (getattr(p, 'name', '') or '').lower()]

        if not projects:
            raise EmptyResultError("No projects found")

        if next_token:
            return {"projects": projects, "continuation_token": next_token}
        return projects

    def _identities_url(self) -> str:
        return f"https://vssps.dev.azure.com/{self.auth.organization_name}/_apis/identities"

    @azure_devops_operation()
    async def get_identity_ids(self, search_filter: str) -> List[Dict[str, Any]]:
        """
        Search identities by name or email

        Returns:
            List of {id, display_name, descriptor}

        Raises:
            EmptyResultError: If nothing matched
        """
        validate_required(search_filter, "search_filter")
        payload = await self.http_client.request_json(
            "GET",
            self._identities_url(),
            params={
                "api-version": ApiVersions.IDENTITIES,
                "searchFilter": "General",
                "filterValue": search_filter,
            }
        )

        identities = (payload or {}).get("value") or []
        if not identities:
            raise EmptyResultError("No identities found")

        return [
            {
                "id": identity.get("id"),
                "display_name": identity.get("providerDisplayName"),
                "descriptor": identity.get("descriptor"),
            }
            for identity in identities
        ]
