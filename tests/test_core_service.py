"""
Unit tests for CoreService.
"""

from types import SimpleNamespace

import pytest

from ado_mcp.errors import EmptyResultError
from ado_mcp.services.core_service import CoreService


@pytest.fixture
def core_client(sdk_clients):
    return sdk_clients['core']


@pytest.fixture
def service(mock_auth, mock_http_client):
    return CoreService(mock_auth, mock_http_client)


class TestTeams:
    """Test list_project_teams."""

    @pytest.mark.asyncio
    async def test_no_teams(self, service, core_client):
        core_client.get_teams.return_value = []

        with pytest.raises(EmptyResultError, match="No teams found"):
            await service.list_project_teams("Contoso")

    @pytest.mark.asyncio
    async def test_teams_passed_through(self, service, core_client):
        teams = [SimpleNamespace(name="Contoso Team")]
        core_client.get_teams.return_value = teams

        assert await service.list_project_teams("Contoso", mine=True) is teams
        core_client.get_teams.assert_called_once_with(project_id="Contoso", mine=True, top=None, skip=None)


class TestProjects:
    """Test list_projects."""

    @pytest.mark.asyncio
    async def test_name_filter(self, service, core_client):
        """Test the case-insensitive name filter."""
        core_client.get_projects.return_value = [
            SimpleNamespace(name="Fabrikam Fiber"),
            SimpleNamespace(name="Contoso Web"),
            SimpleNamespace(name="contoso-api"),
        ]

        projects = await service.list_projects(project_name_filter="CONTOSO")

        assert [project.name for project in projects] == ["Contoso Web", "contoso-api"]

    @pytest.mark.asyncio
    async def test_paged_result_keeps_token(self, service, core_client):
        """Test that a continuation token is returned alongside the page."""
        core_client.get_projects.return_value = SimpleNamespace(
            value=[SimpleNamespace(name="Contoso")],
            continuation_token="42"
        )

        result = await service.list_projects(top=1)

        assert result["continuation_token"] == "42"
        assert result["projects"][0].name == "Contoso"

    @pytest.mark.asyncio
    async def test_nothing_matches(self, service, core_client):
        core_client.get_projects.return_value = [SimpleNamespace(name="Fabrikam")]

        with pytest.raises(EmptyResultError, match="No projects found"):
            await service.list_projects(project_name_filter="contoso")


class TestIdentities:
    """Test get_identity_ids."""

    @pytest.mark.asyncio
    async def test_search(self, service, mock_http_client):
        """Test the identities request and the returned fields."""
        mock_http_client.request_json.return_value = {
            "count": 1,
            "value": [{
                "id": "a1b2",
                "providerDisplayName": "Jamal Hartnett",
                "descriptor": "Microsoft.IdentityModel.Claims.ClaimsIdentity;jamal@contoso.com",
            }],
        }

        identities = await service.get_identity_ids("jamal@contoso.com")

        assert identities == [{
            "id": "a1b2",
            "display_name": "Jamal Hartnett",
            "descriptor": "Microsoft.IdentityModel.Claims.ClaimsIdentity;jamal@contoso.com",
        }]
        method, url = mock_http_client.request_json.call_args.args
        assert method == "GET"
        assert url == "https://vssps.dev.azure.com/contoso/_apis/identities"
        params = mock_http_client.request_json.call_args.kwargs["params"]
        assert params["searchFilter"] == "General"
        assert params["filterValue"] == "jamal@contoso.com"

    @pytest.mark.asyncio
    async def test_no_identities(self, service, mock_http_client):
        mock_http_client.request_json.return_value = {"count": 0, "value": []}

        with pytest.raises(EmptyResultError, match="No identities found"):
            await service.get_identity_ids("nobody")
