"""
Shared fixtures: a mocked authentication provider with mocked SDK clients
and a mocked raw HTTP client.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from ado_mcp.auth import AzureDevOpsAuth
from ado_mcp.http_client import AzureDevOpsHttpClient

SERVER_URL = "https://dev.azure.com/contoso"


@pytest.fixture
def sdk_clients():
    """One Mock per SDK sub-client, keyed the way auth.get_client names them."""
    return {
        name: Mock(name=f"{name}_client")
        for name in (
            'work_item_tracking', 'core', 'work', 'build', 'pipelines',
            'release', 'wiki', 'test_plan', 'test', 'test_results'
        )
    }


@pytest.fixture
def mock_auth(sdk_clients):
    auth = Mock(spec=AzureDevOpsAuth)
    auth.connection = Mock()
    auth.server_url = SERVER_URL
    auth.organization_url = SERVER_URL
    auth.organization_name = "contoso"
    auth.get_client.side_effect = lambda client_type: sdk_clients[client_type]
    return auth


@pytest.fixture
def wit_client(sdk_clients):
    return sdk_clients['work_item_tracking']


@pytest.fixture
def mock_http_client():
    client = Mock(spec=AzureDevOpsHttpClient)
    client.request_json = AsyncMock()
    return client


@pytest.fixture
def make_work_item():
    """Factory for stand-ins of SDK WorkItem objects."""
    def factory(work_item_id, relations=None, **fields):
        return SimpleNamespace(id=work_item_id, relations=relations, fields=fields)
    return factory


@pytest.fixture
def make_relation():
    def factory(rel, url, **attributes):
        return SimpleNamespace(rel=rel, url=url, attributes=attributes or None)
    return factory
