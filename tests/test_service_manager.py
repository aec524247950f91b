"""
Unit tests for ServiceManager.
"""

from unittest.mock import Mock

import pytest

from ado_mcp.service_manager import ServiceManager
from ado_mcp.services import CoreService, WorkItemService
from ado_mcp.useragent import UserAgentComposer


@pytest.fixture
def manager(mock_auth, mock_http_client):
    return ServiceManager(mock_auth, mock_http_client, UserAgentComposer("ado-mcp/test"))


class TestServiceManager:
    """Test ServiceManager."""

    def test_requires_initialized_auth(self, mock_http_client):
        auth = Mock()
        auth.connection = None

        with pytest.raises(ValueError, match="initialized AzureDevOpsAuth"):
            ServiceManager(auth, mock_http_client, UserAgentComposer())

    def test_lazy_loading(self, manager):
        """Test that nothing is created until first access."""
        assert manager.get_loaded_services() == []

        work_items = manager.work_items

        assert isinstance(work_items, WorkItemService)
        assert manager.get_loaded_services() == ["work_items"]

    def test_cached_instance(self, manager, mock_http_client):
        """Test that repeated access returns the same instance."""
        first = manager.core
        second = manager.core

        assert first is second
        assert isinstance(first, CoreService)
        assert first.http_client is mock_http_client

    def test_statistics(self, manager):
        manager.wiki
        manager.wiki
        manager.builds

        stats = manager.get_statistics()

        assert stats["loaded_services"] == 2
        assert stats["service_creations"] == 2
        assert stats["cache_hits"] == 1
        assert stats["cache_hit_rate_percent"] == 33.33
        assert stats["user_agent"] == "ado-mcp/test"

    def test_clear(self, manager):
        manager.releases
        manager.clear_all_services()
        assert manager.get_loaded_services() == []

    def test_repr(self, manager):
        manager.test_plans
        assert repr(manager) == (
            "ServiceManager(organization='https://dev.azure.com/contoso', services=['test_plans'])"
        )
