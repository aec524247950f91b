"""
Unit tests for settings loading and domain parsing.
"""

import logging
from unittest.mock import patch

import pytest

from ado_mcp.config import Settings, load_settings, organization_url_for
from ado_mcp.domains import Domains, parse_domains

ENV_VARS = (
    "AZURE_DEVOPS_ORG_URL", "ADO_ORG_NAME", "ADO_MCP_DOMAINS", "MCP_TRANSPORT",
    "ADO_PAT", "AZURE_DEVOPS_PAT", "PORT", "ADO_MCP_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """No settings from the environment or a .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    with patch("ado_mcp.config.load_dotenv"):
        yield monkeypatch


class TestParseDomains:
    """Test parse_domains."""

    def test_none_enables_all(self):
        assert parse_domains(None) == Domains.ALL

    def test_comma_string(self):
        assert parse_domains("Work-Items, wiki") == frozenset({"work-items", "wiki"})

    def test_repeated_options(self):
        """Test an iterable whose entries may themselves be comma-separated."""
        assert parse_domains(["core", "builds,releases"]) == frozenset({"core", "builds", "releases"})

    def test_all_keyword(self):
        assert parse_domains("wiki,ALL") == Domains.ALL

    def test_unknown_names_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ado_mcp.domains"):
            assert parse_domains("wiki,boards") == frozenset({"wiki"})
        assert "Ignoring unknown domain 'boards'" in caplog.text

    def test_nothing_valid_enables_all(self):
        assert parse_domains("boards,repos") == Domains.ALL


class TestOrganizationUrl:
    """Test organization_url_for."""

    def test_name(self):
        assert organization_url_for("contoso") == "https://dev.azure.com/contoso"

    def test_url_kept(self):
        assert organization_url_for("https://contoso.visualstudio.com/") == "https://contoso.visualstudio.com"


class TestLoadSettings:
    """Test load_settings."""

    def test_defaults(self, clean_env):
        settings = load_settings(organization="contoso")

        assert settings == Settings(
            organization_url="https://dev.azure.com/contoso",
            pat=None,
            domains=Domains.ALL,
            transport="stdio",
            port=8000,
            log_level="WARNING"
        )

    def test_missing_organization(self, clean_env):
        with pytest.raises(ValueError, match="Missing Azure DevOps organization"):
            load_settings()

    def test_environment(self, clean_env):
        """Test every setting read from the environment."""
        clean_env.setenv("ADO_ORG_NAME", "fabrikam")
        clean_env.setenv("ADO_MCP_DOMAINS", "wiki")
        clean_env.setenv("MCP_TRANSPORT", "Streamable-HTTP")
        clean_env.setenv("AZURE_DEVOPS_PAT", "secret")
        clean_env.setenv("PORT", "9000")
        clean_env.setenv("ADO_MCP_LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.organization_url == "https://dev.azure.com/fabrikam"
        assert settings.domains == frozenset({"wiki"})
        assert settings.transport == "streamable-http"
        assert settings.pat == "secret"
        assert settings.port == 9000
        assert settings.log_level == "DEBUG"

    def test_organization_argument_beats_org_url(self, clean_env):
        clean_env.setenv("AZURE_DEVOPS_ORG_URL", "https://dev.azure.com/override/")

        assert load_settings(organization="contoso").organization_url == "https://dev.azure.com/contoso"

    def test_org_url_overrides_name(self, clean_env):
        clean_env.setenv("AZURE_DEVOPS_ORG_URL", "https://dev.azure.com/override/")
        clean_env.setenv("ADO_ORG_NAME", "contoso")

        assert load_settings().organization_url == "https://dev.azure.com/override"

    def test_arguments_win(self, clean_env):
        clean_env.setenv("ADO_PAT", "from-env")
        clean_env.setenv("ADO_MCP_DOMAINS", "wiki")

        settings = load_settings(organization="contoso", pat="from-cli", domains=["core"])

        assert settings.pat == "from-cli"
        assert settings.domains == frozenset({"core"})

    def test_unknown_transport(self, clean_env):
        with pytest.raises(ValueError, match="Unsupported transport 'sse'"):
            load_settings(organization="contoso", transport="sse")
