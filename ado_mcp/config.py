"""
Server settings from CLI arguments, environment variables and a .env file
"""
import logging
import os
import sys
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Union

from dotenv import load_dotenv

from .domains import parse_domains
from .log_sanitizer import RedactingFilter

DEFAULT_TRANSPORT = "stdio"
HTTP_TRANSPORT = "streamable-http"
TRANSPORTS = (DEFAULT_TRANSPORT, HTTP_TRANSPORT)
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "WARNING"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass(frozen=True)
class Settings:
    """Read-only server settings, resolved once at startup"""
    organization_url: str
    pat: Optional[str]
    domains: FrozenSet[str]
    transport: str = DEFAULT_TRANSPORT
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL


def organization_url_for(organization: str) -> str:
    """Accept either an organization name or a full organization URL."""
    organization = organization.strip().rstrip('/')
    if organization.lower().startswith(("https://", "http://")):
        return organization
    return f"https://dev.azure.com/{organization}"


def load_settings(
    organization: Optional[str] = None,
    pat: Optional[str] = None,
    domains: Optional[Union[str, Iterable[str]]] = None,
    transport: Optional[str] = None,
    port: Optional[int] = None,
    log_level: Optional[str] = None
) -> Settings:
    """
    Resolve settings; explicit arguments win over the environment.

    Raises:
        ValueError: If no organization is configured or the transport is unknown
    """
    load_dotenv()

    # ORGANIZATION argument, then the full URL, then the bare name
    organization = organization or os.getenv("AZURE_DEVOPS_ORG_URL") or os.getenv("ADO_ORG_NAME")
    if not organization:
        raise ValueError(
            "Missing Azure DevOps organization. Pass ORGANIZATION or set "
            "ADO_ORG_NAME / AZURE_DEVOPS_ORG_URL"
        )
    org_url = organization_url_for(organization)

    if not domains:
        domains = os.getenv("ADO_MCP_DOMAINS")

    transport = (transport or os.getenv("MCP_TRANSPORT", DEFAULT_TRANSPORT)).lower()
    if transport not in TRANSPORTS:
        raise ValueError(f"Unsupported transport '{transport}'. Use one of: {', '.join(TRANSPORTS)}")

    return Settings(
        organization_url=org_url.rstrip('/'),
        pat=pat or os.getenv("ADO_PAT") or os.getenv("AZURE_DEVOPS_PAT"),
        domains=parse_domains(domains),
        transport=transport,
        port=port or int(os.getenv("PORT", DEFAULT_PORT)),
        log_level=(log_level or os.getenv("ADO_MCP_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    # stdout carries MCP frames in stdio mode
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(RedactingFilter())
