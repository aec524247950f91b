"""
Authentication handling for Azure DevOps
Supports Personal Access Tokens, Azure Managed Identity and Service Principals
"""
import asyncio
import base64
import logging
import os
import time
from collections import defaultdict, deque
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from azure.devops.connection import Connection
from azure.identity import DefaultAzureCredential, ClientSecretCredential
from msrest.authentication import BasicAuthentication

from .log_sanitizer import safe_log_error

logger = logging.getLogger(__name__)


class AzureDevOpsAuth:
    """
    Handles authentication to Azure DevOps using, in order:
    1. Personal Access Token (when one is configured)
    2. Managed Identity / DefaultAzureCredential (includes Azure CLI login)
    3. Service Principal

    Provides the SDK connection, the Authorization header for raw HTTP calls
    and the organization URL every tool builds links against.
    """

    # Azure DevOps resource ID for token acquisition
    AZURE_DEVOPS_RESOURCE_ID = "499b84ac-1321-427f-aa17-267ca6975798"

    # Refresh credential tokens this many seconds before they expire
    TOKEN_REFRESH_MARGIN_SECONDS = 300

    PAT_METHOD = "Personal Access Token"

    def __init__(self, organization_url: str, pat: Optional[str] = None):
        """
        Initialize authentication handler

        Args:
            organization_url: Azure DevOps organization URL
                            (e.g., https://dev.azure.com/yourorg)
            pat: Optional Personal Access Token; falls back to ADO_PAT / AZURE_DEVOPS_PAT
        """
        self.organization_url = organization_url.rstrip('/')
        self.connection: Optional[Connection] = None
        self._pat = pat
        self._credential = None
        self._access_token = None
        self._auth_method = None

        # Auth failure tracking
        self._auth_failures = defaultdict(int)
        self._auth_failure_timestamps = deque(maxlen=100)
        self._last_auth_attempt = None
        self._last_auth_success = None

    @property
    def server_url(self) -> str:
        return self.organization_url

    @property
    def organization_name(self) -> str:
        parsed = urlparse(self.organization_url)
        host = (parsed.hostname or "").lower()
        # Legacy https://{org}.visualstudio.com URLs carry the name in the host
        if host.endswith(".visualstudio.com"):
            return host.split(".", 1)[0]
        return parsed.path.rstrip("/").rsplit("/", 1)[-1]

    async def initialize(self):
        """Initialize and establish connection to Azure DevOps"""
        auth_methods = [
            self._try_pat,
            self._try_managed_identity,
            self._try_service_principal
        ]

        self._last_auth_attempt = datetime.utcnow()

        for auth_method in auth_methods:
            try:
                self.connection = await auth_method()
                if self.connection:
                    self._last_auth_success = datetime.utcnow()
                    logger.info(f"Authenticated using: {self._auth_method}")
                    return
            except Exception as e:
                method_name = auth_method.__name__
                self._auth_failures[method_name] += 1
                self._auth_failure_timestamps.append({
                    'method': method_name,
                    'timestamp': datetime.utcnow().isoformat(),
                    'error_type': type(e).__name__
                })

                # Sanitize error message to prevent credential leakage
                logger.warning(safe_log_error(e, method_name))
                continue

        raise ValueError(
            "Failed to authenticate. Please configure one of:\n"
            "1. Personal Access Token (ADO_PAT or --pat)\n"
            "2. Azure Managed Identity or an Azure CLI login\n"
            "3. Service Principal (AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, AZURE_TENANT_ID)"
        )

    async def _try_pat(self) -> Optional[Connection]:
        """
        Attempt authentication using a Personal Access Token
        Taken from the constructor or the ADO_PAT / AZURE_DEVOPS_PAT variables
        """
        pat = self._pat or os.getenv("ADO_PAT") or os.getenv("AZURE_DEVOPS_PAT")

        if not pat:
            raise ValueError("No personal access token configured")

        self._pat = pat
        self._auth_method = self.PAT_METHOD

        return Connection(base_url=self.organization_url, creds=BasicAuthentication('', pat))

    async def _acquire_token(self, credential):
        return await asyncio.to_thread(
            credential.get_token,
            f"{self.AZURE_DEVOPS_RESOURCE_ID}/.default"
        )

    async def _try_managed_identity(self) -> Optional[Connection]:
        """
        Attempt authentication using DefaultAzureCredential
        This works for:
        - Azure VMs, Functions and Container Instances with managed identity
        - Local development with Azure CLI login
        """
        try:
            credential = DefaultAzureCredential()
            token = await self._acquire_token(credential)
        except Exception as e:
            raise Exception(f"Managed Identity authentication failed: {str(e)}")

        self._credential = credential
        self._access_token = token
        self._auth_method = "Azure Managed Identity / DefaultAzureCredential"

        # Azure DevOps accepts the access token in the same way as a PAT
        return Connection(base_url=self.organization_url, creds=BasicAuthentication('', token.token))

    async def _try_service_principal(self) -> Optional[Connection]:
        """
        Attempt authentication using Service Principal
        Requires AZURE_CLIENT_ID, AZURE_CLIENT_SECRET and AZURE_TENANT_ID
        """
        client_id = os.getenv("AZURE_CLIENT_ID")
        client_secret = os.getenv("AZURE_CLIENT_SECRET")
        tenant_id = os.getenv("AZURE_TENANT_ID")

        if not all([client_id, client_secret, tenant_id]):
            raise ValueError("Missing service principal credentials")

        try:
            credential = ClientSecretCredential(
                tenant_id=tenant_id,
                client_id=client_id,
                client_secret=client_secret
            )
            token = await self._acquire_token(credential)
        except Exception as e:
            raise Exception(f"Service Principal authentication failed: {str(e)}")

        self._credential = credential
        self._access_token = token
        self._auth_method = "Service Principal"

        return Connection(base_url=self.organization_url, creds=BasicAuthentication('', token.token))

    def get_client(self, client_type: str):
        """
        Get a specific Azure DevOps client

        Args:
            client_type: One of 'work_item_tracking', 'core', 'work', 'build',
                'pipelines', 'release', 'wiki', 'test_plan', 'test', 'test_results'

        Returns:
            The requested client instance (cached per type by the connection)
        """
        if not self.connection:
            raise RuntimeError("Not authenticated. Call initialize() first.")

        clients = self.connection.clients_v7_1
        client_map = {
            'work_item_tracking': clients.get_work_item_tracking_client,
            'core': clients.get_core_client,
            'work': clients.get_work_client,
            'build': clients.get_build_client,
            'pipelines': clients.get_pipelines_client,
            'release': clients.get_release_client,
            'wiki': clients.get_wiki_client,
            'test_plan': clients.get_test_plan_client,
            'test': clients.get_test_client,
            'test_results': clients.get_test_results_client,
        }

        if client_type not in client_map:
            raise ValueError(f"Unknown client type: {client_type}")

        return client_map[client_type]()

    def _token_expiring(self) -> bool:
        if not self._access_token:
            return False
        return self._access_token.expires_on - time.time() < self.TOKEN_REFRESH_MARGIN_SECONDS

    async def refresh_if_expiring(self):
        """Refresh the credential token when it is close to expiry."""
        if self._auth_method != self.PAT_METHOD and self._token_expiring():
            await self.refresh_token()

    async def get_authorization_header(self) -> str:
        """
        Authorization header value for raw HTTP calls.

        Returns:
            "Basic ..." for a PAT, "Bearer ..." for credential tokens
        """
        if not self.connection:
            raise RuntimeError("Not authenticated. Call initialize() first.")

        if self._auth_method == self.PAT_METHOD:
            encoded = base64.b64encode(f":{self._pat}".encode()).decode()
            return f"Basic {encoded}"

        await self.refresh_if_expiring()
        return f"Bearer {self._access_token.token}"

    async def refresh_token(self):
        """
        Refresh the credential token and rebuild the SDK connection.

        PATs do not expire during a session and are left alone.
        """
        if self._credential and self._auth_method != self.PAT_METHOD:
            try:
                token = await self._acquire_token(self._credential)
                self._access_token = token
                self.connection = Connection(
                    base_url=self.organization_url,
                    creds=BasicAuthentication('', token.token)
                )
                logger.info("Token refreshed successfully")
            except Exception as e:
                logger.error(safe_log_error(e, "Token refresh failed"))
                raise

    async def close(self):
        """Clean up resources"""
        if hasattr(self._credential, 'close'):
            self._credential.close()

        self.connection = None

    def get_auth_info(self) -> dict:
        """Get information about current authentication"""
        return {
            "method": self._auth_method,
            "organization_url": self.organization_url,
            "authenticated": self.connection is not None
        }

    def get_auth_failure_stats(self) -> dict:
        """
        Get authentication failure statistics.

        Returns:
            Dictionary with failure counts, timestamps, and status
        """
        recent_failures = list(self._auth_failure_timestamps)[-10:]

        return {
            "total_failures_by_method": dict(self._auth_failures),
            "total_failures": sum(self._auth_failures.values()),
            "recent_failures": recent_failures,
            "last_auth_attempt": self._last_auth_attempt.isoformat() if self._last_auth_attempt else None,
            "last_auth_success": self._last_auth_success.isoformat() if self._last_auth_success else None,
            "currently_authenticated": self.connection is not None
        }
