"""
Raw HTTP access to Azure DevOps for endpoints the SDK does not cover
(work item $batch, identity search).
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .errors import map_status_code_to_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class AzureDevOpsHttpClient:
    """
    Thin wrapper over httpx.AsyncClient that adds Azure DevOps headers and
    maps error statuses to UpstreamError subclasses.
    """

    def __init__(
        self,
        authorization_provider: Callable[[], Awaitable[str]],
        user_agent_provider: Callable[[], str],
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            authorization_provider: Coroutine function returning the Authorization header value
            user_agent_provider: Function returning the User-Agent header value
            client: Optional pre-built httpx client (tests pass one with a MockTransport)
        """
        self._authorization_provider = authorization_provider
        self._user_agent_provider = user_agent_provider
        self._client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)

    async def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": await self._authorization_provider(),
            "Content-Type": "application/json",
            "User-Agent": self._user_agent_provider(),
        }

    async def request_json(
        self,
        method: str,
        url: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Send a request and decode the JSON response.

        Returns:
            Decoded JSON, or None for an empty body

        Raises:
            UpstreamError: For any non-2xx status, with status code and reason
        """
        response = await self._client.request(
            method,
            url,
            headers=await self._headers(),
            params=params,
            json=json
        )

        if response.is_error:
            reason = response.reason_phrase or "error"
            if response.text:
                reason = f"{reason}: {response.text}"
            retry_after = response.headers.get("Retry-After")
            logger.warning(f"{method} {url} failed with HTTP {response.status_code}")
            raise map_status_code_to_error(
                response.status_code,
                reason=reason,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        if not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()
