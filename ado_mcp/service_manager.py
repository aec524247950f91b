"""
Service Manager for the per-domain Azure DevOps services
Provides lazy-loading service instances sharing one authentication and HTTP client
"""
from typing import Any, Callable, Dict, List

from .auth import AzureDevOpsAuth
from .http_client import AzureDevOpsHttpClient
from .services import (
    BuildService,
    CoreService,
    ReleaseService,
    TestPlanService,
    WikiService,
    WorkItemService,
    WorkService
)
from .useragent import UserAgentComposer


class ServiceManager:
    """
    Manages service instances for each Azure DevOps domain

    Features:
    - Single authentication instance shared across all services
    - Single raw HTTP client shared by the services that need one
    - Lazy-loading: services created only when first accessed

    Example:
        auth = AzureDevOpsAuth(org_url)
        await auth.initialize()

        manager = ServiceManager(auth, http_client, user_agent)

        # Created on first access, cached afterwards
        work_items = manager.work_items
    """

    def __init__(
        self,
        auth: AzureDevOpsAuth,
        http_client: AzureDevOpsHttpClient,
        user_agent: UserAgentComposer
    ):
        """
        Initialize service manager

        Args:
            auth: Authenticated AzureDevOpsAuth instance
            http_client: Client for raw HTTP calls ($batch, identities)
            user_agent: Composer whose value is sent on raw HTTP calls
        """
        if not auth or not auth.connection:
            raise ValueError(
                "ServiceManager requires an initialized AzureDevOpsAuth instance. "
                "Call auth.initialize() before creating ServiceManager."
            )

        self.auth = auth
        self.http_client = http_client
        self.user_agent = user_agent

        self._services: Dict[str, Any] = {}

        # Statistics
        self._service_creation_count = 0
        self._cache_hit_count = 0

    def _get(self, key: str, factory: Callable[[], Any]) -> Any:
        if key in self._services:
            self._cache_hit_count += 1
            return self._services[key]

        service = factory()
        self._services[key] = service
        self._service_creation_count += 1
        return service

    @property
    def core(self) -> CoreService:
        return self._get("core", lambda: CoreService(self.auth, self.http_client))

    @property
    def work(self) -> WorkService:
        return self._get("work", lambda: WorkService(self.auth))

    @property
    def work_items(self) -> WorkItemService:
        return self._get("work_items", lambda: WorkItemService(self.auth, self.http_client))

    @property
    def builds(self) -> BuildService:
        return self._get("builds", lambda: BuildService(self.auth))

    @property
    def releases(self) -> ReleaseService:
        return self._get("releases", lambda: ReleaseService(self.auth))

    @property
    def wiki(self) -> WikiService:
        return self._get("wiki", lambda: WikiService(self.auth))

    @property
    def test_plans(self) -> TestPlanService:
        return self._get("test_plans", lambda: TestPlanService(self.auth))

    def get_loaded_services(self) -> List[str]:
        return sorted(self._services)

    def clear_all_services(self) -> None:
        """
        Clear all cached service instances
        Useful for testing or resource cleanup
        """
        self._services.clear()

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get service manager statistics

        Returns:
            Dictionary with usage statistics:
            - loaded_services: Number of service instances
            - service_creations: Total services created (including cleared)
            - cache_hits: Number of times a cached service was returned
            - cache_hit_rate_percent: Percentage of cache hits vs total requests
            - user_agent: Current User-Agent value
        """
        total_requests = self._service_creation_count + self._cache_hit_count
        cache_hit_rate = (
            (self._cache_hit_count / total_requests * 100)
            if total_requests > 0 else 0.0
        )

        return {
            "loaded_services": len(self._services),
            "service_creations": self._service_creation_count,
            "cache_hits": self._cache_hit_count,
            "cache_hit_rate_percent": round(cache_hit_rate, 2),
            "user_agent": self.user_agent.user_agent
        }

    def __repr__(self) -> str:
        """String representation for debugging"""
        return (
            f"ServiceManager(organization='{self.auth.organization_url}', "
            f"services={self.get_loaded_services()})"
        )
