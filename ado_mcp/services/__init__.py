"""Per-domain Azure DevOps services"""
from .build_service import BuildService
from .core_service import CoreService
from .release_service import ReleaseService
from .testplan_service import TestPlanService
from .wiki_service import WikiService
from .work_service import WorkService
from .workitem_service import WorkItemService

__all__ = [
    "BuildService",
    "CoreService",
    "ReleaseService",
    "TestPlanService",
    "WikiService",
    "WorkService",
    "WorkItemService",
]
