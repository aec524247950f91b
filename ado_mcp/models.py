"""
Data models for the Azure DevOps MCP server.

Tool argument shapes and the patch/batch documents built from them.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Literal

from azure.devops.v7_1.work_item_tracking.models import JsonPatchOperation


TextFormat = Literal["Html", "Markdown"]


@dataclass
class FieldValue:
    """One field to set on a work item"""
    name: str
    value: Any
    format: Optional[TextFormat] = None


@dataclass
class WorkItemPatch:
    """One JSON-Patch operation against a single work item"""
    path: str
    value: Any = None
    op: str = "Add"
    format: Optional[TextFormat] = None


@dataclass
class BatchUpdate:
    """One JSON-Patch operation addressed to a work item inside a batch"""
    id: int
    path: str
    value: Any = None
    op: str = "Add"
    format: Optional[TextFormat] = None


@dataclass
class LinkUpdate:
    """A link from work item ``id`` to work item ``link_to_id``"""
    id: int
    link_to_id: int
    type: str = "related"
    comment: Optional[str] = None


@dataclass
class ChildWorkItem:
    """A child work item to create under a parent"""
    title: str
    description: str = ""
    format: TextFormat = "Html"
    area_path: Optional[str] = None
    iteration_path: Optional[str] = None


@dataclass
class IterationSpec:
    """An iteration to create under the project's iteration root"""
    iteration_name: str
    start_date: Optional[str] = None
    finish_date: Optional[str] = None


@dataclass
class IterationAssignment:
    """An existing iteration to assign to a team"""
    identifier: str
    path: str


@dataclass
class PatchOperation:
    """A JSON-Patch operation on a work item document"""
    op: str
    path: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        if self.op == "remove":
            return {"op": self.op, "path": self.path}
        return {"op": self.op, "path": self.path, "value": self.value}

    def to_sdk(self) -> JsonPatchOperation:
        if self.op == "remove":
            return JsonPatchOperation(op=self.op, path=self.path)
        return JsonPatchOperation(op=self.op, path=self.path, value=self.value)


@dataclass
class BatchRequestItem:
    """One sub-request of a $batch call"""
    method: str
    uri: str
    headers: Dict[str, str]
    body: List[PatchOperation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "uri": self.uri,
            "headers": dict(self.headers),
            "body": [operation.to_dict() for operation in self.body],
        }
