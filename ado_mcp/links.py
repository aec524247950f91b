"""
Link type resolution and relation patch construction.

Covers links between work items, links from work items to Git and build
artifacts (``vstfs:///`` URIs), and index-addressed relation removal.
"""
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from .constants import LinkTypes, ArtifactLinkNames
from .models import PatchOperation
from .validation import UnknownLinkTypeError, ValidationError, missing_components


# Short link names (lower case) to relation types
LINK_TYPE_MAP = MappingProxyType({
    "parent": LinkTypes.HIERARCHY_REVERSE,
    "child": LinkTypes.HIERARCHY_FORWARD,
    "duplicate": LinkTypes.DUPLICATE_FORWARD,
    "duplicate of": LinkTypes.DUPLICATE_REVERSE,
    "related": LinkTypes.RELATED,
    "successor": LinkTypes.DEPENDENCY_FORWARD,
    "predecessor": LinkTypes.DEPENDENCY_REVERSE,
    "tested by": LinkTypes.TESTED_BY_FORWARD,
    "tests": LinkTypes.TESTED_BY_REVERSE,
    "affects": LinkTypes.AFFECTS_FORWARD,
    "affected by": LinkTypes.AFFECTS_REVERSE,
    "artifact": LinkTypes.ARTIFACT,
})

# Artifact link name -> (vstfs tool/artifact type, ((component, segment prefix), ...))
ARTIFACT_URI_RULES = MappingProxyType({
    ArtifactLinkNames.BRANCH: (
        "Git/Ref", (("project_id", ""), ("repository_id", ""), ("branch_name", "GB"))
    ),
    ArtifactLinkNames.FIXED_IN_COMMIT: (
        "Git/Commit", (("project_id", ""), ("repository_id", ""), ("commit_id", ""))
    ),
    ArtifactLinkNames.PULL_REQUEST: (
        "Git/PullRequestId", (("project_id", ""), ("repository_id", ""), ("pull_request_id", ""))
    ),
    ArtifactLinkNames.BUILD: ("Build/Build", (("build_id", ""),)),
    ArtifactLinkNames.FOUND_IN_BUILD: ("Build/Build", (("build_id", ""),)),
    ArtifactLinkNames.INTEGRATED_IN_BUILD: ("Build/Build", (("build_id", ""),)),
})


def resolve_link_type(name: str) -> str:
    """
    Resolve a short link name ("parent", "Tested By", ...) to its relation type.

    Args:
        name: Link name, matched case-insensitively

    Returns:
        Canonical relation type, e.g. System.LinkTypes.Hierarchy-Reverse

    Raises:
        UnknownLinkTypeError: If the name is not in LINK_TYPE_MAP
    """
    if not isinstance(name, str):
        raise UnknownLinkTypeError(str(name))

    relation_type = LINK_TYPE_MAP.get(name.lower())
    if relation_type is None:
        raise UnknownLinkTypeError(name)
    return relation_type


def work_item_url(server_url: str, work_item_id: int, project: Optional[str] = None) -> str:
    """REST URL of a work item, used as the target of work item links."""
    base = server_url.rstrip("/")
    if project:
        return f"{base}/{project}/_apis/wit/workItems/{work_item_id}"
    return f"{base}/_apis/wit/workItems/{work_item_id}"


def encode_uri_component(value: Any) -> str:
    # Same unreserved set as JavaScript's encodeURIComponent
    return quote(str(value), safe="!~*'()")


def build_artifact_uri(link_type: str, **components: Any) -> str:
    """
    Build a vstfs:/// artifact URI from its components.

    Args:
        link_type: Artifact link name, e.g. "Pull Request" or "Branch"
        **components: project_id, repository_id, branch_name, commit_id,
            pull_request_id, build_id (only the ones the link type needs are read)

    Returns:
        URI such as vstfs:///Git/PullRequestId/Contoso%2Fr1%2F42

    Raises:
        ValidationError: If the link type has no URI rule or components are missing
    """
    rule = ARTIFACT_URI_RULES.get(link_type)
    if rule is None:
        raise ValidationError(
            f"URI building from components is not supported for link type '{link_type}'. "
            "Please provide the full 'artifact_uri' instead.",
            field_name="artifact_uri"
        )

    artifact_type, segments = rule
    values = {name: components.get(name) for name, _ in segments}
    missing = missing_components(values)
    if missing:
        raise ValidationError(
            f"For '{link_type}' links, missing required component(s): {', '.join(missing)}",
            field_name=missing[0]
        )

    path = "%2F".join(
        f"{prefix}{encode_uri_component(values[name])}" for name, prefix in segments
    )
    return f"vstfs:///{artifact_type}/{path}"


def relation_add_operation(
    relation_type: str,
    url: str,
    name: Optional[str] = None,
    comment: Optional[str] = None
) -> PatchOperation:
    """Append a relation to the work item's relation list."""
    value: Dict[str, Any] = {"rel": relation_type, "url": url}
    attributes = {}
    if name:
        attributes["name"] = name
    if comment:
        attributes["comment"] = comment
    if attributes:
        value["attributes"] = attributes
    return PatchOperation("add", "/relations/-", value)


def work_item_link_operation(
    server_url: str,
    link_type: str,
    target_id: int,
    project: Optional[str] = None,
    comment: Optional[str] = None
) -> PatchOperation:
    """Link to another work item by short link name."""
    return relation_add_operation(
        resolve_link_type(link_type),
        work_item_url(server_url, target_id, project),
        comment=comment
    )


def artifact_link_operation(uri: str, link_type: str, comment: Optional[str] = None) -> PatchOperation:
    return relation_add_operation(LinkTypes.ARTIFACT, uri, name=link_type, comment=comment)


def _relation_attr(relation: Any, key: str) -> Any:
    if isinstance(relation, dict):
        return relation.get(key)
    return getattr(relation, key, None)


def relation_to_dict(relation: Any) -> Dict[str, Any]:
    return {
        "rel": _relation_attr(relation, "rel"),
        "url": _relation_attr(relation, "url"),
        "attributes": _relation_attr(relation, "attributes") or {},
    }


def find_relation_indices(
    relations: Sequence[Any],
    relation_type: str,
    url: Optional[str] = None
) -> List[int]:
    """
    Indices of relations matching the type (and the exact URL, when given).

    Indices are returned highest first, the order they must be removed in.
    """
    url = url.strip() if url and url.strip() else None
    matches = [
        index for index, relation in enumerate(relations or [])
        if _relation_attr(relation, "rel") == relation_type
        and (url is None or _relation_attr(relation, "url") == url)
    ]
    return sorted(matches, reverse=True)


def relation_remove_operations(indices: Sequence[int]) -> List[PatchOperation]:
    """One remove operation per index, highest index first."""
    return [PatchOperation("remove", f"/relations/{index}") for index in sorted(indices, reverse=True)]
