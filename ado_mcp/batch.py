"""
Framing for the work item tracking $batch endpoint.

A batch is a JSON array of sub-requests, one per work item, each carrying
the JSON-Patch document for that item. The whole array goes out in a single
HTTP call and the per-item responses come back in the same order.
"""
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import ApiVersions
from .errors import BatchError
from .links import work_item_link_operation
from .models import BatchRequestItem, BatchUpdate, LinkUpdate, PatchOperation
from .patches import field_name_from_path, multiline_format_operation, needs_format_hint
from .validation import validate_patch_operation, validate_text_format, validate_work_item_id

logger = logging.getLogger(__name__)

BATCH_ITEM_HEADERS = {"Content-Type": "application/json-patch+json"}
BATCH_METHOD = "PATCH"

# (work item id, operation, optional format hint)
BatchEntry = Tuple[int, PatchOperation, Optional[str]]


def batch_url(server_url: str, project: Optional[str] = None) -> str:
    base = server_url.rstrip("/")
    if project:
        base = f"{base}/{project}"
    return f"{base}/_apis/wit/$batch?api-version={ApiVersions.BATCH}"


def work_item_uri(work_item_id: int) -> str:
    return f"/_apis/wit/workitems/{work_item_id}?api-version={ApiVersions.BATCH}"


def frame_batch(entries: Iterable[BatchEntry]) -> List[BatchRequestItem]:
    """
    Group operations by work item id into batch sub-requests.

    Ids keep their first-seen order and operations keep their relative order
    within each id. Multiline format operations are appended after all of an
    item's operations, at most once per field.

    Args:
        entries: (work_item_id, PatchOperation, format hint or None) tuples

    Returns:
        One BatchRequestItem per distinct work item id
    """
    grouped: Dict[int, List[PatchOperation]] = {}
    formats: Dict[int, Dict[str, str]] = {}

    for work_item_id, operation, text_format in entries:
        grouped.setdefault(work_item_id, []).append(operation)

        field_name = field_name_from_path(operation.path)
        if field_name and operation.op != "remove" and needs_format_hint(operation.value, text_format):
            formats.setdefault(work_item_id, {}).setdefault(field_name, text_format)

    items = []
    for work_item_id, operations in grouped.items():
        body = list(operations)
        body.extend(
            multiline_format_operation(field_name, text_format)
            for field_name, text_format in formats.get(work_item_id, {}).items()
        )
        items.append(
            BatchRequestItem(
                method=BATCH_METHOD,
                uri=work_item_uri(work_item_id),
                headers=dict(BATCH_ITEM_HEADERS),
                body=body
            )
        )
    return items


def entries_from_updates(updates: Iterable[BatchUpdate]) -> List[BatchEntry]:
    """
    Turn caller-supplied batch updates into framer entries.

    Raises:
        ValidationError: If an id, op or format is invalid
    """
    entries = []
    for update in updates:
        work_item_id = validate_work_item_id(update.id)
        op = validate_patch_operation(update.op)
        validate_text_format(update.format)
        operation = PatchOperation(op, update.path) if op == "remove" else PatchOperation(op, update.path, update.value)
        entries.append((work_item_id, operation, update.format))
    return entries


def entries_from_links(
    server_url: str,
    links: Iterable[LinkUpdate],
    project: Optional[str] = None
) -> List[BatchEntry]:
    """
    Turn work item links into framer entries.

    Raises:
        UnknownLinkTypeError: If a link type name does not resolve
        ValidationError: If an id is invalid
    """
    entries = []
    for link in links:
        work_item_id = validate_work_item_id(link.id)
        target_id = validate_work_item_id(link.link_to_id, "link_to_id")
        operation = work_item_link_operation(
            server_url,
            link.type,
            target_id,
            project=project,
            comment=link.comment or ""
        )
        entries.append((work_item_id, operation, None))
    return entries


def _sub_response_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        value = body.get("value")
        if isinstance(value, dict) and value.get("Message"):
            return value["Message"]
        return body.get("message")
    if isinstance(body, str):
        return body
    return None


def unpack_batch_response(payload: Any, items: Sequence[BatchRequestItem]) -> List[Any]:
    """
    Extract per-item bodies from a $batch response.

    Each sub-response body arrives as a JSON string and is decoded. Any
    sub-response with an error status fails the whole batch.

    Args:
        payload: Decoded response JSON ({"count": n, "value": [...]})
        items: The sub-requests that were sent, in order

    Returns:
        Decoded sub-response bodies in request order

    Raises:
        BatchError: If any sub-response has status 400 or above
    """
    responses = payload.get("value", []) if isinstance(payload, dict) else (payload or [])
    results = []
    failures = []

    for index, response in enumerate(responses):
        body = response.get("body")
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except ValueError:
                pass

        code = response.get("code")
        if code is not None and code >= 400:
            uri = items[index].uri if index < len(items) else None
            failures.append({
                "id": _work_item_id_from_uri(uri),
                "code": code,
                "message": _sub_response_message(body),
            })
        else:
            results.append(body)

    if failures:
        logger.error(f"Batch request failed for {len(failures)} of {len(responses)} work items")
        raise BatchError(failures)

    return results


def _work_item_id_from_uri(uri: Optional[str]) -> Optional[int]:
    if not uri:
        return None
    tail = uri.split("?")[0].rstrip("/").rsplit("/", 1)[-1]
    return int(tail) if tail.isdigit() else None


async def submit_batch(
    http_client,
    server_url: str,
    items: Sequence[BatchRequestItem],
    project: Optional[str] = None
) -> List[Any]:
    """
    Send framed sub-requests in one $batch call and unpack the results.

    Args:
        http_client: AzureDevOpsHttpClient
        server_url: Organization URL
        items: Output of frame_batch
        project: Optional project to scope the call to

    Returns:
        Decoded sub-response bodies

    Raises:
        UpstreamError: If the call itself fails
        BatchError: If any sub-request fails
    """
    url = batch_url(server_url, project)
    logger.debug(f"Submitting batch of {len(items)} work item requests to {url}")
    payload = await http_client.request_json(
        BATCH_METHOD,
        url,
        json=[item.to_dict() for item in items]
    )
    return unpack_batch_response(payload, items)
