"""
JSON-Patch construction for work item fields.

Turns ordered field values into patch operations, adding the
``/multilineFieldsFormat`` operation that tells Azure DevOps how to render
long text (Markdown or Html).
"""
from typing import Iterable, List, Optional, Any, Union, Tuple

from .constants import MULTILINE_FORMAT_THRESHOLD, PATH_FIELDS
from .models import FieldValue, WorkItemPatch, PatchOperation
from .validation import validate_field_name, validate_patch_operation, validate_text_format

FIELDS_PREFIX = "/fields/"
MULTILINE_FORMAT_PREFIX = "/multilineFieldsFormat/"

FieldInput = Union[FieldValue, Tuple[str, Any], Tuple[str, Any, Optional[str]]]


def needs_format_hint(value: Any, text_format: Optional[str]) -> bool:
    """True when a format hint applies: text strictly longer than the threshold."""
    return bool(text_format) and isinstance(value, str) and len(value) > MULTILINE_FORMAT_THRESHOLD


def multiline_format_operation(field_name: str, text_format: str) -> PatchOperation:
    return PatchOperation("add", f"{MULTILINE_FORMAT_PREFIX}{field_name}", text_format)


def field_name_from_path(path: str) -> Optional[str]:
    """Return ``System.Title`` for ``/fields/System.Title``, None for non-field paths."""
    if path and path.startswith(FIELDS_PREFIX):
        return path[len(FIELDS_PREFIX):]
    return None


def is_blank_path_field(field_name: str, value: Any) -> bool:
    """Area and iteration paths are never overwritten with blanks."""
    return field_name in PATH_FIELDS and isinstance(value, str) and not value.strip()


def _as_field_value(item: FieldInput) -> FieldValue:
    if isinstance(item, FieldValue):
        return item
    if len(item) == 2:
        return FieldValue(name=item[0], value=item[1])
    return FieldValue(name=item[0], value=item[1], format=item[2])


def build_field_operations(fields: Iterable[FieldInput], op: str = "add") -> List[PatchOperation]:
    """
    Build patch operations that set work item fields.

    Operations come out in input order. A field with a format hint and a text
    value longer than the threshold is immediately followed by its
    ``/multilineFieldsFormat`` operation. Blank area/iteration paths are skipped.

    Args:
        fields: FieldValue objects or (name, value[, format]) tuples
        op: "add" or "replace"

    Returns:
        List of PatchOperation

    Raises:
        ValidationError: If a field name, format or op is invalid
    """
    op = validate_patch_operation(op)
    operations: List[PatchOperation] = []

    for item in fields:
        field_value = _as_field_value(item)
        validate_field_name(field_value.name)
        validate_text_format(field_value.format)

        if is_blank_path_field(field_value.name, field_value.value):
            continue

        operations.append(PatchOperation(op, f"{FIELDS_PREFIX}{field_value.name}", field_value.value))
        if needs_format_hint(field_value.value, field_value.format):
            operations.append(multiline_format_operation(field_value.name, field_value.format))

    return operations


def build_update_operations(patches: Iterable[WorkItemPatch]) -> List[PatchOperation]:
    """
    Build the patch document for a single work item update.

    Operation names are normalized to lower case. Field paths follow the same
    rules as build_field_operations; other paths are passed through.
    """
    operations: List[PatchOperation] = []

    for patch in patches:
        op = validate_patch_operation(patch.op)
        validate_text_format(patch.format)
        field_name = field_name_from_path(patch.path)

        if op == "remove":
            operations.append(PatchOperation(op, patch.path))
            continue

        if field_name and is_blank_path_field(field_name, patch.value):
            continue

        operations.append(PatchOperation(op, patch.path, patch.value))
        if field_name and needs_format_hint(patch.value, patch.format):
            operations.append(multiline_format_operation(field_name, patch.format))

    return operations
