"""
Input validation for tool arguments.

Tool schemas only check types; the validators here catch arguments that are
well-typed but unusable together, before any network call is made.
"""

import re
from typing import Optional, List, Sequence, Union, Any, Dict


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field_name = field_name


class UnknownLinkTypeError(ValidationError):
    """Raised when a link type name has no relation type mapping."""

    def __init__(self, name: str):
        super().__init__(f"Unknown link type: {name}", field_name="type")
        self.name = name


# JSON-Patch operations accepted from callers (compared case-insensitively)
ALLOWED_PATCH_OPERATIONS = ("add", "replace", "remove")

# Long-text formats understood by /multilineFieldsFormat
ALLOWED_TEXT_FORMATS = ("Html", "Markdown")

# Stage update states accepted by the build stages endpoint
ALLOWED_STAGE_STATES = ("cancel", "retry", "run")


class PatchOperationValidator:
    """Validator for JSON-Patch operation names."""

    @staticmethod
    def validate(op: str) -> str:
        """
        Validate and normalize a patch operation name.

        Args:
            op: Operation name such as "Add", "replace" or "REMOVE"

        Returns:
            The lower-case operation name

        Raises:
            ValidationError: If the operation is not supported
        """
        if not op or not isinstance(op, str):
            raise ValidationError("Patch operation cannot be empty", field_name="op")

        normalized = op.strip().lower()
        if normalized not in ALLOWED_PATCH_OPERATIONS:
            raise ValidationError(
                f"Unsupported patch operation: '{op}'. "
                f"Allowed operations: {', '.join(ALLOWED_PATCH_OPERATIONS)}",
                field_name="op"
            )
        return normalized


class FieldNameValidator:
    """Validator for field reference names (e.g. System.Title)."""

    FIELD_NAME_PATTERN = re.compile(r'^[A-Za-z_][\w.\- ]*$')

    @staticmethod
    def validate(field_name: str) -> str:
        if not field_name or not field_name.strip():
            raise ValidationError("Field name cannot be empty", field_name="name")

        if not FieldNameValidator.FIELD_NAME_PATTERN.match(field_name):
            raise ValidationError(
                f"Invalid field name: '{field_name}'. "
                "Use a field reference name such as System.Title",
                field_name="name"
            )
        return field_name


class WorkItemIdValidator:
    """Validator for work item ids."""

    @staticmethod
    def validate(work_item_id: Any, field_name: str = "id") -> int:
        # bool is an int subclass and is never a valid id
        if isinstance(work_item_id, bool) or not isinstance(work_item_id, int) or work_item_id <= 0:
            raise ValidationError(
                f"Invalid work item ID: {work_item_id}. Must be a positive integer.",
                field_name=field_name
            )
        return work_item_id


class WiqlValidator:
    """Helpers for embedding caller values in WIQL queries."""

    @staticmethod
    def sanitize_string_literal(value: str) -> str:
        """
        Escape a value for use inside a single-quoted WIQL literal.

        Args:
            value: Raw string

        Returns:
            String with single quotes doubled and control characters removed
        """
        if value is None:
            return value
        cleaned = re.sub(r'[\x00-\x1f]', '', value)
        return cleaned.replace("'", "''")


# Convenience functions for common validations

def validate_required(value: Any, field_name: str) -> Any:
    """Fail when a required argument is missing or blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Parameter '{field_name}' is required", field_name=field_name)
    return value


def validate_patch_operation(op: str) -> str:
    """Validate and normalize a patch operation name."""
    return PatchOperationValidator.validate(op)


def validate_field_name(field_name: str) -> str:
    """Validate field reference name."""
    return FieldNameValidator.validate(field_name)


def validate_work_item_id(work_item_id: Any, field_name: str = "id") -> int:
    """Validate a work item id."""
    return WorkItemIdValidator.validate(work_item_id, field_name)


def validate_text_format(text_format: Optional[str]) -> Optional[str]:
    """Validate a long-text format hint if provided."""
    if text_format is None:
        return None
    if text_format not in ALLOWED_TEXT_FORMATS:
        raise ValidationError(
            f"Invalid format: '{text_format}'. "
            f"Allowed formats: {', '.join(ALLOWED_TEXT_FORMATS)}",
            field_name="format"
        )
    return text_format


def validate_max_items(items: Sequence, maximum: int, what: str) -> Sequence:
    """Fail when a list argument is longer than the service accepts in one call."""
    if len(items) > maximum:
        raise ValidationError(
            f"A maximum of {maximum} {what} can be processed in a single call.",
            field_name=what
        )
    return items


def validate_stage_state(state: str) -> str:
    """Validate a build stage update state."""
    normalized = (state or "").strip().lower()
    if normalized not in ALLOWED_STAGE_STATES:
        raise ValidationError(
            f"Invalid stage status: '{state}'. "
            f"Allowed values: {', '.join(ALLOWED_STAGE_STATES)}",
            field_name="status"
        )
    return normalized


def parse_id_list(ids: Union[str, Sequence[int]], field_name: str = "ids") -> List[int]:
    """
    Accept a list of ids or a comma-separated string of ids.

    Args:
        ids: [1, 2, 3] or "1, 2, 3"
        field_name: Argument name used in error messages

    Returns:
        List of positive integer ids

    Raises:
        ValidationError: If any entry is not a positive integer
    """
    if isinstance(ids, str):
        parts = [part.strip() for part in ids.split(",") if part.strip()]
        try:
            parsed = [int(part) for part in parts]
        except ValueError:
            raise ValidationError(
                f"'{field_name}' must be a list of integers or a comma-separated string of integers",
                field_name=field_name
            )
    else:
        parsed = list(ids)

    if not parsed:
        raise ValidationError(f"'{field_name}' cannot be empty", field_name=field_name)

    return [validate_work_item_id(item, field_name) for item in parsed]


def missing_components(components: Dict[str, Any]) -> List[str]:
    """Return the names of components that are None or blank, in the given order."""
    return [
        name for name, value in components.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]


def sanitize_wiql_string(value: str) -> str:
    """Sanitize a string value for use in WIQL queries."""
    return WiqlValidator.sanitize_string_literal(value)
