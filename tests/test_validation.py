"""
Unit tests for validation module.
"""

import pytest

from ado_mcp.validation import (
    ValidationError,
    missing_components,
    parse_id_list,
    sanitize_wiql_string,
    validate_max_items,
    validate_patch_operation,
    validate_required,
    validate_stage_state,
    validate_text_format,
    validate_work_item_id
)


class TestValidateRequired:
    """Test required argument checks."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        """Test that missing values name the parameter."""
        with pytest.raises(ValidationError, match="Parameter 'project' is required") as exc_info:
            validate_required(value, "project")
        assert exc_info.value.field_name == "project"

    def test_present(self):
        """Test that values pass through."""
        assert validate_required("Contoso", "project") == "Contoso"


class TestPatchOperation:
    """Test patch operation names."""

    @pytest.mark.parametrize("op,expected", [("Add", "add"), ("REPLACE", "replace"), (" remove ", "remove")])
    def test_case_insensitive(self, op, expected):
        """Test normalization."""
        assert validate_patch_operation(op) == expected

    @pytest.mark.parametrize("op", ["move", "copy", "test", "", None])
    def test_unsupported(self, op):
        """Test rejection."""
        with pytest.raises(ValidationError):
            validate_patch_operation(op)


class TestWorkItemId:
    """Test work item id checks."""

    @pytest.mark.parametrize("value", [0, -1, "5", 1.5, True])
    def test_invalid(self, value):
        """Test rejection of non-positive and non-integer ids."""
        with pytest.raises(ValidationError, match="Invalid work item ID"):
            validate_work_item_id(value)

    def test_valid(self):
        """Test a valid id."""
        assert validate_work_item_id(42) == 42


class TestParseIdList:
    """Test list or comma-separated ids."""

    def test_string(self):
        """Test a comma-separated string."""
        assert parse_id_list("1, 2,3") == [1, 2, 3]

    def test_list(self):
        """Test a list."""
        assert parse_id_list([4, 5]) == [4, 5]

    def test_not_numbers(self):
        """Test a string with non-numeric parts."""
        with pytest.raises(ValidationError, match="comma-separated"):
            parse_id_list("1,abc", "test_case_ids")

    def test_empty(self):
        """Test an empty selection."""
        with pytest.raises(ValidationError, match="cannot be empty"):
            parse_id_list(" , ")


class TestOtherValidators:
    """Test the remaining helpers."""

    def test_text_format(self):
        """Test allowed formats."""
        assert validate_text_format(None) is None
        assert validate_text_format("Markdown") == "Markdown"
        with pytest.raises(ValidationError):
            validate_text_format("markdown")

    def test_max_items(self):
        """Test the item limit message."""
        validate_max_items(list(range(50)), 50, "child work items")
        with pytest.raises(ValidationError, match="A maximum of 50 child work items can be processed in a single call."):
            validate_max_items(list(range(51)), 50, "child work items")

    def test_stage_state(self):
        """Test stage states."""
        assert validate_stage_state("Retry") == "retry"
        with pytest.raises(ValidationError, match="Invalid stage status"):
            validate_stage_state("pause")

    def test_missing_components(self):
        """Test names come back in order."""
        assert missing_components({"a": None, "b": "x", "c": " "}) == ["a", "c"]

    def test_wiql_quotes_doubled(self):
        """Test WIQL literal escaping."""
        assert sanitize_wiql_string("O'Brien\n") == "O''Brien"
