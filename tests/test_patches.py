"""
Unit tests for the patch builder.

Tests field operations, the multiline format threshold and blank path skipping.
"""

import pytest

from ado_mcp.models import FieldValue, WorkItemPatch
from ado_mcp.patches import (
    build_field_operations,
    build_update_operations,
    field_name_from_path,
    needs_format_hint
)
from ado_mcp.validation import ValidationError


class TestFormatThreshold:
    """Test the 50 character boundary for format hints."""

    def test_exactly_fifty_characters_has_no_hint(self):
        """Test that a 50 character value emits only the value operation."""
        operations = build_field_operations([FieldValue("System.Description", "x" * 50, "Markdown")])

        assert [op.path for op in operations] == ["/fields/System.Description"]

    def test_fifty_one_characters_adds_hint_after_value(self):
        """Test that a 51 character value is followed by exactly one format operation."""
        operations = build_field_operations([FieldValue("System.Description", "x" * 51, "Markdown")])

        assert [op.to_dict() for op in operations] == [
            {"op": "add", "path": "/fields/System.Description", "value": "x" * 51},
            {"op": "add", "path": "/multilineFieldsFormat/System.Description", "value": "Markdown"},
        ]

    def test_no_hint_without_format(self):
        """Test that long text without a format gets no format operation."""
        operations = build_field_operations([FieldValue("System.Description", "x" * 200)])
        assert len(operations) == 1

    def test_non_text_values_never_get_hint(self):
        """Test that only string values are measured."""
        assert not needs_format_hint(list(range(100)), "Html")
        assert not needs_format_hint(10 ** 60, "Html")

    def test_html_hint_is_emitted(self):
        """Test that Html is emitted as a format hint like Markdown."""
        operations = build_field_operations([("Microsoft.VSTS.TCM.ReproSteps", "<p>" + "a" * 60 + "</p>", "Html")])
        assert operations[1].path == "/multilineFieldsFormat/Microsoft.VSTS.TCM.ReproSteps"
        assert operations[1].value == "Html"


class TestBuildFieldOperations:
    """Test ordering and skipping rules."""

    def test_single_title_field(self):
        """Test that one field yields one add operation."""
        operations = build_field_operations([FieldValue("System.Title", "Bug X")])

        assert [op.to_dict() for op in operations] == [
            {"op": "add", "path": "/fields/System.Title", "value": "Bug X"}
        ]

    def test_order_matches_input_with_hint_inline(self):
        """Test that each hint immediately follows its own field."""
        operations = build_field_operations([
            FieldValue("System.Title", "Title"),
            FieldValue("System.Description", "d" * 60, "Markdown"),
            FieldValue("Microsoft.VSTS.Common.Priority", 2),
        ])

        assert [op.path for op in operations] == [
            "/fields/System.Title",
            "/fields/System.Description",
            "/multilineFieldsFormat/System.Description",
            "/fields/Microsoft.VSTS.Common.Priority",
        ]

    @pytest.mark.parametrize("blank", ["", "   ", "\t"])
    def test_blank_path_fields_are_skipped(self, blank):
        """Test that blank area and iteration paths emit nothing."""
        operations = build_field_operations([
            FieldValue("System.Title", "Title"),
            FieldValue("System.AreaPath", blank),
            FieldValue("System.IterationPath", blank),
        ])

        assert [op.path for op in operations] == ["/fields/System.Title"]

    def test_non_blank_path_fields_are_kept(self):
        """Test that real paths are sent."""
        operations = build_field_operations([FieldValue("System.AreaPath", "Contoso\\Web")])
        assert operations[0].value == "Contoso\\Web"

    def test_blank_non_path_field_is_kept(self):
        """Test that only path fields are skipped when blank."""
        operations = build_field_operations([FieldValue("System.Description", "")])
        assert len(operations) == 1

    def test_value_operation_count_matches_non_blank_fields(self):
        """Test that value operations equal the number of non-blank fields."""
        fields = [
            FieldValue("System.Title", "t"),
            FieldValue("System.AreaPath", " "),
            FieldValue("System.Tags", "a; b"),
            FieldValue("System.IterationPath", "Contoso\\Sprint 1"),
        ]
        operations = build_field_operations(fields)
        value_operations = [op for op in operations if op.path.startswith("/fields/")]
        assert len(value_operations) == 3

    def test_replace_operation(self):
        """Test that replace can be requested for every field."""
        operations = build_field_operations([FieldValue("System.Title", "t")], op="Replace")
        assert operations[0].op == "replace"

    def test_invalid_format_rejected(self):
        """Test that unknown formats raise ValidationError."""
        with pytest.raises(ValidationError, match="Invalid format"):
            build_field_operations([FieldValue("System.Description", "x", "Rtf")])

    def test_invalid_field_name_rejected(self):
        """Test that field names must look like reference names."""
        with pytest.raises(ValidationError, match="Invalid field name"):
            build_field_operations([FieldValue("/fields/System.Title", "x")])


class TestBuildUpdateOperations:
    """Test single work item update documents."""

    def test_operations_are_lower_cased(self):
        """Test that Add/Replace/Remove are normalized."""
        operations = build_update_operations([
            WorkItemPatch(path="/fields/System.Title", value="New", op="Replace"),
            WorkItemPatch(path="/fields/System.Tags", op="Remove"),
        ])

        assert [op.to_dict() for op in operations] == [
            {"op": "replace", "path": "/fields/System.Title", "value": "New"},
            {"op": "remove", "path": "/fields/System.Tags"},
        ]

    def test_format_hint_follows_field(self):
        """Test that update patches use the same threshold rule."""
        operations = build_update_operations([
            WorkItemPatch(path="/fields/System.Description", value="y" * 51, format="Markdown"),
        ])
        assert operations[1].to_dict() == {
            "op": "add",
            "path": "/multilineFieldsFormat/System.Description",
            "value": "Markdown",
        }

    def test_non_field_paths_pass_through(self):
        """Test that relation paths are not treated as fields."""
        operations = build_update_operations([
            WorkItemPatch(path="/relations/-", value={"rel": "System.LinkTypes.Related", "url": "u"}),
        ])
        assert operations[0].path == "/relations/-"

    def test_unsupported_operation_rejected(self):
        """Test that move/copy/test are rejected."""
        with pytest.raises(ValidationError, match="Unsupported patch operation: 'Move'"):
            build_update_operations([WorkItemPatch(path="/fields/System.Title", value="x", op="Move")])

    def test_field_name_from_path(self):
        """Test field name extraction."""
        assert field_name_from_path("/fields/System.Title") == "System.Title"
        assert field_name_from_path("/relations/0") is None
