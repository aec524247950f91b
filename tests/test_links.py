"""
Unit tests for link type resolution and relation patches.
"""

import pytest

from ado_mcp.links import (
    LINK_TYPE_MAP,
    artifact_link_operation,
    build_artifact_uri,
    find_relation_indices,
    relation_add_operation,
    relation_remove_operations,
    resolve_link_type,
    work_item_link_operation,
    work_item_url
)
from ado_mcp.validation import UnknownLinkTypeError, ValidationError

SERVER_URL = "https://dev.azure.com/contoso"


class TestResolveLinkType:
    """Test the link name table."""

    @pytest.mark.parametrize("name,expected", [
        ("parent", "System.LinkTypes.Hierarchy-Reverse"),
        ("child", "System.LinkTypes.Hierarchy-Forward"),
        ("duplicate", "System.LinkTypes.Duplicate-Forward"),
        ("duplicate of", "System.LinkTypes.Duplicate-Reverse"),
        ("related", "System.LinkTypes.Related"),
        ("successor", "System.LinkTypes.Dependency-Forward"),
        ("predecessor", "System.LinkTypes.Dependency-Reverse"),
        ("tested by", "Microsoft.VSTS.Common.TestedBy-Forward"),
        ("tests", "Microsoft.VSTS.Common.TestedBy-Reverse"),
        ("affects", "Microsoft.VSTS.Common.Affects-Forward"),
        ("affected by", "Microsoft.VSTS.Common.Affects-Reverse"),
        ("artifact", "ArtifactLink"),
    ])
    def test_each_entry(self, name, expected):
        """Test every entry of the table."""
        assert resolve_link_type(name) == expected

    def test_table_has_twelve_entries(self):
        """Test that the parametrized cases above cover the whole table."""
        assert len(LINK_TYPE_MAP) == 12

    def test_table_is_read_only(self):
        """Test that the table cannot be modified at runtime."""
        with pytest.raises(TypeError):
            LINK_TYPE_MAP["bogus"] = "x"

    @pytest.mark.parametrize("name", ["RELATED", "related", "Related"])
    def test_case_insensitive(self, name):
        """Test that case does not matter."""
        assert resolve_link_type(name) == "System.LinkTypes.Related"

    def test_unknown_name_keeps_input(self):
        """Test that the error carries the literal input."""
        with pytest.raises(UnknownLinkTypeError) as exc_info:
            resolve_link_type("bogus")

        assert "bogus" in str(exc_info.value)
        assert exc_info.value.name == "bogus"

    def test_unknown_name_keeps_original_case(self):
        """Test that the input is not normalized in the message."""
        with pytest.raises(UnknownLinkTypeError, match="Unknown link type: ReLated-ish"):
            resolve_link_type("ReLated-ish")

    def test_no_partial_matching(self):
        """Test that prefixes do not resolve."""
        with pytest.raises(UnknownLinkTypeError):
            resolve_link_type("parents")

    def test_unknown_link_type_is_validation_error(self):
        """Test the error hierarchy."""
        assert issubclass(UnknownLinkTypeError, ValidationError)


class TestArtifactUri:
    """Test vstfs:/// URI construction."""

    def test_pull_request_uri(self):
        """Test the pull request URI is URL-encoded."""
        uri = build_artifact_uri("Pull Request", project_id="Contoso", repository_id="r1", pull_request_id=42)
        assert uri == "vstfs:///Git/PullRequestId/Contoso%2Fr1%2F42"

    def test_branch_uri_prefixes_branch(self):
        """Test that branch segments carry the GB prefix and slashes are encoded."""
        uri = build_artifact_uri("Branch", project_id="p1", repository_id="r1", branch_name="feature/login")
        assert uri == "vstfs:///Git/Ref/p1%2Fr1%2FGBfeature%2Flogin"

    def test_commit_uri(self):
        """Test the commit URI."""
        uri = build_artifact_uri("Fixed in Commit", project_id="p1", repository_id="r1", commit_id="abc123")
        assert uri == "vstfs:///Git/Commit/p1%2Fr1%2Fabc123"

    @pytest.mark.parametrize("link_type", ["Build", "Found in build", "Integrated in build"])
    def test_build_uri_needs_only_build_id(self, link_type):
        """Test the build URI."""
        assert build_artifact_uri(link_type, build_id=77) == "vstfs:///Build/Build/77"

    def test_spaces_are_encoded(self):
        """Test that components are percent-encoded."""
        uri = build_artifact_uri("Pull Request", project_id="My Project", repository_id="r1", pull_request_id=1)
        assert uri == "vstfs:///Git/PullRequestId/My%20Project%2Fr1%2F1"

    def test_missing_components_are_named(self):
        """Test that exactly the missing components are listed."""
        with pytest.raises(ValidationError) as exc_info:
            build_artifact_uri("Branch", project_id="p1", repository_id="", branch_name=None)

        assert str(exc_info.value) == (
            "For 'Branch' links, missing required component(s): repository_id, branch_name"
        )

    def test_missing_build_id(self):
        """Test the build link without an id."""
        with pytest.raises(ValidationError, match="missing required component\\(s\\): build_id"):
            build_artifact_uri("Build")

    def test_link_type_without_rule(self):
        """Test that link types without a URI rule ask for the full URI."""
        with pytest.raises(ValidationError, match="Please provide the full 'artifact_uri' instead"):
            build_artifact_uri("Wiki", project_id="p1")


class TestRelationAdd:
    """Test relation add operations."""

    def test_work_item_link_operation(self):
        """Test a link to another work item."""
        operation = work_item_link_operation(SERVER_URL, "Parent", 7, project="Contoso", comment="why")

        assert operation.to_dict() == {
            "op": "add",
            "path": "/relations/-",
            "value": {
                "rel": "System.LinkTypes.Hierarchy-Reverse",
                "url": "https://dev.azure.com/contoso/Contoso/_apis/wit/workItems/7",
                "attributes": {"comment": "why"},
            },
        }

    def test_no_attributes_when_empty(self):
        """Test that empty name and comment are omitted."""
        operation = relation_add_operation("System.LinkTypes.Related", "u", name="", comment="")
        assert operation.value == {"rel": "System.LinkTypes.Related", "url": "u"}

    def test_artifact_link_operation(self):
        """Test that artifact links carry the link name."""
        operation = artifact_link_operation("vstfs:///Build/Build/1", "Build")
        assert operation.value == {
            "rel": "ArtifactLink",
            "url": "vstfs:///Build/Build/1",
            "attributes": {"name": "Build"},
        }

    def test_work_item_url_without_project(self):
        """Test the organization-level work item URL."""
        assert work_item_url(SERVER_URL + "/", 3) == "https://dev.azure.com/contoso/_apis/wit/workItems/3"

    def test_unknown_link_type_raises_before_building(self):
        """Test that resolution failures propagate."""
        with pytest.raises(UnknownLinkTypeError):
            work_item_link_operation(SERVER_URL, "bogus", 1)


class TestRelationRemove:
    """Test index-addressed relation removal."""

    RELATIONS = [
        {"rel": "System.LinkTypes.Related", "url": "https://x/1"},
        {"rel": "System.LinkTypes.Hierarchy-Reverse", "url": "https://x/2"},
        {"rel": "System.LinkTypes.Related", "url": "https://x/3"},
    ]

    def test_indices_are_descending(self):
        """Test that matches at 0 and 2 come back as [2, 0]."""
        assert find_relation_indices(self.RELATIONS, "System.LinkTypes.Related") == [2, 0]

    def test_remove_operations_are_descending(self):
        """Test the remove sequence order."""
        operations = relation_remove_operations([0, 2])
        assert [op.to_dict() for op in operations] == [
            {"op": "remove", "path": "/relations/2"},
            {"op": "remove", "path": "/relations/0"},
        ]

    def test_url_filter(self):
        """Test that a URL narrows the match."""
        assert find_relation_indices(self.RELATIONS, "System.LinkTypes.Related", "https://x/3") == [2]

    def test_blank_url_is_ignored(self):
        """Test that a blank URL does not filter."""
        assert find_relation_indices(self.RELATIONS, "System.LinkTypes.Related", "  ") == [2, 0]

    def test_no_match(self):
        """Test that no relation matches."""
        assert find_relation_indices(self.RELATIONS, "System.LinkTypes.Duplicate-Forward") == []
        assert find_relation_indices(None, "System.LinkTypes.Related") == []
