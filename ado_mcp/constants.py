"""
Constants for Azure DevOps operations.

Field reference names, relation types, API versions and limits shared by
the patch builders and the services.
"""

from typing import List, Optional


# ============================================================================
# Field Reference Names
# ============================================================================

class FieldNames:
    """Azure DevOps field reference names."""

    ID = "System.Id"
    AREA_PATH = "System.AreaPath"
    TEAM_PROJECT = "System.TeamProject"
    ITERATION_PATH = "System.IterationPath"
    WORK_ITEM_TYPE = "System.WorkItemType"
    STATE = "System.State"
    ASSIGNED_TO = "System.AssignedTo"
    CREATED_BY = "System.CreatedBy"
    CHANGED_DATE = "System.ChangedDate"
    TITLE = "System.Title"
    DESCRIPTION = "System.Description"
    TAGS = "System.Tags"
    PARENT = "System.Parent"

    PRIORITY = "Microsoft.VSTS.Common.Priority"
    REPRO_STEPS = "Microsoft.VSTS.TCM.ReproSteps"
    STEPS = "Microsoft.VSTS.TCM.Steps"


# Path-like fields that are skipped when given a blank value
PATH_FIELDS = frozenset({FieldNames.AREA_PATH, FieldNames.ITERATION_PATH})

# Fields returned by wit_get_work_items_batch_by_ids when none are requested
DEFAULT_BATCH_FIELDS: List[str] = [
    FieldNames.ID,
    FieldNames.WORK_ITEM_TYPE,
    FieldNames.TITLE,
    FieldNames.STATE,
    FieldNames.PARENT,
    FieldNames.TAGS,
]


# ============================================================================
# Relation Types
# ============================================================================

class LinkTypes:
    """Canonical work item relation types."""

    HIERARCHY_FORWARD = "System.LinkTypes.Hierarchy-Forward"
    HIERARCHY_REVERSE = "System.LinkTypes.Hierarchy-Reverse"
    DUPLICATE_FORWARD = "System.LinkTypes.Duplicate-Forward"
    DUPLICATE_REVERSE = "System.LinkTypes.Duplicate-Reverse"
    RELATED = "System.LinkTypes.Related"
    DEPENDENCY_FORWARD = "System.LinkTypes.Dependency-Forward"
    DEPENDENCY_REVERSE = "System.LinkTypes.Dependency-Reverse"
    TESTED_BY_FORWARD = "Microsoft.VSTS.Common.TestedBy-Forward"
    TESTED_BY_REVERSE = "Microsoft.VSTS.Common.TestedBy-Reverse"
    AFFECTS_FORWARD = "Microsoft.VSTS.Common.Affects-Forward"
    AFFECTS_REVERSE = "Microsoft.VSTS.Common.Affects-Reverse"
    ARTIFACT = "ArtifactLink"


class ArtifactLinkNames:
    """Artifact link names (the relation's ``name`` attribute)."""

    BRANCH = "Branch"
    BUILD = "Build"
    FIXED_IN_CHANGESET = "Fixed in Changeset"
    FIXED_IN_COMMIT = "Fixed in Commit"
    FOUND_IN_BUILD = "Found in build"
    INTEGRATED_IN_BUILD = "Integrated in build"
    MODEL_LINK = "Model Link"
    PULL_REQUEST = "Pull Request"
    RELATED_WORKITEM = "Related Workitem"
    RESULT_ATTACHMENT = "Result attachment"
    SOURCE_CODE_FILE = "Source Code File"
    TAG = "Tag"
    TEST_RESULT = "Test Result"
    WIKI = "Wiki"

    ALL = (
        BRANCH, BUILD, FIXED_IN_CHANGESET, FIXED_IN_COMMIT, FOUND_IN_BUILD,
        INTEGRATED_IN_BUILD, MODEL_LINK, PULL_REQUEST, RELATED_WORKITEM,
        RESULT_ATTACHMENT, SOURCE_CODE_FILE, TAG, TEST_RESULT, WIKI,
    )


# ============================================================================
# API Versions and Limits
# ============================================================================

class ApiVersions:
    """REST API versions used for raw HTTP calls."""

    BATCH = "5.0"
    IDENTITIES = "7.1-preview.1"


class QueryLimits:
    """Limits applied to queries and list arguments."""

    # get_work_items accepts at most 200 ids per call
    WORK_ITEMS_BATCH_SIZE = 200
    MAX_CHILD_WORK_ITEMS = 50
    DEFAULT_TOP = 50


# Long-text values strictly longer than this get a multiline format operation
MULTILINE_FORMAT_THRESHOLD = 50

# Expected result used for test steps that do not state one
DEFAULT_EXPECTED_RESULT = "Verify step completes successfully"


class ExpandOptions:
    """Work item expand parameter values."""

    NONE = "None"
    RELATIONS = "Relations"
    FIELDS = "Fields"
    LINKS = "Links"
    ALL = "All"

    @classmethod
    def from_name(cls, name: str) -> Optional[str]:
        """Map a case-insensitive name ("relations") to the API value ("Relations"); None if unknown."""
        values = {value.lower(): value for value in (cls.NONE, cls.RELATIONS, cls.FIELDS, cls.LINKS, cls.ALL)}
        return values.get((name or "none").strip().lower())
