"""
Work Item service for Azure DevOps operations
Handles creates, updates, links, comments, queries and $batch mutations
"""
import logging
from typing import List, Dict, Any, Optional, Sequence, Union

from azure.devops.v7_1.work_item_tracking.models import (
    CommentCreate,
    Wiql,
    WorkItemBatchGetRequest
)
from azure.devops.v7_1.work.models import TeamContext

from ..batch import entries_from_links, entries_from_updates, frame_batch, submit_batch
from ..constants import (
    ArtifactLinkNames,
    DEFAULT_BATCH_FIELDS,
    ExpandOptions,
    FieldNames,
    LinkTypes,
    QueryLimits
)
from ..decorators import azure_devops_operation, handle_ado_error, validate_work_item_id
from ..errors import EmptyResultError, NoMatchingRelationError, PartialCreationError
from ..links import (
    artifact_link_operation,
    build_artifact_uri,
    find_relation_indices,
    relation_add_operation,
    relation_remove_operations,
    relation_to_dict,
    resolve_link_type,
    work_item_url
)
from ..models import BatchUpdate, ChildWorkItem, FieldValue, LinkUpdate, WorkItemPatch
from ..patches import build_field_operations, build_update_operations
from ..responses import dump_json
from ..validation import (
    ValidationError,
    parse_id_list,
    sanitize_wiql_string,
    validate_max_items,
    validate_required,
    validate_work_item_id as check_work_item_id
)

logger = logging.getLogger(__name__)

# States excluded from "my work items" unless completed items are requested
COMPLETED_STATES = ("Closed", "Done", "Removed", "Resolved", "Completed")

# Fields shown in work item lists
LIST_FIELDS = [
    FieldNames.ID,
    FieldNames.TITLE,
    FieldNames.STATE,
    FieldNames.WORK_ITEM_TYPE,
    FieldNames.ASSIGNED_TO,
    FieldNames.ITERATION_PATH,
    FieldNames.CHANGED_DATE,
]

QUERY_EXPAND_OPTIONS = ("none", "wiql", "clauses", "all", "minimal")


class WorkItemService:
    """Service for work item operations"""

    def __init__(self, auth, http_client):
        """
        Initialize work item service

        Args:
            auth: AzureDevOpsAuth instance
            http_client: AzureDevOpsHttpClient used for $batch calls
        """
        self.auth = auth
        self.http_client = http_client

    @property
    def wit_client(self):
        return self.auth.get_client('work_item_tracking')

    @property
    def work_client(self):
        return self.auth.get_client('work')

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @azure_devops_operation()
    async def get_my_work_items(
        self,
        project: str,
        include_completed: bool = False,
        top: int = QueryLimits.DEFAULT_TOP
    ) -> List[Dict[str, Any]]:
        """
        Get work items assigned to the current user

        Args:
            project: Project name
            include_completed: Include items in completed states
            top: Maximum number of work items to return

        Returns:
            List of formatted work items
        """
        validate_required(project, "project")

        wiql_query = (
            "SELECT [System.Id] FROM WorkItems "
            f"WHERE [System.TeamProject] = '{sanitize_wiql_string(project)}' "
            "AND [System.AssignedTo] = @Me"
        )
        if not include_completed:
            states = ", ".join(f"'{state}'" for state in COMPLETED_STATES)
            wiql_query += f" AND [System.State] NOT IN ({states})"
        wiql_query += " ORDER BY [System.ChangedDate] DESC"

        query_result = self.wit_client.query_by_wiql(
            Wiql(query=wiql_query),
            team_context=TeamContext(project=project),
            top=top
        )

        if not query_result or not query_result.work_items:
            return []

        ids = [item.id for item in query_result.work_items][:top]
        work_items = await self._batch_get_work_items(ids, fields=LIST_FIELDS)
        return [self._format_work_item(wi) for wi in work_items]

    @azure_devops_operation()
    async def list_backlogs(self, project: str, team: str) -> Any:
        validate_required(project, "project")
        validate_required(team, "team")
        return self.work_client.get_backlogs(TeamContext(project=project, team=team))

    @azure_devops_operation()
    async def list_backlog_work_items(self, project: str, team: str, backlog_id: str) -> Any:
        validate_required(backlog_id, "backlog_id")
        return self.work_client.get_backlog_level_work_items(
            TeamContext(project=project, team=team),
            backlog_id
        )

    @validate_work_item_id
    @azure_devops_operation()
    async def get_work_item(
        self,
        work_item_id: int,
        project: str,
        fields: Optional[List[str]] = None,
        as_of: Optional[str] = None,
        expand: Optional[str] = None
    ) -> Any:
        """
        Get a single work item

        Args:
            work_item_id: Work item ID
            project: Project name
            fields: Optional list of fields to return
            as_of: Optional ISO date to read the item as of
            expand: none, relations, fields, links or all
        """
        expand_value = None
        if expand:
            expand_value = ExpandOptions.from_name(expand)
            if expand_value is None:
                raise ValidationError(
                    f"Invalid expand: '{expand}'. Allowed values: none, relations, fields, links, all",
                    field_name="expand"
                )

        return self.wit_client.get_work_item(
            id=work_item_id,
            project=project,
            fields=fields,
            as_of=as_of,
            expand=expand_value
        )

    @azure_devops_operation()
    async def get_work_items_batch_by_ids(
        self,
        project: str,
        ids: Union[str, Sequence[int]],
        fields: Optional[List[str]] = None
    ) -> List[Any]:
        """Get several work items by id, in chunks the API accepts."""
        id_list = parse_id_list(ids)
        fields = fields or DEFAULT_BATCH_FIELDS

        work_items = []
        for start in range(0, len(id_list), QueryLimits.WORK_ITEMS_BATCH_SIZE):
            chunk = id_list[start:start + QueryLimits.WORK_ITEMS_BATCH_SIZE]
            work_items.extend(
                self.wit_client.get_work_items_batch(
                    WorkItemBatchGetRequest(ids=chunk, fields=fields),
                    project=project
                ) or []
            )
        return work_items

    @validate_work_item_id
    @azure_devops_operation()
    async def list_work_item_comments(
        self,
        work_item_id: int,
        project: str,
        top: int = QueryLimits.DEFAULT_TOP
    ) -> Any:
        return self.wit_client.get_comments(project=project, work_item_id=work_item_id, top=top)

    @azure_devops_operation()
    async def get_work_items_for_iteration(
        self,
        project: str,
        iteration_id: str,
        team: Optional[str] = None
    ) -> Any:
        validate_required(iteration_id, "iteration_id")
        return self.work_client.get_iteration_work_items(
            TeamContext(project=project, team=team),
            iteration_id
        )

    @azure_devops_operation()
    async def get_work_item_type(self, project: str, work_item_type: str) -> Any:
        validate_required(work_item_type, "work_item_type")
        return self.wit_client.get_work_item_type(project=project, type=work_item_type)

    @azure_devops_operation()
    async def get_query(
        self,
        project: str,
        query: str,
        expand: Optional[str] = None,
        depth: int = 0,
        include_deleted: bool = False
    ) -> Any:
        """
        Get a saved query by id or path

        Args:
            project: Project name
            query: Query id or path (e.g. "Shared Queries/Active Bugs")
            expand: none, wiql, clauses, all or minimal
            depth: Folder depth to return children for
            include_deleted: Include deleted queries and folders
        """
        if expand and expand.lower() not in QUERY_EXPAND_OPTIONS:
            raise ValidationError(
                f"Invalid expand: '{expand}'. Allowed values: {', '.join(QUERY_EXPAND_OPTIONS)}",
                field_name="expand"
            )
        return self.wit_client.get_query(
            project=project,
            query=query,
            expand=expand.lower() if expand else None,
            depth=depth,
            include_deleted=include_deleted
        )

    @azure_devops_operation()
    async def get_query_results_by_id(
        self,
        query_id: str,
        project: Optional[str] = None,
        team: Optional[str] = None,
        top: int = QueryLimits.DEFAULT_TOP
    ) -> Any:
        validate_required(query_id, "id")
        return self.wit_client.query_by_id(
            query_id,
            team_context=TeamContext(project=project, team=team),
            top=top
        )

    # ------------------------------------------------------------------
    # Single-item mutations
    # ------------------------------------------------------------------

    @azure_devops_operation()
    async def create_work_item(
        self,
        project: str,
        work_item_type: str,
        fields: Sequence[FieldValue]
    ) -> Any:
        """
        Create a work item from a list of field values

        Args:
            project: Project name
            work_item_type: Work item type (e.g. "Bug", "Task")
            fields: Ordered field values; long text with a format hint also
                sets /multilineFieldsFormat for that field

        Returns:
            The created work item as returned by Azure DevOps

        Raises:
            ValidationError: If project or type is missing, or a field is invalid
            EmptyResultError: If the service returned nothing
        """
        validate_required(project, "project")
        validate_required(work_item_type, "work_item_type")
        document = build_field_operations(fields)

        created = self.wit_client.create_work_item(
            document=[operation.to_sdk() for operation in document],
            project=project,
            type=work_item_type
        )
        if not created:
            raise EmptyResultError("Work item was not created")
        return created

    @validate_work_item_id
    @azure_devops_operation()
    async def update_work_item(
        self,
        work_item_id: int,
        updates: Sequence[WorkItemPatch],
        project: Optional[str] = None
    ) -> Any:
        """
        Apply JSON-Patch operations to one work item

        Raises:
            ValidationError: If an operation or format is unsupported
            EmptyResultError: If the service returned nothing
        """
        document = build_update_operations(updates)
        if not document:
            raise ValidationError("At least one update is required", field_name="updates")

        updated = self.wit_client.update_work_item(
            document=[operation.to_sdk() for operation in document],
            id=work_item_id,
            project=project
        )
        if not updated:
            raise EmptyResultError("Work item was not updated")
        return updated

    @validate_work_item_id
    @azure_devops_operation()
    async def add_work_item_comment(self, work_item_id: int, project: str, comment: str) -> Any:
        validate_required(comment, "comment")
        return self.wit_client.add_comment(
            request=CommentCreate(text=comment),
            project=project,
            work_item_id=work_item_id
        )

    @handle_ado_error
    async def _create_child(self, project: str, work_item_type: str, document) -> Any:
        return self.wit_client.create_work_item(
            document=document,
            project=project,
            type=work_item_type
        )

    @azure_devops_operation()
    async def add_child_work_items(
        self,
        parent_id: int,
        project: str,
        work_item_type: str,
        items: Sequence[ChildWorkItem]
    ) -> List[Any]:
        """
        Create child work items under a parent, one call per item, in order

        Items are created sequentially so that a failure leaves an ordered
        prefix of created items. When that prefix is not empty the error
        carries the created ids.

        Raises:
            ValidationError: For missing arguments or more than 50 items
            PartialCreationError: If a create fails after earlier ones succeeded
        """
        check_work_item_id(parent_id, "parent_id")
        validate_required(project, "project")
        validate_required(work_item_type, "work_item_type")
        if not items:
            raise ValidationError("At least one child work item is required", field_name="items")
        validate_max_items(items, QueryLimits.MAX_CHILD_WORK_ITEMS, "child work items")

        parent_url = work_item_url(self.auth.server_url, parent_id, project)
        documents = []
        for item in items:
            validate_required(item.title, "title")
            document = build_field_operations([
                FieldValue(FieldNames.TITLE, item.title),
                FieldValue(FieldNames.DESCRIPTION, item.description or "", item.format),
                FieldValue(FieldNames.AREA_PATH, item.area_path or ""),
                FieldValue(FieldNames.ITERATION_PATH, item.iteration_path or ""),
            ])
            document.append(relation_add_operation(LinkTypes.HIERARCHY_REVERSE, parent_url))
            documents.append(document)

        created = []
        for document in documents:
            try:
                work_item = await self._create_child(
                    project,
                    work_item_type,
                    [operation.to_sdk() for operation in document]
                )
            except Exception as e:
                if not created:
                    raise
                raise PartialCreationError(e, [getattr(wi, 'id', None) for wi in created]) from e
            created.append(work_item)
            logger.debug(f"Created child work item {getattr(work_item, 'id', None)} under {parent_id}")

        return created

    @validate_work_item_id
    @azure_devops_operation()
    async def link_work_item_to_pull_request(
        self,
        work_item_id: int,
        project_id: str,
        repository_id: str,
        pull_request_id: int,
        pull_request_project_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Link a work item to a pull request through an artifact link

        Args:
            work_item_id: Work item to link
            project_id: Project of the work item (and of the pull request by default)
            repository_id: Repository name or id
            pull_request_id: Pull request id
            pull_request_project_id: Project of the pull request when it differs
        """
        validate_required(project_id, "project_id")
        uri = build_artifact_uri(
            ArtifactLinkNames.PULL_REQUEST,
            project_id=pull_request_project_id or project_id,
            repository_id=repository_id,
            pull_request_id=pull_request_id
        )
        operation = artifact_link_operation(uri, ArtifactLinkNames.PULL_REQUEST)

        updated = self.wit_client.update_work_item(
            document=[operation.to_sdk()],
            id=work_item_id,
            project=project_id
        )
        if not updated:
            raise EmptyResultError("Work item update failed")

        return {
            "work_item_id": work_item_id,
            "pull_request_id": pull_request_id,
            "artifact_uri": uri,
            "success": True
        }

    @validate_work_item_id
    @azure_devops_operation()
    async def add_artifact_link(
        self,
        work_item_id: int,
        project: str,
        link_type: str = ArtifactLinkNames.BRANCH,
        artifact_uri: Optional[str] = None,
        project_id: Optional[str] = None,
        repository_id: Optional[str] = None,
        branch_name: Optional[str] = None,
        commit_id: Optional[str] = None,
        pull_request_id: Optional[int] = None,
        build_id: Optional[int] = None,
        comment: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Link a work item to a repository, build or other artifact

        An explicit artifact_uri wins; otherwise the vstfs URI is built from
        the components the link type needs.

        Raises:
            ValidationError: For unknown link types or missing components
            EmptyResultError: If the update returned nothing
        """
        if link_type not in ArtifactLinkNames.ALL:
            raise ValidationError(
                f"Invalid artifact link type: '{link_type}'. "
                f"Allowed values: {', '.join(ArtifactLinkNames.ALL)}",
                field_name="link_type"
            )

        if artifact_uri and artifact_uri.strip():
            uri = artifact_uri.strip()
        else:
            uri = build_artifact_uri(
                link_type,
                project_id=project_id,
                repository_id=repository_id,
                branch_name=branch_name,
                commit_id=commit_id,
                pull_request_id=pull_request_id,
                build_id=build_id
            )

        operation = artifact_link_operation(uri, link_type, comment)
        updated = self.wit_client.update_work_item(
            document=[operation.to_sdk()],
            id=work_item_id,
            project=project
        )
        if not updated:
            raise EmptyResultError("Work item update failed")

        return {
            "work_item_id": work_item_id,
            "artifact_uri": uri,
            "link_type": link_type,
            "comment": comment or None,
            "success": True
        }

    @validate_work_item_id
    @azure_devops_operation()
    async def unlink_work_item(
        self,
        work_item_id: int,
        project: str,
        link_type: str = "related",
        url: Optional[str] = None
    ) -> str:
        """
        Remove links of one type (optionally to one URL) from a work item

        Relations are addressed by index, so all matching indices are taken
        from one read of the relation list and removed highest first. Another
        writer changing the list between the read and the update can shift
        indices; the update call carries no revision check.

        Returns:
            Text naming the number of removed links and the removed relations

        Raises:
            UnknownLinkTypeError: If the link type does not resolve
            NoMatchingRelationError: If no relation matches
        """
        relation_type = resolve_link_type(link_type)

        work_item = self.wit_client.get_work_item(
            id=work_item_id,
            project=project,
            expand=ExpandOptions.RELATIONS
        )
        relations = list(getattr(work_item, 'relations', None) or [])

        indices = find_relation_indices(relations, relation_type, url)
        if not indices:
            raise NoMatchingRelationError(
                link_type,
                url,
                [relation_to_dict(relation) for relation in relations]
            )

        updated = self.wit_client.update_work_item(
            document=[operation.to_sdk() for operation in relation_remove_operations(indices)],
            id=work_item_id,
            project=project
        )
        if not updated:
            raise EmptyResultError("Work item was not updated")

        removed = [relation_to_dict(relations[index]) for index in sorted(indices)]
        return (
            f"Removed {len(indices)} link(s) of type '{link_type}':\n"
            f"{dump_json(removed)}\n\n"
            f"Updated work item result:\n{dump_json(updated)}"
        )

    # ------------------------------------------------------------------
    # Batch mutations ($batch endpoint)
    # ------------------------------------------------------------------

    @azure_devops_operation()
    async def update_work_items_batch(self, project: str, updates: Sequence[BatchUpdate]) -> List[Any]:
        """
        Apply updates to several work items in one $batch call

        Updates to the same id are coalesced into one sub-request.

        Raises:
            ValidationError: If an op, id or format is invalid
            BatchError: If any sub-request failed
        """
        if not updates:
            raise ValidationError("At least one update is required", field_name="updates")

        items = frame_batch(entries_from_updates(updates))
        return await submit_batch(self.http_client, self.auth.server_url, items, project)

    @azure_devops_operation()
    async def link_work_items(self, project: str, updates: Sequence[LinkUpdate]) -> List[Any]:
        """
        Create work item links in one $batch call

        Raises:
            UnknownLinkTypeError: If a link type does not resolve
            BatchError: If any sub-request failed
        """
        validate_required(project, "project")
        if not updates:
            raise ValidationError("At least one link is required", field_name="updates")

        items = frame_batch(entries_from_links(self.auth.server_url, updates, project))
        return await submit_batch(self.http_client, self.auth.server_url, items, project)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _batch_get_work_items(self, ids: List[int], fields: Optional[List[str]] = None) -> List[Any]:
        """Fetch work items in chunks of the API's batch size."""
        all_items = []
        for i in range(0, len(ids), QueryLimits.WORK_ITEMS_BATCH_SIZE):
            batch_ids = ids[i:i + QueryLimits.WORK_ITEMS_BATCH_SIZE]
            all_items.extend(self.wit_client.get_work_items(ids=batch_ids, fields=fields) or [])
        return all_items

    def _format_work_item(self, wi) -> Dict[str, Any]:
        """Format work item for list responses"""
        fields = wi.fields or {}

        return {
            'id': wi.id,
            'title': fields.get(FieldNames.TITLE),
            'state': fields.get(FieldNames.STATE),
            'work_item_type': fields.get(FieldNames.WORK_ITEM_TYPE),
            'assigned_to': self._format_identity(fields.get(FieldNames.ASSIGNED_TO)),
            'iteration_path': fields.get(FieldNames.ITERATION_PATH),
            'changed_date': fields.get(FieldNames.CHANGED_DATE),
            'url': wi.url
        }

    @staticmethod
    def _format_identity(identity) -> Optional[str]:
        """Format identity field"""
        if not identity:
            return None
        if isinstance(identity, dict):
            return identity.get('displayName') or identity.get('uniqueName')
        return str(identity)
