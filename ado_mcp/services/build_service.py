"""
Build service: build definitions, builds, logs and pipeline runs
"""
import logging
from typing import Any, Dict, List, Optional

from azure.devops.v7_1.build.models import UpdateStageParameters
from azure.devops.v7_1.pipelines.models import RunPipelineParameters

from ..decorators import azure_devops_operation
from ..errors import EmptyResultError
from ..validation import ValidationError, validate_required, validate_stage_state

logger = logging.getLogger(__name__)


class BuildService:
    """Service for builds and pipelines"""

    def __init__(self, auth):
        self.auth = auth

    @property
    def build_client(self):
        return self.auth.get_client('build')

    @property
    def pipelines_client(self):
        return self.auth.get_client('pipelines')

    @azure_devops_operation()
    async def get_definitions(
        self,
        project: str,
        name: Optional[str] = None,
        repository_id: Optional[str] = None,
        repository_type: Optional[str] = None,
        path: Optional[str] = None,
        top: Optional[int] = None,
        continuation_token: Optional[str] = None
    ) -> Any:
        validate_required(project, "project")
        return self.build_client.get_definitions(
            project=project,
            name=name,
            repository_id=repository_id,
            repository_type=repository_type,
            top=top,
            continuation_token=continuation_token,
            path=path
        )

    @azure_devops_operation()
    async def get_definition_revisions(self, project: str, definition_id: int) -> Any:
        return self.build_client.get_definition_revisions(project=project, definition_id=definition_id)

    @azure_devops_operation()
    async def get_builds(
        self,
        project: str,
        definitions: Optional[List[int]] = None,
        top: int = 100,
        status_filter: Optional[str] = None,
        result_filter: Optional[str] = None,
        branch_name: Optional[str] = None,
        continuation_token: Optional[str] = None,
        query_order: Optional[str] = None
    ) -> Any:
        """
        List builds, newest first by default

        Args:
            project: Project name
            definitions: Only builds of these definition ids
            top: Page size
            status_filter: e.g. inProgress, completed
            result_filter: e.g. succeeded, failed
            branch_name: e.g. refs/heads/main
            continuation_token: Token from a previous page
            query_order: e.g. finishTimeDescending
        """
        validate_required(project, "project")
        return self.build_client.get_builds(
            project=project,
            definitions=definitions,
            status_filter=status_filter,
            result_filter=result_filter,
            top=top,
            continuation_token=continuation_token,
            branch_name=branch_name,
            query_order=query_order
        )

    @azure_devops_operation()
    async def get_log(self, project: str, build_id: int) -> Any:
        return self.build_client.get_build_logs(project=project, build_id=build_id)

    @azure_devops_operation()
    async def get_log_by_id(
        self,
        project: str,
        build_id: int,
        log_id: int,
        start_line: Optional[int] = None,
        end_line: Optional[int] = None
    ) -> Any:
        return self.build_client.get_build_log_lines(
            project=project,
            build_id=build_id,
            log_id=log_id,
            start_line=start_line,
            end_line=end_line
        )

    @azure_devops_operation()
    async def get_changes(
        self,
        project: str,
        build_id: int,
        continuation_token: Optional[str] = None,
        top: int = 100,
        include_source_change: Optional[bool] = None
    ) -> Any:
        return self.build_client.get_build_changes(
            project=project,
            build_id=build_id,
            continuation_token=continuation_token,
            top=top,
            include_source_change=include_source_change
        )

    @azure_devops_operation()
    async def get_status(self, project: str, build_id: int) -> Any:
        return self.build_client.get_build_report(project=project, build_id=build_id)

    @azure_devops_operation()
    async def update_build_stage(
        self,
        project: str,
        build_id: int,
        stage_name: str,
        status: str,
        force_retry_all_jobs: bool = False
    ) -> Any:
        """Cancel, retry or run one stage of a build."""
        validate_required(stage_name, "stage_name")
        state = validate_stage_state(status)
        return self.build_client.update_stage(
            UpdateStageParameters(force_retry_all_jobs=force_retry_all_jobs, state=state),
            build_id,
            stage_name,
            project=project
        )

    @azure_devops_operation()
    async def get_run(self, project: str, pipeline_id: int, run_id: int) -> Any:
        return self.pipelines_client.get_run(project=project, pipeline_id=pipeline_id, run_id=run_id)

    @azure_devops_operation()
    async def list_runs(self, project: str, pipeline_id: int) -> Any:
        return self.pipelines_client.list_runs(project=project, pipeline_id=pipeline_id)

    @azure_devops_operation()
    async def run_pipeline(
        self,
        project: str,
        pipeline_id: int,
        pipeline_version: Optional[int] = None,
        branch: Optional[str] = None,
        preview_run: bool = False,
        stages_to_skip: Optional[List[str]] = None,
        template_parameters: Optional[Dict[str, str]] = None,
        variables: Optional[Dict[str, str]] = None,
        yaml_override: Optional[str] = None
    ) -> Any:
        """
        Queue a pipeline run (or a preview run that only renders the YAML)

        Raises:
            ValidationError: If yaml_override is given without preview_run
            EmptyResultError: If the service returned no run id
        """
        if yaml_override and not preview_run:
            raise ValidationError(
                "Parameter 'yamlOverride' can only be specified together with parameter 'previewRun'.",
                field_name="yaml_override"
            )

        resources = None
        if branch:
            ref_name = branch if branch.startswith("refs/") else f"refs/heads/{branch}"
            resources = {"repositories": {"self": {"refName": ref_name}}}

        run_parameters = RunPipelineParameters(
            preview_run=preview_run or None,
            resources=resources,
            stages_to_skip=stages_to_skip,
            template_parameters=template_parameters,
            variables={name: {"value": value} for name, value in variables.items()} if variables else None,
            yaml_override=yaml_override
        )

        run = self.pipelines_client.run_pipeline(
            run_parameters,
            project,
            pipeline_id,
            pipeline_version=pipeline_version
        )
        if not run or getattr(run, 'id', None) is None:
            raise EmptyResultError("Failed to get build ID from pipeline run")

        logger.info(f"Queued run {run.id} of pipeline {pipeline_id}")
        return run
