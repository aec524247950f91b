"""
Work service: team iterations
"""
from typing import Any, List, Optional, Sequence

from azure.devops.v7_1.work.models import TeamContext, TeamSettingsIteration
from azure.devops.v7_1.work_item_tracking.models import WorkItemClassificationNode

from ..decorators import azure_devops_operation
from ..errors import EmptyResultError
from ..models import IterationAssignment, IterationSpec
from ..validation import ValidationError, validate_required


class WorkService:
    """Service for iteration management"""

    def __init__(self, auth):
        self.auth = auth

    @property
    def work_client(self):
        return self.auth.get_client('work')

    @property
    def wit_client(self):
        return self.auth.get_client('work_item_tracking')

    @azure_devops_operation()
    async def list_team_iterations(self, project: str, team: str, timeframe: Optional[str] = None) -> List[Any]:
        """
        List iterations assigned to a team

        Args:
            project: Project name
            team: Team name
            timeframe: Only "current" is supported by the service
        """
        validate_required(project, "project")
        validate_required(team, "team")
        iterations = self.work_client.get_team_iterations(
            TeamContext(project=project, team=team),
            timeframe=timeframe
        )
        if not iterations:
            raise EmptyResultError("No iterations found")
        return iterations

    @azure_devops_operation()
    async def create_iterations(self, project: str, iterations: Sequence[IterationSpec]) -> List[Any]:
        """Create iterations under the project's iteration root, in order."""
        validate_required(project, "project")
        if not iterations:
            raise ValidationError("At least one iteration is required", field_name="iterations")

        created = []
        for iteration in iterations:
            validate_required(iteration.iteration_name, "iteration_name")
            attributes = {}
            if iteration.start_date:
                attributes["startDate"] = iteration.start_date
            if iteration.finish_date:
                attributes["finishDate"] = iteration.finish_date

            node = self.wit_client.create_or_update_classification_node(
                posted_node=WorkItemClassificationNode(
                    name=iteration.iteration_name,
                    attributes=attributes or None
                ),
                project=project,
                structure_group="iterations"
            )
            if node:
                created.append(node)
        return created

    @azure_devops_operation()
    async def assign_iterations(
        self,
        project: str,
        team: str,
        iterations: Sequence[IterationAssignment]
    ) -> List[Any]:
        """Assign existing iterations to a team, in order."""
        validate_required(project, "project")
        validate_required(team, "team")
        if not iterations:
            raise ValidationError("At least one iteration is required", field_name="iterations")

        team_context = TeamContext(project=project, team=team)
        assigned = []
        for iteration in iterations:
            result = self.work_client.post_team_iteration(
                TeamSettingsIteration(id=iteration.identifier, path=iteration.path),
                team_context
            )
            if result:
                assigned.append(result)
        return assigned
