"""
Test plan service: test plans, suites, test cases and build test results
"""
import re
from typing import Any, List, Optional, Sequence, Union
from xml.sax.saxutils import escape

from azure.devops.v7_1.test_plan.models import TestPlanCreateParams

from ..constants import DEFAULT_EXPECTED_RESULT, FieldNames
from ..decorators import azure_devops_operation, validate_work_item_id
from ..errors import EmptyResultError
from ..links import work_item_link_operation
from ..models import FieldValue, PatchOperation
from ..patches import build_field_operations
from ..validation import parse_id_list, validate_required, validate_work_item_id as check_work_item_id

TEST_CASE_TYPE = "Test Case"

STEP_NUMBER_PATTERN = re.compile(r'^(\d+)\.\s*(.+)$')


def escape_xml(text: str) -> str:
    return escape(text, {'"': "&quot;", "'": "&apos;"})


def convert_steps_to_xml(steps: str) -> str:
    """
    Convert numbered step lines into the Microsoft.VSTS.TCM.Steps XML.

    Each non-blank line is one step. A leading "1." is dropped. Text after a
    "|" is the expected result; steps without one get a default.

    Example:
        "1. Open the app|App opens\\n2. Sign in"
    """
    lines = [line.strip() for line in steps.splitlines() if line.strip()]

    parts = [f'<steps id="0" last="{len(lines)}">']
    for index, line in enumerate(lines, start=1):
        match = STEP_NUMBER_PATTERN.match(line)
        step_text = match.group(2) if match else line

        action, _, expected = step_text.partition("|")
        expected = expected.strip() or DEFAULT_EXPECTED_RESULT

        parts.append(
            f'<step id="{index}" type="ActionStep">'
            f'<parameterizedString isformatted="true">{escape_xml(action.strip())}</parameterizedString>'
            f'<parameterizedString isformatted="true">{escape_xml(expected)}</parameterizedString>'
            '<description/></step>'
        )
    parts.append("</steps>")
    return "".join(parts)


class TestPlanService:
    """Service for test plan management"""

    # Not a test class, despite the name
    __test__ = False

    def __init__(self, auth):
        self.auth = auth

    @property
    def test_plan_client(self):
        return self.auth.get_client('test_plan')

    @property
    def test_client(self):
        return self.auth.get_client('test')

    @property
    def test_results_client(self):
        return self.auth.get_client('test_results')

    @property
    def wit_client(self):
        return self.auth.get_client('work_item_tracking')

    @azure_devops_operation()
    async def list_test_plans(
        self,
        project: str,
        filter_active_plans: bool = True,
        include_plan_details: bool = False,
        continuation_token: Optional[str] = None
    ) -> Any:
        validate_required(project, "project")
        return self.test_plan_client.get_test_plans(
            project=project,
            continuation_token=continuation_token,
            include_plan_details=include_plan_details,
            filter_active_plans=filter_active_plans
        )

    @azure_devops_operation()
    async def create_test_plan(
        self,
        project: str,
        name: str,
        iteration: str,
        description: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        area_path: Optional[str] = None
    ) -> Any:
        validate_required(name, "name")
        validate_required(iteration, "iteration")
        return self.test_plan_client.create_test_plan(
            TestPlanCreateParams(
                name=name,
                iteration=iteration,
                description=description,
                start_date=start_date,
                end_date=end_date,
                area_path=area_path
            ),
            project
        )

    @azure_devops_operation()
    async def add_test_cases_to_suite(
        self,
        project: str,
        plan_id: int,
        suite_id: int,
        test_case_ids: Union[str, Sequence[int]]
    ) -> Any:
        ids = parse_id_list(test_case_ids, "test_case_ids")
        return self.test_client.add_test_cases_to_suite(
            project,
            plan_id,
            suite_id,
            ",".join(str(test_case_id) for test_case_id in ids)
        )

    @azure_devops_operation()
    async def create_test_case(
        self,
        project: str,
        title: str,
        steps: Optional[str] = None,
        priority: Optional[int] = None,
        area_path: Optional[str] = None,
        iteration_path: Optional[str] = None,
        tests_work_item_id: Optional[int] = None
    ) -> Any:
        """
        Create a Test Case work item

        Args:
            project: Project name
            title: Test case title
            steps: Numbered step lines, "action|expected result" per line
            priority: Priority (1-4)
            area_path: Area path; blank values are not sent
            iteration_path: Iteration path; blank values are not sent
            tests_work_item_id: Work item this test case tests

        Returns:
            The created work item

        Raises:
            ValidationError: If project or title is missing
            EmptyResultError: If the service returned nothing
        """
        validate_required(project, "project")
        validate_required(title, "title")

        fields = [FieldValue(FieldNames.TITLE, title)]
        if steps:
            fields.append(FieldValue(FieldNames.STEPS, convert_steps_to_xml(steps)))
        if priority is not None:
            fields.append(FieldValue(FieldNames.PRIORITY, priority))
        if area_path is not None:
            fields.append(FieldValue(FieldNames.AREA_PATH, area_path))
        if iteration_path is not None:
            fields.append(FieldValue(FieldNames.ITERATION_PATH, iteration_path))

        document = build_field_operations(fields)
        if tests_work_item_id is not None:
            check_work_item_id(tests_work_item_id, "tests_work_item_id")
            document.append(
                work_item_link_operation(self.auth.server_url, "tests", tests_work_item_id, project=project)
            )

        created = self.wit_client.create_work_item(
            document=[operation.to_sdk() for operation in document],
            project=project,
            type=TEST_CASE_TYPE
        )
        if not created:
            raise EmptyResultError("Test case was not created")
        return created

    @validate_work_item_id
    @azure_devops_operation()
    async def update_test_case_steps(self, work_item_id: int, steps: str) -> Any:
        validate_required(steps, "steps")
        operation = PatchOperation("replace", f"/fields/{FieldNames.STEPS}", convert_steps_to_xml(steps))
        updated = self.wit_client.update_work_item(document=[operation.to_sdk()], id=work_item_id)
        if not updated:
            raise EmptyResultError("Test case was not updated")
        return updated

    @azure_devops_operation()
    async def list_test_cases(self, project: str, plan_id: int, suite_id: int) -> List[Any]:
        return self.test_plan_client.get_test_case_list(project=project, plan_id=plan_id, suite_id=suite_id)

    @azure_devops_operation()
    async def show_test_results_from_build_id(self, project: str, build_id: int) -> Any:
        return self.test_results_client.get_test_result_details_for_build(project=project, build_id=build_id)
