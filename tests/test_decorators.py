"""
Unit tests for decorators module.

Tests error mapping, execution logging and work item id checks.
"""

import logging
from types import SimpleNamespace

import pytest
from azure.devops.exceptions import AzureDevOpsAuthenticationError

from ado_mcp.decorators import (
    azure_devops_operation,
    handle_ado_error,
    log_execution,
    validate_work_item_id
)
from ado_mcp.errors import (
    AuthenticationError,
    EmptyResultError,
    NotFoundError,
    RateLimitError,
    TransientError
)
from ado_mcp.validation import ValidationError


class HttpFailure(Exception):
    """An exception shaped like the SDK's HTTP errors."""

    def __init__(self, message, status_code=None, headers=None):
        super().__init__(message)
        self.response = SimpleNamespace(status_code=status_code, headers=headers or {})


class TestHandleAdoError:
    """Test handle_ado_error decorator."""

    @pytest.mark.asyncio
    async def test_success_passes_through(self):
        """Test that results are returned unchanged."""
        @handle_ado_error
        async def ok():
            return 5

        assert await ok() == 5

    @pytest.mark.asyncio
    async def test_response_status_is_mapped(self):
        """Test mapping via response.status_code."""
        @handle_ado_error
        async def missing():
            raise HttpFailure("Work item 9 does not exist", status_code=404)

        with pytest.raises(NotFoundError) as exc_info:
            await missing()

        assert "Work item 9 does not exist" in str(exc_info.value)
        assert isinstance(exc_info.value.original_error, HttpFailure)

    @pytest.mark.asyncio
    async def test_status_code_attribute_is_mapped(self):
        """Test mapping via a status_code attribute."""
        error = Exception("Internal Server Error")
        error.status_code = 500

        @handle_ado_error
        async def failing():
            raise error

        with pytest.raises(TransientError, match="HTTP 500"):
            await failing()

    @pytest.mark.asyncio
    async def test_retry_after_is_read(self):
        """Test that 429 responses carry Retry-After."""
        @handle_ado_error
        async def throttled():
            raise HttpFailure("Too Many Requests", status_code=429, headers={"Retry-After": "12"})

        with pytest.raises(RateLimitError) as exc_info:
            await throttled()
        assert exc_info.value.retry_after == 12

    @pytest.mark.asyncio
    async def test_sdk_authentication_error(self):
        """Test that SDK authentication errors become 401s."""
        @handle_ado_error
        async def unauthorized():
            raise AzureDevOpsAuthenticationError("token expired")

        with pytest.raises(AuthenticationError):
            await unauthorized()

    @pytest.mark.asyncio
    async def test_errors_without_status_propagate_unchanged(self):
        """Test that other exceptions are not wrapped."""
        @handle_ado_error
        async def invalid():
            raise ValidationError("Parameter 'project' is required")

        with pytest.raises(ValidationError):
            await invalid()

    @pytest.mark.asyncio
    async def test_custom_errors_are_not_rewrapped(self):
        """Test that our own errors pass straight through."""
        @handle_ado_error
        async def empty():
            raise EmptyResultError("No teams found")

        with pytest.raises(EmptyResultError, match="No teams found"):
            await empty()


class TestLogExecution:
    """Test log_execution decorator."""

    @pytest.mark.asyncio
    async def test_logs_entry_and_exit(self, caplog):
        """Test that calls are logged at the chosen level."""
        @log_execution(level=logging.INFO)
        async def list_things():
            return []

        with caplog.at_level(logging.INFO, logger="ado_mcp.decorators"):
            await list_things()

        assert "Calling list_things" in caplog.text
        assert "list_things completed successfully" in caplog.text

    @pytest.mark.asyncio
    async def test_failures_are_logged_and_raised(self, caplog):
        """Test that exceptions propagate after logging."""
        @log_execution(level=logging.INFO)
        async def broken():
            raise RuntimeError("nope")

        with caplog.at_level(logging.INFO, logger="ado_mcp.decorators"):
            with pytest.raises(RuntimeError):
                await broken()

        assert "broken failed with error: nope" in caplog.text


class TestValidateWorkItemId:
    """Test validate_work_item_id decorator."""

    class Service:
        @validate_work_item_id
        async def get(self, work_item_id):
            return work_item_id

    @pytest.mark.asyncio
    async def test_positional(self):
        """Test the first argument after self."""
        assert await self.Service().get(3) == 3
        with pytest.raises(ValidationError):
            await self.Service().get(-3)

    @pytest.mark.asyncio
    async def test_keyword(self):
        """Test the work_item_id keyword."""
        with pytest.raises(ValidationError):
            await self.Service().get(work_item_id=0)


class TestAzureDevOpsOperation:
    """Test the combined decorator."""

    @pytest.mark.asyncio
    async def test_maps_errors(self):
        """Test that error mapping is applied."""
        @azure_devops_operation()
        async def forbidden():
            raise HttpFailure("Access denied", status_code=401)

        with pytest.raises(AuthenticationError):
            await forbidden()
