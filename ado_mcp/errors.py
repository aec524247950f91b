"""
Custom exception classes for the Azure DevOps MCP server.

Provides structured errors for upstream failures (SDK and raw HTTP) and for
the reported, non-fatal conditions a tool can end in.
"""

from typing import Optional, Any, List, Dict


class AzureDevOpsError(Exception):
    """
    Base exception for Azure DevOps errors.

    Attributes:
        status_code: HTTP status code from the API response
        message: Human-readable error message
        original_error: The original exception that was caught
        details: Additional error details
    """

    def __init__(
        self,
        status_code: Optional[int] = None,
        message: str = "Azure DevOps API error",
        original_error: Optional[Exception] = None,
        details: Optional[Any] = None
    ):
        self.status_code = status_code
        self.message = message
        self.original_error = original_error
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the error."""
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error': self.__class__.__name__,
            'status_code': self.status_code,
            'message': self.message,
            'details': str(self.details) if self.details else None
        }


class UpstreamError(AzureDevOpsError):
    """
    Raised when an Azure DevOps call rejects or returns a non-OK status.

    The upstream reason (and body text, when there is one) is kept in the
    message so the caller sees what the service actually said.
    """

    def __init__(
        self,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        original_error: Optional[Exception] = None,
        details: Optional[Any] = None
    ):
        reason = reason or (str(original_error) if original_error else None)
        if status_code and reason:
            message = f"Azure DevOps request failed (HTTP {status_code}): {reason}"
        elif status_code:
            message = f"Azure DevOps request failed (HTTP {status_code})"
        else:
            message = f"Azure DevOps request failed: {reason or 'no reason given'}"

        super().__init__(
            status_code=status_code,
            message=message,
            original_error=original_error,
            details=details
        )
        self.reason = reason

    def __str__(self) -> str:
        # The status code is already part of the message
        return self.message


class AuthenticationError(UpstreamError):
    """
    Raised when authentication fails (HTTP 401).

    Usually an expired or revoked token, or one missing required scopes.
    """


class PermissionDeniedError(UpstreamError):
    """Raised when the identity lacks permission for an operation (HTTP 403)."""


class NotFoundError(UpstreamError):
    """Raised when the addressed resource does not exist (HTTP 404)."""


class RateLimitError(UpstreamError):
    """
    Raised when the API rate limit is exceeded (HTTP 429).

    Carries the Retry-After value in seconds when the service sent one.
    """

    def __init__(
        self,
        status_code: int = 429,
        reason: Optional[str] = None,
        original_error: Optional[Exception] = None,
        retry_after: Optional[int] = None
    ):
        super().__init__(
            status_code=status_code,
            reason=reason,
            original_error=original_error,
            details={'retry_after': retry_after}
        )
        self.retry_after = retry_after


class TransientError(UpstreamError):
    """Raised for temporary service errors (HTTP 500, 502, 503, 504)."""


class BatchError(UpstreamError):
    """
    Raised when one or more sub-requests of a $batch call failed.

    The batch is reported as a whole; ``failures`` lists the work item id and
    status code of every failed sub-request.
    """

    def __init__(self, failures: List[Dict[str, Any]]):
        summary = ", ".join(
            f"work item {failure.get('id')} (HTTP {failure.get('code')})"
            for failure in failures
        )
        super().__init__(
            reason=f"{len(failures)} batch operation(s) failed: {summary}",
            details={'failures': failures}
        )
        self.failures = failures


class PartialCreationError(AzureDevOpsError):
    """
    Raised when a sequential create fails after some items were created.

    ``created_ids`` holds the ids created before the failure, in order.
    """

    def __init__(self, original_error: Exception, created_ids: List[int]):
        reason = str(original_error) or "Unknown error occurred"
        message = f"{reason} (created before failure: {', '.join(str(i) for i in created_ids)})"
        super().__init__(
            status_code=getattr(original_error, 'status_code', None),
            message=message,
            original_error=original_error,
            details={'created_ids': created_ids}
        )
        self.created_ids = created_ids

    def __str__(self) -> str:
        return self.message


class NoMatchingRelationError(AzureDevOpsError):
    """
    Raised when an unlink finds no relation matching the requested filter.

    This is a reported condition: the work item is left untouched.
    """

    def __init__(self, link_type: str, url: Optional[str] = None, relations: Optional[list] = None):
        message = f"No matching relations found for link type '{link_type}'"
        if url:
            message += f" and URL '{url}'"
        message += "."
        super().__init__(message=message, details={'relations': relations or []})
        self.link_type = link_type
        self.url = url


class EmptyResultError(AzureDevOpsError):
    """Raised when a call succeeded but returned nothing where an entity was expected."""

    def __init__(self, message: str = "Operation produced no result"):
        super().__init__(message=message)


def map_status_code_to_error(
    status_code: int,
    reason: Optional[str] = None,
    original_error: Optional[Exception] = None,
    **kwargs
) -> UpstreamError:
    """
    Map HTTP status code to appropriate error class.

    Args:
        status_code: HTTP status code from Azure DevOps
        reason: Upstream reason phrase or message
        original_error: The original exception
        **kwargs: Additional error-specific parameters (retry_after)

    Returns:
        Appropriate UpstreamError subclass instance
    """
    if status_code == 401:
        return AuthenticationError(status_code, reason, original_error)
    elif status_code == 403:
        return PermissionDeniedError(status_code, reason, original_error)
    elif status_code == 404:
        return NotFoundError(status_code, reason, original_error)
    elif status_code == 429:
        return RateLimitError(
            status_code,
            reason,
            original_error,
            retry_after=kwargs.get('retry_after')
        )
    elif status_code in [500, 502, 503, 504]:
        return TransientError(status_code, reason, original_error)
    else:
        return UpstreamError(status_code, reason, original_error)
