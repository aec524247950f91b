"""
Decorators for error handling, logging and argument checks on service calls.
"""

import logging
from functools import wraps
from typing import Callable, TypeVar, Optional

from azure.devops.exceptions import AzureDevOpsAuthenticationError

from .errors import AzureDevOpsError, map_status_code_to_error
from .validation import validate_work_item_id as _validate_id

# Type variable for generic function signatures
T = TypeVar('T')

logger = logging.getLogger(__name__)


def _status_code_of(error: Exception) -> Optional[int]:
    status_code = getattr(error, 'status_code', None)
    if not status_code:
        response = getattr(error, 'response', None)
        if response is not None:
            status_code = getattr(response, 'status_code', None)
    if not status_code and isinstance(error, AzureDevOpsAuthenticationError):
        status_code = 401
    return status_code if isinstance(status_code, int) else None


def _retry_after_of(error: Exception) -> Optional[int]:
    response = getattr(error, 'response', None)
    headers = getattr(response, 'headers', None) if response is not None else None
    if not headers:
        return None

    # Retry-After can be in seconds or HTTP-date
    retry_after_header = headers.get('Retry-After') or headers.get('retry-after')
    if not retry_after_header:
        return None
    try:
        return int(retry_after_header)
    except (ValueError, TypeError):
        logger.warning(f"Could not parse Retry-After header: {retry_after_header}")
        return 60


def handle_ado_error(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator mapping Azure DevOps SDK exceptions to custom error classes.

    Exceptions that carry an HTTP status (``status_code`` or
    ``response.status_code``) become the matching UpstreamError subclass with
    the upstream text preserved. Anything else propagates unchanged.

    Example:
        @handle_ado_error
        async def get_work_item(self, work_item_id: int):
            return self.wit_client.get_work_item(id=work_item_id)
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except AzureDevOpsError:
            # Already a custom error, re-raise as-is
            raise
        except Exception as e:
            status_code = _status_code_of(e)
            if not status_code:
                raise

            retry_after = _retry_after_of(e) if status_code == 429 else None
            error = map_status_code_to_error(
                status_code,
                reason=str(e) or None,
                original_error=e,
                retry_after=retry_after
            )
            logger.error(
                f"Azure DevOps API error in {func.__name__}: {error}",
                exc_info=True
            )
            raise error from e

    return wrapper


def log_execution(
    level: int = logging.INFO,
    log_args: bool = False
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator to log function execution.

    Args:
        level: Logging level (default: INFO)
        log_args: Whether to log function arguments (default: False)

    Example:
        @log_execution(level=logging.DEBUG, log_args=True)
        async def get_work_item(self, work_item_id: int):
            return self.wit_client.get_work_item(id=work_item_id)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            func_name = func.__name__

            if log_args:
                logger.log(level, f"Calling {func_name} with args={args[1:]}, kwargs={kwargs}")
            else:
                logger.log(level, f"Calling {func_name}")

            try:
                result = await func(*args, **kwargs)
                logger.log(level, f"{func_name} completed successfully")
                return result
            except Exception as e:
                logger.log(level, f"{func_name} failed with error: {e}")
                raise

        return wrapper
    return decorator


def validate_work_item_id(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to validate the work item id argument.

    Checks ``work_item_id`` in kwargs, or the first positional argument after
    ``self``, before the wrapped call runs.

    Raises:
        ValidationError: If the id is not a positive integer
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        if 'work_item_id' in kwargs:
            _validate_id(kwargs['work_item_id'], 'work_item_id')
        elif len(args) > 1:
            _validate_id(args[1], 'work_item_id')

        return await func(*args, **kwargs)

    return wrapper


def azure_devops_operation(level: int = logging.DEBUG) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Convenience decorator combining execution logging and error mapping.

    Example:
        @azure_devops_operation()
        async def get_work_item(self, work_item_id: int):
            return self.wit_client.get_work_item(id=work_item_id)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        decorated = handle_ado_error(func)
        decorated = log_execution(level=level)(decorated)
        return decorated

    return decorator
