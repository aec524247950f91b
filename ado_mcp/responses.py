"""
Tool response envelopes.

Every tool produces a ToolResponse: a single text block, flagged as an error
or not. ``run_tool`` turns the outcome of a service call (a value, None or an
exception) into one, and ``deliver`` adapts it to what FastMCP expects.
"""
import dataclasses
import json
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict

from fastmcp.exceptions import ToolError
from msrest.serialization import Model

from .errors import EmptyResultError, NoMatchingRelationError
from .log_sanitizer import safe_log_error

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"
NO_RESULT_MESSAGE = "Operation produced no result"


@dataclasses.dataclass
class ToolResponse:
    """Text result of a tool call"""
    text: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            envelope["isError"] = True
        return envelope


def to_jsonable(obj: Any) -> Any:
    """Convert SDK models, dataclasses and dates into JSON-compatible values."""
    if isinstance(obj, Model):
        return obj.serialize(keep_readonly=True)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(dataclasses.asdict(obj))
    if isinstance(obj, dict):
        return {key: to_jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_jsonable(item) for item in obj]
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    return obj


def dump_json(obj: Any) -> str:
    return json.dumps(to_jsonable(obj), indent=2, default=str)


def success(result: Any) -> ToolResponse:
    if isinstance(result, str):
        return ToolResponse(result)
    return ToolResponse(dump_json(result))


def failure(message: str) -> ToolResponse:
    return ToolResponse(message, is_error=True)


def error_message(error: BaseException) -> str:
    return str(error) or UNKNOWN_ERROR_MESSAGE


async def run_tool(operation: Callable[[], Awaitable[Any]], error_prefix: str) -> ToolResponse:
    """
    Run a service call and wrap its outcome in a ToolResponse.

    Args:
        operation: Zero-argument coroutine function performing the call
        error_prefix: Prefix for failure messages, e.g. "Error creating work item"

    Returns:
        Success envelope for a value (strings verbatim, anything else as JSON),
        an error envelope for None, reported conditions or exceptions
    """
    try:
        result = await operation()
    except (EmptyResultError, NoMatchingRelationError) as e:
        logger.info(f"{error_prefix}: {e}")
        return failure(error_message(e))
    except Exception as e:
        logger.error(safe_log_error(e, error_prefix), exc_info=True)
        return failure(f"{error_prefix}: {error_message(e)}")

    if result is None:
        return failure(NO_RESULT_MESSAGE)
    return success(result)


def deliver(response: ToolResponse) -> str:
    """
    Hand a ToolResponse to FastMCP.

    FastMCP reports a raised ToolError as an ``isError`` result carrying the
    error text, so error envelopes are raised and successes returned.
    """
    if response.is_error:
        raise ToolError(response.text)
    return response.text
