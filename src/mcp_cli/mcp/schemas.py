"""
Reply Schemas

Boundary validation for decoded tools/list and tools/call replies. The
functions here are pure: the same payload always yields the same value or
the same ReplyValidationError.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError

from .exceptions import ReplyValidationError


class ResponseKind(str, Enum):
    TOOLS_LIST = "tools-list"
    TOOL_CALL = "tool-call"


class WireInputSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: StrictStr = "object"
    properties: Dict[str, Any] = Field(default_factory=dict)
    required: Optional[List[StrictStr]] = None


class WireTool(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: StrictStr
    description: Optional[StrictStr] = None
    inputSchema: Optional[WireInputSchema] = None


class ToolsListReply(BaseModel):
    """Validated tools/list reply."""

    model_config = ConfigDict(extra="allow")

    tools: List[WireTool] = Field(default_factory=list)


class WireContentItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: StrictStr = "text"
    text: Optional[StrictStr] = None
    data: Any = None


class ToolCallReply(BaseModel):
    """Validated tools/call reply.

    ``degraded`` is set when the reply carried a ``content`` field that is
    not a list; ``raw`` then holds the original payload so the caller can
    wrap it instead of failing.
    """

    model_config = ConfigDict(extra="allow")

    content: List[WireContentItem] = Field(default_factory=list)
    isError: StrictBool = False
    degraded: bool = False
    raw: Dict[str, Any] = Field(default_factory=dict)


# pydantic error type -> expected kind reported to callers
_EXPECTED_KINDS = {
    "missing": "required field",
    "string_type": "string",
    "list_type": "list",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
    "bool_type": "boolean",
}


def _drop_nulls(payload: Mapping[str, Any], *keys: str) -> Dict[str, Any]:
    """Treat explicit nulls on optional top-level fields as absent."""
    cleaned = dict(payload)
    for key in keys:
        if key in cleaned and cleaned[key] is None:
            del cleaned[key]
    return cleaned


def _require_mapping(payload: Any) -> None:
    if not isinstance(payload, Mapping):
        raise ReplyValidationError("", "object", type(payload).__name__)


def _to_reply_error(exc: ValidationError) -> ReplyValidationError:
    """Report the first violation as a field path plus expected kind."""
    first = exc.errors()[0]
    path = ".".join(str(part) for part in first["loc"])
    error_type = first["type"]
    expected = _EXPECTED_KINDS.get(error_type, error_type)
    received = "missing" if error_type == "missing" else type(first.get("input")).__name__
    return ReplyValidationError(path, expected, received)


def validate_tools_list(payload: Any) -> ToolsListReply:
    """Validate a tools/list reply. A missing ``tools`` field means no tools."""
    _require_mapping(payload)
    try:
        return ToolsListReply.model_validate(_drop_nulls(payload, "tools"))
    except ValidationError as e:
        raise _to_reply_error(e) from e


def validate_tool_call(payload: Any) -> ToolCallReply:
    """Validate a tools/call reply.

    Content that is present but not a list is not an error: the reply is
    returned with ``degraded=True``.
    """
    _require_mapping(payload)
    cleaned = _drop_nulls(payload, "content", "isError")

    if "content" in cleaned and not isinstance(cleaned["content"], list):
        return ToolCallReply(
            isError=cleaned.get("isError") is True,
            degraded=True,
            raw=dict(payload),
        )

    try:
        reply = ToolCallReply.model_validate(
            {key: value for key, value in cleaned.items() if key not in ("degraded", "raw")}
        )
    except ValidationError as e:
        raise _to_reply_error(e) from e
    reply.raw = dict(payload)
    return reply


def validate_reply(kind: ResponseKind, payload: Any):
    """Validate ``payload`` as the reply to a request of ``kind``."""
    if kind == ResponseKind.TOOLS_LIST:
        return validate_tools_list(payload)
    if kind == ResponseKind.TOOL_CALL:
        return validate_tool_call(payload)
    raise ValueError(f"Unsupported response kind: {kind}")
