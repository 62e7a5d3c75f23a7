"""
WebVault Backend — Response Envelope
======================================

What:  The uniform JSON shape wrapped around every API result.
How:   Three discriminated shapes, branchable on `status` alone:

    success  {status:"success", code:0, message, data, requestId, timestamp}
    fail     {status:"fail", code:"<string>", message, errors, requestId, timestamp}   4xx
    error    {status:"error", code:"<string>", message, requestId, timestamp}          5xx

`code` is the integer 0 for success and a string error code otherwise.
`errors` maps a field name to a list of human-readable messages; problems
that belong to no single field are filed under "_root".

The builders are pure: pass `request_id` and `timestamp` explicitly and the
output depends on nothing else. Omitting them reads the current request id
and clock.

Timestamps are ISO-8601 UTC (`2024-05-01T08:30:00.000Z`) except on the tags
endpoint, which uses `YYYY-MM-DD HH:mm:ss` in the configured zone
(TAGS_TIMEZONE, Asia/Shanghai by default).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, Iterable, List, Literal, Mapping, Optional, TypeVar
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic.alias_generators import to_camel

from webvault.config import settings
from webvault.middleware.request_id import request_id_var
from webvault.schemas.common import CamelModel

T = TypeVar("T")

TimestampStyle = Literal["iso", "local"]

ROOT_ERROR_KEY = "_root"
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


# ══════════════════════════════════════════════════════════════════════════
# Envelope Models
# ══════════════════════════════════════════════════════════════════════════


class SuccessEnvelope(CamelModel, Generic[T]):
    status: Literal["success"] = "success"
    code: int = Field(default=0, description="Always 0 on success")
    message: str = "ok"
    data: Optional[T] = None
    request_id: Optional[str] = None
    timestamp: str


class FailEnvelope(CamelModel):
    status: Literal["fail"] = "fail"
    code: str = "validation_failed"
    message: str
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    request_id: Optional[str] = None
    timestamp: str


class ErrorEnvelope(CamelModel):
    status: Literal["error"] = "error"
    code: str = "internal_error"
    message: str
    request_id: Optional[str] = None
    timestamp: str


# ══════════════════════════════════════════════════════════════════════════
# Builders
# ══════════════════════════════════════════════════════════════════════════


def format_timestamp(style: TimestampStyle = "iso", now: Optional[datetime] = None) -> str:
    """
    Render a timestamp for an envelope.

    Examples:
        >>> moment = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)
        >>> format_timestamp("iso", moment)
        '2024-05-01T08:30:00.000Z'
        >>> format_timestamp("local", moment)   # Asia/Shanghai
        '2024-05-01 16:30:00'
    """
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if style == "local":
        return moment.astimezone(ZoneInfo(settings.tags_timezone)).strftime("%Y-%m-%d %H:%M:%S")
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def _request_id(request_id: Optional[str]) -> Optional[str]:
    if request_id is not None:
        return request_id
    return request_id_var.get("") or None


def success(
    data: Any = None,
    *,
    message: str = "ok",
    request_id: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> SuccessEnvelope:
    return SuccessEnvelope(
        message=message,
        data=data,
        request_id=_request_id(request_id),
        timestamp=timestamp or format_timestamp(),
    )


def fail(
    errors: Optional[Mapping[str, Iterable[str]]] = None,
    *,
    message: str = "Validation failed",
    code: str = "validation_failed",
    request_id: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> FailEnvelope:
    return FailEnvelope(
        code=code,
        message=message,
        errors={key: list(messages) for key, messages in (errors or {}).items()},
        request_id=_request_id(request_id),
        timestamp=timestamp or format_timestamp(),
    )


def error(
    message: str = "An internal error occurred. Please try again later.",
    *,
    code: str = "internal_error",
    request_id: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> ErrorEnvelope:
    return ErrorEnvelope(
        code=code,
        message=message,
        request_id=_request_id(request_id),
        timestamp=timestamp or format_timestamp(),
    )


def field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """
    Convert pydantic/FastAPI error dicts into a field-keyed message map.

    The request location prefix ("body", "query", ...) is dropped, nested
    locations are dotted (`items.0.websiteId`), snake_case field names are
    reported under their camelCase wire names, and custom `ValueError`
    messages are returned without pydantic's "Value error, " prefix.
    """
    result: Dict[str, List[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        key = ".".join(_wire_name(part) for part in loc) or ROOT_ERROR_KEY

        ctx = err.get("ctx") or {}
        if err.get("type") == "value_error" and "error" in ctx:
            message = str(ctx["error"])
        else:
            message = str(err.get("msg", "Invalid value"))
        result.setdefault(key, []).append(message)
    return result


def _wire_name(part: str) -> str:
    if "_" in part and not part.startswith("_"):
        return to_camel(part)
    return part
