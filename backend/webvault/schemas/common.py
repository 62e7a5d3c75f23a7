"""
WebVault Backend — Shared Schema Building Blocks
==================================================

What:  Base classes used by every request/response schema.

    CamelModel   JSON uses camelCase (`pageSize`, `isFeatured`), Python uses
                 snake_case; both spellings are accepted on input.
    InputModel   Request bodies. An empty string means "absent", and so
                 does null, except for the fields a schema lists in
                 `clearable_fields`, where null means "clear this value".
    PatchModel   Partial updates. Rejects a patch with no fields left after
                 the empty-value normalisation.
"""

import json
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

EMPTY_PATCH_MESSAGE = "At least one field must be provided"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class InputModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    clearable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        clearable = set()
        for name in cls.clearable_fields:
            clearable.add(name)
            alias = cls.model_fields[name].alias
            if alias:
                clearable.add(alias)

        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str) and not value.strip():
                continue
            if value is None and key not in clearable:
                continue
            cleaned[key] = value
        return cleaned


class PatchModel(InputModel):
    @model_validator(mode="after")
    def require_some_field(self):
        if not self.model_fields_set:
            raise ValueError(EMPTY_PATCH_MESSAGE)
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent (None means clear)."""
        return self.model_dump(exclude_unset=True)


def split_list(value: Any) -> Any:
    """Accept either a JSON list or a comma-separated string; dedupe in order."""
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        seen = set()
        items = []
        for raw in value:
            item = str(raw).strip()
            if item and item not in seen:
                seen.add(item)
                items.append(item)
        return items
    return value


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PageResponse(CamelModel, Generic[T]):
    """One page of a listing plus the data needed to derive page counts."""

    items: List[T] = Field(description="Rows on this page (never more than pageSize)")
    page: int = Field(description="1-indexed page number")
    page_size: int = Field(description="Effective page size after clamping")
    total: int = Field(description="Total rows matching the filters")
    has_more: bool = Field(description="Whether a further page exists")


class HealthResponse(CamelModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    data_channel: str = Field(description="Configured database dialect")
    uptime_seconds: float
    checks: Dict[str, str] = Field(default_factory=dict)


class SignOutResponse(CamelModel):
    redirect_url: str


class AuditLogResponse(CamelModel):
    id: str
    actor_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: str
    changes: Optional[Dict[str, Any]] = None
    created_at: datetime

    @field_validator("changes", mode="before")
    @classmethod
    def parse_changes(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v else None
        return v
