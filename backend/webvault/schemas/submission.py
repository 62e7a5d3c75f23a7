"""WebVault Backend — Submission Schemas."""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from webvault.schemas.common import CamelModel, InputModel, split_list
from webvault.schemas.website import validate_http_url


class SubmissionCreate(InputModel):
    """A website proposed by a signed-in user; lands as pending review."""

    title: str = Field(min_length=1, max_length=200)
    url: str = Field(max_length=2048)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: Optional[str] = Field(default=None, max_length=120)
    tag_ids: List[str] = Field(default_factory=list)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return validate_http_url(v)

    @field_validator("tag_ids", mode="before")
    @classmethod
    def split_ids(cls, v):
        return split_list(v)


class SubmissionResponse(CamelModel):
    id: str
    website_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    submitted_by: Optional[str] = None
    status: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    @field_validator("payload", mode="before")
    @classmethod
    def parse_payload(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v else {}
        return v
