"""
WebVault Backend — Public Tag Route
=====================================

GET /api/tags lists tags with website counts. Envelope timestamps on this
route use the local `YYYY-MM-DD HH:mm:ss` style (TAGS_TIMEZONE), errors
included.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.dependencies import local_timestamps
from webvault.schemas.envelope import SuccessEnvelope, format_timestamp, success
from webvault.schemas.tag import TagListResponse
from webvault.services.tag_service import tag_service

router = APIRouter(prefix="/api", tags=["Tags"])


@router.get(
    "/tags",
    response_model=SuccessEnvelope[TagListResponse],
    dependencies=[Depends(local_timestamps)],
    summary="List tags",
    description=(
        "`status` defaults to active; `status=all` lists every tag. "
        "`total`, `active` and `inactive` count the search matches regardless of status."
    ),
)
async def list_tags(
    search: Optional[str] = Query(default=None),
    status: Optional[Literal["active", "inactive", "hidden", "all"]] = Query(default="active"),
    order_by: Literal["name", "recent", "usage"] = Query(default="name", alias="orderBy"),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[TagListResponse]:
    result = await tag_service.list_tags(db, search=search, status=status, order_by=order_by)
    return success(result, timestamp=format_timestamp("local"))
