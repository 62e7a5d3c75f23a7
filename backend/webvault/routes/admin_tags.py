"""WebVault Backend — Admin Tag Routes (session required)."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.dependencies import require_session
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.schemas.tag import TagCreate, TagListResponse, TagResponse, TagUpdate
from webvault.services.tag_service import tag_service

router = APIRouter(
    prefix="/api/admin/tags",
    tags=["Admin: Tags"],
    responses={401: {"description": "No session", "model": FailEnvelope}},
)


@router.get("", response_model=SuccessEnvelope[TagListResponse], summary="List tags")
async def list_tags(
    search: Optional[str] = Query(default=None),
    status: Optional[Literal["active", "inactive", "hidden", "all"]] = Query(default="all"),
    order_by: Literal["name", "recent", "usage"] = Query(default="name", alias="orderBy"),
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[TagListResponse]:
    return success(await tag_service.list_tags(db, search=search, status=status, order_by=order_by))


@router.post(
    "",
    status_code=201,
    response_model=SuccessEnvelope[TagResponse],
    responses={422: {"description": "Invalid tag", "model": FailEnvelope}},
    summary="Create a tag",
)
async def create_tag(
    payload: TagCreate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[TagResponse]:
    return success(await tag_service.create_tag(db, payload, actor_id=session_id), message="created")


@router.patch(
    "/{tag_id}",
    response_model=SuccessEnvelope[TagResponse],
    responses={
        404: {"description": "Tag not found", "model": FailEnvelope},
        422: {"description": "Invalid or empty patch", "model": FailEnvelope},
    },
    summary="Update a tag",
)
async def update_tag(
    tag_id: str,
    payload: TagUpdate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[TagResponse]:
    result = await tag_service.update_tag(db, tag_id, payload, actor_id=session_id)
    return success(result, message="updated")


@router.delete(
    "/{tag_id}",
    response_model=SuccessEnvelope,
    responses={
        404: {"description": "Tag not found", "model": FailEnvelope},
        409: {"description": "Tag still assigned to websites", "model": FailEnvelope},
    },
    summary="Delete an unused tag",
)
async def delete_tag(
    tag_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope:
    await tag_service.delete_tag(db, tag_id, actor_id=session_id)
    return success(message="deleted")
