"""WebVault Backend — Admin Category Routes (session required)."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.dependencies import require_session
from webvault.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryNode,
    CategoryUpdate,
)
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.services.category_service import category_service

router = APIRouter(
    prefix="/api/admin/categories",
    tags=["Admin: Categories"],
    responses={401: {"description": "No session", "model": FailEnvelope}},
)


@router.get("", response_model=SuccessEnvelope[CategoryListResponse], summary="Category tree")
async def list_categories(
    search: Optional[str] = Query(default=None, description="Name contains"),
    status: Literal["active", "inactive", "hidden", "all"] = Query(default="all"),
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CategoryListResponse]:
    return success(await category_service.list_categories(db, search=search, status=status))


@router.post(
    "",
    status_code=201,
    response_model=SuccessEnvelope[CategoryNode],
    responses={422: {"description": "Invalid category or unknown parent", "model": FailEnvelope}},
    summary="Create a category",
)
async def create_category(
    payload: CategoryCreate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CategoryNode]:
    result = await category_service.create_category(db, payload, actor_id=session_id)
    return success(result, message="created")


@router.patch(
    "/{category_id}",
    response_model=SuccessEnvelope[CategoryNode],
    responses={
        404: {"description": "Category not found", "model": FailEnvelope},
        422: {"description": "Invalid patch, unknown parent or cycle", "model": FailEnvelope},
    },
    summary="Update or move a category",
)
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CategoryNode]:
    result = await category_service.update_category(db, category_id, payload, actor_id=session_id)
    return success(result, message="updated")


@router.delete(
    "/{category_id}",
    response_model=SuccessEnvelope,
    responses={
        404: {"description": "Category not found", "model": FailEnvelope},
        409: {"description": "Category still has children", "model": FailEnvelope},
    },
    summary="Delete a leaf category",
)
async def delete_category(
    category_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope:
    await category_service.delete_category(db, category_id, actor_id=session_id)
    return success(message="deleted")
