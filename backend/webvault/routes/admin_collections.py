"""WebVault Backend — Admin Collection Routes (session required)."""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.dependencies import require_session
from webvault.schemas.collection import (
    CollectionCreate,
    CollectionDetailResponse,
    CollectionItemsReplace,
    CollectionResponse,
    CollectionUpdate,
)
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.services.collection_service import collection_service

router = APIRouter(
    prefix="/api/admin/collections",
    tags=["Admin: Collections"],
    responses={401: {"description": "No session", "model": FailEnvelope}},
)


@router.get("", response_model=SuccessEnvelope[List[CollectionResponse]], summary="List collections")
async def list_collections(
    search: Optional[str] = Query(default=None),
    featured: Optional[bool] = Query(default=None),
    order_by: Literal["order", "name", "recent"] = Query(default="order", alias="orderBy"),
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[List[CollectionResponse]]:
    result = await collection_service.list_collections(
        db, search=search, featured=featured, order_by=order_by
    )
    return success(result)


@router.post(
    "",
    status_code=201,
    response_model=SuccessEnvelope[CollectionDetailResponse],
    responses={422: {"description": "Invalid collection or unknown website", "model": FailEnvelope}},
    summary="Create a collection",
)
async def create_collection(
    payload: CollectionCreate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CollectionDetailResponse]:
    result = await collection_service.create_collection(db, payload, actor_id=session_id)
    return success(result, message="created")


@router.get(
    "/{collection_id}",
    response_model=SuccessEnvelope[CollectionDetailResponse],
    responses={404: {"description": "Collection not found", "model": FailEnvelope}},
    summary="Get a collection with every item",
)
async def get_collection(
    collection_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CollectionDetailResponse]:
    return success(await collection_service.get_collection(db, collection_id))


@router.patch(
    "/{collection_id}",
    response_model=SuccessEnvelope[CollectionDetailResponse],
    responses={
        404: {"description": "Collection not found", "model": FailEnvelope},
        422: {"description": "Invalid or empty patch", "model": FailEnvelope},
    },
    summary="Update a collection",
)
async def update_collection(
    collection_id: str,
    payload: CollectionUpdate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CollectionDetailResponse]:
    result = await collection_service.update_collection(
        db, collection_id, payload, actor_id=session_id
    )
    return success(result, message="updated")


@router.put(
    "/{collection_id}/items",
    response_model=SuccessEnvelope[CollectionDetailResponse],
    responses={
        404: {"description": "Collection not found", "model": FailEnvelope},
        422: {"description": "Unknown website; nothing changed", "model": FailEnvelope},
    },
    summary="Replace a collection's items",
)
async def replace_items(
    collection_id: str,
    payload: CollectionItemsReplace,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CollectionDetailResponse]:
    result = await collection_service.replace_items(
        db, collection_id, payload.items, actor_id=session_id
    )
    return success(result, message="updated")


@router.delete(
    "/{collection_id}",
    response_model=SuccessEnvelope,
    responses={404: {"description": "Collection not found", "model": FailEnvelope}},
    summary="Delete a collection",
)
async def delete_collection(
    collection_id: str,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope:
    await collection_service.delete_collection(db, collection_id, actor_id=session_id)
    return success(message="deleted")
