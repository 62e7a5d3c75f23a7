"""
WebVault Backend — Public Collection Routes
=============================================

    GET /api/collections          curated collections with website counts
    GET /api/collections/{slug}   one collection with its visible websites
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.schemas.collection import CollectionDetailResponse, CollectionResponse
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.services.collection_service import collection_service

router = APIRouter(prefix="/api", tags=["Collections"])


@router.get(
    "/collections",
    response_model=SuccessEnvelope[List[CollectionResponse]],
    summary="List collections",
)
async def list_collections(
    search: Optional[str] = Query(default=None),
    featured: Optional[bool] = Query(default=None),
    order_by: Literal["order", "name", "recent"] = Query(default="order", alias="orderBy"),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[List[CollectionResponse]]:
    result = await collection_service.list_collections(
        db, search=search, featured=featured, order_by=order_by
    )
    return success(result)


@router.get(
    "/collections/{slug}",
    response_model=SuccessEnvelope[CollectionDetailResponse],
    responses={404: {"description": "Collection not found", "model": FailEnvelope}},
    summary="Get a collection with its websites",
)
async def get_collection(
    slug: str,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[CollectionDetailResponse]:
    return success(await collection_service.get_collection(db, slug, visible_only=True))
