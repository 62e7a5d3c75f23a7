"""
WebVault Backend — Admin Activity Routes
==========================================

Read-only views over moderation activity (session required):

    GET /api/admin/submissions    submission requests, newest first
    GET /api/admin/audit-logs     audit trail, newest first
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.config import settings
from webvault.database import get_db_session
from webvault.dependencies import optional_filter, require_session
from webvault.queries.websites import normalize_pagination
from webvault.schemas.common import AuditLogResponse, PageResponse
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.schemas.submission import SubmissionResponse
from webvault.services.audit_service import audit_service
from webvault.services.submission_service import submission_service

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin: Activity"],
    responses={
        401: {"description": "No session", "model": FailEnvelope},
        422: {"description": "Invalid pagination", "model": FailEnvelope},
    },
)


@router.get(
    "/submissions",
    response_model=SuccessEnvelope[PageResponse[SubmissionResponse]],
    summary="List submission requests",
)
async def list_submissions(
    response: Response,
    status: Optional[str] = Query(default=None),
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[PageResponse[SubmissionResponse]]:
    pagination = normalize_pagination(
        page,
        page_size,
        default_page_size=settings.admin_default_page_size,
        max_page_size=settings.admin_max_page_size,
    )
    result = await submission_service.list_submissions(db, pagination, status=optional_filter(status))
    response.headers["X-Total-Count"] = str(result.total)
    return success(result)


@router.get(
    "/audit-logs",
    response_model=SuccessEnvelope[PageResponse[AuditLogResponse]],
    summary="List audit log entries",
)
async def list_audit_logs(
    response: Response,
    entity_type: Optional[str] = Query(default=None, alias="entityType"),
    entity_id: Optional[str] = Query(default=None, alias="entityId"),
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[PageResponse[AuditLogResponse]]:
    pagination = normalize_pagination(
        page,
        page_size,
        default_page_size=settings.admin_default_page_size,
        max_page_size=settings.admin_max_page_size,
    )
    result = await audit_service.list_logs(
        db, pagination, entity_type=optional_filter(entity_type), entity_id=optional_filter(entity_id)
    )
    response.headers["X-Total-Count"] = str(result.total)
    return success(result)
