"""
WebVault Backend — Audit Service
==================================

What:  Appends audit rows for admin actions and lists them read-only.
How:   record() only adds the row to the caller's session, so the audit entry
       commits or rolls back together with the change it describes.
"""

import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.models.audit_log import AuditLog
from webvault.queries.websites import Pagination
from webvault.schemas.common import AuditLogResponse, PageResponse
from webvault.services.errors import database_errors

logger = logging.getLogger(__name__)


class AuditService:
    def record(
        self,
        db: AsyncSession,
        *,
        actor_id: Optional[str],
        action: str,
        entity_type: str,
        entity_id: str,
        changes: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            changes=json.dumps(changes, default=str, ensure_ascii=False) if changes else None,
        )
        db.add(entry)
        logger.info("Audit %s on %s %s by %s", action, entity_type, entity_id, actor_id)
        return entry

    async def list_logs(
        self,
        db: AsyncSession,
        pagination: Pagination,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> PageResponse[AuditLogResponse]:
        conditions = []
        if entity_type:
            conditions.append(AuditLog.entity_type == entity_type)
        if entity_id:
            conditions.append(AuditLog.entity_id == entity_id)

        with database_errors("list_audit_logs"):
            rows = (
                await db.execute(
                    select(AuditLog)
                    .where(*conditions)
                    .order_by(AuditLog.created_at.desc(), AuditLog.id)
                    .limit(pagination.limit)
                    .offset(pagination.offset)
                )
            ).scalars().all()
            total = (
                await db.execute(select(func.count()).select_from(AuditLog).where(*conditions))
            ).scalar() or 0

        return PageResponse[AuditLogResponse](
            items=[AuditLogResponse.model_validate(row) for row in rows],
            page=pagination.page,
            page_size=pagination.page_size,
            total=total,
            has_more=pagination.offset + len(rows) < total,
        )


audit_service = AuditService()
