"""
WebVault Backend — Submission request model
=============================================

A submission request is the audit trail for a user-proposed website: the
raw payload as submitted, who submitted it, and the review decision.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webvault.database import Base
from webvault.utils import new_id, utcnow


class SubmissionRequest(Base):
    __tablename__ = "submission_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    website_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("websites.id", ondelete="SET NULL"), nullable=True
    )
    payload: Mapped[str] = mapped_column(Text, nullable=False, comment="JSON request body")
    submitted_by: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending")
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("idx_submission_requests_website_id", "website_id"),
        Index("idx_submission_requests_status", "status"),
    )
