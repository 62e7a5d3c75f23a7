"""
WebVault Backend — Submission Route
=====================================

POST /api/submissions: a signed-in user proposes a website. It lands as a
hidden, pending entry for the moderators.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from webvault.database import get_db_session
from webvault.dependencies import require_session
from webvault.schemas.envelope import FailEnvelope, SuccessEnvelope, success
from webvault.schemas.submission import SubmissionCreate, SubmissionResponse
from webvault.services.submission_service import submission_service

router = APIRouter(prefix="/api", tags=["Submissions"])


@router.post(
    "/submissions",
    status_code=201,
    response_model=SuccessEnvelope[SubmissionResponse],
    responses={
        401: {"description": "No session", "model": FailEnvelope},
        422: {"description": "Invalid submission", "model": FailEnvelope},
    },
    summary="Submit a website for review",
)
async def create_submission(
    payload: SubmissionCreate,
    session_id: str = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessEnvelope[SubmissionResponse]:
    result = await submission_service.create_submission(db, payload, submitted_by=session_id)
    return success(result, message="created")
