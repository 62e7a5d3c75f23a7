"""
WebVault Backend — Bulk Review Tests
======================================

What we test:
    ✅ A batch with one unknown id is rejected with nothing changed
    ✅ A failure part-way through leaves every row untouched (500)
    ✅ A successful batch updates every row, closes pending submissions and
       writes one audit row per website

How:
    Service-level tests call website_admin_service directly; HTTP tests go
    through POST /api/admin/websites/bulk-review. A failure is injected by
    patching audit_service.record to raise on its third call.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from webvault.exceptions import DatabaseError, ValidationError
from webvault.models.audit_log import AuditLog
from webvault.models.submission import SubmissionRequest
from webvault.models.website import Website
from webvault.schemas.website import BulkReviewRequest
from webvault.services.audit_service import audit_service
from webvault.services.website_admin_service import website_admin_service

BULK_REVIEW_URL = "/api/admin/websites/bulk-review"


async def pending_websites(make_website, count: int):
    return [
        await make_website(status="pending", review_status="pending", is_public=False)
        for _ in range(count)
    ]


async def review_states(session_factory, ids):
    async with session_factory() as session:
        rows = (
            await session.execute(
                select(Website.id, Website.status, Website.review_status).where(Website.id.in_(ids))
            )
        ).all()
    return {row.id: (row.status, row.review_status) for row in rows}


async def audit_count(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(AuditLog))).scalar()


def failing_after(calls: int):
    original = audit_service.record
    state = {"n": 0}

    def _record(*args, **kwargs):
        state["n"] += 1
        if state["n"] > calls:
            raise RuntimeError("simulated write failure")
        return original(*args, **kwargs)

    return _record


class TestBulkReviewService:
    @pytest.mark.asyncio
    async def test_unknown_id_rejects_whole_batch(self, session_factory, make_website):
        websites = await pending_websites(make_website, 4)
        ids = [w.id for w in websites] + ["does-not-exist"]

        async with session_factory() as session:
            with pytest.raises(ValidationError) as exc_info:
                await website_admin_service.bulk_review(
                    session, BulkReviewRequest(ids=ids, review_status="approved")
                )
            await session.rollback()

        assert exc_info.value.field == "ids"
        assert "does-not-exist" in exc_info.value.errors["ids"][0]
        states = await review_states(session_factory, ids[:4])
        assert set(states.values()) == {("pending", "pending")}

    @pytest.mark.asyncio
    async def test_failure_mid_batch_changes_nothing(self, session_factory, make_website):
        websites = await pending_websites(make_website, 5)
        ids = [w.id for w in websites]

        async with session_factory() as session:
            with patch.object(audit_service, "record", side_effect=failing_after(2)):
                with pytest.raises(DatabaseError):
                    await website_admin_service.bulk_review(
                        session, BulkReviewRequest(ids=ids, review_status="approved")
                    )
            await session.rollback()

        states = await review_states(session_factory, ids)
        assert set(states.values()) == {("pending", "pending")}
        assert await audit_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_approve_batch(self, session_factory, make_website):
        websites = await pending_websites(make_website, 3)
        ids = [w.id for w in websites]

        async with session_factory() as session:
            result = await website_admin_service.bulk_review(
                session,
                BulkReviewRequest(ids=ids, review_status="approved", notes="looks good"),
                actor_id="sess_reviewer",
            )
            await session.commit()

        assert result.updated == 3
        states = await review_states(session_factory, ids)
        assert set(states.values()) == {("active", "approved")}
        assert await audit_count(session_factory) == 3

    @pytest.mark.asyncio
    async def test_reject_blocks_websites(self, session_factory, make_website):
        websites = await pending_websites(make_website, 2)
        ids = [w.id for w in websites]

        async with session_factory() as session:
            await website_admin_service.bulk_review(
                session, BulkReviewRequest(ids=ids, review_status="rejected")
            )
            await session.commit()

        states = await review_states(session_factory, ids)
        assert set(states.values()) == {("blocked", "rejected")}

    @pytest.mark.asyncio
    async def test_pending_submissions_are_closed(self, session_factory, make_website):
        website = (await pending_websites(make_website, 1))[0]
        async with session_factory() as session:
            session.add(SubmissionRequest(website_id=website.id, payload="{}", status="pending"))
            await session.commit()

        async with session_factory() as session:
            await website_admin_service.bulk_review(
                session,
                BulkReviewRequest(ids=[website.id], review_status="approved"),
                actor_id="sess_reviewer",
            )
            await session.commit()

        async with session_factory() as session:
            submission = (await session.execute(select(SubmissionRequest))).scalar_one()
        assert submission.status == "approved"
        assert submission.reviewed_by == "sess_reviewer"
        assert submission.reviewed_at is not None


class TestBulkReviewEndpoint:
    @pytest.mark.asyncio
    async def test_unknown_id_returns_422(
        self, test_client, admin_headers, session_factory, make_website
    ):
        websites = await pending_websites(make_website, 4)
        ids = [w.id for w in websites] + ["missing-id"]

        response = await test_client.post(
            BULK_REVIEW_URL,
            json={"ids": ids, "reviewStatus": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == "fail"
        assert body["code"] == "validation_failed"
        assert "ids" in body["errors"]
        states = await review_states(session_factory, ids[:4])
        assert set(states.values()) == {("pending", "pending")}

    @pytest.mark.asyncio
    async def test_injected_failure_returns_500_and_rolls_back(
        self, test_client, admin_headers, session_factory, make_website
    ):
        websites = await pending_websites(make_website, 5)
        ids = [w.id for w in websites]

        with patch.object(audit_service, "record", side_effect=failing_after(3)):
            response = await test_client.post(
                BULK_REVIEW_URL,
                json={"ids": ids, "reviewStatus": "approved"},
                headers=admin_headers,
            )

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "error"
        assert body["code"] == "internal_error"
        assert "simulated" not in body["message"]
        states = await review_states(session_factory, ids)
        assert set(states.values()) == {("pending", "pending")}
        assert await audit_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_success_envelope(self, test_client, admin_headers, session_factory, make_website):
        websites = await pending_websites(make_website, 5)
        ids = [w.id for w in websites]

        response = await test_client.post(
            BULK_REVIEW_URL,
            json={"ids": ids, "reviewStatus": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["code"] == 0
        assert body["message"] == "updated"
        assert body["data"] == {"updated": 5}
        states = await review_states(session_factory, ids)
        assert set(states.values()) == {("active", "approved")}

    @pytest.mark.asyncio
    async def test_requires_session(self, test_client):
        response = await test_client.post(
            BULK_REVIEW_URL, json={"ids": ["a"], "reviewStatus": "approved"}
        )
        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_pending_decision_rejected(self, test_client, admin_headers):
        response = await test_client.post(
            BULK_REVIEW_URL,
            json={"ids": ["a"], "reviewStatus": "pending"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert "reviewStatus" in response.json()["errors"]
