"""
WebVault Backend — Application Package
========================================

What: Website directory and bookmark manager API (public listing, curation
      and moderation).
Who:  Imported by uvicorn (webvault.main:app), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, audit, transactions
    ├─────────────────────────────────────┤
    │   Queries / Models / Schemas        │  ← Shared listing query, ORM, Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
