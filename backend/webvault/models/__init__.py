"""
WebVault Backend — ORM Models
===============================

Importing this package registers every table on `Base.metadata`
(Alembic autogenerate and the test suite's create_all rely on that).
"""

from webvault.models.audit_log import AuditLog
from webvault.models.blog_post import BlogPost
from webvault.models.category import Category
from webvault.models.collection import Collection, CollectionItem
from webvault.models.submission import SubmissionRequest
from webvault.models.tag import Tag, WebsiteTag
from webvault.models.website import Website

__all__ = [
    "AuditLog",
    "BlogPost",
    "Category",
    "Collection",
    "CollectionItem",
    "SubmissionRequest",
    "Tag",
    "Website",
    "WebsiteTag",
]
