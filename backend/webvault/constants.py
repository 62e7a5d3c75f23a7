"""Values shared by models, schemas and services."""

from typing import Final

# Lifecycle status a website moves to when a review decision is recorded
REVIEW_TO_WEBSITE_STATUS: Final[dict] = {
    "approved": "active",
    "rejected": "blocked",
    "under_review": "pending",
    "changes_requested": "pending",
}

SLUG_PATTERN: Final[str] = r"^[a-z0-9-]+$"
TAG_COLOR_PATTERN: Final[str] = r"^#?[0-9a-fA-F]{3,8}$"

MAX_COLLECTION_ITEMS: Final[int] = 200
