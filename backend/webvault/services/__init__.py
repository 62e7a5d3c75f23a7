# Services package init
"""
WebVault Backend — Services Layer
===================================

Service Inventory:
    - WebsiteService:       public listing, detail, visits, categories
    - WebsiteAdminService:  moderation CRUD and bulk review
    - TagService:           tag CRUD and website↔tag assignment
    - CollectionService:    curated collections and their items
    - BlogService:          blog posts and publish-time rules
    - SubmissionService:    user-proposed websites
    - AuditService:         audit rows written in the caller's session
    - FaviconService:       favicon proxy over httpx
    - IdentityProviderClient: session revocation with tenacity retries

Each module exposes a singleton (`website_service`, `tag_service`, ...).
Services take the request's AsyncSession and never commit; the session
dependency commits or rolls back once per request.
"""
