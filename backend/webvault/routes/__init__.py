# Routes package init
"""
WebVault Backend — API Routes Package
=======================================

Route Inventory:
    Public
    - websites.py           GET  /api/websites, /api/websites/{id}, /api/categories
                            POST /api/websites/{id}/visit
    - tags.py               GET  /api/tags
    - collections.py        GET  /api/collections, /api/collections/{slug}
    - blog.py               GET  /api/blog-posts, /api/blog-posts/{slug}
    - favicon.py            GET  /api/favicon?domain=
    - health.py             GET  /api/health
    Signed in
    - submissions.py        POST /api/submissions
    - auth.py               POST /api/auth/sign-out
    Admin (session required)
    - admin_websites.py     /api/admin/websites (+ bulk-review, status, tags, options)
    - admin_tags.py         /api/admin/tags
    - admin_categories.py   /api/admin/categories (category tree)
    - admin_collections.py  /api/admin/collections (+ items)
    - admin_blog.py         /api/admin/blog-posts
    - admin_activity.py     /api/admin/submissions, /api/admin/audit-logs

Routes stay thin: parse the request, call a service, wrap the result with
`success(...)`. Errors are raised and turned into envelopes by the handlers
in main.py.
"""
