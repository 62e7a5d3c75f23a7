# Middleware package init
"""
WebVault Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: reuse X-Request-ID or generate one; stored in a ContextVar
       so services and envelopes can read it
    2. Logging: one access line per request with status and duration
"""
