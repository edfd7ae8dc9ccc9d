# Middleware package init
"""
East Village Everything — Middleware Package
==============================================

What:  Cross-cutting concerns applied around the route handlers.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [Session] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and the X-Request-ID header
    2. Logging:    one access line per request, tagged with the request ID
    3. Session:    Starlette SessionMiddleware (signed cookie) for admin auth

Dependencies (per-route rather than global):
    - auth.require_admin:        401 unless an admin session exists
    - rate_limit.throttle_login: 429 after too many login attempts per IP
"""
