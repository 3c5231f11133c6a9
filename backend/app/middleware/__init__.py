# Middleware package init
"""
FamilyEvents Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route

    1. Request ID: correlation id for logs and error bodies, 429s included
    2. Logging: one access line per request, tagged with the request id
    3. Rate Limit: abusive clients are rejected before any route work
"""
