# Middleware package init
"""
FreePaste — Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Access Logging] → [GZip] → Route Handler

    The request id is assigned first so the access log line and any error
    response for the same request carry it.
"""
