"""
Aquarium Log Backend: Middleware Package
==========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [Session] → [GZip] → [CORS] → Route Handler

    - Request ID: correlation id for logs and the X-Request-ID header
    - Logging: one access line per request with status and duration
    - Session, GZip and CORS are Starlette's own middleware (see main.py)
"""
