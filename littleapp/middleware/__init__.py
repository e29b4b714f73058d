"""
Little Application: Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every response, a 429 included, carries X-Request-ID
    2. Rate Limit: over-limit clients are rejected before any route work
    3. Logging: method, path, status and duration tagged with the request id

    Responses travel back through the chain in reverse order.
"""
