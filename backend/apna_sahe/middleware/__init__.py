# Middleware package init
"""
Apna SAHE Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [Body Limit] → [CORS] → Route

    1. Request ID: correlation id for logs and error bodies, 429s included
    2. Rate Limit: reject abusive clients before any work is done
    3. Logging: one access line per request, tagged with the request id
    4. Body Limit: refuse oversized JSON bodies with 413
    5. CORS: FastAPI's CORSMiddleware (handles preflight)

    Responses travel back through the chain in reverse, so the request id
    header and the logged status/duration reflect the final response.
"""
