"""
Apna SAHE Backend — JSON Body Size Middleware
===============================================

What:  Rejects JSON request bodies larger than `max_json_body_size` (1 MB by
       default) with 413 before the route parses them.
How:   Trusts `Content-Length` when the client sends it. Multipart uploads are
       left alone; the note upload route enforces its own 10 MB file limit.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from apna_sahe.config import settings
from apna_sahe.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, max_body_size: int = None):
        super().__init__(app)
        self.max_body_size = max_body_size or settings.max_json_body_size

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        content_type = request.headers.get("content-type", "")
        declared = request.headers.get("content-length")

        if "json" in content_type and declared and declared.isdigit() and int(declared) > self.max_body_size:
            logger.warning(
                "Rejected %s %s: JSON body of %s bytes exceeds %d",
                request.method, request.url.path, declared, self.max_body_size,
            )
            return JSONResponse(
                status_code=413,
                content={
                    "error": "payload_too_large",
                    "message": "Request body too large",
                    "details": {"max_bytes": self.max_body_size},
                    "request_id": request_id_var.get("") or None,
                },
            )

        return await call_next(request)
