"""
Apna SAHE Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app()` assembles middleware, exception handlers and routers;
       the lifespan connects to Firebase and Cloudinary before the first
       request.
Who:   uvicorn (`uvicorn apna_sahe.main:app`), or `python -m apna_sahe.main`.

Application Architecture:
    ┌───────────────────────────────────────────────────────────────┐
    │                         FastAPI App                           │
    │                                                               │
    │  Middleware:  Request ID → Rate Limit → Logging → Body Limit  │
    │               → GZip → CORS                                   │
    │                                                               │
    │  Routes:  /health  /api/auth  /api/users  /api/notes          │
    │           /api/cloudinary  /api/events  /api/facilities       │
    │           /api/queries                                        │
    │                                                               │
    │  Exception Handlers:                                          │
    │    SaheError → its status_code │ Exception → 500              │
    └───────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → Firebase Admin → Cloudinary. A failure in either
              platform step aborts startup; a server that cannot verify
              tokens or delete files must not accept traffic.
    Shutdown: log and exit. The SDK clients hold no resources that need an
              explicit close.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from apna_sahe import __version__
from apna_sahe.config import settings
from apna_sahe.exceptions import SaheError
from apna_sahe.firebase import init_firebase_admin
from apna_sahe.middleware.body_limit import BodySizeLimitMiddleware
from apna_sahe.middleware.logging import RequestLoggingMiddleware
from apna_sahe.middleware.rate_limit import RateLimitMiddleware
from apna_sahe.middleware.request_id import RequestIDMiddleware, request_id_var
from apna_sahe.routes import auth, events, facilities, health, media, notes, queries, users
from apna_sahe.services.media_service import configure_cloudinary

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2024-01-15T12:00:00 [INFO] apna_sahe.services.note_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Chatty third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Apna SAHE backend %s starting up...", __version__)

    try:
        init_firebase_admin()
        configure_cloudinary()
    except (ValueError, OSError) as e:
        logger.critical("Startup aborted, platform configuration is invalid: %s", str(e))
        raise

    if not settings.firebase_web_api_key:
        logger.warning("FIREBASE_WEB_API_KEY is not set; password sign-in will answer 503")
    if not settings.admin_email:
        logger.warning("ADMIN_EMAIL is not set; only users with role 'admin' are administrators")

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    logger.info("Apna SAHE backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(exc: SaheError, rid: str) -> dict:
    """
    Uniform error envelope: {"error", "message", "details", "request_id"}.

    Context is only echoed back for client errors; for server errors it is
    logged and withheld.
    """
    body = {"error": exc.error_code, "message": exc.message, "request_id": rid}
    if exc.status_code < 500 and exc.context:
        body["details"] = exc.context
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Every SaheError subclass carries its own status code and error code, so a
    single handler covers them. Request body schema violations keep FastAPI's
    default 422 response.
    """

    @app.exception_handler(SaheError)
    async def handle_sahe_error(request: Request, exc: SaheError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        return JSONResponse(status_code=exc.status_code, content=error_body(exc, rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, stack trace to the log only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Apna SAHE API",
        description=(
            "Backend for the Apna SAHE student notes portal: accounts, PDF notes "
            "with points, campus events, facilities and student note requests."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → RateLimit → Logging → BodyLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        # Browsers reject credentialed requests to a wildcard origin
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(notes.router)
    app.include_router(media.router)
    app.include_router(events.router)
    app.include_router(facilities.router)
    app.include_router(queries.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("apna_sahe.main:app", host=settings.host, port=settings.port)
