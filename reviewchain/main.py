"""
FastAPI Application Entry Point

Creates and configures the review service application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() returns a configured app
   - Tests build their own instance and override dependencies

2. Lifespan Events
   - startup: log configuration, build the review service (and its store)
   - shutdown: close the publication HTTP client

3. Exception Handlers
   - One handler per review service error, each rendering the HTTP status
     and body documented for it
   - A catch-all that logs and hides internals outside debug mode
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reviewchain.config import get_settings
from reviewchain.dependencies import Publication, get_publication_client, get_review_service
from reviewchain.exceptions import (
    DuplicateReviewError,
    InvalidReviewError,
    ReviewNotFoundError,
    StorageError,
)
from reviewchain.routers import publication_router, reviews_router
from reviewchain.schemas.review import DuplicateReviewResponse, ErrorResponse

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Code before yield runs on startup, code after yield on shutdown.
    """
    # ----- STARTUP -----
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Review store backend: {settings.review_store_backend}")

    service = app.dependency_overrides.get(get_review_service, get_review_service)()
    client = app.dependency_overrides.get(get_publication_client, get_publication_client)()

    if not service.publication_enabled:
        logger.warning("Publication disabled - reviews will be stored locally only")
    elif client.has_hosted_backend_configured():
        logger.info(f"Publication backends: {client.backend_names}")
    else:
        logger.warning("No hosted publication backend configured - local node only")

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info(f"Shutting down {settings.app_name}...")
    client.close()


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Review Service

Product reviews tied to wallet addresses.

### Features
- **One review per wallet per product**, enforced under concurrency
- **Tamper evidence**: every review carries a SHA-256 review hash and a
  content address
- **Distributed publication**: reviews are pinned to content-addressable
  storage (local node, Pinata, web3.storage) when available
- **Verification**: look reviews up by hash and read published content back
        """,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(InvalidReviewError)
    async def invalid_review_handler(request: Request, exc: InvalidReviewError) -> JSONResponse:
        logger.info(f"Rejected invalid submission: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(message=exc.message).model_dump(exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed JSON and bad path/query parameters get the same 400 shape."""
        problems = [f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "; ".join(problems) or "Invalid request"},
        )

    @app.exception_handler(DuplicateReviewError)
    async def duplicate_review_handler(
        request: Request, exc: DuplicateReviewError
    ) -> JSONResponse:
        body = DuplicateReviewResponse(
            message=exc.message,
            existing_review_id=exc.existing.review_id if exc.existing else None,
            submitted_at=exc.existing.timestamp if exc.existing else None,
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=body.model_dump(mode="json", by_alias=True),
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error(f"Storage error: {exc.message} ({exc.error})")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": exc.message, "error": exc.error},
        )

    @app.exception_handler(ReviewNotFoundError)
    async def not_found_handler(request: Request, exc: ReviewNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": exc.message},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Catch-all exception handler.

        In production, hide internal errors from users.
        In debug mode, show more details.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return JSONResponse(status_code=500, content={"message": str(exc)})

        return JSONResponse(status_code=500, content={"message": "An internal error occurred."})

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    # prefix="/api/v1" creates versioned URLs: /api/v1/reviews, /api/v1/publication
    api_prefix = f"/api/{settings.api_version}"

    app.include_router(reviews_router, prefix=api_prefix)
    app.include_router(publication_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running and how publication is configured.",
    )
    def health_check(client: Publication) -> dict:
        """
        Used by load balancers, liveness probes and monitoring.

        Reports configuration only; no backend is contacted.
        """
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.api_version,
            "storage": {
                "backend": settings.review_store_backend,
            },
            "publication": {
                "enabled": settings.publication_enabled,
                "preferred_backend": settings.preferred_publication_backend,
                "configured": client.has_hosted_backend_configured(),
                "backends": client.configuration_status(),
            },
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn reviewchain.main:app

app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# python -m reviewchain.main

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "reviewchain.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
