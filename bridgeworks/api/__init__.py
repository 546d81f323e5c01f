"""
FastAPI application factory and API package.

Run with:
    uvicorn bridgeworks.api:app --reload --port 8000

Or via main.py:
    python -m bridgeworks --serve
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bridgeworks.api.routes import (
    health_router,
    reports_router,
    requests_router,
    suggestions_router,
)
from bridgeworks.config import get_settings
from bridgeworks.errors import (
    AuthenticationError,
    AuthorizationError,
    BridgeworksError,
    NotFoundError,
    ValidationError,
)
from bridgeworks.services import ReportingService, RequestService

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[BridgeworksError], int] = {
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    ValidationError: 422,
}


async def _handle_domain_error(request: Request, exc: BridgeworksError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS_CODES.items() if isinstance(exc, cls)), 400
    )
    logger.warning(f"{request.method} {request.url.path} → {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def create_app(service: Optional[RequestService] = None) -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="Bridgeworks Feature Intelligence API",
        description="Feature request lifecycle, revenue prediction and suggestions",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: allow the frontend (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    request_service = service or RequestService()
    application.state.request_service = request_service
    application.state.reporting_service = ReportingService(
        request_service.store, clock=request_service.clock
    )

    application.add_exception_handler(BridgeworksError, _handle_domain_error)

    application.include_router(health_router, tags=["Health"])
    application.include_router(requests_router, prefix="/api/requests", tags=["Requests"])
    application.include_router(suggestions_router, prefix="/api/suggestions", tags=["Suggestions"])
    application.include_router(reports_router, prefix="/api/reports", tags=["Reports"])

    logger.info(f"Created {settings.app_name} API")
    return application


# Module-level instance for `uvicorn bridgeworks.api:app`
app = create_app()
