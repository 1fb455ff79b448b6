"""
Application factory - builds FastAPI app with all middleware and routes.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from webprint import __version__
from webprint.config import Settings, get_settings
from webprint.modules.health.router import router as health_router
from webprint.modules.render import PlaywrightEngine, RenderEngine, build_router
from webprint.shared.errors import (
    InvalidInputError,
    OriginNotAllowedError,
    PayloadTooLargeError,
    WebPrintError,
)
from webprint.shared.ids import generate_request_id
from webprint.shared.logging import (
    clear_request_context,
    get_logger,
    get_request_context,
    set_request_context,
    setup_logging,
)
from webprint.shared.origins import is_origin_allowed
from webprint.shared.types import RequestContext

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info(f"Starting WebPrint {__version__}...")

    # Probe once; an unavailable engine only disables the render route
    engine = app.state.engine
    if isinstance(engine, PlaywrightEngine) and not engine.available:
        await engine.probe()

    logger.info(f"Render endpoint: POST {settings.render_path}")
    yield
    logger.info("WebPrint stopped")


def _error_response(exc: WebPrintError) -> JSONResponse:
    ctx = get_request_context()
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error": exc.to_dict(),
            "request_id": ctx.request_id if ctx else None,
        },
    )


def build_app(
    settings: Settings | None = None,
    engine: RenderEngine | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)
        engine: Optional rendering engine; defaults to Playwright Chromium,
            probed at startup

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="WebPrint",
        description="Render web pages and HTML documents to PDF",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine if engine is not None else PlaywrightEngine(settings)
    app.state.started_at = time.monotonic()
    app.state.render_slots = (
        asyncio.Semaphore(settings.max_concurrent_renders)
        if settings.max_concurrent_renders > 0
        else None
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Authorization"],
    )

    # Body size gate
    @app.middleware("http")
    async def body_limit_middleware(request: Request, call_next: Any) -> Response:
        """Reject bodies whose declared length exceeds max_body_bytes."""
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > settings.max_body_bytes:
            return _error_response(PayloadTooLargeError(
                f"Request body is {declared} bytes; the limit is {settings.max_body_bytes} bytes",
                details={"size_bytes": int(declared), "max_bytes": settings.max_body_bytes},
            ))
        return await call_next(request)

    # Origin gate
    @app.middleware("http")
    async def origin_gate_middleware(request: Request, call_next: Any) -> Response:
        """Reject browser origins that are not on the allow-list."""
        origin = request.headers.get("origin")
        if not is_origin_allowed(origin, settings.cors_origins):
            logger.warning(f"Rejected request from origin {origin}")
            return _error_response(OriginNotAllowedError(f"Origin not allowed: {origin}"))
        return await call_next(request)

    # Request context middleware
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Response:
        """Attach request context for logging and tracing."""
        ctx = RequestContext(
            request_id=request.headers.get("X-Request-ID", generate_request_id()),
            origin=request.headers.get("origin"),
        )
        set_request_context(ctx)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = ctx.request_id
            return response
        finally:
            clear_request_context()

    @app.exception_handler(WebPrintError)
    async def webprint_error_handler(request: Request, exc: WebPrintError) -> JSONResponse:
        """Handle WebPrintError with consistent JSON response."""
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed bodies as InvalidInput rather than 422."""
        return _error_response(
            InvalidInputError(
                "Malformed request body",
                details={"errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
                    for err in exc.errors()
                ]},
            )
        )

    # Register routers
    app.include_router(health_router, tags=["health"])
    app.include_router(build_router(settings))

    return app
