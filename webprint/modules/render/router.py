"""Render module routes."""

from fastapi import APIRouter, Depends, Request, Response

from webprint.config import Settings
from webprint.shared.logging import get_logger

from .schemas import GeneratePdfRequest
from .service import RenderService
from .validator import classify_request

logger = get_logger(__name__)


def get_render_service(request: Request) -> RenderService:
    """Dependency injection for service."""
    state = request.app.state
    return RenderService(
        state.engine,
        state.settings,
        slots=getattr(state, "render_slots", None),
    )


async def generate_pdf(
    body: GeneratePdfRequest,
    service: RenderService = Depends(get_render_service),
) -> Response:
    """
    Render a URL or an HTML document to PDF.

    Returns the PDF as binary content. Failures are raised as WebPrintError
    and rendered as JSON by the app's exception handler.
    """
    job = classify_request(body, service.settings, service.engine)
    result = await service.render(job)

    return Response(
        content=result.pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": "attachment; filename=export.pdf",
            "Content-Length": str(result.size_bytes),
        },
    )


def build_router(settings: Settings) -> APIRouter:
    """Build the render router for the configured paths."""
    router = APIRouter(tags=["render"])
    router.add_api_route(settings.render_path, generate_pdf, methods=["POST"])
    if settings.enable_root_render and settings.render_path != "/":
        router.add_api_route("/", generate_pdf, methods=["POST"], include_in_schema=False)
    return router
