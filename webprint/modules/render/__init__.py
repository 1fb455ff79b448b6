"""Render module - URL/HTML to PDF rendering using Playwright."""

from .engine import BrowserSession, PlaywrightEngine, RenderEngine
from .router import build_router
from .schemas import GeneratePdfRequest, HtmlRenderJob, RenderResult, UrlRenderJob
from .service import RenderService

__all__ = [
    "build_router",
    "BrowserSession",
    "GeneratePdfRequest",
    "HtmlRenderJob",
    "PlaywrightEngine",
    "RenderEngine",
    "RenderResult",
    "RenderService",
    "UrlRenderJob",
]
