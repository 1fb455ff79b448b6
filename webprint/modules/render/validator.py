"""
Request classification and input limits.

Runs before any browser work. When both `url` and `html` are present the
request is rendered in URL mode and the inline HTML is ignored.
"""

from urllib.parse import urlparse

from webprint.config import Settings
from webprint.shared.errors import (
    InvalidInputError,
    PayloadTooLargeError,
    ServiceUnavailableError,
)
from webprint.shared.logging import get_logger

from .engine import RenderEngine
from .schemas import GeneratePdfRequest, HtmlRenderJob, RenderJob, UrlRenderJob

logger = get_logger(__name__)

ALLOWED_URL_SCHEMES = ("http", "https")


def _non_empty_string(value: object) -> bool:
    return isinstance(value, str) and value.strip() != ""


def check_engine_available(engine: RenderEngine) -> None:
    """Raise ServiceUnavailableError if the engine failed its startup probe."""
    if not engine.available:
        raise ServiceUnavailableError(
            "PDF rendering engine is not available",
            details={"reason": engine.reason} if engine.reason else None,
        )


def check_html_size(html: str, max_bytes: int) -> int:
    """Return the UTF-8 size of `html`, rejecting documents over the ceiling."""
    size = len(html.encode("utf-8"))
    if size > max_bytes:
        raise PayloadTooLargeError(
            f"HTML payload is {size} bytes; the limit is {max_bytes} bytes",
            details={"size_bytes": size, "max_bytes": max_bytes},
        )
    return size


def classify_request(
    request: GeneratePdfRequest,
    settings: Settings,
    engine: RenderEngine,
) -> RenderJob:
    """
    Turn a raw request into a render job.

    Raises:
        ServiceUnavailableError: Engine failed to initialize at startup
        InvalidInputError: Neither `url` nor `html` is a non-empty string
        PayloadTooLargeError: `html` exceeds the configured ceiling
    """
    check_engine_available(engine)

    cookies = list(request.cookies or [])
    options = request.options or {}
    pdf_options = request.pdf_options or {}

    # Applies whichever mode wins
    if isinstance(request.html, str):
        check_html_size(request.html, settings.max_html_bytes)

    if _non_empty_string(request.url):
        url = request.url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ALLOWED_URL_SCHEMES or not parsed.netloc:
            raise InvalidInputError(
                "URL must be an absolute http(s) URL", details={"url": url}
            )
        if request.html is not None:
            logger.info("Both url and html supplied; rendering url and ignoring html")
        return UrlRenderJob(
            url=url, cookies=cookies, options=options, pdf_options=pdf_options
        )

    if _non_empty_string(request.html):
        return HtmlRenderJob(
            html=request.html, cookies=cookies, options=options, pdf_options=pdf_options
        )

    raise InvalidInputError("Missing content: provide a non-empty 'url' or 'html' string")
