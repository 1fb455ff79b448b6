"""PDF extraction from a loaded, ready page."""

import asyncio
from typing import Any

from webprint.shared.errors import ResultTooLargeError
from webprint.shared.logging import get_logger

from .engine import translate_engine_error
from .schemas import PdfSettings

logger = get_logger(__name__)


def check_pdf_size(pdf: bytes, max_bytes: int) -> None:
    """Reject a rendered PDF that exceeds the ceiling. Nothing is truncated."""
    if len(pdf) > max_bytes:
        raise ResultTooLargeError(
            f"Rendered PDF is {len(pdf)} bytes; the limit is {max_bytes} bytes",
            details={"size_bytes": len(pdf), "max_bytes": max_bytes},
        )


async def render_pdf(
    page: Any,
    options: PdfSettings,
    timeout_ms: int,
    max_bytes: int,
) -> bytes:
    """
    Print the page to PDF.

    Screen media is emulated first since source documents are laid out for
    on-screen display, not print stylesheets.

    Raises:
        RenderTimeoutError: PDF generation exceeded `timeout_ms`
        ResultTooLargeError: Output exceeds `max_bytes`
        EngineFaultError: The browser failed while printing
    """
    try:
        await page.emulate_media(media="screen")
        pdf = await asyncio.wait_for(
            page.pdf(**options.to_pdf_kwargs()), timeout=timeout_ms / 1000
        )
    except Exception as e:
        raise translate_engine_error(e, "PDF generation") from e

    check_pdf_size(pdf, max_bytes)
    logger.info(f"Generated PDF: {len(pdf)} bytes")
    return pdf
