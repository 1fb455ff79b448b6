"""
Render service - drives one headless browser through a render job.

Pipeline: options -> browser session -> content -> (isolation) ->
readiness -> PDF. The BrowserSession context manager owns the browser for
the whole sequence and closes it on every exit path.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from webprint.config import Settings, get_settings
from webprint.shared.errors import RenderTimeoutError, WebPrintError
from webprint.shared.logging import get_logger
from webprint.shared.types import RenderMode

from .acquirer import acquire_content
from .engine import BrowserSession, RenderEngine, translate_engine_error
from .isolation import isolate_section
from .options import resolve_render_options
from .pdf import render_pdf
from .readiness import wait_until_ready
from .schemas import RenderJob, RenderResult
from .validator import check_engine_available

logger = get_logger(__name__)


class RenderService:
    """Service for rendering URLs and HTML documents to PDF."""

    def __init__(
        self,
        engine: RenderEngine,
        settings: Settings | None = None,
        slots: asyncio.Semaphore | None = None,
    ) -> None:
        self.engine = engine
        self.settings = settings or get_settings()
        self.slots = slots

    @asynccontextmanager
    async def admission(self) -> AsyncIterator[None]:
        """Hold one admission slot, if a limit is configured."""
        if self.slots is None:
            yield
            return
        async with self.slots:
            yield

    def should_isolate(self, mode: RenderMode) -> bool:
        if mode == RenderMode.URL:
            return self.settings.isolate_url_mode
        return self.settings.isolate_html_mode

    async def render(self, job: RenderJob) -> RenderResult:
        """
        Render a job to PDF bytes.

        Args:
            job: Classified render job

        Returns:
            RenderResult with the PDF payload

        Raises:
            WebPrintError: Any failure, already mapped onto the error taxonomy
        """
        check_engine_available(self.engine)
        settings = self.settings
        options = resolve_render_options(job.mode, settings, job.options, job.pdf_options)

        logger.info(
            f"Rendering {job.mode.value} job: viewport "
            f"{options.viewport.width}x{options.viewport.height}, scale {options.scale}"
        )
        start_time = time.time()

        async with self.admission(), BrowserSession(self.engine, options.viewport) as session:
            try:
                await acquire_content(session.page, session.context, job, settings)

                region: str | None = None
                if self.should_isolate(job.mode):
                    found = await isolate_section(session.page, settings.export_selector)
                    if found or settings.export_section_required:
                        region = settings.export_selector

                readiness = await wait_until_ready(
                    session.page,
                    region,
                    timeout_ms=settings.readiness_timeout_ms,
                    poll_interval_ms=settings.readiness_poll_interval_ms,
                    settle_delay_ms=settings.settle_delay_ms,
                )
                if not readiness.ready:
                    raise RenderTimeoutError(
                        f"Page assets not ready after {readiness.elapsed_ms}ms",
                        details={
                            "stage": f"readiness:{readiness.stage}",
                            "pending": readiness.pending,
                        },
                    )

                pdf = await render_pdf(
                    session.page,
                    options,
                    timeout_ms=settings.pdf_timeout_ms,
                    max_bytes=settings.max_pdf_bytes,
                )
            except WebPrintError as e:
                logger.warning(f"Render failed ({e.code}): {e.message}")
                raise
            except Exception as e:
                logger.exception("Render failed with an unexpected error")
                raise translate_engine_error(e, "render") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Rendered {len(pdf)} bytes in {duration_ms}ms")
        return RenderResult(pdf=pdf, mode=job.mode, duration_ms=duration_ms)
