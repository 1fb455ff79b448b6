"""
Rendering engine capability and browser session lifetime.

The engine is probed once at startup and injected into the app. Each render
gets its own BrowserSession: one browser process, one context, one page,
torn down on every exit path.
"""

import asyncio
from pathlib import Path
from typing import Any, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from webprint.config import Settings
from webprint.shared.errors import EngineFaultError, RenderTimeoutError, WebPrintError
from webprint.shared.logging import get_logger

from .schemas import Viewport

logger = get_logger(__name__)


# =============================================================================
# CAPABILITY
# =============================================================================

class BrowserHandle(Protocol):
    """A launched browser process."""

    async def new_context(self, **kwargs: Any) -> Any: ...

    async def close(self) -> None: ...


class RenderEngine(Protocol):
    """Something that can launch a fresh browser per request."""

    available: bool
    reason: str | None

    async def launch(self) -> BrowserHandle: ...


class PlaywrightBrowser:
    """Chromium browser together with the Playwright driver that started it."""

    def __init__(self, playwright: Any, browser: Any) -> None:
        self._playwright = playwright
        self._browser = browser

    async def new_context(self, **kwargs: Any) -> Any:
        return await self._browser.new_context(**kwargs)

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightEngine:
    """Headless Chromium via Playwright."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.available = False
        self.reason: str | None = None

    async def probe(self) -> bool:
        """
        Check that Playwright starts and the Chromium binary is installed.

        Leaves `available` False with a `reason` when it is not. Never raises.
        """
        try:
            async with async_playwright() as p:
                executable = p.chromium.executable_path
            if not executable or not Path(executable).exists():
                self.reason = f"Chromium executable not found at {executable!r}"
            else:
                self.available = True
                self.reason = None
        except Exception as e:
            self.reason = f"Playwright failed to start: {e}"

        if self.available:
            logger.info("Rendering engine available (Playwright Chromium)")
        else:
            logger.error(f"Rendering engine unavailable: {self.reason}")
        return self.available

    async def launch(self) -> PlaywrightBrowser:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=True,
                args=self.settings.browser_args,
                timeout=self.settings.launch_timeout_ms,
            )
        except BaseException:
            await playwright.stop()
            raise
        return PlaywrightBrowser(playwright, browser)


# =============================================================================
# ERRORS
# =============================================================================

def translate_engine_error(
    exc: BaseException,
    stage: str,
    load_failure: bool = False,
) -> WebPrintError:
    """
    Map a Playwright (or unexpected) exception onto the error taxonomy.

    With `load_failure`, engine errors raised while loading content (DNS
    failures, refused connections) count as the content never arriving
    within its budget and become RenderTimeoutError.
    """
    if isinstance(exc, WebPrintError):
        return exc
    if isinstance(exc, (PlaywrightTimeoutError, asyncio.TimeoutError)):
        return RenderTimeoutError(
            f"Timed out during {stage}", details={"stage": stage, "cause": str(exc)}
        )
    if isinstance(exc, PlaywrightError) and load_failure:
        return RenderTimeoutError(
            f"Content did not load during {stage}: {exc.message}",
            details={"stage": stage},
        )
    if isinstance(exc, PlaywrightError):
        return EngineFaultError(
            f"Browser error during {stage}: {exc.message}",
            details={"stage": stage},
        )
    return EngineFaultError(
        f"Unexpected error during {stage}: {exc}", details={"stage": stage}
    )


# =============================================================================
# SESSION
# =============================================================================

class BrowserSession:
    """
    Request-scoped owner of one browser, one context and one page.

    Use as `async with BrowserSession(engine, viewport) as session:`. The
    browser is closed exactly once when the block exits, whatever the
    outcome. Close failures are logged and swallowed.
    """

    def __init__(self, engine: RenderEngine, viewport: Viewport) -> None:
        self.engine = engine
        self.viewport = viewport
        self.browser: BrowserHandle | None = None
        self.context: Any = None
        self.page: Any = None
        self._closed = False

    async def __aenter__(self) -> "BrowserSession":
        try:
            self.browser = await self.engine.launch()
            self.context = await self.browser.new_context(
                viewport={"width": self.viewport.width, "height": self.viewport.height},
            )
            self.page = await self.context.new_page()
        except BaseException as e:
            await self.close()
            if isinstance(e, Exception):
                raise translate_engine_error(e, "browser launch") from e
            raise
        logger.debug("Browser session opened")
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        await self.close()
        return False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Release the browser. Idempotent; never raises except on cancellation."""
        if self._closed:
            return
        self._closed = True

        browser, self.browser = self.browser, None
        self.context = None
        self.page = None
        if browser is None:
            return

        try:
            # Shielded so a disconnecting client cannot strand the process
            await asyncio.shield(browser.close())
            logger.debug("Browser session closed")
        except asyncio.CancelledError:
            logger.warning("Request cancelled while closing browser; close continues in background")
            raise
        except Exception as e:
            logger.warning(f"Failed to close browser session: {e}")
