"""
Fake rendering engine.

Mirrors the slice of the Playwright async API the render pipeline uses
(browser -> context -> page), so pipeline and HTTP tests run without Chromium.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from webprint.modules.render.isolation import COUNT_SECTIONS_SCRIPT
from webprint.modules.render.readiness import FONTS_READY_SCRIPT, PENDING_ASSETS_SCRIPT

FAKE_PDF = b"%PDF-1.7\n" + b"0" * 2048 + b"\n%%EOF\n"


@dataclass
class FakeBehavior:
    """Knobs for the fake engine. Errors are raised from the matching call."""
    launch_error: BaseException | None = None
    goto_error: BaseException | None = None
    set_content_error: BaseException | None = None
    pdf_error: BaseException | None = None
    close_error: BaseException | None = None
    cookie_error: Callable[[dict[str, Any]], BaseException | None] | None = None
    section_count: int = 1
    # int, list consumed one value per poll (last value repeats), or callable
    pending_assets: Any = 0
    pdf_bytes: bytes = FAKE_PDF
    goto_delay: float = 0
    close_delay: float = 0


class FakePage:
    def __init__(self, behavior: FakeBehavior) -> None:
        self.behavior = behavior
        self.calls: list[tuple[str, Any]] = []
        self.style_tags: list[str] = []
        self.pdf_kwargs: dict[str, Any] | None = None
        self.media: str | None = None

    async def goto(self, url: str, wait_until: str | None = None, timeout: float | None = None) -> None:
        self.calls.append(("goto", url))
        if self.behavior.goto_delay:
            await asyncio.sleep(self.behavior.goto_delay)
        if self.behavior.goto_error:
            raise self.behavior.goto_error

    async def set_content(self, html: str, wait_until: str | None = None, timeout: float | None = None) -> None:
        self.calls.append(("set_content", html))
        if self.behavior.set_content_error:
            raise self.behavior.set_content_error

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", expression))
        if expression == FONTS_READY_SCRIPT:
            return "loaded"
        if expression == COUNT_SECTIONS_SCRIPT:
            return self.behavior.section_count
        if expression == PENDING_ASSETS_SCRIPT:
            if arg is not None and self.behavior.section_count == 0:
                return -1
            return self._next_pending()
        return None

    def _next_pending(self) -> int:
        pending = self.behavior.pending_assets
        if callable(pending):
            return pending()
        if isinstance(pending, list):
            return pending.pop(0) if len(pending) > 1 else pending[0]
        return pending

    async def add_style_tag(self, content: str | None = None, **kwargs: Any) -> None:
        self.style_tags.append(content or "")

    async def wait_for_timeout(self, timeout: float) -> None:
        self.calls.append(("wait_for_timeout", timeout))

    async def emulate_media(self, media: str | None = None, **kwargs: Any) -> None:
        self.media = media

    async def pdf(self, **kwargs: Any) -> bytes:
        self.pdf_kwargs = kwargs
        if self.behavior.pdf_error:
            raise self.behavior.pdf_error
        return self.behavior.pdf_bytes


class FakeContext:
    def __init__(self, behavior: FakeBehavior, **options: Any) -> None:
        self.behavior = behavior
        self.options = options
        self.cookies: list[dict[str, Any]] = []
        self.pages: list[FakePage] = []

    async def add_cookies(self, cookies: list[dict[str, Any]]) -> None:
        for cookie in cookies:
            if self.behavior.cookie_error:
                error = self.behavior.cookie_error(cookie)
                if error is not None:
                    raise error
            self.cookies.append(cookie)

    async def new_page(self) -> FakePage:
        page = FakePage(self.behavior)
        self.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self, behavior: FakeBehavior, on_close: Callable[[], None] | None = None) -> None:
        self.behavior = behavior
        self.contexts: list[FakeContext] = []
        self.close_count = 0
        self.closing = False
        self.closed = False
        self._on_close = on_close

    async def new_context(self, **kwargs: Any) -> FakeContext:
        context = FakeContext(self.behavior, **kwargs)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.close_count += 1
        self.closing = True
        try:
            if self.behavior.close_delay:
                await asyncio.sleep(self.behavior.close_delay)
            if self.behavior.close_error:
                raise self.behavior.close_error
        finally:
            self.closed = True
            if self._on_close:
                self._on_close()

    @property
    def page(self) -> FakePage:
        return self.contexts[-1].pages[-1]


class FakeEngine:
    """Engine that launches FakeBrowsers; available unless told otherwise."""

    def __init__(self, behavior: FakeBehavior | None = None, available: bool = True) -> None:
        self.behavior = behavior or FakeBehavior()
        self.available = available
        self.reason: str | None = None if available else "Chromium not installed"
        self.browsers: list[FakeBrowser] = []
        self.open_count = 0
        self.max_open = 0

    @property
    def launch_count(self) -> int:
        return len(self.browsers)

    @property
    def last_browser(self) -> FakeBrowser:
        return self.browsers[-1]

    async def launch(self) -> FakeBrowser:
        if self.behavior.launch_error:
            raise self.behavior.launch_error
        browser = FakeBrowser(self.behavior, on_close=self._browser_closed)
        self.open_count += 1
        self.max_open = max(self.max_open, self.open_count)
        self.browsers.append(browser)
        return browser

    def _browser_closed(self) -> None:
        self.open_count -= 1
