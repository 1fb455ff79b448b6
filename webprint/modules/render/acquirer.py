"""
Content acquisition: load a render job into a browser page.

URL mode navigates to the target; HTML mode sets the document directly.
Cookies are applied one at a time and failures are logged and skipped, so a
bad cookie degrades to an unauthenticated render instead of a failed one.
"""

from typing import Any

from pydantic import ValidationError

from webprint.config import Settings
from webprint.shared.logging import get_logger

from .engine import translate_engine_error
from .schemas import CookieSpec, HtmlRenderJob, RenderJob, UrlRenderJob

logger = get_logger(__name__)

# Re-fire load so client-side frameworks that render on it catch up
REDISPATCH_LOAD_SCRIPT = "() => { window.dispatchEvent(new Event('load')); }"


async def apply_cookies(
    context: Any,
    cookies: list[Any],
    fallback_url: str | None = None,
) -> int:
    """
    Add cookies to a browser context, best effort.

    Args:
        context: Playwright BrowserContext
        cookies: Raw cookie objects from the request
        fallback_url: URL used to scope cookies that carry no url/domain

    Returns:
        Number of cookies applied
    """
    applied = 0
    for index, raw in enumerate(cookies):
        try:
            spec = CookieSpec.model_validate(raw)
            cookie = spec.to_playwright(fallback_url)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Skipping invalid cookie #{index}: {e}")
            continue

        try:
            await context.add_cookies([cookie])
            applied += 1
        except Exception as e:
            logger.warning(f"Failed to apply cookie '{spec.name}': {e}")

    if cookies:
        logger.info(f"Applied {applied}/{len(cookies)} cookies")
    return applied


async def load_url(page: Any, context: Any, job: UrlRenderJob, settings: Settings) -> None:
    """Apply cookies for the target origin and navigate to it."""
    await apply_cookies(context, job.cookies, fallback_url=job.url)

    logger.info(f"Navigating to {job.url}")
    try:
        await page.goto(
            job.url,
            wait_until=settings.wait_until,
            timeout=settings.navigation_timeout_ms,
        )
    except Exception as e:
        raise translate_engine_error(e, "navigation", load_failure=True) from e
    logger.info(f"Navigation finished: {job.url}")

    if settings.hydration_delay_ms:
        try:
            await page.evaluate(REDISPATCH_LOAD_SCRIPT)
            await page.wait_for_timeout(settings.hydration_delay_ms)
        except Exception as e:
            raise translate_engine_error(e, "hydration") from e


async def load_html(page: Any, context: Any, job: HtmlRenderJob, settings: Settings) -> None:
    """Apply cookies (for embedded resources) and set the page content."""
    await apply_cookies(context, job.cookies)

    logger.info(f"Setting page content ({len(job.html)} chars)")
    try:
        await page.set_content(
            job.html,
            wait_until=settings.wait_until,
            timeout=settings.content_timeout_ms,
        )
    except Exception as e:
        raise translate_engine_error(e, "content load", load_failure=True) from e


async def acquire_content(page: Any, context: Any, job: RenderJob, settings: Settings) -> None:
    """Load a job into `page` using the strategy for its mode."""
    if isinstance(job, UrlRenderJob):
        await load_url(page, context, job, settings)
    else:
        await load_html(page, context, job, settings)
