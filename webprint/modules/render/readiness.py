"""
Readiness gate.

Blocks PDF extraction until web fonts, images and CSS background images in
the target region have settled, or until the readiness deadline passes.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from webprint.shared.logging import get_logger

from .engine import translate_engine_error

logger = get_logger(__name__)


FONTS_READY_SCRIPT = "() => document.fonts.ready.then(() => document.fonts.status)"

# Returns the number of unsettled assets under the region, or -1 when the
# region does not exist. Background images are probed with detached Image
# objects cached on window so repeated polls reuse them.
PENDING_ASSETS_SCRIPT = r"""(selector) => {
    const roots = selector
        ? Array.from(document.querySelectorAll(selector))
        : [document.body].filter(Boolean);
    if (roots.length === 0) return -1;

    const probes = window.__webprintBackgroundProbes || (window.__webprintBackgroundProbes = {});
    let pending = 0;
    for (const root of roots) {
        for (const el of [root, ...root.querySelectorAll('*')]) {
            if (el.tagName === 'IMG') {
                if (el.loading === 'lazy') el.loading = 'eager';
                if (!el.complete) pending++;
                continue;
            }
            const background = getComputedStyle(el).backgroundImage;
            if (!background || background === 'none') continue;
            for (const match of background.matchAll(/url\(\s*["']?(.*?)["']?\s*\)/g)) {
                const src = match[1];
                if (!src) continue;
                let probe = probes[src];
                if (!probe) {
                    probe = new Image();
                    probe.src = src;
                    probes[src] = probe;
                }
                if (!probe.complete) pending++;
            }
        }
    }
    return pending;
}"""


class ReadinessStatus(str, Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ReadinessResult:
    """Outcome of a readiness wait."""
    status: ReadinessStatus
    elapsed_ms: int
    stage: str = "assets"
    pending: int | None = None

    @property
    def ready(self) -> bool:
        return self.status == ReadinessStatus.READY


class _Deadline:
    def __init__(self, timeout_ms: int) -> None:
        self.start = time.monotonic()
        self.expires = self.start + timeout_ms / 1000

    def remaining(self) -> float:
        return max(0.0, self.expires - time.monotonic())

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start) * 1000)


async def wait_for_fonts(page: Any, deadline: _Deadline, min_wait: float) -> bool:
    """
    Wait for document.fonts.ready. Returns False if the deadline passes first.

    The page always gets at least `min_wait` seconds to answer.
    """
    try:
        await asyncio.wait_for(
            page.evaluate(FONTS_READY_SCRIPT), timeout=max(deadline.remaining(), min_wait)
        )
    except asyncio.TimeoutError:
        return False
    return True


async def poll_assets(
    page: Any,
    selector: str | None,
    deadline: _Deadline,
    poll_interval_ms: int,
) -> tuple[bool, int | None]:
    """
    Poll the pending-asset count until it reaches zero or the deadline passes.

    Returns:
        (settled, last pending count). A count of -1 means the region was missing.
    """
    interval = poll_interval_ms / 1000
    pending: int | None = None

    while True:
        try:
            pending = await asyncio.wait_for(
                page.evaluate(PENDING_ASSETS_SCRIPT, selector),
                timeout=max(deadline.remaining(), interval),
            )
        except asyncio.TimeoutError:
            return False, pending

        if pending == 0:
            return True, 0

        remaining = deadline.remaining()
        if remaining <= 0:
            return False, pending
        await asyncio.sleep(min(interval, remaining))


async def wait_until_ready(
    page: Any,
    selector: str | None,
    timeout_ms: int,
    poll_interval_ms: int,
    settle_delay_ms: int = 0,
) -> ReadinessResult:
    """
    Wait for fonts, then images/backgrounds in `selector`, then a settle delay.

    Args:
        page: Playwright Page
        selector: Region to check; None checks the whole body
        timeout_ms: Budget shared by the font and asset waits
        poll_interval_ms: Delay between asset polls
        settle_delay_ms: Fixed pause after assets settle

    Returns:
        ReadinessResult tagged READY or TIMED_OUT
    """
    deadline = _Deadline(timeout_ms)

    try:
        if not await wait_for_fonts(page, deadline, poll_interval_ms / 1000):
            logger.warning("Timed out waiting for web fonts")
            return ReadinessResult(
                ReadinessStatus.TIMED_OUT, deadline.elapsed_ms(), stage="fonts"
            )

        settled, pending = await poll_assets(page, selector, deadline, poll_interval_ms)
        if not settled:
            region = selector or "body"
            if pending == -1:
                logger.warning(f"Timed out: no element matches '{region}'")
            else:
                logger.warning(f"Timed out with {pending} asset(s) still loading in '{region}'")
            return ReadinessResult(
                ReadinessStatus.TIMED_OUT, deadline.elapsed_ms(), pending=pending
            )

        if settle_delay_ms:
            await page.wait_for_timeout(settle_delay_ms)
    except Exception as e:
        raise translate_engine_error(e, "readiness wait") from e

    elapsed = deadline.elapsed_ms()
    logger.info(f"Page ready after {elapsed}ms")
    return ReadinessResult(ReadinessStatus.READY, elapsed, pending=0)
