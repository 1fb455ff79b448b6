"""
Export-section isolation.

Hides everything on the page except the export section(s), their
descendants and the ancestors needed to reach them. The hiding rule only
applies while at least one export section exists (`body:has(...)`), so a page
without one renders in full instead of coming out blank.
"""

from typing import Any

from webprint.shared.logging import get_logger

from .engine import translate_engine_error

logger = get_logger(__name__)

COUNT_SECTIONS_SCRIPT = "(selector) => document.querySelectorAll(selector).length"


def build_isolation_css(selector: str) -> str:
    """Build the style block that isolates `selector`."""
    return (
        f"body:has({selector}) *:not({selector}):not({selector} *):not(:has({selector})) "
        "{ display: none !important; }\n"
        f"{selector} {{ display: block !important; width: 100% !important; "
        "height: auto !important; }\n"
    )


async def isolate_section(page: Any, selector: str) -> int:
    """
    Inject the isolation style block.

    Returns:
        Number of export sections present when the style was injected
    """
    try:
        await page.add_style_tag(content=build_isolation_css(selector))
        count = await page.evaluate(COUNT_SECTIONS_SCRIPT, selector)
    except Exception as e:
        raise translate_engine_error(e, "section isolation") from e

    if count:
        logger.info(f"Isolated {count} export section(s) matching '{selector}'")
    else:
        logger.warning(f"No export section matches '{selector}'; page left fully visible")
    return int(count or 0)
