"""
Render option merging.

Options are resolved from three layers, later layers winning key by key:

    1. mode defaults   (Settings.url_* / Settings.html_*)
    2. `options`       (request body)
    3. `pdfOptions`    (request body)

Margins merge per side, so `{"margin": {"top": "1in"}}` in pdfOptions keeps
the other three sides from the lower layers. A margin given as a single
string applies to all four sides of that layer.
"""

import re
from typing import Any

from pydantic import ValidationError

from webprint.config import Settings
from webprint.shared.errors import InvalidInputError
from webprint.shared.logging import get_logger
from webprint.shared.types import RenderMode

from .schemas import PdfSettings

logger = get_logger(__name__)


# Accepted request keys -> canonical option name
OPTION_KEYS = {
    "width": "width",
    "height": "height",
    "format": "format",
    "scale": "scale",
    "margin": "margin",
    "margins": "margin",
    "landscape": "landscape",
    "printBackground": "print_background",
    "print_background": "print_background",
    "preferCSSPageSize": "prefer_css_page_size",
    "prefer_css_page_size": "prefer_css_page_size",
    "pageRanges": "page_ranges",
    "page_ranges": "page_ranges",
}

MARGIN_SIDES = ("top", "right", "bottom", "left")

# CSS pixels per unit
PX_PER_UNIT = {
    "px": 1.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
    "pt": 96.0 / 72.0,
}

_LENGTH_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px|in|cm|mm|pt)?\s*$", re.IGNORECASE)


def css_length_to_px(value: Any) -> float | None:
    """Convert a CSS length (or bare number of pixels) to CSS pixels."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    unit = (match.group(2) or "px").lower()
    return float(match.group(1)) * PX_PER_UNIT[unit]


def _as_css_length(value: Any) -> str:
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid length: {value!r}")
    if isinstance(value, (int, float)):
        return f"{value:g}px"
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise InvalidInputError(f"Invalid length: {value!r}")


def _expand_margin(value: Any) -> dict[str, str]:
    if isinstance(value, dict):
        return {
            side: _as_css_length(value[side]) for side in MARGIN_SIDES if side in value
        }
    length = _as_css_length(value)
    return {side: length for side in MARGIN_SIDES}


def normalize_option_keys(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Map camelCase/snake_case request keys onto canonical names."""
    if not raw:
        return {}
    normalized: dict[str, Any] = {}
    for key, value in raw.items():
        canonical = OPTION_KEYS.get(key)
        if canonical is None:
            logger.debug(f"Ignoring unknown render option: {key}")
            continue
        if value is None:
            continue
        if canonical == "margin":
            value = _expand_margin(value)
        elif canonical in ("width", "height"):
            value = _as_css_length(value)
        normalized[canonical] = value
    return normalized


def mode_defaults(mode: RenderMode, settings: Settings) -> dict[str, Any]:
    """Built-in defaults for a render mode."""
    if mode == RenderMode.URL:
        width, height, scale = settings.url_page_width, settings.url_page_height, settings.url_scale
    else:
        width, height, scale = settings.html_page_width, settings.html_page_height, settings.html_scale

    return {
        "width": width,
        "height": height,
        "scale": scale,
        "margin": {side: settings.default_margin for side in MARGIN_SIDES},
        "print_background": True,
        "prefer_css_page_size": True,
        "landscape": False,
    }


def merge_option_layers(*layers: dict[str, Any]) -> dict[str, Any]:
    """Merge normalized option layers; later layers win."""
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            if key == "margin":
                merged["margin"] = {**merged.get("margin", {}), **value}
            else:
                merged[key] = value
    return merged


def resolve_render_options(
    mode: RenderMode,
    settings: Settings,
    options: dict[str, Any] | None = None,
    pdf_options: dict[str, Any] | None = None,
) -> PdfSettings:
    """
    Resolve the effective options for one render.

    Args:
        mode: Render mode (selects the default layer)
        settings: Service settings
        options: Caller `options`
        pdf_options: Caller `pdfOptions`

    Returns:
        Merged PdfSettings including the browser viewport

    Raises:
        InvalidInputError: If a supplied value is out of range or malformed,
            or if `options`/`pdfOptions` is not an object. Requests that come
            through GeneratePdfRequest are already dicts; direct callers are not.
    """
    if options is not None and not isinstance(options, dict):
        raise InvalidInputError("'options' must be an object")
    if pdf_options is not None and not isinstance(pdf_options, dict):
        raise InvalidInputError("'pdfOptions' must be an object")

    merged = merge_option_layers(
        mode_defaults(mode, settings),
        normalize_option_keys(options),
        normalize_option_keys(pdf_options),
    )

    width_px = css_length_to_px(merged.get("width"))
    height_px = css_length_to_px(merged.get("height"))
    merged["viewport"] = {
        "width": round(width_px) if width_px else settings.default_viewport_width,
        "height": round(height_px) if height_px else settings.default_viewport_height,
    }

    try:
        return PdfSettings.model_validate(merged)
    except ValidationError as e:
        raise InvalidInputError(
            "Invalid render options",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
