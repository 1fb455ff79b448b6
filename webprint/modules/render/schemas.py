"""Render module schemas."""

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webprint.shared.types import RenderMode


# =============================================================================
# REQUESTS
# =============================================================================

class GeneratePdfRequest(BaseModel):
    """
    Raw render request body.

    Mode fields are typed loosely on purpose so that shape problems surface
    as InvalidInput from the validator rather than as schema errors.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: Any = Field(default=None, description="Remote page to render")
    html: Any = Field(default=None, description="Inline HTML document to render")
    cookies: list[Any] | None = Field(
        default=None, description="Cookies applied before loading content"
    )
    options: dict[str, Any] | None = Field(
        default=None, description="Render options layered over mode defaults"
    )
    pdf_options: dict[str, Any] | None = Field(
        default=None,
        alias="pdfOptions",
        description="PDF options; override `options` key by key",
    )


class CookieSpec(BaseModel):
    """A single cookie as supplied by the caller."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    value: str = ""
    url: str | None = None
    domain: str | None = None
    path: str | None = None
    expires: float | None = None
    secure: bool | None = None
    http_only: bool | None = Field(default=None, alias="httpOnly")
    same_site: str | None = Field(default=None, alias="sameSite")

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            return json.dumps(v, separators=(",", ":"))
        if isinstance(v, bool):
            return "true" if v else "false"
        return str(v)

    @field_validator("same_site", mode="before")
    @classmethod
    def normalize_same_site(cls, v: Any) -> str | None:
        if v is None or v == "":
            return None
        mapping = {"strict": "Strict", "lax": "Lax", "none": "None"}
        normalized = mapping.get(str(v).strip().lower())
        if normalized is None:
            raise ValueError(f"Unsupported sameSite value: {v!r}")
        return normalized

    def to_playwright(self, fallback_url: str | None = None) -> dict[str, Any]:
        """
        Convert to the cookie dict accepted by BrowserContext.add_cookies.

        Playwright needs either `url` or `domain` + `path`. Cookies carrying
        neither are scoped to `fallback_url` (the render target).

        Raises:
            ValueError: If the cookie cannot be scoped.
        """
        cookie: dict[str, Any] = {"name": self.name, "value": self.value}

        if self.domain:
            cookie["domain"] = self.domain
            cookie["path"] = self.path or "/"
        elif self.url:
            cookie["url"] = self.url
        elif fallback_url:
            cookie["url"] = fallback_url
        else:
            raise ValueError(f"Cookie '{self.name}' has no url or domain to scope it to")

        if self.expires is not None:
            cookie["expires"] = self.expires
        if self.secure is not None:
            cookie["secure"] = self.secure
        if self.http_only is not None:
            cookie["httpOnly"] = self.http_only
        if self.same_site is not None:
            cookie["sameSite"] = self.same_site
        return cookie


# =============================================================================
# RESOLVED OPTIONS
# =============================================================================

class Margins(BaseModel):
    """Page margins in CSS units."""
    top: str = "0px"
    right: str = "0px"
    bottom: str = "0px"
    left: str = "0px"


class Viewport(BaseModel):
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)


class PdfSettings(BaseModel):
    """Fully merged render options for one request."""

    width: str | None = None
    height: str | None = None
    format: str | None = None
    scale: float = Field(default=1.0, ge=0.1, le=2.0)
    margin: Margins = Field(default_factory=Margins)
    print_background: bool = True
    prefer_css_page_size: bool = True
    landscape: bool = False
    page_ranges: str | None = None
    viewport: Viewport

    def to_pdf_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for Page.pdf()."""
        kwargs: dict[str, Any] = {
            "scale": self.scale,
            "margin": self.margin.model_dump(),
            "print_background": self.print_background,
            "prefer_css_page_size": self.prefer_css_page_size,
            "landscape": self.landscape,
        }
        if self.format:
            kwargs["format"] = self.format
        if self.width:
            kwargs["width"] = self.width
        if self.height:
            kwargs["height"] = self.height
        if self.page_ranges:
            kwargs["page_ranges"] = self.page_ranges
        return kwargs


# =============================================================================
# JOBS & RESULTS
# =============================================================================

@dataclass(frozen=True)
class UrlRenderJob:
    """Render a remote page, optionally authenticated with cookies."""
    url: str
    cookies: list[Any] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
    pdf_options: dict[str, Any] = field(default_factory=dict)
    mode: RenderMode = RenderMode.URL


@dataclass(frozen=True)
class HtmlRenderJob:
    """Render an inline HTML document."""
    html: str
    cookies: list[Any] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
    pdf_options: dict[str, Any] = field(default_factory=dict)
    mode: RenderMode = RenderMode.HTML


RenderJob = UrlRenderJob | HtmlRenderJob


@dataclass(frozen=True)
class RenderResult:
    """Rendered PDF payload."""
    pdf: bytes
    mode: RenderMode
    duration_ms: int = 0

    @property
    def size_bytes(self) -> int:
        return len(self.pdf)
