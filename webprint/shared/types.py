"""Shared type definitions."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class RequestContext:
    """Per-request context attached by middleware for logging."""
    request_id: str
    origin: str | None = None


class RenderMode(str, Enum):
    """Content acquisition strategy for a render request."""
    URL = "url"
    HTML = "html"
