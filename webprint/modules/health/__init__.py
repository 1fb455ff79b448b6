"""Health module - liveness and service info."""

from .router import router

__all__ = ["router"]
