"""Configuration package."""

from .settings import MIB, Settings, get_settings, init_settings, reset_settings

__all__ = ["MIB", "Settings", "get_settings", "init_settings", "reset_settings"]
