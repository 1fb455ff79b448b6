"""
WebPrint settings.

All values can be overridden with WEBPRINT_* environment variables.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024

DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class Settings(BaseSettings):
    """Service configuration."""

    model_config = SettingsConfigDict(env_prefix="WEBPRINT_", extra="ignore")

    # === Server ===
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
    )
    render_path: str = "/api/generate-pdf"
    enable_root_render: bool = Field(
        default=False, description="Also accept render requests on POST /"
    )

    # === Limits ===
    max_html_bytes: int = Field(default=50 * MIB, ge=1)
    max_pdf_bytes: int = Field(default=50 * MIB, ge=1)
    max_body_bytes: int = Field(
        default=64 * MIB, ge=1, description="Ceiling on the declared request body size"
    )
    max_concurrent_renders: int = Field(
        default=4, ge=0, description="Admission limit for renders (0 = unlimited)"
    )

    # === Browser ===
    browser_args: list[str] = Field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    launch_timeout_ms: int = Field(default=30_000, ge=0)

    # === Timeouts (compose additively per request) ===
    navigation_timeout_ms: int = Field(default=60_000, ge=0)
    content_timeout_ms: int = Field(default=60_000, ge=0)
    readiness_timeout_ms: int = Field(default=120_000, ge=1)
    readiness_poll_interval_ms: int = Field(default=250, ge=1)
    settle_delay_ms: int = Field(default=300, ge=0)
    hydration_delay_ms: int = Field(default=500, ge=0)
    pdf_timeout_ms: int = Field(default=120_000, ge=1)
    wait_until: str = Field(
        default="networkidle", pattern="^(load|domcontentloaded|networkidle|commit)$"
    )

    # === Section isolation ===
    export_selector: str = ".pdf-export"
    isolate_url_mode: bool = True
    isolate_html_mode: bool = False
    export_section_required: bool = Field(
        default=True,
        description="Fail the render when isolation finds no export section",
    )

    # === Mode defaults ===
    url_page_width: str = "12in"
    url_page_height: str = "9in"
    url_scale: float = Field(default=2.0, ge=0.1, le=2.0)
    html_page_width: str = "1200px"
    html_page_height: str = "900px"
    html_scale: float = Field(default=1.0, ge=0.1, le=2.0)
    default_margin: str = "0px"
    default_viewport_width: int = Field(default=1200, ge=1)
    default_viewport_height: int = Field(default=900, ge=1)

    @field_validator("cors_origins")
    @classmethod
    def strip_trailing_slash(cls, v: list[str]) -> list[str]:
        # Browsers send origins without a trailing slash
        return [origin.strip().rstrip("/") for origin in v]


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Install a settings instance (used by tests and embedders)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
