"""Configuration utilities for the scraper service."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ScraperSettings(BaseSettings):
    """Settings definition with inline documentation for future maintainers."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "scraper-service"
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # Shared browser
    browser_type: str = "chromium"
    headless: bool = True
    user_agent: Optional[str] = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    viewport_width: int = 1920
    viewport_height: int = 1080
    launch_browser_on_startup: bool = True

    # Timeouts (milliseconds)
    default_timeout_ms: int = 30000
    navigation_timeout_ms: int = 60000
    post_load_selector_timeout_ms: int = 30000
    step_selector_timeout_ms: int = 10000
    navigation_wait_timeout_ms: int = 10000
    type_delay_ms: int = 100


@lru_cache
def get_settings() -> ScraperSettings:
    """Return cached ScraperSettings to avoid repeated environment parsing."""

    return ScraperSettings()
