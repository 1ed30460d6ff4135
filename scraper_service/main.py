"""FastAPI entry point for the scraper service."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .automation import BrowserConfig, BrowserManager, GenericScraper
from .config import ScraperSettings, get_settings
from .logging_setup import configure_logging
from .routers import scrape


def create_app(
    settings: Optional[ScraperSettings] = None,
    scraper: Optional[GenericScraper] = None,
) -> FastAPI:
    """Create a FastAPI application around a single scrape engine.

    The engine, and with it the shared browser, lives on ``app.state.scraper``
    for the lifetime of the application: launched at startup, released at
    shutdown.
    """

    resolved_settings = settings or get_settings()
    configure_logging(resolved_settings.log_level)

    engine = scraper or GenericScraper(
        browser_manager=BrowserManager(BrowserConfig.from_settings(resolved_settings)),
        settings=resolved_settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if resolved_settings.launch_browser_on_startup:
            await engine.initialize()
        try:
            yield
        finally:
            logger.info("Shutting down scraper engine")
            await engine.shutdown()

    app = FastAPI(title=resolved_settings.app_name, lifespan=lifespan)
    app.state.scraper = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=resolved_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(scrape.router)

    @app.get("/health", tags=["health"])
    async def health_check() -> Dict[str, object]:
        """Report service status and whether the shared browser is running."""

        return {
            "status": "ok",
            "service": resolved_settings.app_name,
            "browser": engine.browser_manager.is_running,
        }

    return app
