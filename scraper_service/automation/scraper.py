"""Scrape engine: session setup, interactions, extraction and capture."""

from datetime import datetime, timezone
from typing import Mapping, Optional

from loguru import logger

from ..config import ScraperSettings, get_settings
from ..models.scrape import ScrapeConfig, ScrapeResult
from .browser_manager import BrowserConfig, BrowserManager
from .capture import CaptureModule
from .errors import ScraperError
from .extraction import ExtractionEngine
from .interactions import InteractionExecutor
from .navigation import NavigationController, resolve_url
from .observer import ScrapeObserver


class GenericScraper:
    """
    Runs declarative scrapes against a shared browser.

    Lifecycle:
    - ``initialize()`` launches the shared browser (once, before traffic)
    - ``scrape()`` never raises; every outcome is a :class:`ScrapeResult`
    - ``shutdown()`` releases the browser; a later scrape relaunches it
    """

    def __init__(
        self,
        browser_manager: Optional[BrowserManager] = None,
        settings: Optional[ScraperSettings] = None,
        extraction: Optional[ExtractionEngine] = None,
        capture: Optional[CaptureModule] = None,
    ) -> None:
        settings = settings or get_settings()
        self.browser_manager = browser_manager or BrowserManager(
            BrowserConfig.from_settings(settings)
        )
        self.navigation = NavigationController(
            selector_timeout=settings.post_load_selector_timeout_ms,
            navigation_timeout=settings.navigation_timeout_ms,
        )
        self.interactions = InteractionExecutor(
            selector_timeout=settings.step_selector_timeout_ms,
            navigation_timeout=settings.navigation_wait_timeout_ms,
            type_delay=settings.type_delay_ms,
        )
        self.extraction = extraction or ExtractionEngine()
        self.capture = capture or CaptureModule()

    async def initialize(self) -> None:
        """Prepare the shared browser handle."""
        await self.browser_manager.ensure_browser()

    async def shutdown(self) -> None:
        """Release the shared browser handle."""
        await self.browser_manager.shutdown()

    async def scrape(
        self, config: ScrapeConfig, params: Optional[Mapping[str, str]] = None
    ) -> ScrapeResult:
        """Run one scrape.

        Args:
            config: What to load, how to interact and what to extract
            params: Runtime values for URL placeholders and interaction steps

        Returns:
            Success result with extracted data, or failure result with the error
        """
        timestamp = datetime.now(timezone.utc).isoformat()
        params = dict(params or {})
        url = config.url
        observer = ScrapeObserver(url=config.url, verbose=config.debug)

        try:
            # Resolved before any browser work so missing params cost nothing
            url = resolve_url(config.url, config.url_params, params)
            await self.browser_manager.ensure_browser()

            async with self.browser_manager.session() as session:
                observer.event("session_opened", session=session.id)
                page = session.page

                await self.navigation.navigate(page, url, config, observer)

                if config.interactions:
                    await self.interactions.run(page, config.interactions, params, observer)

                data = await self.extraction.extract(
                    page, config.selectors, observer, config.post_process
                )

                screenshot, html_source = await self.capture.capture(
                    page,
                    observer,
                    screenshot=config.screenshot,
                    html_source=config.html_source,
                )

            logger.info(f"Scraped {len(data)} fields from {url}")
            return ScrapeResult.succeeded(
                data=data,
                screenshot=screenshot,
                html_source=html_source,
                timestamp=timestamp,
                url=url,
            )

        except ScraperError as e:
            observer.failure(e)
            return ScrapeResult.failed(error=str(e), timestamp=timestamp, url=url)
        except Exception as e:
            logger.exception(f"Unexpected error while scraping {url}")
            return ScrapeResult.failed(
                error=f"{type(e).__name__}: {e}", timestamp=timestamp, url=url
            )
