"""Shared Playwright browser with per-scrape isolated sessions."""

import asyncio
import itertools
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncGenerator, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from ..config import ScraperSettings
from .errors import LaunchError, SessionError


class BrowserType(str, Enum):
    """Supported browser types."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


@dataclass
class BrowserConfig:
    """Configuration for the shared browser and the sessions it spawns."""

    browser_type: BrowserType = BrowserType.CHROMIUM
    headless: bool = True
    viewport: Dict[str, int] = field(
        default_factory=lambda: {"width": 1920, "height": 1080}
    )
    user_agent: Optional[str] = None
    locale: str = "en-US"
    timeout: int = 30000  # 30 seconds

    @classmethod
    def from_settings(cls, settings: ScraperSettings) -> "BrowserConfig":
        """Build a browser configuration from service settings."""
        return cls(
            browser_type=BrowserType(settings.browser_type),
            headless=settings.headless,
            viewport={
                "width": settings.viewport_width,
                "height": settings.viewport_height,
            },
            user_agent=settings.user_agent,
            timeout=settings.default_timeout_ms,
        )


@dataclass
class BrowserSession:
    """One isolated context and its page, owned by a single scrape."""

    id: int
    context: BrowserContext
    page: Page
    closed: bool = False


class BrowserManager:
    """Owns the process-wide browser handle and hands out isolated sessions.

    The browser is launched lazily and lives until :meth:`shutdown`. A single
    lock serializes launch, session creation and shutdown, so a session-open
    racing a shutdown either completes before the handle closes or fails with
    :class:`SessionError`.
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """Initialize browser manager with configuration.

        Args:
            config: Browser configuration settings
        """
        self.config = config or BrowserConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._sessions: List[BrowserSession] = []
        self._session_ids = itertools.count(1)
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily so the lock binds to the running event loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def ensure_browser(self) -> None:
        """Launch the shared browser if it is not running.

        Raises:
            LaunchError: If Playwright or the browser cannot start
        """
        async with self._get_lock():
            if self._browser is not None:
                return
            await self._launch()

    async def _launch(self) -> None:
        logger.info(f"Starting Playwright with {self.config.browser_type.value} browser")
        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()

            if self.config.browser_type == BrowserType.CHROMIUM:
                browser_launcher = self._playwright.chromium
            elif self.config.browser_type == BrowserType.FIREFOX:
                browser_launcher = self._playwright.firefox
            elif self.config.browser_type == BrowserType.WEBKIT:
                browser_launcher = self._playwright.webkit
            else:
                raise ValueError(f"Unsupported browser type: {self.config.browser_type}")

            launch_options: Dict[str, Any] = {"headless": self.config.headless}
            if self.config.browser_type == BrowserType.CHROMIUM:
                launch_options["args"] = ["--disable-dev-shm-usage"]

            self._browser = await browser_launcher.launch(**launch_options)
        except Exception as e:
            logger.error(f"Browser launch failed: {e}")
            await self._stop_playwright()
            raise LaunchError(f"Browser launch failed: {e}") from e

        logger.info("Browser launched successfully")

    async def open_session(self) -> BrowserSession:
        """Create a fresh isolated session on the shared browser.

        Returns:
            Session with its own cookies, storage and viewport

        Raises:
            SessionError: If the browser is not running or the context fails
        """
        async with self._get_lock():
            if self._browser is None:
                raise SessionError("Browser is not running")

            context_options: Dict[str, Any] = {
                "viewport": self.config.viewport,
                "user_agent": self.config.user_agent,
                "locale": self.config.locale,
            }

            context: Optional[BrowserContext] = None
            try:
                context = await self._browser.new_context(**context_options)
                page = await context.new_page()
                page.set_default_timeout(self.config.timeout)
            except Exception as e:
                if context is not None:
                    await self._close_quietly(context)
                raise SessionError(f"Failed to open browser session: {e}") from e

            session = BrowserSession(id=next(self._session_ids), context=context, page=page)
            self._sessions.append(session)

        logger.debug(f"Opened browser session {session.id}")
        return session

    async def close_session(self, session: BrowserSession) -> None:
        """Release the session's page and context. Safe to call twice."""
        if session.closed:
            return
        session.closed = True

        try:
            await session.page.close()
        except Exception as e:
            logger.warning(f"Error closing page of session {session.id}: {e}")
        await self._close_quietly(session.context)

        if session in self._sessions:
            self._sessions.remove(session)
        logger.debug(f"Closed browser session {session.id}")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[BrowserSession, None]:
        """Open a session for the duration of the block (context manager).

        Yields:
            Browser session ready for navigation
        """
        browser_session = await self.open_session()
        try:
            yield browser_session
        finally:
            await self.close_session(browser_session)

    async def shutdown(self) -> None:
        """Close open sessions, the browser and Playwright."""
        async with self._get_lock():
            logger.info("Stopping browser manager")

            for browser_session in list(self._sessions):
                await self.close_session(browser_session)

            if self._browser:
                try:
                    await self._browser.close()
                except Exception as e:
                    logger.warning(f"Error closing browser: {e}")
                self._browser = None

            await self._stop_playwright()
            logger.info("Browser manager stopped")

    async def _stop_playwright(self) -> None:
        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    @staticmethod
    async def _close_quietly(context: BrowserContext) -> None:
        try:
            await context.close()
        except Exception as e:
            logger.warning(f"Error closing context: {e}")

    async def get_health(self) -> Dict[str, Any]:
        """Get browser manager health status.

        Returns:
            Health status dictionary with browser status, type and open sessions
        """
        return {
            "status": "healthy" if self._browser else "not_started",
            "browser_type": self.config.browser_type,
            "sessions": len(self._sessions),
        }
