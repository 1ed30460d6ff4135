"""Screenshot and HTML snapshot capture."""

import base64
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup
from loguru import logger
from playwright.async_api import Page

from .errors import CaptureError
from .observer import ScrapeObserver


class CaptureModule:
    """Captures the page after extraction has finished."""

    def __init__(self, parser: str = "lxml"):
        """Initialize capture module.

        Args:
            parser: BeautifulSoup parser used to re-read HTML snapshots
        """
        self.parser = parser

    async def capture(
        self,
        page: Page,
        observer: ScrapeObserver,
        screenshot: bool = False,
        html_source: bool = False,
    ) -> Tuple[Optional[str], Optional[str]]:
        """Capture the requested artifacts.

        Args:
            page: Page to capture
            observer: Event sink for this scrape
            screenshot: Capture a full-page PNG
            html_source: Serialize the current DOM

        Returns:
            Tuple of (base64 screenshot or None, HTML or None)

        Raises:
            CaptureError: If a requested capture fails
        """
        screenshot_base64: Optional[str] = None
        html: Optional[str] = None

        if screenshot:
            try:
                image = await page.screenshot(full_page=True)
            except Exception as e:
                raise CaptureError(f"Screenshot capture failed: {e}") from e
            screenshot_base64 = base64.b64encode(image).decode("utf-8")
            observer.event("screenshot_captured", bytes=len(image))

        if html_source:
            try:
                html = await page.content()
            except Exception as e:
                raise CaptureError(f"HTML capture failed: {e}") from e
            observer.event("html_captured", characters=len(html))

        return screenshot_base64, html

    def select_snapshot(self, html: str, selector: str) -> List[str]:
        """Extract element texts from a captured HTML snapshot by CSS selector.

        Public helper for callers that keep ``htmlSource`` and need to re-read
        fields offline. Texts follow DOM ``textContent``: descendant text is
        concatenated and whitespace is kept as-is.

        Args:
            html: HTML content captured by :meth:`capture`
            selector: CSS selector

        Returns:
            Text content of every match, in document order
        """
        soup = BeautifulSoup(html, self.parser)
        elements = soup.select(selector)
        logger.debug(f"Snapshot selector {selector} matched {len(elements)} elements")
        return [element.get_text() for element in elements]
