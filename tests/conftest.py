"""Local test configuration for the scraper service."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Union
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

# -- Path management ------------------------------------------------------
# The service uses a flat ``scraper_service/`` package layout rather than a
# ``src/`` layout, so a clean checkout does not have the repository root on
# ``sys.path`` when pytest starts. Inserting it first keeps ``import
# scraper_service`` working without an editable install.
SERVICE_ROOT = Path(__file__).resolve().parent.parent
if str(SERVICE_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICE_ROOT))

from scraper_service.automation import (
    BrowserConfig,
    BrowserManager,
    GenericScraper,
    ScrapeObserver,
)
from scraper_service.config import ScraperSettings
from scraper_service.main import create_app

DomMap = Dict[str, Union[List[Mock], Exception]]


def make_element(
    text: Optional[str] = "",
    visible: bool = True,
    classes: str = "",
    tag: str = "span",
) -> AsyncMock:
    """Build a mock ``ElementHandle`` with the calls the engine makes."""
    element = AsyncMock()
    element.text_content = AsyncMock(return_value=text)
    element.is_visible = AsyncMock(return_value=visible)
    element.get_attribute = AsyncMock(return_value=classes or None)
    element.evaluate = AsyncMock(return_value=tag)
    element.fill = AsyncMock()
    element.type = AsyncMock()
    element.press = AsyncMock()
    return element


def make_page(dom: Optional[DomMap] = None, html: str = "<html></html>") -> AsyncMock:
    """Build a mock ``Page`` whose ``query_selector_all`` answers from ``dom``.

    A selector mapped to an exception raises it, mimicking a malformed
    selector or a detached node.
    """
    dom = dom if dom is not None else {}

    def query(selector: str) -> List[Mock]:
        matches = dom.get(selector, [])
        if isinstance(matches, Exception):
            raise matches
        return list(matches)

    page = AsyncMock()
    page.url = "https://example.com/"
    page.goto = AsyncMock()
    page.query_selector_all = AsyncMock(side_effect=query)
    page.wait_for_selector = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.screenshot = AsyncMock(return_value=b"png-bytes")
    page.content = AsyncMock(return_value=html)
    page.close = AsyncMock()
    page.set_default_timeout = Mock()
    page.is_closed = Mock(return_value=False)
    return page


def make_manager(page: AsyncMock) -> BrowserManager:
    """A ``BrowserManager`` whose running browser hands out ``page``."""
    manager = BrowserManager(BrowserConfig())
    context = AsyncMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    browser = AsyncMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    manager._browser = browser
    return manager


@pytest.fixture
def test_settings() -> ScraperSettings:
    """Provide test-specific settings."""
    return ScraperSettings(
        app_name="scraper-service-test",
        cors_origins=["http://localhost:3000", "http://localhost:8000"],
        log_level="DEBUG",
        launch_browser_on_startup=False,
    )


@pytest.fixture
def observer() -> ScrapeObserver:
    """Observer for a single scrape."""
    return ScrapeObserver(url="https://example.com/", verbose=True)


@pytest.fixture
def scraper_for(test_settings):
    """Factory building an engine whose sessions use the given page."""

    def build(page: AsyncMock) -> GenericScraper:
        return GenericScraper(browser_manager=make_manager(page), settings=test_settings)

    return build


@pytest.fixture
def mock_scraper() -> Mock:
    """An engine double for API tests."""
    scraper = Mock(spec=GenericScraper)
    scraper.scrape = AsyncMock()
    scraper.initialize = AsyncMock()
    scraper.shutdown = AsyncMock()
    scraper.browser_manager = Mock()
    scraper.browser_manager.is_running = True
    scraper.browser_manager.get_health = AsyncMock(
        return_value={"status": "healthy", "browser_type": "chromium", "sessions": 0}
    )
    return scraper


@pytest.fixture
def app(test_settings, mock_scraper):
    """Create FastAPI app with test settings and a mocked engine."""
    return create_app(test_settings, scraper=mock_scraper)


@pytest.fixture
def client(app):
    """Provide TestClient for the scraper service."""
    return TestClient(app)


@pytest.fixture
def element_factory():
    """Expose :func:`make_element` to tests."""
    return make_element


@pytest.fixture
def page_factory():
    """Expose :func:`make_page` to tests."""
    return make_page


@pytest.fixture
def manager_factory():
    """Expose :func:`make_manager` to tests."""
    return make_manager
