"""End-to-end tests for the scrape engine with a mocked browser."""

import base64
from unittest.mock import AsyncMock, patch

import pytest

from scraper_service.automation import BrowserManager, GenericScraper
from scraper_service.config import ScraperSettings
from scraper_service.models import ClickStep, FillStep, ScrapeConfig, ScrapeResult


def session_context(scraper: GenericScraper):
    """The context mock every session of ``scraper`` receives."""
    return scraper.browser_manager._browser.new_context.return_value


def assert_one_shape(result: ScrapeResult) -> None:
    if result.success:
        assert result.data is not None and result.error is None
    else:
        assert result.error and result.data is None
    assert result.timestamp
    assert result.url


class TestScenarios:
    """Behaviour observable through ``scrape``."""

    @pytest.mark.asyncio
    async def test_single_heading(self, scraper_for, page_factory, element_factory):
        page = page_factory({"h1": [element_factory("Hello")]})
        scraper = scraper_for(page)

        result = await scraper.scrape(ScrapeConfig(url="https://x/", selectors={"title": "h1"}))

        assert result.success is True
        assert result.data == {"title": "Hello"}
        assert result.url == "https://x/"
        assert result.screenshot is None
        assert result.html_source is None
        session_context(scraper).close.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_url_param_detected_before_navigation(self, scraper_for, page_factory):
        page = page_factory()
        scraper = scraper_for(page)
        config = ScrapeConfig(url="https://x/{zip}", url_params=["zip"], selectors={})

        result = await scraper.scrape(config)

        assert result.success is False
        assert "zip" in result.error
        assert result.url == "https://x/{zip}"
        page.goto.assert_not_called()
        scraper.browser_manager._browser.new_context.assert_not_called()

    @pytest.mark.asyncio
    async def test_url_params_resolved(self, scraper_for, page_factory):
        page = page_factory()
        scraper = scraper_for(page)
        config = ScrapeConfig(url="https://x/{zip}", url_params=["zip"], selectors={})

        result = await scraper.scrape(config, {"zip": "94110"})

        assert result.success is True
        assert result.url == "https://x/94110"
        assert page.goto.call_args.args[0] == "https://x/94110"

    @pytest.mark.asyncio
    async def test_missing_selector_is_null(self, scraper_for, page_factory):
        scraper = scraper_for(page_factory({}))

        result = await scraper.scrape(
            ScrapeConfig(url="https://x/", selectors={"thatField": ".missing"})
        )

        assert result.success is True
        assert result.data["thatField"] is None

    @pytest.mark.asyncio
    async def test_invisible_click_target_fails_scrape(
        self, scraper_for, page_factory, element_factory
    ):
        page = page_factory(
            {".submit": [element_factory(visible=False)], "h1": [element_factory("Hello")]}
        )
        scraper = scraper_for(page)
        config = ScrapeConfig(
            url="https://x/",
            interactions=[ClickStep(selector=".submit")],
            selectors={"title": "h1"},
        )

        result = await scraper.scrape(config)

        assert result.success is False
        assert ".submit" in result.error
        # Extraction never ran
        queried = [call.args[0] for call in page.query_selector_all.call_args_list]
        assert "h1" not in queried
        session_context(scraper).close.assert_called_once()

    @pytest.mark.asyncio
    async def test_interactions_run_with_params(self, scraper_for, page_factory, element_factory):
        field = element_factory()
        button = element_factory()
        page = page_factory(
            {"#zip": [field], ".go": [button], ".temp": [element_factory("72")]}
        )
        scraper = scraper_for(page)
        config = ScrapeConfig(
            url="https://x/",
            interactions=[
                FillStep(selector="#zip", param_name="zip"),
                ClickStep(selector=".go"),
            ],
            selectors={"temp": ".temp"},
        )

        result = await scraper.scrape(config, {"zip": "10001"})

        assert result.success is True
        field.fill.assert_called_once_with("10001")
        button.press.assert_called_once_with("Enter")
        assert result.data == {"temp": "72"}

    @pytest.mark.asyncio
    async def test_captures_attached(self, scraper_for, page_factory):
        page = page_factory(html="<html><h1>Hi</h1></html>")
        scraper = scraper_for(page)
        config = ScrapeConfig(
            url="https://x/", selectors={}, screenshot=True, html_source=True
        )

        result = await scraper.scrape(config)

        assert result.success is True
        assert base64.b64decode(result.screenshot) == b"png-bytes"
        assert result.html_source == "<html><h1>Hi</h1></html>"


class TestFailureModel:
    """``scrape`` is total and always releases its session."""

    @pytest.mark.asyncio
    async def test_navigation_failure(self, scraper_for, page_factory):
        page = page_factory()
        page.goto.side_effect = RuntimeError("net::ERR_CONNECTION_REFUSED")
        scraper = scraper_for(page)

        result = await scraper.scrape(ScrapeConfig(url="https://x/", selectors={"t": "h1"}))

        assert result.success is False
        assert "ERR_CONNECTION_REFUSED" in result.error
        session_context(scraper).close.assert_called_once()

    @pytest.mark.asyncio
    async def test_capture_failure(self, scraper_for, page_factory):
        page = page_factory()
        page.screenshot.side_effect = RuntimeError("Target closed")
        scraper = scraper_for(page)

        result = await scraper.scrape(
            ScrapeConfig(url="https://x/", selectors={}, screenshot=True)
        )

        assert result.success is False
        assert "Screenshot" in result.error
        session_context(scraper).close.assert_called_once()

    @pytest.mark.asyncio
    async def test_session_closed_during_extraction(self, scraper_for, page_factory):
        closed = RuntimeError("Target page, context or browser has been closed")
        page = page_factory({"h1": closed, ".price": closed})
        page.is_closed.return_value = True
        scraper = scraper_for(page)

        result = await scraper.scrape(
            ScrapeConfig(url="https://x/", selectors={"title": "h1", "price": ".price"})
        )

        assert result.success is False
        assert result.data is None
        assert "has been closed" in result.error
        session_context(scraper).close.assert_called_once()

    @pytest.mark.asyncio
    async def test_launch_failure(self, test_settings):
        scraper = GenericScraper(browser_manager=BrowserManager(), settings=test_settings)
        with patch("scraper_service.automation.browser_manager.async_playwright") as mock_pw:
            mock_playwright = AsyncMock()
            mock_playwright.chromium.launch = AsyncMock(side_effect=RuntimeError("missing executable"))
            mock_pw.return_value.start = AsyncMock(return_value=mock_playwright)

            result = await scraper.scrape(ScrapeConfig(url="https://x/", selectors={}))

        assert result.success is False
        assert "missing executable" in result.error

    @pytest.mark.asyncio
    async def test_unexpected_error_still_yields_result(self, scraper_for, page_factory):
        scraper = scraper_for(page_factory())
        scraper.extraction.extract = AsyncMock(side_effect=KeyError("surprise"))

        result = await scraper.scrape(ScrapeConfig(url="https://x/", selectors={}))

        assert result.success is False
        assert "KeyError" in result.error
        session_context(scraper).close.assert_called_once()

    @pytest.mark.asyncio
    async def test_every_outcome_has_one_shape(self, scraper_for, page_factory, element_factory):
        configs = [
            ScrapeConfig(url="https://x/", selectors={"t": "h1"}),
            ScrapeConfig(url="https://x/{a}", url_params=["a"], selectors={}),
            ScrapeConfig(url="https://x/", interactions=[ClickStep(selector=".no")], selectors={}),
        ]
        for config in configs:
            result = await scraper_for(page_factory({"h1": [element_factory("T")]})).scrape(config)
            assert_one_shape(result)

    @pytest.mark.asyncio
    async def test_timestamp_is_iso_utc(self, scraper_for, page_factory):
        result = await scraper_for(page_factory()).scrape(
            ScrapeConfig(url="https://x/", selectors={})
        )
        assert result.timestamp.endswith("+00:00")


class TestLifecycle:
    """initialize/shutdown delegate to the browser manager."""

    @pytest.mark.asyncio
    async def test_initialize_and_shutdown(self, test_settings):
        manager = AsyncMock(spec=BrowserManager)
        scraper = GenericScraper(browser_manager=manager, settings=test_settings)

        await scraper.initialize()
        await scraper.shutdown()

        manager.ensure_browser.assert_called_once()
        manager.shutdown.assert_called_once()

    def test_timeouts_come_from_settings(self, test_settings):
        settings = test_settings.model_copy(
            update={"post_load_selector_timeout_ms": 111, "type_delay_ms": 7}
        )
        scraper = GenericScraper(browser_manager=BrowserManager(), settings=settings)

        assert scraper.navigation.selector_timeout == 111
        assert scraper.interactions.type_delay == 7

    @pytest.mark.asyncio
    async def test_navigation_timeout_env_override(
        self, monkeypatch, page_factory, manager_factory
    ):
        monkeypatch.setenv("NAVIGATION_TIMEOUT_MS", "5000")
        settings = ScraperSettings(launch_browser_on_startup=False)
        page = page_factory()
        scraper = GenericScraper(browser_manager=manager_factory(page), settings=settings)

        await scraper.scrape(ScrapeConfig(url="https://x/", selectors={}))

        assert settings.navigation_timeout_ms == 5000
        page.goto.assert_called_once_with("https://x/", wait_until="domcontentloaded", timeout=5000)

    @pytest.mark.asyncio
    async def test_config_timeout_beats_setting(self, scraper_for, page_factory):
        page = page_factory()

        await scraper_for(page).scrape(
            ScrapeConfig(url="https://x/", selectors={}, navigation_timeout=9000)
        )

        assert page.goto.call_args.kwargs["timeout"] == 9000
