"""URL template resolution and initial page load."""

from typing import List, Mapping

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..models.scrape import PLACEHOLDER_PATTERN, ScrapeConfig
from .errors import MissingParameterError, NavigationError
from .observer import ScrapeObserver


def resolve_url(template: str, url_params: List[str], params: Mapping[str, str]) -> str:
    """Substitute ``{name}`` placeholders in ``template``.

    Every declared parameter must be supplied. Undeclared placeholders are
    filled when the caller happens to supply them and left as-is otherwise.

    Raises:
        MissingParameterError: Naming every declared parameter without a value
    """
    missing = [name for name in url_params if params.get(name) is None]
    if missing:
        raise MissingParameterError(missing)

    def substitute(match) -> str:
        value = params.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


class NavigationController:
    """Loads the target page and applies the post-load wait policy."""

    # Pages that keep polling connections open never reach "networkidle",
    # so the load only waits for the document to be parsed.
    WAIT_UNTIL = "domcontentloaded"

    def __init__(self, selector_timeout: int = 30000, navigation_timeout: int = 60000):
        self.selector_timeout = selector_timeout
        self.navigation_timeout = navigation_timeout

    async def navigate(
        self, page: Page, url: str, config: ScrapeConfig, observer: ScrapeObserver
    ) -> None:
        """Load ``url`` and wait for the page to settle.

        Raises:
            NavigationError: If the page load fails or exceeds the timeout
        """
        timeout = config.navigation_timeout or self.navigation_timeout
        observer.event("navigation_started", target=url, timeout=timeout)
        try:
            await page.goto(url, wait_until=self.WAIT_UNTIL, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationError(f"Navigation to {url} timed out after {timeout}ms") from e
        except Exception as e:
            raise NavigationError(f"Navigation to {url} failed: {e}") from e
        observer.event("navigation_completed", target=url)

        if config.wait_for_selector:
            try:
                await page.wait_for_selector(
                    config.wait_for_selector, timeout=self.selector_timeout
                )
                observer.event("wait_for_selector_found", selector=config.wait_for_selector)
            except Exception as e:
                # A missing marker does not make the page unscrapable
                observer.warning(
                    "wait_for_selector_failed",
                    selector=config.wait_for_selector,
                    error=str(e),
                )

        if config.wait_for_timeout:
            observer.event("settle_delay", duration=config.wait_for_timeout)
            await page.wait_for_timeout(config.wait_for_timeout)
