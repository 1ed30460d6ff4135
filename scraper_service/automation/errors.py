"""Scrape failure taxonomy.

Every error except :class:`ExtractionError` is fatal: it aborts the scrape and
is reported as a failed :class:`~scraper_service.models.ScrapeResult`.
"""

from typing import List, Optional


class ScraperError(Exception):
    """Base class for scrape failures."""


class MissingParameterError(ScraperError):
    """Required URL template parameters were not supplied."""

    def __init__(self, missing: List[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required parameters: {', '.join(self.missing)}")


class LaunchError(ScraperError):
    """The browser engine could not be started."""


class SessionError(ScraperError):
    """An isolated browser session could not be opened."""


class NavigationError(ScraperError):
    """The initial page load failed or timed out."""


class InteractionError(ScraperError):
    """An interaction step could not be carried out."""

    def __init__(self, message: str, selector: Optional[str] = None, step_type: Optional[str] = None) -> None:
        self.selector = selector
        self.step_type = step_type
        super().__init__(message)


class ExtractionError(ScraperError):
    """A single field could not be evaluated. Recovered by degrading to None."""

    def __init__(self, field_name: str, message: str) -> None:
        self.field_name = field_name
        super().__init__(f"Field '{field_name}': {message}")


class CaptureError(ScraperError):
    """Screenshot or HTML capture failed."""
