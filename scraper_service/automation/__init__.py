"""Browser automation engine for declarative scraping."""

from .browser_manager import BrowserConfig, BrowserManager, BrowserSession, BrowserType
from .capture import CaptureModule
from .errors import (
    CaptureError,
    ExtractionError,
    InteractionError,
    LaunchError,
    MissingParameterError,
    NavigationError,
    ScraperError,
    SessionError,
)
from .extraction import FIELD_HOOKS, ElementSnapshot, ExtractionEngine
from .interactions import InteractionExecutor
from .navigation import NavigationController, resolve_url
from .observer import ScrapeObserver
from .scraper import GenericScraper

__all__ = [
    "BrowserConfig",
    "BrowserManager",
    "BrowserSession",
    "BrowserType",
    "CaptureModule",
    "ElementSnapshot",
    "ExtractionEngine",
    "FIELD_HOOKS",
    "GenericScraper",
    "InteractionExecutor",
    "NavigationController",
    "ScrapeObserver",
    "resolve_url",
    "ScraperError",
    "MissingParameterError",
    "LaunchError",
    "SessionError",
    "NavigationError",
    "InteractionError",
    "ExtractionError",
    "CaptureError",
]
