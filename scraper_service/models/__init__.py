"""Data models package."""

from .scrape import (
    ClickStep,
    ExtractedValue,
    FillStep,
    InteractionStep,
    KeyPressStep,
    ScrapeConfig,
    ScrapeResult,
    TypeStep,
    WaitForNavigationStep,
    WaitForSelectorStep,
    WaitStep,
    find_placeholders,
)

__all__ = [
    "ScrapeConfig",
    "ScrapeResult",
    "ExtractedValue",
    "InteractionStep",
    "FillStep",
    "TypeStep",
    "ClickStep",
    "KeyPressStep",
    "WaitForSelectorStep",
    "WaitStep",
    "WaitForNavigationStep",
    "find_placeholders",
]
