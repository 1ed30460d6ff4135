"""Catalog of named site configurations."""

from typing import Dict

from ..models import ScrapeConfig
from .alameda_jury import alameda_jury_configs
from .example import example_configs
from .wunderground import wunderground_configs

SCRAPER_CONFIGS: Dict[str, ScrapeConfig] = {
    **example_configs,
    **wunderground_configs,
    **alameda_jury_configs,
}

__all__ = ["SCRAPER_CONFIGS"]
