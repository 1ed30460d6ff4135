"""Example configuration for a news site."""

from typing import Dict

from ..models import ScrapeConfig

example_news_config = ScrapeConfig(
    url="https://example.com/news",
    wait_for_selector=".article-list",
    selectors={
        "headlines": ".article-title",
        "descriptions": ".article-description",
        "authors": ".article-author",
    },
)

example_configs: Dict[str, ScrapeConfig] = {
    "example-news": example_news_config,
}
