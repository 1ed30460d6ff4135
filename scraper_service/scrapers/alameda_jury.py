"""Alameda County jury duty reporting page."""

from typing import Dict

from ..models import ScrapeConfig

alameda_jury_config = ScrapeConfig(
    url="https://www.alameda.courts.ca.gov/general-information/jury-service/jury-duty-reporting",
    wait_for_selector=".jcc-body__main-text",
    wait_for_timeout=3000,
    navigation_timeout=60000,
    selectors={
        "pageTitle": "h1",
        # e.g. "January 05, 2026, through January 09, 2026"
        "weekDates": ".jcc-body__main-text > p:nth-of-type(1) strong",
        # Group numbers, dates, times and locations
        "groupNotices": ".jcc-body__main-text .blockquote--box",
        "calledGroupsHeading": ".jcc-body__main-text h2",
        "instructions": ".jcc-body__main-text > p",
        "courtLocations": ".jcc-body__aside-text ul li a",
        "travelInfo": ".jcc-body__aside-text p",
    },
    post_process={
        "groupNotices": "strip_whitespace",
        "instructions": "strip_whitespace",
    },
)

alameda_jury_configs: Dict[str, ScrapeConfig] = {
    "alameda-jury-reporting": alameda_jury_config,
}
