"""Scrape API endpoints."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..automation import GenericScraper
from ..models import ScrapeConfig, ScrapeResult
from ..scrapers import SCRAPER_CONFIGS

router = APIRouter(prefix="/api/v1", tags=["scrape"])


def get_scraper(request: Request) -> GenericScraper:
    """Return the engine owned by the running application."""
    return request.app.state.scraper


def get_catalog() -> Dict[str, ScrapeConfig]:
    """Return the named configuration catalog."""
    return SCRAPER_CONFIGS


class RunScraperRequest(BaseModel):
    """Runtime options for a catalog scraper."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    params: Dict[str, str] = Field(
        default_factory=dict, description="Values for URL and interaction parameters"
    )
    debug: Optional[bool] = Field(default=None, description="Verbose scrape events")
    screenshot: Optional[bool] = Field(default=None, description="Capture a screenshot")
    html_source: Optional[bool] = Field(
        default=None, alias="htmlSource", description="Return the page HTML"
    )

    def apply(self, config: ScrapeConfig) -> ScrapeConfig:
        """Merge the flags that were provided into a copy of ``config``."""
        overrides = {
            name: value
            for name, value in (
                ("debug", self.debug),
                ("screenshot", self.screenshot),
                ("html_source", self.html_source),
            )
            if value is not None
        }
        return config.model_copy(update=overrides) if overrides else config


class CustomScrapeRequest(ScrapeConfig):
    """A full scrape configuration plus its runtime parameters."""

    params: Dict[str, str] = Field(default_factory=dict)

    def to_config(self) -> ScrapeConfig:
        return ScrapeConfig.model_validate(self.model_dump(exclude={"params"}))


class ScraperListResponse(BaseModel):
    """Names of the catalog configurations."""

    scrapers: List[str]


def _respond(result: ScrapeResult) -> JSONResponse:
    """Map a scrape result onto an HTTP status."""
    status_code = status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=status_code, content=result.model_dump(by_alias=True))


@router.get(
    "/scrapers",
    response_model=ScraperListResponse,
    summary="List scrapers",
    description="List the names of the predefined scraper configurations",
)
async def list_scrapers(
    catalog: Dict[str, ScrapeConfig] = Depends(get_catalog),
) -> ScraperListResponse:
    """List catalog scrapers."""
    return ScraperListResponse(scrapers=sorted(catalog))


@router.post(
    "/scrape/{name}",
    response_model=ScrapeResult,
    summary="Run a predefined scraper",
    description="Run a catalog configuration with runtime parameters",
)
async def run_scraper(
    name: str,
    request: Optional[RunScraperRequest] = None,
    scraper: GenericScraper = Depends(get_scraper),
    catalog: Dict[str, ScrapeConfig] = Depends(get_catalog),
) -> JSONResponse:
    """Run a predefined scraper by name."""
    config = catalog.get(name)
    if config is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Scraper '{name}' not found",
        )

    request = request or RunScraperRequest()
    result = await scraper.scrape(request.apply(config), request.params)
    if not result.success:
        logger.warning(f"Scraper {name} failed: {result.error}")
    return _respond(result)


@router.post(
    "/scrape",
    response_model=ScrapeResult,
    summary="Run a custom scraper",
    description="Run a scrape described by the request body",
)
async def run_custom_scraper(
    request: CustomScrapeRequest,
    scraper: GenericScraper = Depends(get_scraper),
) -> JSONResponse:
    """Run a custom scraper with the provided configuration."""
    result = await scraper.scrape(request.to_config(), request.params)
    if not result.success:
        logger.warning(f"Custom scrape of {request.url} failed: {result.error}")
    return _respond(result)


@router.get(
    "/browser/health",
    summary="Browser health check",
    description="Report the shared browser status",
)
async def browser_health(
    scraper: GenericScraper = Depends(get_scraper),
) -> Dict[str, object]:
    """Check browser status."""
    return await scraper.browser_manager.get_health()
