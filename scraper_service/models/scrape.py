"""Scrape configuration and result models."""

import re
from typing import Annotated, Dict, List, Literal, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

# A field resolves to nothing, one text, or every matched text in document order.
ExtractedValue = Optional[Union[str, List[str]]]


def find_placeholders(template: str) -> List[str]:
    """Return placeholder names in ``template`` in order of first appearance."""
    names: List[str] = []
    for name in PLACEHOLDER_PATTERN.findall(template):
        if name not in names:
            names.append(name)
    return names


class ScrapeModel(BaseModel):
    """Immutable model accepting both camelCase keys and snake_case names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class TextEntryStep(ScrapeModel):
    """Shared shape of steps that write text into an element."""

    selector: str = Field(..., min_length=1)
    value: Optional[str] = Field(
        None, description="Literal text, may contain {param} placeholders"
    )
    param_name: Optional[str] = Field(
        None, description="Runtime parameter supplying the text"
    )

    @model_validator(mode="after")
    def require_text_source(self) -> "TextEntryStep":
        """Ensure the step knows where its text comes from."""
        if self.value is None and self.param_name is None:
            raise ValueError(
                f"'{self.type}' step on '{self.selector}' needs a value or paramName"
            )
        return self


class FillStep(TextEntryStep):
    """Assign the element's value in one operation."""

    type: Literal["fill"] = "fill"


class TypeStep(TextEntryStep):
    """Send the text one keystroke at a time."""

    type: Literal["type"] = "type"


class ClickStep(ScrapeModel):
    """Activate the element with the keyboard."""

    type: Literal["click"] = "click"
    selector: str = Field(..., min_length=1)


class KeyPressStep(ScrapeModel):
    """Send a single named key (e.g. ``Enter``, ``ArrowDown``)."""

    type: Literal["keyPress"] = "keyPress"
    selector: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)


class WaitForSelectorStep(ScrapeModel):
    """Block until the selector has a visible match."""

    type: Literal["waitForSelector"] = "waitForSelector"
    selector: str = Field(..., min_length=1)
    timeout: Optional[int] = Field(None, gt=0, description="Milliseconds")


class WaitStep(ScrapeModel):
    """Unconditional delay."""

    type: Literal["wait"] = "wait"
    duration: int = Field(..., ge=0, description="Milliseconds")


class WaitForNavigationStep(ScrapeModel):
    """Wait for the page transition triggered by a previous step."""

    type: Literal["waitForNavigation"] = "waitForNavigation"


InteractionStep = Annotated[
    Union[
        FillStep,
        TypeStep,
        ClickStep,
        KeyPressStep,
        WaitForSelectorStep,
        WaitStep,
        WaitForNavigationStep,
    ],
    Field(discriminator="type"),
]


class ScrapeConfig(ScrapeModel):
    """Declarative description of one scrape."""

    url: str = Field(..., min_length=1, description="URL or {param} template")
    url_params: List[str] = Field(default_factory=list)
    interactions: List[InteractionStep] = Field(default_factory=list)
    selectors: Dict[str, str] = Field(..., description="Field name to CSS selector")
    wait_for_selector: Optional[str] = None
    wait_for_timeout: Optional[int] = Field(None, ge=0)
    screenshot: bool = False
    html_source: bool = False
    debug: bool = False
    headless: bool = True
    navigation_timeout: Optional[int] = Field(None, gt=0, description="Page load timeout in ms")
    post_process: Dict[str, str] = Field(
        default_factory=dict, description="Field name to registered hook name"
    )

    @field_validator("url_params")
    @classmethod
    def dedupe_url_params(cls, v: List[str]) -> List[str]:
        """Collapse repeated parameter names, keeping declaration order."""
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_placeholders(self) -> "ScrapeConfig":
        """Warn about URL placeholders nobody declared."""
        undeclared = [
            name for name in find_placeholders(self.url) if name not in self.url_params
        ]
        if undeclared:
            logger.warning(
                f"URL template {self.url} uses undeclared parameters: {', '.join(undeclared)}"
            )
        return self


class ScrapeResult(ScrapeModel):
    """Outcome of a scrape: either data or an error, never both."""

    success: bool
    data: Optional[Dict[str, ExtractedValue]] = None
    screenshot: Optional[str] = Field(None, description="Base64-encoded PNG")
    html_source: Optional[str] = None
    error: Optional[str] = None
    timestamp: str
    url: str

    @model_validator(mode="after")
    def check_shape(self) -> "ScrapeResult":
        """Keep the success and failure shapes mutually exclusive."""
        if self.success:
            if self.data is None or self.error is not None:
                raise ValueError("Successful result needs data and no error")
        else:
            if self.error is None:
                raise ValueError("Failed result needs an error message")
            if any(v is not None for v in (self.data, self.screenshot, self.html_source)):
                raise ValueError("Failed result cannot carry data or captures")
        return self

    @classmethod
    def succeeded(
        cls,
        data: Dict[str, ExtractedValue],
        timestamp: str,
        url: str,
        screenshot: Optional[str] = None,
        html_source: Optional[str] = None,
    ) -> "ScrapeResult":
        return cls(
            success=True,
            data=data,
            screenshot=screenshot,
            html_source=html_source,
            timestamp=timestamp,
            url=url,
        )

    @classmethod
    def failed(cls, error: str, timestamp: str, url: str) -> "ScrapeResult":
        return cls(success=False, error=error, timestamp=timestamp, url=url)
