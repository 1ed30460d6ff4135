"""Selector-map evaluation with per-field failure isolation."""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from playwright.async_api import ElementHandle, Page

from ..models.scrape import ExtractedValue
from .errors import ExtractionError, SessionError
from .observer import ScrapeObserver


@dataclass(frozen=True)
class ElementSnapshot:
    """Values read once from a matched element for post-processing."""

    text: str
    tag: str = ""
    classes: Tuple[str, ...] = ()


# (field name, matched element) -> transformed text
FieldHook = Callable[[str, ElementSnapshot], str]

# Class token fragments that identify a unit of measure, checked in order.
UNIT_CLASS_TOKENS: Dict[str, str] = {
    "unit-f": "°F",
    "unit-c": "°C",
    "unit-temperature": "°F",
    "unit-mph": "mph",
    "unit-kmh": "km/h",
    "unit-speed": "mph",
    "unit-in": "in",
    "unit-mb": "mb",
    "unit-hpa": "hPa",
    "unit-pressure": "in",
    "unit-mi": "mi",
    "unit-km": "km",
    "unit-distance": "mi",
    "unit-percent": "%",
    "unit-humidity": "%",
}

_UNIT_TOKEN = re.compile(r"(?:^|-)(unit-[a-z]+)$")


def infer_unit(classes: Tuple[str, ...]) -> Optional[str]:
    """Return the unit named by a ``*unit-<name>`` CSS class, if any."""
    for css_class in classes:
        match = _UNIT_TOKEN.search(css_class.lower())
        if match and match.group(1) in UNIT_CLASS_TOKENS:
            return UNIT_CLASS_TOKENS[match.group(1)]
    return None


def unit_from_class(field_name: str, element: ElementSnapshot) -> str:
    """Append the unit inferred from the element's CSS classes to its text."""
    text = element.text.strip()
    unit = infer_unit(element.classes)
    if unit is None or not text or text.endswith(unit):
        return element.text
    return f"{text} {unit}"


def strip_whitespace(field_name: str, element: ElementSnapshot) -> str:
    """Collapse runs of whitespace in the element text."""
    return " ".join(element.text.split())


FIELD_HOOKS: Dict[str, FieldHook] = {
    "unit_from_class": unit_from_class,
    "strip_whitespace": strip_whitespace,
}


class ExtractionEngine:
    """Evaluates a field-to-selector map against the current page.

    Zero matches yield ``None``, one match its text, several matches a list of
    texts in document order. A failure in one field degrades that field to
    ``None`` and never stops the others. A closed page is not a field failure
    and raises :class:`SessionError`.
    """

    def __init__(self, hooks: Optional[Mapping[str, FieldHook]] = None):
        self.hooks: Dict[str, FieldHook] = dict(FIELD_HOOKS if hooks is None else hooks)

    async def extract(
        self,
        page: Page,
        selectors: Mapping[str, str],
        observer: ScrapeObserver,
        post_process: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, ExtractedValue]:
        """Extract every field in ``selectors``."""
        post_process = post_process or {}
        data: Dict[str, ExtractedValue] = {}

        for field_name, selector in selectors.items():
            try:
                data[field_name] = await self._extract_field(
                    page, field_name, selector, post_process.get(field_name)
                )
            except ExtractionError as e:
                data[field_name] = None
                observer.warning(
                    "field_extraction_failed",
                    field=field_name,
                    selector=selector,
                    error=str(e),
                )

        observer.event(
            "extraction_completed",
            fields=len(data),
            empty=sum(1 for value in data.values() if value is None),
        )
        return data

    async def _extract_field(
        self, page: Page, field_name: str, selector: str, hook_name: Optional[str]
    ) -> ExtractedValue:
        hook: Optional[FieldHook] = None
        if hook_name is not None:
            hook = self.hooks.get(hook_name)
            if hook is None:
                raise ExtractionError(field_name, f"unknown post-processing hook '{hook_name}'")

        try:
            elements = await page.query_selector_all(selector)
            if not elements:
                return None

            texts: List[str] = []
            for element in elements:
                if hook is None:
                    texts.append(await element.text_content() or "")
                else:
                    texts.append(hook(field_name, await self.snapshot(element)))
        except Exception as e:
            if page.is_closed():
                raise SessionError(f"Page closed while extracting '{field_name}': {e}") from e
            raise ExtractionError(field_name, str(e)) from e

        if len(texts) == 1:
            return texts[0]
        return texts

    @staticmethod
    async def snapshot(element: ElementHandle) -> ElementSnapshot:
        """Read the values hooks may inspect from ``element``."""
        text = await element.text_content() or ""
        tag = await element.evaluate("el => el.tagName.toLowerCase()")
        css_class = await element.get_attribute("class") or ""
        return ElementSnapshot(text=text, tag=tag, classes=tuple(css_class.split()))
