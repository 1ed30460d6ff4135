"""Sequential execution of pre-extraction interaction steps."""

import asyncio
from typing import Mapping, Optional, Sequence

from playwright.async_api import ElementHandle, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..models.scrape import (
    ClickStep,
    FillStep,
    InteractionStep,
    KeyPressStep,
    PLACEHOLDER_PATTERN,
    TypeStep,
    WaitForNavigationStep,
    WaitForSelectorStep,
    WaitStep,
)
from .errors import InteractionError
from .observer import ScrapeObserver

ACTIVATION_KEY = "Enter"


class InteractionExecutor:
    """
    Runs interaction steps in order against a loaded page.

    There is no branching and no retry: a step either completes or the whole
    scrape fails with :class:`InteractionError`. Steps that target a selector
    act on the first visible match in document order.
    """

    def __init__(
        self,
        selector_timeout: int = 10000,
        navigation_timeout: int = 10000,
        type_delay: int = 100,
    ) -> None:
        self.selector_timeout = selector_timeout
        self.navigation_timeout = navigation_timeout
        self.type_delay = type_delay

    async def run(
        self,
        page: Page,
        steps: Sequence[InteractionStep],
        params: Mapping[str, str],
        observer: ScrapeObserver,
    ) -> None:
        """Execute ``steps`` one after another."""
        for index, step in enumerate(steps):
            observer.event(
                "interaction_started",
                index=index,
                step=step.type,
                selector=getattr(step, "selector", None),
            )
            try:
                await self._execute_step(page, step, params)
            except InteractionError:
                raise
            except Exception as e:
                selector = getattr(step, "selector", None)
                target = f" on '{selector}'" if selector else ""
                raise InteractionError(
                    f"Interaction '{step.type}'{target} failed: {e}",
                    selector=selector,
                    step_type=step.type,
                ) from e
            observer.event("interaction_completed", index=index, step=step.type)

    async def _execute_step(
        self, page: Page, step: InteractionStep, params: Mapping[str, str]
    ) -> None:
        if isinstance(step, FillStep):
            element = await self.first_visible(page, step.selector, step.type)
            await element.fill(self.resolve_text(step, params))
        elif isinstance(step, TypeStep):
            # Keystroke events drive autocomplete widgets that ignore fill()
            element = await self.first_visible(page, step.selector, step.type)
            await element.type(self.resolve_text(step, params), delay=self.type_delay)
        elif isinstance(step, ClickStep):
            # Keyboard activation sidesteps overlays that intercept pointer clicks
            element = await self.first_visible(page, step.selector, step.type)
            await element.press(ACTIVATION_KEY)
        elif isinstance(step, KeyPressStep):
            element = await self.first_visible(page, step.selector, step.type)
            await element.press(step.key)
        elif isinstance(step, WaitStep):
            await page.wait_for_timeout(step.duration)
        elif isinstance(step, WaitForSelectorStep):
            await self._wait_for_visible(page, step)
        elif isinstance(step, WaitForNavigationStep):
            await self._wait_for_navigation(page)
        else:
            raise InteractionError(f"Unsupported interaction type: {step.type}")

    async def first_visible(self, page: Page, selector: str, step_type: str) -> ElementHandle:
        """Return the first visible element matching ``selector``.

        Raises:
            InteractionError: If no current match is visible
        """
        elements = await page.query_selector_all(selector)
        for element in elements:
            if await element.is_visible():
                return element
        raise InteractionError(
            f"No visible element for selector '{selector}' in '{step_type}' step "
            f"({len(elements)} matched)",
            selector=selector,
            step_type=step_type,
        )

    @staticmethod
    def resolve_text(step, params: Mapping[str, str]) -> str:
        """Resolve the text a fill/type step writes.

        ``param_name`` is looked up in ``params``; a literal ``value`` has its
        ``{name}`` placeholders substituted from the same mapping.
        """
        if step.param_name is not None:
            value: Optional[str] = params.get(step.param_name)
            if value is None:
                raise InteractionError(
                    f"Parameter '{step.param_name}' required by '{step.type}' step is missing",
                    selector=step.selector,
                    step_type=step.type,
                )
            return str(value)

        def substitute(match) -> str:
            name = match.group(1)
            if params.get(name) is None:
                raise InteractionError(
                    f"Parameter '{name}' required by '{step.type}' step is missing",
                    selector=step.selector,
                    step_type=step.type,
                )
            return str(params[name])

        return PLACEHOLDER_PATTERN.sub(substitute, step.value)

    async def _wait_for_visible(self, page: Page, step: WaitForSelectorStep) -> None:
        timeout = step.timeout or self.selector_timeout
        try:
            await page.wait_for_selector(step.selector, state="visible", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise InteractionError(
                f"Selector '{step.selector}' did not become visible within {timeout}ms",
                selector=step.selector,
                step_type=step.type,
            ) from e

    async def _wait_for_navigation(self, page: Page) -> None:
        """Race a parsed-document wait against a network-idle wait.

        Resolves as soon as either succeeds. A network-idle failure is
        tolerated; the step fails only when the parsed-document wait fails too.
        """
        # TODO: confirm with site owners whether a network-idle timeout on a
        # genuinely slow transition should fail the step instead of being hidden.
        parsed = asyncio.ensure_future(
            page.wait_for_load_state("domcontentloaded", timeout=self.navigation_timeout)
        )
        idle = asyncio.ensure_future(
            page.wait_for_load_state("networkidle", timeout=self.navigation_timeout)
        )
        pending = {parsed, idle}
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                # Both may finish together; read every exception so none goes unretrieved
                errors = [task.exception() for task in done]
                if any(error is None for error in errors):
                    return
        finally:
            for task in pending:
                task.cancel()

        raise InteractionError(
            f"Navigation did not complete: {parsed.exception()}",
            step_type="waitForNavigation",
        ) from parsed.exception()
