"""SmartFormFiller: caller-facing facade over detection, filling, submit and navigation."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from formpilot.auth.smart_login import perform_smart_login
from formpilot.data.data_generator import DataGenerator, Value
from formpilot.detector.field_detector import detect_fields
from formpilot.executor.diagnostics import DiagnosticsCollector
from formpilot.executor.field_filler import analyze_fields, fill_form
from formpilot.executor.strategies import raise_if_page_closed
from formpilot.executor.submitter import submit
from formpilot.models.config import FormPilotConfig, LoginConfig
from formpilot.models.field import FieldDescriptor
from formpilot.models.results import (
    AutomationResult,
    FillResult,
    FormAnalysis,
    LoginResult,
    NavigationResult,
)
from formpilot.navigator.smart_navigator import SmartNavigator
from formpilot.utils.browser import create_context, launch_browser, settle
from formpilot.vision.vision_analyzer import VisionAnalyzer

logger = logging.getLogger(__name__)


class SmartFormFiller:
    """Owns one browser page and runs the form operations against it.

    Use ``init()``/``close()`` or ``async with``; ``attach(page)`` drives
    a page the caller already owns.
    """

    def __init__(self, config: Optional[FormPilotConfig] = None):
        self.config = config or FormPilotConfig()
        fill = self.config.fill
        self.generator = DataGenerator(locale=fill.locale, custom_data=fill.custom_data, seed=fill.seed)
        self.diagnostics = DiagnosticsCollector(self.config.screenshot_dir, screenshots=self.config.screenshot)
        self.vision: Optional[VisionAnalyzer] = None
        if self.config.vision.enabled:
            self.vision = VisionAnalyzer(config=self.config.vision)

        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> "SmartFormFiller":
        self._playwright = await async_playwright().start()
        self.browser = await launch_browser(self._playwright, self.config.browser)
        self.context = await create_context(self.browser, self.config.browser)
        self.page = await self.context.new_page()
        return self

    def attach(self, page: Page) -> "SmartFormFiller":
        self.page = page
        return self

    async def close(self) -> None:
        if self.context is not None:
            await self.context.close()
            self.context = None
        if self.browser is not None:
            await self.browser.close()
            self.browser = None
            logger.info("Browser closed")
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        self.page = None

    async def __aenter__(self) -> "SmartFormFiller":
        return await self.init()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_page(self) -> Page:
        if self.page is None:
            raise RuntimeError("Browser not initialized. Call init() or goto() first.")
        return self.page

    async def goto(self, url: str, wait_for: Optional[str] = None) -> "SmartFormFiller":
        if self.page is None:
            await self.init()
        page = self._require_page()
        logger.info("Navigating to %s", url)
        await page.goto(url, wait_until="domcontentloaded")
        await settle(page, self.config.navigator.settle_timeout_ms)
        if wait_for:
            await page.wait_for_selector(wait_for, timeout=self.config.fill.selector_timeout_ms)
        return self

    # ------------------------------------------------------------------
    # Form operations
    # ------------------------------------------------------------------

    async def detect_fields(self) -> list[FieldDescriptor]:
        page = self._require_page()
        fields = await detect_fields(page)
        if fields and self.vision is not None and self.vision.available:
            screenshot = await self.diagnostics.take_screenshot(page, "vision", full_page=True)
            if screenshot:
                fields = await self.vision.enhance_fields(fields, screenshot, page.url)
        return fields

    async def fill_form(self, custom_data: Optional[dict[str, Value]] = None) -> FillResult:
        """Fill every detectable field; ``custom_data`` overrides are merged in first."""
        page = self._require_page()
        if custom_data:
            self.generator.set_custom_data(custom_data)

        result = await fill_form(
            page,
            self.generator,
            fields=await self.detect_fields(),
            settle_delay_ms=self.config.fill.settle_delay_ms,
            typing_delay_ms=self.config.fill.typing_delay_ms,
        )
        if not result.success:
            result.diagnostics = await self.diagnostics.capture(page, "no-fields")
        elif self.config.screenshot:
            await self.diagnostics.take_screenshot(page, "filled-form")
        return result

    async def analyze_form(self) -> FormAnalysis:
        return analyze_fields(await self.detect_fields())

    async def submit(self, selector: Optional[str] = None) -> bool:
        return await submit(
            self._require_page(),
            selector=selector,
            post_submit_delay_ms=self.config.fill.post_submit_delay_ms,
            click_timeout_ms=self.config.fill.selector_timeout_ms,
        )

    async def auto_navigate(self, max_steps: Optional[int] = None) -> NavigationResult:
        navigator = SmartNavigator(self._require_page(), self.config.navigator)
        return await navigator.auto_navigate(max_steps)

    async def login(self, login: LoginConfig) -> LoginResult:
        if self.page is None:
            await self.init()
        return await perform_smart_login(
            self._require_page(),
            login,
            navigator_config=self.config.navigator,
            diagnostics=self.diagnostics,
            settle_timeout_ms=self.config.navigator.settle_timeout_ms,
        )

    async def take_screenshot(self, name: str = "screenshot") -> str:
        return await self.diagnostics.take_screenshot(self._require_page(), name)

    async def automate(
        self,
        url: str,
        custom_data: Optional[dict[str, Value]] = None,
        wait_for: Optional[str] = None,
        analyze: bool = False,
        submit: bool = False,
        submit_selector: Optional[str] = None,
        navigate: bool = False,
    ) -> AutomationResult:
        """Run the whole flow: open, optionally analyze, fill, submit, navigate.

        Driver errors on a live page become a failed result; a closed page
        propagates.
        """
        result = AutomationResult(success=False, url=url)
        try:
            await self.goto(url, wait_for=wait_for)
            if analyze:
                result.analysis = await self.analyze_form()
            result.fill = await self.fill_form(custom_data)
            if submit:
                result.submitted = await self.submit(submit_selector)
            if navigate:
                result.navigation = await self.auto_navigate()
        except PlaywrightError as e:
            if self.page is not None:
                raise_if_page_closed(self.page, e)
            logger.error("Automation failed on %s: %s", url, e)
            result.error = str(e)
            return result

        result.success = result.fill.success
        return result


async def fill_multiple_forms(
    forms: list[dict],
    config: Optional[FormPilotConfig] = None,
    submit: bool = False,
) -> list[AutomationResult]:
    """Fill each ``{"url": ..., "custom_data": {...}}`` entry in its own browser session."""
    results: list[AutomationResult] = []
    for form in forms:
        logger.info("Filling form: %s", form["url"])
        async with SmartFormFiller(config) as filler:
            result = await filler.automate(
                form["url"],
                custom_data=form.get("custom_data") or {},
                submit=submit,
                submit_selector=form.get("submit_selector"),
            )
        results.append(result)
        logger.info("%s: %s", form["url"], "success" if result.success else "failed")
    return results
