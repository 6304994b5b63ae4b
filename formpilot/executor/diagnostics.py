"""Failure diagnostics: URL, screenshot and a page text sample."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from formpilot.detector.dom_scripts import PAGE_TEXT_JS
from formpilot.models.results import Diagnostics

logger = logging.getLogger(__name__)

TEXT_SAMPLE_LENGTH = 500


class DiagnosticsCollector:
    """Captures screenshots and partial page state for failure reports."""

    def __init__(self, screenshot_dir: str | Path = "./screenshots", screenshots: bool = True):
        self.screenshot_dir = Path(screenshot_dir)
        self.screenshots = screenshots
        self._screenshot_count = 0

    async def take_screenshot(self, page: Page, label: str = "screenshot", full_page: bool = True) -> str:
        """Capture a screenshot and return the file path, or "" when it could not be taken."""
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        self._screenshot_count += 1
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = self.screenshot_dir / f"{label}-{stamp}-{self._screenshot_count}.png"
        try:
            await page.screenshot(path=str(path), full_page=full_page)
        except PlaywrightError as e:
            logger.warning("Screenshot failed: %s", e)
            return ""
        logger.info("Screenshot saved: %s", path)
        return str(path)

    async def capture(self, page: Page, label: str = "failure") -> Diagnostics:
        """Collect whatever state is still reachable; never raises on a closed page."""
        if page.is_closed():
            return Diagnostics()

        text_sample = ""
        try:
            text = await page.evaluate(PAGE_TEXT_JS)
            text_sample = " ".join((text or "").split())[:TEXT_SAMPLE_LENGTH]
        except PlaywrightError as e:
            logger.debug("Could not read page text: %s", e)

        screenshot_path = await self.take_screenshot(page, label) if self.screenshots else ""
        return Diagnostics(url=page.url, screenshot_path=screenshot_path, text_sample=text_sample)
