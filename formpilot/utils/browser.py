"""Browser launch, context setup and settle waits."""

from __future__ import annotations

import logging
import random

from playwright.async_api import Browser, BrowserContext, Page, Playwright
from playwright.async_api import Error as PlaywrightError

from formpilot.executor.strategies import raise_if_page_closed
from formpilot.models.config import BrowserConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/128.0.0.0 Safari/537.36"
)

# Login portals commonly refuse sessions that advertise automation
_AUTOMATION_MASK_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
if (!window.chrome) { window.chrome = {}; }
if (!window.chrome.runtime) { window.chrome.runtime = {}; }
"""


async def launch_browser(playwright: Playwright, config: BrowserConfig) -> Browser:
    """Launch Chromium with the configured headless mode and slow-motion delay."""
    logger.debug("Launching Chromium (headless=%s, slow_mo=%d)", config.headless, config.slow_mo)
    return await playwright.chromium.launch(
        headless=config.headless,
        slow_mo=config.slow_mo,
        args=["--disable-blink-features=AutomationControlled"] if config.mask_automation else [],
    )


async def create_context(browser: Browser, config: BrowserConfig) -> BrowserContext:
    """Create a browser context sized and identified per ``config``."""
    context = await browser.new_context(
        viewport={"width": config.viewport.width, "height": config.viewport.height},
        user_agent=config.user_agent or DEFAULT_USER_AGENT,
        locale="en-US",
    )
    if config.mask_automation:
        await context.add_init_script(_AUTOMATION_MASK_SCRIPT)
    return context


async def settle(page: Page, timeout_ms: int = 30000) -> None:
    """Wait for network idle; a timeout is not an error."""
    try:
        await page.wait_for_load_state("networkidle", timeout=timeout_ms)
    except PlaywrightError as e:
        raise_if_page_closed(page, e)
        logger.debug("Network idle timeout, continuing")


async def human_delay(page: Page, min_ms: int = 50, max_ms: int = 300) -> None:
    """Wait a randomized amount of time to mimic human interaction pacing."""
    await page.wait_for_timeout(random.randint(min_ms, max_ms))
