"""Submit-control discovery."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Page

from formpilot.executor.strategies import StrategyFailed, try_in_order

logger = logging.getLogger(__name__)

# Ranked from most to least specific
SUBMIT_SELECTORS = [
    'button[type="submit"]',
    'input[type="submit"]',
    'button:has-text("Submit")',
    'button:has-text("Login")',
    'button:has-text("Log In")',
    'button:has-text("Sign In")',
    'button:has-text("Continue")',
    'button:has-text("Next")',
    'button:has-text("Send")',
    'input[value="Submit"]',
    'input[value="Login"]',
    'input[value="Sign In"]',
    'input[value="Log In"]',
    "#submit",
    "#login",
    "#signin",
    "#btn-submit",
    "#btn-login",
    ".submit-button",
    ".login-button",
    ".btn-submit",
    ".btn-login",
    "form button",
    'form input[type="button"]',
]


def _click_visible(page: Page, selector: str, timeout_ms: int):
    async def attempt() -> str:
        element = page.locator(selector).first
        if not await element.is_visible():
            raise StrategyFailed(f"'{selector}' not visible")
        await element.click(timeout=timeout_ms)
        return selector

    return attempt


def _click_direct(page: Page, selector: str, timeout_ms: int):
    async def attempt() -> str:
        await page.click(selector, timeout=timeout_ms)
        return selector

    return attempt


async def submit(
    page: Page,
    selector: Optional[str] = None,
    post_submit_delay_ms: int = 1000,
    click_timeout_ms: int = 5000,
) -> bool:
    """Submit the current form. Returns False when no submit control was found."""
    strategies = []
    if selector:
        strategies.append((f"custom:{selector}", _click_direct(page, selector, click_timeout_ms)))
    strategies.extend((s, _click_visible(page, s, click_timeout_ms)) for s in SUBMIT_SELECTORS)

    outcome = await try_in_order(strategies, page=page, description="submit")
    if not outcome.succeeded:
        logger.warning("Could not find a submit button; pass an explicit selector")
        return False

    logger.info("Form submitted via %s", outcome.strategy_used)
    await page.wait_for_timeout(post_submit_delay_ms)
    return True
