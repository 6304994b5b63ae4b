"""Smart navigator: drives multi-step flows (consent, continue, finish) to a landing page.

Each iteration checks the terminal conditions in order (step budget, stuck
on one URL, landing page), then tries at most one agreement toggle and one
navigation-button click. The procedure is greedy and never backtracks.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from formpilot.detector.dom_scripts import FRAME_BUTTON_CLICK_JS, PAGE_TEXT_JS
from formpilot.detector.field_detector import detect_fields
from formpilot.executor.strategies import StrategyFailed, raise_if_page_closed, try_in_order
from formpilot.models.config import NavigatorConfig
from formpilot.models.results import NavigationOutcome, NavigationResult, NavigationStep
from formpilot.url_utils import is_landing_page

logger = logging.getLogger(__name__)

_INSTRUCTION_VERB = re.compile(r"\b(click|press|tap|select|hit)\b")

# Action word found in an on-page instruction -> button family to try first
PRIORITY_FAMILIES: list[tuple[str, list[str]]] = [
    ("finish", ["Finish", "Done", "Complete"]),
    ("next", ["Next", "Continue", "Proceed"]),
    ("continue", ["Continue", "Next", "Proceed"]),
    ("submit", ["Submit", "Send", "Confirm"]),
    ("accept", ["Accept", "Agree", "Confirm"]),
]

FALLBACK_SUBMIT_SELECTOR = 'button[type="submit"]'


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def button_priority(page_text: str) -> list[str]:
    """Return the label family an on-page instruction asks for, if any."""
    text = page_text.lower()
    if not _INSTRUCTION_VERB.search(text):
        return []
    for word, family in PRIORITY_FAMILIES:
        if re.search(rf"\b{word}\b", text):
            return list(family)
    return []


class SmartNavigator:
    """Greedy, bounded navigator for login and consent flows."""

    def __init__(self, page: Page, config: Optional[NavigatorConfig] = None):
        self.page = page
        self.config = config or NavigatorConfig()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def auto_navigate(self, max_steps: Optional[int] = None) -> NavigationResult:
        """Navigate until a landing page, a stuck loop, no progress or the step budget.

        ``steps_taken`` counts iterations entered, including the one that
        detected the terminal condition.
        """
        max_steps = self.config.max_steps if max_steps is None else max_steps
        logger.info("Starting auto-navigation (max %d steps)", max_steps)

        history: list[NavigationStep] = []
        step = 0
        same_url_streak = 0
        last_url: Optional[str] = None
        outcome = NavigationOutcome.MAX_STEPS

        while True:
            if step >= max_steps:
                logger.warning("Reached maximum steps (%d)", max_steps)
                outcome = NavigationOutcome.MAX_STEPS
                break
            step += 1
            await self.page.wait_for_timeout(self.config.pre_scan_delay_ms)

            current_url = self.page.url
            same_url_streak = same_url_streak + 1 if current_url == last_url else 1
            last_url = current_url
            logger.info("Step %d: %s", step, current_url)

            if same_url_streak >= self.config.stuck_threshold:
                logger.warning("Same URL seen %d times in a row, stopping", same_url_streak)
                outcome = NavigationOutcome.STUCK
                break

            page_text = await self._read_page_text()
            if self.is_final_page(page_text, current_url):
                logger.info("Reached landing page")
                outcome = NavigationOutcome.LANDED
                break

            agreed = await self.handle_agreements(page_text)
            clicked = await self.click_navigation_button(page_text)

            if not agreed and not clicked:
                logger.info("No more actions to take")
                outcome = NavigationOutcome.NO_PROGRESS
                break

            await self._settle()
            new_url = self.page.url
            url_changed = new_url != current_url
            if agreed:
                # Toggling changes page state even when the URL stays put
                same_url_streak = 0
            history.append(NavigationStep(
                page_url=current_url,
                action="button_clicked" if clicked else "agreement_toggled",
                button_label=clicked,
                url_changed=url_changed,
            ))

        logger.info("Auto-navigation finished after %d steps (%s)", step, outcome.value)
        return NavigationResult(
            steps_taken=step,
            outcome=outcome,
            final_url=self.page.url,
            history=history,
        )

    # ------------------------------------------------------------------
    # Page state
    # ------------------------------------------------------------------

    async def _read_page_text(self) -> str:
        try:
            text = await self.page.evaluate(PAGE_TEXT_JS)
        except PlaywrightError as e:
            raise_if_page_closed(self.page, e)
            logger.debug("Could not read page text: %s", e)
            return ""
        return (text or "").lower()

    async def _settle(self) -> None:
        await self.page.wait_for_timeout(self.config.post_action_delay_ms)
        try:
            await self.page.wait_for_load_state("networkidle", timeout=self.config.settle_timeout_ms)
        except PlaywrightError as e:
            raise_if_page_closed(self.page, e)
            logger.debug("Network idle timeout, continuing")

    def is_final_page(self, page_text: str, url: str) -> bool:
        """Landing heuristic on the URL, then on landing indicators in the page text."""
        return is_landing_page(
            url,
            page_text,
            landing_tokens=self.config.landing_url_tokens,
            flow_tokens=self.config.flow_url_tokens,
            text_indicators=self.config.landing_text_indicators,
        )

    async def has_form_to_fill(self) -> bool:
        return len(await detect_fields(self.page)) > 0

    # ------------------------------------------------------------------
    # Agreements
    # ------------------------------------------------------------------

    async def handle_agreements(self, page_text: Optional[str] = None) -> bool:
        """Switch the first visible agreement control to "agreed".

        Requires consent vocabulary in the page text. Idempotent: a control
        already in the agreed state is left alone and does not count.
        """
        if page_text is None:
            page_text = await self._read_page_text()
        if not any(word in page_text.lower() for word in self.config.consent_words):
            logger.debug("No consent vocabulary on page")
            return False

        for selector in self.config.toggle_selectors:
            element = self.page.locator(selector).first
            try:
                if not await element.is_visible():
                    continue
                role = await element.get_attribute("role")
                if await self._is_agreed(element, role):
                    logger.debug("Agreement control %s already agreed", selector)
                    continue
                await self._toggle(element, role)
            except PlaywrightError as e:
                raise_if_page_closed(self.page, e)
                logger.debug("Agreement control %s not usable: %s", selector, e)
                continue
            logger.info("Toggled agreement control: %s", selector)
            return True

        logger.debug("No agreement toggles found")
        return False

    @staticmethod
    async def _is_agreed(element: Locator, role: Optional[str]) -> bool:
        if role == "switch":
            checked = await element.get_attribute("aria-checked")
            pressed = await element.get_attribute("aria-pressed")
            return checked == "true" or pressed == "true"
        try:
            return await element.is_checked()
        except PlaywrightError:
            # Not a checkable element; fall back to ARIA state
            return await element.get_attribute("aria-checked") == "true"

    async def _toggle(self, element: Locator, role: Optional[str]) -> None:
        timeout = self.config.click_timeout_ms
        if role == "switch":
            await element.click(timeout=timeout)
            return
        try:
            await element.check(timeout=timeout)
        except PlaywrightError as e:
            raise_if_page_closed(self.page, e)
            await element.click(timeout=timeout)

    # ------------------------------------------------------------------
    # Navigation buttons
    # ------------------------------------------------------------------

    def _candidate_labels(self, page_text: str) -> list[str]:
        labels: list[str] = []
        for label in button_priority(page_text) + list(self.config.button_labels):
            if label not in labels:
                labels.append(label)
        return labels

    async def click_navigation_button(self, page_text: Optional[str] = None) -> Optional[str]:
        """Click the best navigation button and return its label, or None."""
        if page_text is None:
            page_text = await self._read_page_text()
        logger.debug("Page says: %s", " ".join(page_text[:200].split()))

        for label in self._candidate_labels(page_text):
            await self._wait_until_enabled(label)
            outcome = await try_in_order(
                self._button_strategies(label), page=self.page, description=f"button '{label}'",
            )
            if outcome.succeeded:
                logger.info("Clicked '%s' via %s", label, outcome.strategy_used)
                return label

        try:
            await self.page.click(FALLBACK_SUBMIT_SELECTOR, timeout=self.config.click_timeout_ms)
        except PlaywrightError as e:
            raise_if_page_closed(self.page, e)
            logger.debug("No navigation buttons found")
            return None
        logger.info("Clicked generic submit button")
        return "Submit"

    async def _wait_until_enabled(self, label: str) -> None:
        selector = f'button:has-text("{_quote(label)}"):not([disabled])'
        try:
            await self.page.wait_for_selector(selector, timeout=self.config.enable_wait_ms)
        except PlaywrightError as e:
            raise_if_page_closed(self.page, e)
            logger.debug("No enabled '%s' button appeared", label)

    def _button_strategies(self, label: str):
        page = self.page
        timeout = self.config.click_timeout_ms
        quoted = _quote(label)

        async def exact_text() -> None:
            await page.locator(f'text="{quoted}"').first.click(timeout=timeout)

        async def role_name() -> None:
            name = re.compile(re.escape(label), re.IGNORECASE)
            await page.get_by_role("button", name=name).first.click(timeout=timeout)

        async def has_text() -> None:
            await page.locator(f'button:has-text("{quoted}")').first.click(timeout=timeout)

        async def frame_script() -> None:
            for frame in page.frames:
                try:
                    if await frame.evaluate(FRAME_BUTTON_CLICK_JS, label):
                        return
                except PlaywrightError as e:
                    raise_if_page_closed(page, e)
                    logger.debug("Frame %s not scriptable: %s", frame.url, e)
            raise StrategyFailed(f"no '{label}' button in any frame")

        return [
            ("exact_text", exact_text),
            ("role_name", role_name),
            ("has_text", has_text),
            ("frame_script", frame_script),
        ]
