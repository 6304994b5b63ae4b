"""Smart selector resolution: tries ranked strategies against the live page."""

from __future__ import annotations

import logging
from typing import Sequence

from playwright.async_api import Locator, Page

from formpilot.executor.strategies import StrategyFailed, StrategyOutcome, try_in_order
from formpilot.models.field import SelectorStrategy

logger = logging.getLogger(__name__)


class SelectorResolutionResult:
    """Result of a selector resolution attempt."""

    def __init__(
        self,
        locator: Locator | None,
        strategy: SelectorStrategy | None,
        attempts: list[dict],
    ):
        self.locator = locator
        self.strategy = strategy
        self.attempts = attempts  # [{strategy, success, error}]

    @property
    def resolved(self) -> bool:
        return self.locator is not None

    @property
    def resolved_selector(self) -> str | None:
        return self.strategy.selector if self.strategy else None


async def resolve_field_locator(
    page: Page,
    strategies: Sequence[SelectorStrategy],
) -> SelectorResolutionResult:
    """Return a locator for the first strategy whose selector matches an element.

    Uniqueness is not checked; the first match is used. Strategy order is
    the caller's ranking.
    """
    by_name: dict[str, SelectorStrategy] = {}
    attempts = []
    for strategy in strategies:
        label = f"{strategy.kind}:{strategy.selector}"
        by_name[label] = strategy
        attempts.append((label, _locate(page, strategy.selector)))

    outcome: StrategyOutcome = await try_in_order(attempts, page=page, description="resolve field")
    if not outcome.succeeded:
        logger.debug("No strategy matched (%d tried)", len(outcome.attempts))
        return SelectorResolutionResult(locator=None, strategy=None, attempts=outcome.attempts)

    chosen = by_name[outcome.strategy_used]
    if chosen is not strategies[0]:
        logger.info("Resolved via fallback %s -> '%s'", chosen.kind, chosen.selector)
    return SelectorResolutionResult(locator=outcome.value, strategy=chosen, attempts=outcome.attempts)


def _locate(page: Page, selector: str):
    async def attempt() -> Locator:
        locator = page.locator(selector)
        if await locator.count() == 0:
            raise StrategyFailed(f"no element matches '{selector}'")
        return locator.first

    return attempt
