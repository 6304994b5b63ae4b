"""Generic try-in-order combinator shared by selector, navigation and submit logic."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

logger = logging.getLogger(__name__)

Attempt = Callable[[], Awaitable[Any]]


class StrategyFailed(Exception):
    """An attempt ran to completion but did not find or act on its target."""


class PageClosedError(RuntimeError):
    """The page or browser went away; no further strategy can succeed."""


class StrategyOutcome:
    """Result of running an ordered list of strategies."""

    def __init__(
        self,
        succeeded: bool,
        strategy_used: str,
        attempts: list[dict],
        value: Any = None,
    ):
        self.succeeded = succeeded
        self.strategy_used = strategy_used
        self.attempts = attempts  # [{strategy, success, error}]
        self.value = value


def raise_if_page_closed(page: Optional[Page], exc: BaseException) -> None:
    """Turn a driver error on a closed page into a fatal PageClosedError."""
    if page is not None and page.is_closed():
        raise PageClosedError(f"Page closed during automation: {exc}") from exc


async def try_in_order(
    strategies: Sequence[tuple[str, Attempt]],
    page: Optional[Page] = None,
    description: str = "",
) -> StrategyOutcome:
    """Run ``strategies`` in order until one completes without failing.

    A strategy fails by raising ``StrategyFailed`` or a Playwright error
    (timeouts included); the next one is then tried. Any other exception
    propagates, as does a driver error once ``page`` is closed.
    """
    attempts: list[dict] = []
    for name, attempt in strategies:
        try:
            value = await attempt()
        except (StrategyFailed, PlaywrightError) as e:
            raise_if_page_closed(page, e)
            attempts.append({"strategy": name, "success": False, "error": str(e)})
            logger.debug("%s: strategy '%s' failed: %s", description or "try_in_order", name, e)
            continue
        attempts.append({"strategy": name, "success": True, "error": None})
        return StrategyOutcome(succeeded=True, strategy_used=name, attempts=attempts, value=value)

    logger.debug("%s: all %d strategies failed", description or "try_in_order", len(attempts))
    return StrategyOutcome(succeeded=False, strategy_used="none", attempts=attempts)
