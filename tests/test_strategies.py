"""Tests for the try-in-order strategy combinator."""

from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from formpilot.executor.strategies import (
    PageClosedError,
    StrategyFailed,
    raise_if_page_closed,
    try_in_order,
)


class TestTryInOrder:
    @pytest.mark.asyncio
    async def test_first_success_wins(self):
        second = AsyncMock(return_value="b")
        outcome = await try_in_order([("a", AsyncMock(return_value="a")), ("b", second)])
        assert outcome.succeeded
        assert outcome.strategy_used == "a"
        assert outcome.value == "a"
        second.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_through_failures(self):
        outcome = await try_in_order([
            ("missing", AsyncMock(side_effect=StrategyFailed("nothing there"))),
            ("timeout", AsyncMock(side_effect=PlaywrightError("Timeout 10ms exceeded"))),
            ("works", AsyncMock(return_value=42)),
        ])
        assert outcome.succeeded
        assert outcome.strategy_used == "works"
        assert [a["success"] for a in outcome.attempts] == [False, False, True]
        assert outcome.attempts[0]["error"] == "nothing there"

    @pytest.mark.asyncio
    async def test_all_fail(self):
        outcome = await try_in_order([("a", AsyncMock(side_effect=StrategyFailed("x")))])
        assert not outcome.succeeded
        assert outcome.strategy_used == "none"
        assert outcome.value is None

    @pytest.mark.asyncio
    async def test_empty(self):
        outcome = await try_in_order([])
        assert not outcome.succeeded
        assert outcome.attempts == []

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        with pytest.raises(KeyError):
            await try_in_order([("a", AsyncMock(side_effect=KeyError("bug")))])

    @pytest.mark.asyncio
    async def test_closed_page_aborts(self, mock_page):
        mock_page.is_closed.return_value = True
        later = AsyncMock()
        with pytest.raises(PageClosedError):
            await try_in_order(
                [("a", AsyncMock(side_effect=PlaywrightError("Target closed"))), ("b", later)],
                page=mock_page,
            )
        later.assert_not_called()


class TestRaiseIfPageClosed:
    def test_open_page_is_ignored(self, mock_page):
        raise_if_page_closed(mock_page, PlaywrightError("x"))

    def test_no_page(self):
        raise_if_page_closed(None, PlaywrightError("x"))

    def test_closed_page_raises(self, mock_page):
        mock_page.is_closed.return_value = True
        with pytest.raises(PageClosedError, match="Page closed"):
            raise_if_page_closed(mock_page, PlaywrightError("x"))
