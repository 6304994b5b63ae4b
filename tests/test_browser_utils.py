"""Tests for browser lifecycle helpers."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from formpilot.executor.strategies import PageClosedError
from formpilot.models.config import BrowserConfig, ViewportConfig
from formpilot.utils.browser import DEFAULT_USER_AGENT, create_context, human_delay, launch_browser, settle


class TestLaunch:
    @pytest.mark.asyncio
    async def test_launch_browser(self):
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value="browser")
        browser = await launch_browser(playwright, BrowserConfig(headless=True, slow_mo=0))
        assert browser == "browser"
        kwargs = playwright.chromium.launch.call_args.kwargs
        assert kwargs["headless"] is True
        assert kwargs["slow_mo"] == 0

    @pytest.mark.asyncio
    async def test_create_context(self):
        context = MagicMock()
        context.add_init_script = AsyncMock()
        browser = MagicMock()
        browser.new_context = AsyncMock(return_value=context)

        result = await create_context(browser, BrowserConfig(viewport=ViewportConfig(width=800, height=600)))

        assert result is context
        kwargs = browser.new_context.call_args.kwargs
        assert kwargs["viewport"] == {"width": 800, "height": 600}
        assert kwargs["user_agent"] == DEFAULT_USER_AGENT
        context.add_init_script.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_automation_mask_can_be_disabled(self):
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value="browser")
        context = MagicMock()
        context.add_init_script = AsyncMock()
        browser = MagicMock()
        browser.new_context = AsyncMock(return_value=context)
        config = BrowserConfig(mask_automation=False)

        await launch_browser(playwright, config)
        await create_context(browser, config)

        assert playwright.chromium.launch.call_args.kwargs["args"] == []
        context.add_init_script.assert_not_awaited()


class TestWaits:
    @pytest.mark.asyncio
    async def test_settle_timeout_is_not_an_error(self, mock_page):
        mock_page.wait_for_load_state.side_effect = PlaywrightError("Timeout 10ms exceeded")
        await settle(mock_page, 10)

    @pytest.mark.asyncio
    async def test_settle_on_closed_page(self, mock_page):
        mock_page.wait_for_load_state.side_effect = PlaywrightError("Target closed")
        mock_page.is_closed.return_value = True
        with pytest.raises(PageClosedError):
            await settle(mock_page)

    @pytest.mark.asyncio
    async def test_human_delay_range(self, mock_page):
        await human_delay(mock_page, min_ms=10, max_ms=20)
        delay = mock_page.wait_for_timeout.call_args.args[0]
        assert 10 <= delay <= 20
