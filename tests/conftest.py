"""Pytest configuration and shared fixtures."""

from typing import Optional
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from playwright.async_api import Frame, Locator, Page

from formpilot.models.config import FormPilotConfig, NavigatorConfig
from formpilot.models.field import FieldDescriptor
from formpilot.models.recording import ElementSnapshot, RecordedAction


# ============================================================================
# Playwright doubles
# ============================================================================


def make_locator(
    count: int = 1,
    visible: bool = True,
    checked: bool = False,
    attributes: Optional[dict] = None,
    options: Optional[list[str]] = None,
) -> MagicMock:
    """Create a Locator double whose async methods are AsyncMocks.

    ``.first`` returns the locator itself; ``.locator("option")`` returns a
    locator whose ``all_text_contents`` yields ``options``.
    """
    attributes = attributes or {}
    loc = MagicMock(spec=Locator)
    loc.first = loc
    loc.count = AsyncMock(return_value=count)
    loc.is_visible = AsyncMock(return_value=visible)
    loc.is_checked = AsyncMock(return_value=checked)
    loc.get_attribute = AsyncMock(side_effect=lambda name, **kw: attributes.get(name))
    for method in ("click", "check", "uncheck", "fill", "clear", "press_sequentially",
                   "select_option", "press", "evaluate"):
        setattr(loc, method, AsyncMock())

    option_locator = MagicMock(spec=Locator)
    option_locator.all_text_contents = AsyncMock(return_value=list(options or []))
    loc.locator = Mock(return_value=option_locator)
    return loc


def make_frame(clicks: bool = False, url: str = "https://example.com") -> MagicMock:
    frame = MagicMock(spec=Frame)
    frame.url = url
    frame.evaluate = AsyncMock(return_value=clicks)
    return frame


def make_page(url: str = "https://example.com", locator: Optional[MagicMock] = None) -> MagicMock:
    """Create a Page double; every ``page.locator(...)`` returns ``locator``."""
    page = MagicMock(spec=Page)
    page.url = url
    page.is_closed = Mock(return_value=False)
    page.locator = Mock(return_value=locator if locator is not None else make_locator())
    page.get_by_role = Mock(return_value=make_locator())
    page.frames = [make_frame()]
    page.evaluate = AsyncMock(return_value="")
    page.goto = AsyncMock()
    page.click = AsyncMock()
    page.screenshot = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.wait_for_event = AsyncMock()
    page.expose_binding = AsyncMock()
    page.on = Mock()
    page.remove_listener = Mock()
    return page


@pytest.fixture
def mock_page() -> MagicMock:
    """Create a mock Playwright page."""
    return make_page()


# ============================================================================
# Model fixtures
# ============================================================================


@pytest.fixture
def fast_navigator_config() -> NavigatorConfig:
    """Navigator config with every delay zeroed."""
    return NavigatorConfig(
        pre_scan_delay_ms=0,
        post_action_delay_ms=0,
        settle_timeout_ms=10,
        click_timeout_ms=10,
        enable_wait_ms=10,
    )


@pytest.fixture
def fast_config(tmp_path, fast_navigator_config) -> FormPilotConfig:
    config = FormPilotConfig(screenshot_dir=str(tmp_path / "screenshots"))
    config.navigator = fast_navigator_config
    config.fill.settle_delay_ms = 0
    config.fill.typing_delay_ms = 0
    config.fill.post_submit_delay_ms = 0
    return config


def make_field(index: int = 0, **kwargs) -> FieldDescriptor:
    return FieldDescriptor(index=index, **kwargs)


@pytest.fixture
def login_actions() -> list[RecordedAction]:
    """A recorded login followed by a post-landing click."""
    login_url = "https://portal.example.com/s/login/"
    home_url = "https://portal.example.com/s/"
    return [
        RecordedAction(
            type="click", timestamp=1000, url=login_url,
            element=ElementSnapshot(tag="input", type="text", id="UserName"),
        ),
        RecordedAction(
            type="input", timestamp=1100, url=login_url, value="  a@b.com ",
            element=ElementSnapshot(tag="input", type="text", id="UserName", name="username"),
        ),
        RecordedAction(
            type="input", timestamp=1200, url=login_url, value="***HIDDEN***",
            element=ElementSnapshot(tag="input", type="password", id="Password", name="password"),
        ),
        RecordedAction(
            type="click", timestamp=1300, url=login_url,
            element=ElementSnapshot(tag="button", type="submit", text="Log in"),
        ),
        RecordedAction(
            type="navigation", timestamp=2000, url=home_url,
            from_url=login_url, to=home_url,
        ),
        RecordedAction(
            type="click", timestamp=2500, url=home_url,
            element=ElementSnapshot(tag="div", class_name="flowruntimeFlowRuntime"),
        ),
        RecordedAction(
            type="click", timestamp=3000, url=home_url,
            element=ElementSnapshot(tag="a", text="Reports", aria_label="Reports"),
        ),
    ]
