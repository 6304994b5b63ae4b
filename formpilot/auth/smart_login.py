"""Smart login: finds the credential fields, signs in, then walks the post-login flow."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from formpilot.detector.field_detector import detect_fields
from formpilot.executor.diagnostics import DiagnosticsCollector
from formpilot.executor.selector_resolver import resolve_field_locator
from formpilot.executor.selector_synthesizer import rank_selectors
from formpilot.executor.strategies import raise_if_page_closed
from formpilot.executor.submitter import submit
from formpilot.models.config import LoginConfig, NavigatorConfig
from formpilot.models.field import FieldDescriptor, FieldType
from formpilot.models.results import LoginResult
from formpilot.navigator.smart_navigator import SmartNavigator
from formpilot.utils.browser import human_delay, settle

logger = logging.getLogger(__name__)

# Keywords that suggest a field name is for username/email
_USERNAME_NAME_KEYWORDS = ("user", "login", "email", "account", "uname", "identifier")

_TEXT_INPUT_TYPES = ("text", "email", "tel")


class LoginFieldMissing(Exception):
    """A mandatory credential field could not be found or filled."""


def _find_password_field(fields: list[FieldDescriptor]) -> Optional[FieldDescriptor]:
    for field in fields:
        if field.kind == "input" and field.input_type == "password":
            return field
    return None


def _find_username_field(fields: list[FieldDescriptor]) -> Optional[FieldDescriptor]:
    """Pick the username/email field using heuristics."""
    text_fields = [
        f for f in fields
        if f.kind == "input" and f.input_type in _TEXT_INPUT_TYPES and f.is_fillable
    ]

    # Priority 1: classified as email or username
    for wanted in (FieldType.EMAIL, FieldType.USERNAME):
        for field in text_fields:
            if field.detected_type == wanted:
                return field

    # Priority 2: name or id contains a username-related keyword
    for field in text_fields:
        key = f"{field.name} {field.id}".lower()
        if any(kw in key for kw in _USERNAME_NAME_KEYWORDS):
            return field

    # Priority 3: first text field
    return text_fields[0] if text_fields else None


async def _fill_credential(page: Page, field: FieldDescriptor, value: str) -> None:
    resolution = await resolve_field_locator(page, rank_selectors(field))
    if not resolution.resolved:
        raise LoginFieldMissing(f"could not locate '{field.display_name}'")
    await resolution.locator.fill(value)


async def _verify_login_success(page: Page, login_url: str) -> bool:
    """Login worked if the URL moved away from the login page or the password field is gone."""
    if page.url.rstrip("/") != login_url.rstrip("/"):
        return True
    try:
        password_visible = await page.locator('input[type="password"]').first.is_visible()
    except PlaywrightError as e:
        raise_if_page_closed(page, e)
        return False
    return not password_visible


async def perform_smart_login(
    page: Page,
    login: LoginConfig,
    navigator_config: Optional[NavigatorConfig] = None,
    diagnostics: Optional[DiagnosticsCollector] = None,
    settle_timeout_ms: int = 30000,
) -> LoginResult:
    """Sign in on ``login.login_url`` and optionally auto-navigate to the landing page.

    A missing username or password field is a structural failure: the
    result is unsuccessful and carries diagnostics. Environment failures
    (closed page, dead browser) propagate.
    """
    diagnostics = diagnostics or DiagnosticsCollector()
    logger.info("Smart login: navigating to %s", login.login_url)
    await page.goto(login.login_url, wait_until="domcontentloaded")
    await settle(page, settle_timeout_ms)

    fields = await detect_fields(page)
    password_field = _find_password_field(fields)
    username_field = _find_username_field(fields)
    if password_field is None or username_field is None:
        missing = "password" if password_field is None else "username"
        logger.error("Smart login: no %s field found (%d fields detected)", missing, len(fields))
        return LoginResult(
            success=False,
            error=f"Could not identify the {missing} field",
            diagnostics=await diagnostics.capture(page, "login-fields-missing"),
        )

    username_selector = rank_selectors(username_field)[0].selector
    password_selector = rank_selectors(password_field)[0].selector
    logger.debug("Smart login: username=%s, password=%s", username_selector, password_selector)

    try:
        await _fill_credential(page, username_field, login.username)
        await human_delay(page, min_ms=80, max_ms=300)
        await _fill_credential(page, password_field, login.password)
    except (LoginFieldMissing, PlaywrightError) as e:
        raise_if_page_closed(page, e)
        logger.error("Smart login: could not fill credentials: %s", e)
        return LoginResult(
            success=False,
            error=str(e),
            username_selector=username_selector,
            password_selector=password_selector,
            diagnostics=await diagnostics.capture(page, "login-fill-failed"),
        )

    if not await submit(page):
        logger.info("Smart login: no submit button, pressing Enter in the password field")
        await page.locator(password_selector).first.press("Enter")
    await settle(page, settle_timeout_ms)

    navigation = None
    if login.auto_navigate:
        navigation = await SmartNavigator(page, navigator_config).auto_navigate()

    success = (navigation is not None and navigation.landed) or await _verify_login_success(page, login.login_url)
    if success:
        logger.info("Smart login: signed in, now on %s", page.url)
        return LoginResult(
            success=True,
            username_selector=username_selector,
            password_selector=password_selector,
            post_login_url=page.url,
            navigation=navigation,
        )

    logger.warning("Smart login: still on the login page after submitting")
    return LoginResult(
        success=False,
        error="Login submitted but the page still shows the login form",
        username_selector=username_selector,
        password_selector=password_selector,
        post_login_url=page.url,
        navigation=navigation,
        diagnostics=await diagnostics.capture(page, "login-unverified"),
    )
