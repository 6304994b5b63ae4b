"""Tests for field detection."""

import pytest
from playwright.async_api import Error as PlaywrightError

from formpilot.detector.dom_scripts import ELEMENT_HELPERS_JS
from formpilot.detector.field_detector import detect_fields, parse_raw_fields
from formpilot.executor.strategies import PageClosedError
from formpilot.models.field import FieldType

RAW_LOGIN_FORM = [
    {"index": 0, "kind": "input", "tag": "input", "input_type": "text", "id": "UserName", "label": "User Name"},
    {"index": 1, "kind": "input", "tag": "input", "input_type": "password", "id": "Password"},
]


class TestParseRawFields:
    def test_classifies(self):
        fields = parse_raw_fields(RAW_LOGIN_FORM)
        assert [f.detected_type for f in fields] == [FieldType.USERNAME, FieldType.PASSWORD]

    def test_skips_invalid(self):
        fields = parse_raw_fields([{"kind": "input"}, RAW_LOGIN_FORM[0]])
        assert len(fields) == 1
        assert fields[0].id == "UserName"


class TestDetectFields:
    @pytest.mark.asyncio
    async def test_detects(self, mock_page):
        mock_page.evaluate.return_value = RAW_LOGIN_FORM
        fields = await detect_fields(mock_page)
        assert len(fields) == 2
        assert fields[1].input_type == "password"

    @pytest.mark.asyncio
    async def test_no_fields(self, mock_page):
        mock_page.evaluate.return_value = []
        assert await detect_fields(mock_page) == []

    @pytest.mark.asyncio
    async def test_script_error_returns_empty(self, mock_page):
        mock_page.evaluate.side_effect = PlaywrightError("Execution context was destroyed")
        assert await detect_fields(mock_page) == []

    @pytest.mark.asyncio
    async def test_closed_page_raises(self, mock_page):
        mock_page.evaluate.side_effect = PlaywrightError("Target closed")
        mock_page.is_closed.return_value = True
        with pytest.raises(PageClosedError):
            await detect_fields(mock_page)


class TestElementHelpers:
    def test_visibility_matches_playwright_visible(self):
        # The tag-index fallback uses :nth-match(tag:visible, N), so the in-page
        # ordinal must count the same elements Playwright does.
        helper = ELEMENT_HELPERS_JS.split("const __fpIsVisible", 1)[1].split("};", 1)[0]
        assert "opacity" not in helper
        assert "visibility === 'visible'" in helper
        assert "filter(__fpIsVisible)" in ELEMENT_HELPERS_JS
