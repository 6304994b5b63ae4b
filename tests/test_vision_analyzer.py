"""Tests for the optional vision analyzer."""

import os
from unittest.mock import Mock, patch

import anthropic
import pytest

from formpilot.models.field import FieldDescriptor, FieldType, VisionHint
from formpilot.vision.vision_analyzer import VisionAnalyzer, fields_match, media_type_for

# 1x1 transparent PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\nIDATx\x9cc\x00\x01"
    b"\x00\x00\x05\x00\x01\r\n-\xb4\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture
def screenshot(tmp_path):
    path = tmp_path / "form.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def mock_ai_client():
    client = Mock()
    client.ask_image_json.return_value = {
        "fields": [
            {"label": "Email Address", "type": "email", "required": True, "hints": "work email"},
            {"label": "Favourite number", "type": "number"},
        ]
    }
    return client


class TestHelpers:
    def test_media_type(self):
        assert media_type_for("shot.JPG") == "image/jpeg"
        assert media_type_for("shot.bin") == "image/png"

    def test_fields_match(self):
        field = FieldDescriptor(index=0, label="Email")
        assert fields_match(field, VisionHint(label="Email Address"))
        assert not fields_match(field, VisionHint(label="Password"))
        assert not fields_match(FieldDescriptor(index=0), VisionHint(label="Email"))
        assert not fields_match(field, VisionHint(label=""))


class TestVisionAnalyzer:
    def test_unavailable_without_api_key(self):
        with patch.dict(os.environ, {}, clear=True):
            assert not VisionAnalyzer().available

    @pytest.mark.asyncio
    async def test_analyze_screenshot(self, mock_ai_client, screenshot):
        hints = await VisionAnalyzer(ai_client=mock_ai_client).analyze_screenshot(screenshot, "https://a.com")
        assert [h.label for h in hints] == ["Email Address", "Favourite number"]
        assert hints[0].required is True
        assert mock_ai_client.ask_image_json.call_args.kwargs["media_type"] == "image/png"

    @pytest.mark.asyncio
    async def test_api_failure_returns_none(self, mock_ai_client, screenshot):
        mock_ai_client.ask_image_json.side_effect = anthropic.APIError("boom", request=Mock(), body=None)
        assert await VisionAnalyzer(ai_client=mock_ai_client).analyze_screenshot(screenshot) is None

    @pytest.mark.asyncio
    async def test_missing_file_returns_none(self, mock_ai_client, tmp_path):
        assert await VisionAnalyzer(ai_client=mock_ai_client).analyze_screenshot(tmp_path / "nope.png") is None

    @pytest.mark.asyncio
    async def test_enhance_fields(self, mock_ai_client, screenshot):
        fields = [
            FieldDescriptor(index=0, label="Email", detected_type=FieldType.EMAIL),
            FieldDescriptor(index=1, label="Password", detected_type=FieldType.PASSWORD),
        ]
        enhanced = await VisionAnalyzer(ai_client=mock_ai_client).enhance_fields(fields, screenshot)
        assert enhanced[0].vision_hints.hints == "work email"
        assert enhanced[0].detected_type == FieldType.EMAIL
        assert enhanced[1].vision_hints is None
        assert fields[0].vision_hints is None

    @pytest.mark.asyncio
    async def test_enhance_fields_without_hints(self, mock_ai_client, screenshot):
        mock_ai_client.ask_image_json.side_effect = ValueError("AI returned invalid JSON")
        fields = [FieldDescriptor(index=0, label="Email")]
        assert await VisionAnalyzer(ai_client=mock_ai_client).enhance_fields(fields, screenshot) == fields
