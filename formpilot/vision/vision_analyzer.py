"""Vision analyzer: optional screenshot-based hints merged into detected fields.

The analyzer never replaces DOM classification; matched fields only gain
``vision_hints``. Any failure (no API key, API error, unparseable answer)
yields ``None`` and leaves the fields untouched.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Optional

import anthropic
from pydantic import ValidationError

from formpilot.ai.client import AIClient
from formpilot.ai.prompts.vision import VISION_SYSTEM_PROMPT, build_vision_prompt
from formpilot.models.config import VisionConfig
from formpilot.models.field import FieldDescriptor, VisionHint

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def media_type_for(path: str | Path) -> str:
    return MEDIA_TYPES.get(Path(path).suffix.lower(), "image/png")


def fields_match(field: FieldDescriptor, hint: VisionHint) -> bool:
    """A DOM field matches a vision field when either label text contains the other."""
    dom_text = " ".join(t for t in (field.label, field.placeholder, field.aria_label) if t).lower()
    vision_text = hint.label.lower().strip()
    if not dom_text or not vision_text:
        return False
    return vision_text in dom_text or dom_text in vision_text


class VisionAnalyzer:
    """Asks Claude to list the form fields visible in a screenshot."""

    def __init__(self, ai_client: Optional[AIClient] = None, config: Optional[VisionConfig] = None):
        self.config = config or VisionConfig()
        self.ai_client = ai_client
        if self.ai_client is None:
            try:
                self.ai_client = AIClient(
                    model=self.config.model,
                    max_tokens=self.config.max_tokens,
                    debug_dir=self.config.debug_dir,
                )
            except EnvironmentError as e:
                logger.warning("Vision analysis disabled: %s", e)

    @property
    def available(self) -> bool:
        return self.ai_client is not None

    async def analyze_screenshot(self, image_path: str | Path, page_url: str = "") -> Optional[list[VisionHint]]:
        if self.ai_client is None:
            return None
        try:
            image_base64 = base64.b64encode(Path(image_path).read_bytes()).decode("ascii")
            data = self.ai_client.ask_image_json(
                VISION_SYSTEM_PROMPT,
                build_vision_prompt(page_url),
                image_base64,
                media_type=media_type_for(image_path),
                max_tokens=self.config.max_tokens,
            )
        except (OSError, ValueError, anthropic.APIError) as e:
            logger.warning("Vision analysis failed: %s", e)
            return None

        hints: list[VisionHint] = []
        for raw in data.get("fields", []) if isinstance(data, dict) else []:
            try:
                hints.append(VisionHint.model_validate(raw))
            except ValidationError as e:
                logger.debug("Skipping malformed vision field %r: %s", raw, e)
        logger.info("Vision analysis found %d fields", len(hints))
        return hints

    async def enhance_fields(
        self, fields: list[FieldDescriptor], screenshot_path: str | Path, page_url: str = "",
    ) -> list[FieldDescriptor]:
        """Return ``fields`` with ``vision_hints`` attached where a vision field matches."""
        hints = await self.analyze_screenshot(screenshot_path, page_url)
        if not hints:
            return fields

        enhanced = []
        for field in fields:
            match = next((h for h in hints if fields_match(field, h)), None)
            enhanced.append(field.model_copy(update={"vision_hints": match}) if match else field)
        logger.debug("Vision hints attached to %d/%d fields",
                     sum(1 for f in enhanced if f.vision_hints), len(fields))
        return enhanced
