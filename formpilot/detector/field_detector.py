"""Scans the rendered page for fillable elements and classifies them."""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from pydantic import ValidationError

from formpilot.detector.classifier import classify_field
from formpilot.detector.dom_scripts import FIELD_CANDIDATE_SELECTORS, FIELD_SCAN_JS
from formpilot.executor.strategies import raise_if_page_closed
from formpilot.models.field import FieldDescriptor

logger = logging.getLogger(__name__)


def parse_raw_fields(raw_fields: list[dict]) -> list[FieldDescriptor]:
    """Build classified descriptors from the raw dictionaries returned by the page scan."""
    fields: list[FieldDescriptor] = []
    for raw in raw_fields:
        try:
            descriptor = FieldDescriptor(**raw)
        except ValidationError as e:
            logger.debug("Skipping unparseable field %s: %s", raw.get("index"), e)
            continue
        fields.append(classify_field(descriptor))
    return fields


async def detect_fields(page: Page) -> list[FieldDescriptor]:
    """Detect all visible, fillable fields on the current page.

    Hidden elements (by computed style or zero size) and non-fillable
    input kinds (hidden, submit, button, reset, image) are excluded. The
    result is ordered by document position and indexed from 0.
    """
    try:
        raw_fields = await page.evaluate(FIELD_SCAN_JS, ",".join(FIELD_CANDIDATE_SELECTORS))
    except PlaywrightError as e:
        raise_if_page_closed(page, e)
        logger.error("Field detection failed: %s", e)
        return []

    fields = parse_raw_fields(raw_fields or [])
    logger.info("Detected %d fields", len(fields))
    for f in fields:
        logger.debug(
            "  #%d %s[%s] %r -> %s (%s)",
            f.index, f.tag, f.input_type, f.display_name,
            f.detected_type.value, f.confidence.value,
        )
    return fields
