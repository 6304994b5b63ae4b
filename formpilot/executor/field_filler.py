"""Fill orchestration: detect the fields on a page and write a value into each one."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from formpilot.data.data_generator import DataGenerator, Value
from formpilot.detector.field_detector import detect_fields
from formpilot.executor.selector_resolver import resolve_field_locator
from formpilot.executor.selector_synthesizer import rank_selectors
from formpilot.executor.strategies import raise_if_page_closed
from formpilot.models.field import FieldDescriptor, FieldType
from formpilot.models.results import FieldSummary, FillResult, FormAnalysis

logger = logging.getLogger(__name__)

TRUTHY_STRINGS = ("true", "on", "yes", "1")

# Native pickers reject keystrokes; these are written in one go
DIRECT_FILL_INPUT_TYPES = ("date", "datetime-local", "time", "month", "week", "color", "range")


class FieldNotFound(Exception):
    """No ranked selector matched the field on the live page."""


def _as_bool(value: Value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)


def _category(field: FieldDescriptor) -> str:
    if field.kind == "select" or field.tag == "select":
        return "select"
    input_type = field.input_type.lower()
    if field.kind == "input" and input_type in ("checkbox", "radio", "file"):
        return input_type
    if field.kind == "input" and input_type in DIRECT_FILL_INPUT_TYPES:
        return "direct"
    return "text"


def _log_value(field: FieldDescriptor, value: Value) -> str:
    if field.detected_type == FieldType.PASSWORD or field.input_type == "password":
        return "***"
    return repr(value)


async def fill_field(
    page: Page,
    field: FieldDescriptor,
    value: Value,
    generator: DataGenerator,
    typing_delay_ms: int = 50,
) -> bool:
    """Write ``value`` into ``field``. Returns False when the field was skipped."""
    category = _category(field)
    if category == "file":
        logger.info("Skipping file input: %s", field.display_name)
        return False

    resolution = await resolve_field_locator(page, rank_selectors(field))
    if not resolution.resolved:
        raise FieldNotFound(f"no selector matched '{field.display_name}'")
    element: Locator = resolution.locator

    match category:
        case "checkbox":
            if _as_bool(value):
                await element.check()
            else:
                await element.uncheck()
        case "radio":
            await element.check()
        case "select":
            await _fill_select(element, field, generator)
        case "direct":
            await element.fill("" if value is None else str(value))
        case _:
            await element.clear()
            await element.press_sequentially("" if value is None else str(value), delay=typing_delay_ms)

    logger.info("Filled %s (%s): %s", field.display_name, field.detected_type.value, _log_value(field, value))
    return True


async def _fill_select(element: Locator, field: FieldDescriptor, generator: DataGenerator) -> None:
    """Pick a non-placeholder option by position; an override picks by label."""
    found, override = generator.get_custom_data(field)
    if found and isinstance(override, str):
        await element.select_option(label=override)
        return

    options = await element.locator("option").all_text_contents()
    index = generator.pick_option_index(len(options))
    if index is None:
        logger.debug("Select %s has no choice to make (%d options)", field.display_name, len(options))
        return
    await element.select_option(index=index)
    logger.debug("Selected option %d of %d in %s", index, len(options), field.display_name)


async def fill_form(
    page: Page,
    generator: DataGenerator,
    fields: Optional[list[FieldDescriptor]] = None,
    settle_delay_ms: int = 100,
    typing_delay_ms: int = 50,
) -> FillResult:
    """Fill every enabled field on the page, in detection order.

    Per-field failures are logged and listed in ``failed``; they never
    stop the remaining fields. With no detectable field the result is
    unsuccessful and nothing is touched.
    """
    if fields is None:
        fields = await detect_fields(page)
    if not fields:
        logger.warning("No form fields detected")
        return FillResult(success=False, filled=0, total=0)

    filled = 0
    failed: list[str] = []
    skipped: list[str] = []
    for field in fields:
        if not field.is_fillable:
            logger.info("Skipping disabled/readonly field: %s", field.display_name)
            skipped.append(field.display_name)
            continue

        value = generator.generate(field)
        try:
            if await fill_field(page, field, value, generator, typing_delay_ms=typing_delay_ms):
                filled += 1
            else:
                skipped.append(field.display_name)
        except (FieldNotFound, PlaywrightError) as e:
            raise_if_page_closed(page, e)
            logger.warning("Failed to fill field %s: %s", field.display_name, e)
            failed.append(field.display_name)

        await page.wait_for_timeout(settle_delay_ms)

    logger.info("Filled %d/%d fields", filled, len(fields))
    return FillResult(
        success=True,
        filled=filled,
        total=len(fields),
        fields=fields,
        failed=failed,
        skipped=skipped,
    )


def analyze_fields(fields: list[FieldDescriptor]) -> FormAnalysis:
    """Summarize detected fields by type and requiredness."""
    type_counts = Counter(f.detected_type.value for f in fields)
    required = sum(1 for f in fields if f.required)
    return FormAnalysis(
        total_fields=len(fields),
        required_fields=required,
        optional_fields=len(fields) - required,
        field_types=dict(type_counts),
        fields=[
            FieldSummary(
                name=f.name or f.id,
                type=f.detected_type.value,
                label=f.label,
                required=f.required,
                confidence=f.confidence.value,
            )
            for f in fields
        ],
    )


async def analyze_form(page: Page) -> FormAnalysis:
    """Detect the page's fields and summarize them without filling anything."""
    return analyze_fields(await detect_fields(page))
