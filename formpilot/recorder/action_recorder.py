"""Action recorder: captures a human's clicks, inputs and submits in a live page."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from pathlib import Path
from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from pydantic import ValidationError

from formpilot.detector.dom_scripts import RECORDER_BINDING, RECORDER_JS
from formpilot.executor.selector_synthesizer import selector_for
from formpilot.models.recording import (
    ACTION_TYPES,
    HIDDEN_VALUE,
    ElementSnapshot,
    RecordedAction,
    save_action_log,
)
from formpilot.recorder.script_generator import ScriptGenerator, extract_form_data

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ActionRecorder:
    """Records user actions on one page.

    Listeners live in the page and report through an exposed binding; they
    are re-attached after every full load. Navigation is detected by
    polling ``page.url``. Password values are stored as ``***HIDDEN***``
    unless ``keep_passwords`` is set.
    """

    def __init__(self, page: Page, keep_passwords: bool = False, poll_interval_ms: int = 500):
        self.page = page
        self.keep_passwords = keep_passwords
        self.poll_interval_ms = poll_interval_ms
        self.actions: list[RecordedAction] = []
        self.is_recording = False
        self._binding_exposed = False
        self._poll_task: Optional[asyncio.Task] = None
        self._last_url = ""

    async def start_recording(self) -> None:
        """Begin capturing; any previously captured actions are discarded."""
        logger.info("Starting action recording")
        self.actions = []
        self.is_recording = True
        self._last_url = self.page.url

        if not self._binding_exposed:
            await self.page.expose_binding(RECORDER_BINDING, self._on_binding)
            self._binding_exposed = True
        self.page.on("load", self._on_load)
        await self._inject()
        self._poll_task = asyncio.create_task(self._poll_url())

    async def stop_recording(self) -> list[RecordedAction]:
        """Stop capturing and return everything captured so far."""
        self.is_recording = False
        self.page.remove_listener("load", self._on_load)
        if self._poll_task is not None:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None
        logger.info("Recorded %d actions", len(self.actions))
        return list(self.actions)

    def get_actions(self) -> list[RecordedAction]:
        return list(self.actions)

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    async def _inject(self) -> None:
        try:
            await self.page.wait_for_load_state("domcontentloaded", timeout=5000)
            attached = await self.page.evaluate(RECORDER_JS)
        except PlaywrightError as e:
            # Expected while a navigation tears the document down; the next
            # load event re-injects.
            logger.debug("Recorder injection skipped: %s", e)
            return
        if attached:
            logger.debug("Recorder attached to %s", self.page.url)

    async def _on_load(self, page: Page) -> None:
        if self.is_recording:
            await self._inject()

    async def _on_binding(self, source: Any, payload: dict) -> None:
        if not self.is_recording:
            return
        action = self._build_action(payload)
        if action is None:
            return
        self.actions.append(action)
        logger.debug("Recorded %s: %s", action.type, action.selector.selector if action.selector else "")

    def _build_action(self, payload: dict) -> Optional[RecordedAction]:
        if not isinstance(payload, dict) or payload.get("type") not in ACTION_TYPES:
            logger.debug("Ignoring recorder payload: %r", payload)
            return None
        try:
            element = ElementSnapshot.model_validate(payload.get("element") or {})
        except ValidationError as e:
            logger.debug("Malformed element snapshot: %s", e)
            return None

        value = payload.get("value")
        if element.input_type == "password" and not self.keep_passwords:
            # The snapshot carries the live value too
            element = element.model_copy(update={"value": None})
            if value is not None:
                value = HIDDEN_VALUE

        return RecordedAction(
            type=payload["type"],
            timestamp=int(payload.get("timestamp") or _now_ms()),
            url=payload.get("url") or self.page.url,
            selector=selector_for(element),
            element=element,
            value=value,
        )

    async def _poll_url(self) -> None:
        while self.is_recording:
            await asyncio.sleep(self.poll_interval_ms / 1000)
            if self.page.is_closed():
                break
            self.check_navigation()

    def check_navigation(self) -> Optional[RecordedAction]:
        """Record a navigation action if the page URL changed since the last check."""
        current = self.page.url
        if current == self._last_url:
            return None
        action = RecordedAction(
            type="navigation",
            timestamp=_now_ms(),
            url=current,
            from_url=self._last_url,
            to=current,
        )
        self.actions.append(action)
        self._last_url = current
        logger.info("Navigation: %s", current)
        return action

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def generate_script(self, format: str = "playwright", include_comments: bool = True) -> str:
        return ScriptGenerator(self.actions, include_comments=include_comments).generate(format)

    def save_to_file(self, path: str | Path = "recorded-actions.json") -> Path:
        path = Path(path)
        save_action_log(self.actions, path)
        logger.info("Actions saved to %s", path)
        return path

    def save_script(self, path: str | Path, format: str = "playwright") -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.generate_script(format), encoding="utf-8")
        logger.info("Script saved to %s", path)
        return path

    def summary(self) -> dict:
        """Action counts by type and the recorded field values (hidden ones masked)."""
        fields = {
            key: "(hidden)" if value == HIDDEN_VALUE else value
            for key, value in extract_form_data(self.actions).items()
        }
        return {
            "total": len(self.actions),
            "by_type": dict(Counter(a.type for a in self.actions)),
            "fields": fields,
        }
