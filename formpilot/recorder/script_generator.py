"""Script generator: turns a recorded action log into a runnable Python script.

Two formats are produced:

* ``playwright`` replays every recorded action with direct Playwright calls.
* ``formpilot`` replaces the first page's literal fills with one
  ``SmartFormFiller.fill_form`` call, runs the ``SmartNavigator`` after a
  submit, and replays only the actions that happened after landing.

Output depends only on the action log, so regenerating from the same log
is byte-identical.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from formpilot.executor.selector_synthesizer import selector_for
from formpilot.models.recording import HIDDEN_VALUE, RecordedAction
from formpilot.url_utils import is_landing_url

logger = logging.getLogger(__name__)

SCRIPT_FORMATS = ("playwright", "formpilot")

PASSWORD_PLACEHOLDER = "YOUR_PASSWORD_HERE"

# Container clicks recorded inside flow runtimes; replaying them does nothing useful
NOISE_SELECTOR_TOKENS = ("flowruntimeFlowRuntime", "navigation")

_SUBMIT_TEXT = re.compile(r"log ?in|sign ?in|submit", re.IGNORECASE)

INDENT = "        "


def _lit(value: Optional[str]) -> str:
    return repr("" if value is None else value)


def _selector_of(action: RecordedAction) -> Optional[str]:
    if action.selector is not None:
        return action.selector.selector
    if action.element is not None:
        return selector_for(action.element).selector
    return None


def _replay_value(action: RecordedAction) -> str:
    if action.is_hidden_value:
        return PASSWORD_PLACEHOLDER
    return action.value or ""


def _describe(action: RecordedAction) -> str:
    element = action.element
    if element is None:
        return "element"
    text = element.text or element.name or element.placeholder or element.aria_label or element.tag or "element"
    return " ".join(text.split())[:60]


def group_actions_by_url(actions: list[RecordedAction]) -> dict[str, list[RecordedAction]]:
    """Group non-navigation actions by the URL active at capture time, in first-seen order."""
    grouped: dict[str, list[RecordedAction]] = {}
    for action in actions:
        if action.type == "navigation":
            continue
        grouped.setdefault(action.url, []).append(action)
    return grouped


def form_data_key(action: RecordedAction) -> str:
    element = action.element
    if element is None:
        return "field"
    return element.name or element.id or element.label or element.placeholder or "field"


def extract_form_data(actions: list[RecordedAction]) -> dict[str, str]:
    """Map field key -> trimmed value for input actions; the last write to a key wins."""
    data: dict[str, str] = {}
    for action in actions:
        if action.type == "input":
            data[form_data_key(action)] = (action.value or "").strip()
    return data


def is_submit_like(action: RecordedAction) -> bool:
    if action.type == "submit":
        return True
    if action.type != "click" or action.element is None:
        return False
    if action.element.input_type == "submit":
        return True
    return bool(action.element.text and _SUBMIT_TEXT.search(action.element.text))


def post_landing_actions(actions: list[RecordedAction]) -> list[RecordedAction]:
    """Clicks and navigations after the first landing page reached following the first submit."""
    submit_index = next((i for i, a in enumerate(actions) if is_submit_like(a)), None)
    if submit_index is None:
        return []

    landing_index = None
    for i in range(submit_index + 1, len(actions)):
        action = actions[i]
        url = action.to if action.type == "navigation" else action.url
        if url and is_landing_url(url):
            landing_index = i
            break
    if landing_index is None:
        return []

    replay: list[RecordedAction] = []
    for action in actions[landing_index + 1:]:
        if action.type == "navigation" and action.to:
            replay.append(action)
        elif action.type == "click":
            selector = _selector_of(action)
            if selector and not any(token in selector for token in NOISE_SELECTOR_TOKENS):
                replay.append(action)
    return replay


class ScriptGenerator:
    """Renders recorded actions as an async Python script."""

    def __init__(self, actions: list[RecordedAction], include_comments: bool = True):
        self.actions = list(actions)
        self.include_comments = include_comments

    def generate(self, format: str = "playwright") -> str:
        if format not in SCRIPT_FORMATS:
            raise ValueError(f"Unknown script format '{format}' (expected one of {', '.join(SCRIPT_FORMATS)})")
        if not self.actions:
            return "# No actions recorded\n"
        if format == "playwright":
            return self._generate_playwright()
        return self._generate_formpilot()

    # ------------------------------------------------------------------
    # Direct Playwright script
    # ------------------------------------------------------------------

    def _generate_playwright(self) -> str:
        lines = [
            '"""Generated automation script.',
            "",
            f"Total actions: {len(self.actions)}",
            '"""',
            "",
            "import asyncio",
            "",
            "from playwright.async_api import async_playwright",
            "",
            "",
            "async def run_automation():",
            "    async with async_playwright() as p:",
            f"{INDENT}browser = await p.chromium.launch(headless=False)",
            f"{INDENT}context = await browser.new_context()",
            f"{INDENT}page = await context.new_page()",
            "",
        ]

        for url, actions in group_actions_by_url(self.actions).items():
            if self.include_comments:
                lines.append(f"{INDENT}# Navigate to: {url}")
            lines.append(f"{INDENT}await page.goto({_lit(url)})")
            lines.append(f'{INDENT}await page.wait_for_load_state("networkidle")')
            lines.append("")

            previous: Optional[RecordedAction] = None
            for action in actions:
                step = self._playwright_step(action, previous)
                if step:
                    lines.extend(step)
                    lines.append("")
                previous = action

        lines.extend([
            f'{INDENT}print("Automation complete")',
            f"{INDENT}await browser.close()",
            "",
            "",
            'if __name__ == "__main__":',
            "    asyncio.run(run_automation())",
            "",
        ])
        return "\n".join(lines)

    def _playwright_step(self, action: RecordedAction, previous: Optional[RecordedAction]) -> list[str]:
        selector = _selector_of(action)
        if selector is None:
            logger.debug("Skipping %s action without a target", action.type)
            return []
        sel = _lit(selector)
        comment: list[str] = []

        if action.type == "input":
            element = action.element
            input_type = element.input_type if element else ""
            if self.include_comments:
                comment = [f"{INDENT}# Fill {form_data_key(action)}"]
            if input_type in ("checkbox", "radio"):
                checked = (action.value or "").lower() == "true"
                call = "check" if checked or input_type == "radio" else "uncheck"
                return comment + [f"{INDENT}await page.{call}({sel})"]
            if element is not None and element.tag == "select":
                return comment + [f"{INDENT}await page.select_option({sel}, {_lit(action.value)})"]
            return comment + [f"{INDENT}await page.fill({sel}, {_lit(_replay_value(action))})"]

        if action.type == "click":
            if self.include_comments:
                comment = [f"{INDENT}# Click {_describe(action)}"]
            return comment + [
                f"{INDENT}await page.click({sel})",
                f"{INDENT}await page.wait_for_timeout(1000)",
            ]

        if action.type == "submit":
            if self.include_comments:
                comment = [f"{INDENT}# Submit form"]
            if previous is not None and previous.type == "click":
                # The preceding click already submitted the form
                return comment + [f'{INDENT}await page.wait_for_load_state("networkidle")']
            return comment + [
                f'{INDENT}await page.locator({sel}).evaluate("form => form.requestSubmit()")',
                f'{INDENT}await page.wait_for_load_state("networkidle")',
            ]
        return []

    # ------------------------------------------------------------------
    # FormPilot workflow script
    # ------------------------------------------------------------------

    def _generate_formpilot(self) -> str:
        groups = group_actions_by_url(self.actions)
        first_url = next(iter(groups), "") or "https://example.com"
        first_group = groups.get(first_url, [])
        form_data = extract_form_data(first_group)
        has_submit = any(is_submit_like(a) for a in self.actions)
        replay = post_landing_actions(self.actions) if has_submit else []
        has_clicks = any(a.type == "click" for a in replay)

        lines = [
            '"""Generated FormPilot workflow.',
            "",
            f"Total actions: {len(self.actions)}",
            '"""',
            "",
            "import asyncio",
            "",
        ]
        if has_clicks:
            lines.extend(["from playwright.async_api import Error as PlaywrightError", ""])
        lines.append("from formpilot.form_filler import SmartFormFiller")
        if has_submit:
            lines.append("from formpilot.navigator.smart_navigator import SmartNavigator")
        lines.extend([
            "",
            "",
            "async def run_workflow():",
            "    async with SmartFormFiller() as filler:",
        ])
        if self.include_comments:
            lines.append(f"{INDENT}# Navigate to starting page")
        lines.append(f"{INDENT}await filler.goto({_lit(first_url)})")
        lines.append("")

        if form_data:
            if self.include_comments:
                lines.append(f"{INDENT}# Fill form with data")
            lines.append(f"{INDENT}await filler.fill_form({{")
            for key, value in form_data.items():
                shown = PASSWORD_PLACEHOLDER if value == HIDDEN_VALUE else value
                lines.append(f"{INDENT}    {_lit(key)}: {_lit(shown)},")
            lines.append(f"{INDENT}}})")
            lines.append("")

        if has_submit:
            if self.include_comments:
                lines.append(f"{INDENT}# Submit, then move through login and agreement steps")
            lines.extend([
                f"{INDENT}await filler.submit()",
                f"{INDENT}navigator = SmartNavigator(filler.page)",
                f"{INDENT}await navigator.auto_navigate()",
                "",
            ])

        if replay:
            if self.include_comments:
                lines.append(f"{INDENT}# Post-landing actions")
            for action in replay:
                lines.extend(self._replay_step(action))
                lines.append("")

        lines.extend([
            f'{INDENT}print("Workflow complete")',
            "",
            "",
            'if __name__ == "__main__":',
            "    asyncio.run(run_workflow())",
            "",
        ])
        return "\n".join(lines)

    def _replay_step(self, action: RecordedAction) -> list[str]:
        if action.type == "navigation":
            return [
                f"{INDENT}await filler.page.goto({_lit(action.to)})",
                f'{INDENT}await filler.page.wait_for_load_state("networkidle")',
            ]
        sel = _lit(_selector_of(action))
        return [
            f"{INDENT}try:",
            f"{INDENT}    await filler.page.wait_for_selector({sel}, timeout=10000)",
            f"{INDENT}    await filler.page.click({sel})",
            f"{INDENT}except PlaywrightError:",
            f"{INDENT}    print({_lit('Click failed: ' + _describe(action))})",
            f"{INDENT}await filler.page.wait_for_timeout(2000)",
        ]
