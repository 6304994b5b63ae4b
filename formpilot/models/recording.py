"""Recorded action log models."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from formpilot.models.field import SelectorStrategy

logger = logging.getLogger(__name__)

ACTION_TYPES = ("click", "input", "submit", "navigation")

HIDDEN_VALUE = "***HIDDEN***"


class ElementSnapshot(BaseModel):
    """Compact description of the element an action targeted."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    tag: str = Field(default="", validation_alias=AliasChoices("tag", "tagName"))
    type: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None
    class_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("class_name", "className"))
    placeholder: Optional[str] = None
    aria_label: Optional[str] = Field(default=None, validation_alias=AliasChoices("aria_label", "ariaLabel"))
    role: Optional[str] = None
    label: Optional[str] = None
    text: Optional[str] = None
    value: Optional[str] = None
    tag_ordinal: int = 0

    # Attribute names shared with FieldDescriptor so the selector synthesizer
    # can rank either one.
    @property
    def input_type(self) -> str:
        return self.type or ""


class RecordedAction(BaseModel):
    """One captured user action. Logs are append-only and time-ordered."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str  # click, input, submit, navigation
    timestamp: int = 0  # epoch milliseconds
    url: str = ""
    selector: Optional[SelectorStrategy] = None
    element: Optional[ElementSnapshot] = None
    value: Optional[str] = None
    from_url: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None

    @property
    def is_hidden_value(self) -> bool:
        return self.value == HIDDEN_VALUE


def load_action_log(path: str | Path) -> list[RecordedAction]:
    """Load a saved action log, skipping entries of unknown action types."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Action log not found: {path}")
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"Action log must be a JSON array: {path}")

    actions: list[RecordedAction] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or entry.get("type") not in ACTION_TYPES:
            logger.debug("Skipping unrecognized action #%d in %s", i, path)
            continue
        try:
            actions.append(RecordedAction.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping malformed action #%d in %s: %s", i, path, e)
    logger.debug("Loaded %d actions from %s", len(actions), path)
    return actions


def save_action_log(actions: list[RecordedAction], path: str | Path) -> None:
    """Write actions as an ordered JSON array."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(
            [a.model_dump(by_alias=True, exclude_none=True) for a in actions],
            f,
            indent=2,
        )
