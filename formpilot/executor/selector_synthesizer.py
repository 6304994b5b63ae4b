"""Selector synthesis: ranked, structure-free locators for a described element.

Earlier strategies are globally unique and stable across reloads; later ones
are heuristic and may match several elements. Only the final tag-ordinal
fallback depends on document position.
"""

from __future__ import annotations

import re
from typing import Union

from formpilot.models.field import FieldDescriptor, SelectorStrategy
from formpilot.models.recording import ElementSnapshot

ElementLike = Union[FieldDescriptor, ElementSnapshot]

# Characters that break a bare ``#id`` selector in practice
_ID_SPECIAL_CHARS = re.compile(r"[:\[\](){}]")
_CSS_IDENTIFIER = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")

MAX_TEXT_LENGTH = 50

# Class prefixes generated by frameworks and CSS-in-JS tooling
FRAMEWORK_CLASS_PREFIXES = ("ng-", "_", "css-", "sc-", "jsx-", "svelte-", "ember")


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def id_selector(element_id: str) -> str:
    """Render ``#id`` when the id is a plain CSS identifier, else attribute equality."""
    if _ID_SPECIAL_CHARS.search(element_id) or not _CSS_IDENTIFIER.match(element_id):
        return f'[id="{_quote(element_id)}"]'
    return f"#{element_id}"


def _first_stable_class(class_name: str) -> str | None:
    for cls in class_name.split():
        if cls.startswith(FRAMEWORK_CLASS_PREFIXES):
            continue
        if _CSS_IDENTIFIER.match(cls):
            return cls
    return None


def rank_selectors(element: ElementLike) -> list[SelectorStrategy]:
    """Return every applicable strategy for ``element``, most robust first."""
    strategies: list[SelectorStrategy] = []

    def _add(kind: str, value: str, selector: str) -> None:
        strategies.append(SelectorStrategy(kind=kind, value=value, selector=selector))

    element_id = element.id or ""
    name = element.name or ""
    placeholder = element.placeholder or ""
    aria_label = element.aria_label or ""
    tag = element.tag or "input"
    input_type = element.input_type
    text = (element.text or "").strip()

    if element_id:
        _add("id", element_id, id_selector(element_id))
    if name:
        _add("name", name, f'[name="{_quote(name)}"]')
    if placeholder:
        _add("placeholder", placeholder, f'[placeholder="{_quote(placeholder)}"]')
    if aria_label:
        _add("aria-label", aria_label, f'[aria-label="{_quote(aria_label)}"]')
    if placeholder and input_type and tag == "input":
        _add(
            "typeAndPlaceholder",
            f"{input_type}|{placeholder}",
            f'input[type="{_quote(input_type)}"][placeholder="{_quote(placeholder)}"]',
        )
    if text and len(text) < MAX_TEXT_LENGTH:
        _add("text", text, f'text="{_quote(text)}"')
    stable_class = _first_stable_class(element.class_name or "")
    if stable_class:
        _add("class", stable_class, f".{stable_class}")
    if element.role:
        _add("role", element.role, f'[role="{_quote(element.role)}"]')

    if element.tag_ordinal:
        _add("tag-index", f"{tag}:{element.tag_ordinal}", f":nth-match({tag}:visible, {element.tag_ordinal})")
    else:
        _add("tag-index", tag, tag)
    return strategies


def selector_for(element: ElementLike) -> SelectorStrategy:
    """Return the single most robust strategy for ``element``."""
    return rank_selectors(element)[0]
