"""Shared URL utilities: the landing-page heuristic."""

from __future__ import annotations

from typing import Sequence

DEFAULT_LANDING_URL_TOKENS = ("home", "dashboard", "main")
DEFAULT_FLOW_URL_TOKENS = ("login", "agreement", "flow")


def is_landing_url(
    url: str,
    landing_tokens: Sequence[str] = DEFAULT_LANDING_URL_TOKENS,
    flow_tokens: Sequence[str] = DEFAULT_FLOW_URL_TOKENS,
) -> bool:
    """A URL looks like a landing page if it names one, or is not part of a login flow."""
    if not url:
        return False
    url_lower = url.lower()
    if any(token in url_lower for token in landing_tokens):
        return True
    return not any(token in url_lower for token in flow_tokens)


def is_landing_page(
    url: str,
    page_text: str,
    landing_tokens: Sequence[str] = DEFAULT_LANDING_URL_TOKENS,
    flow_tokens: Sequence[str] = DEFAULT_FLOW_URL_TOKENS,
    text_indicators: Sequence[str] = (),
) -> bool:
    """Combine the URL heuristic with landing indicators found in the page text."""
    if is_landing_url(url, landing_tokens, flow_tokens):
        return True
    text_lower = page_text.lower()
    return any(indicator in text_lower for indicator in text_indicators)
