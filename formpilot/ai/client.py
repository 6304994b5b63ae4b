"""Claude API client for screenshot questions asked by the vision analyzer."""

from __future__ import annotations

import json
import logging
import os
import re
import time
from pathlib import Path
from typing import Any, Optional

import anthropic

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5"

EXCHANGE_LOG_NAME = "vision-exchanges.jsonl"

_FENCE = re.compile(r"```(?:json)?\s*\n(.*?)\n```", re.DOTALL)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def image_block(image_base64: str, media_type: str = "image/png") -> dict:
    """Message content block carrying one base64-encoded image."""
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": media_type, "data": image_base64},
    }


def extract_json_object(text: str) -> dict[str, Any]:
    """Pull the first JSON object out of a model answer.

    Tolerates markdown fences, prose around the object and trailing commas.
    Raises ValueError when no object can be decoded.
    """
    fenced = _FENCE.search(text)
    body = _TRAILING_COMMA.sub(r"\1", fenced.group(1) if fenced else text)
    start = body.find("{")
    if start == -1:
        raise ValueError("AI returned invalid JSON: no object found")
    try:
        value, _ = json.JSONDecoder(strict=False).raw_decode(body, start)
    except json.JSONDecodeError as e:
        raise ValueError(f"AI returned invalid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ValueError("AI returned invalid JSON: expected an object")
    return value


class AIClient:
    """Sends one screenshot plus a question to Claude and returns the answer.

    Every exchange (prompts and answer, never the image) is appended to a
    JSON-lines log under ``debug_dir`` when one is set.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1000,
        debug_dir: Optional[str | Path] = None,
    ):
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise EnvironmentError(
                "ANTHROPIC_API_KEY environment variable is not set. "
                "Export it or turn vision analysis off."
            )
        self.client = anthropic.Anthropic(api_key=api_key, timeout=120.0)
        self.model = model
        self.max_tokens = max_tokens
        self.debug_dir = Path(debug_dir) if debug_dir else None
        self.call_count = 0

    def ask_image(
        self,
        system_prompt: str,
        question: str,
        image_base64: str,
        media_type: str = "image/png",
        max_tokens: Optional[int] = None,
    ) -> str:
        """Return Claude's text answer about the image. API errors propagate."""
        self.call_count += 1
        tokens = max_tokens or self.max_tokens
        logger.debug("Vision request #%d (model=%s, max_tokens=%d)", self.call_count, self.model, tokens)

        started = time.monotonic()
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=tokens,
                system=system_prompt,
                messages=[{
                    "role": "user",
                    "content": [image_block(image_base64, media_type), {"type": "text", "text": question}],
                }],
            )
        except anthropic.APIError as e:
            logger.error("Claude API error: %s", e)
            self._log_exchange(system_prompt, question, error=str(e))
            raise

        answer = response.content[0].text
        elapsed = time.monotonic() - started
        logger.info("Vision answer in %.1fs (%d chars)", elapsed, len(answer))
        if response.stop_reason == "max_tokens":
            logger.warning("Vision answer truncated at %d tokens", tokens)
        self._log_exchange(system_prompt, question, answer=answer, elapsed=elapsed)
        return answer

    def ask_image_json(
        self,
        system_prompt: str,
        question: str,
        image_base64: str,
        media_type: str = "image/png",
        max_tokens: Optional[int] = None,
    ) -> dict[str, Any]:
        return extract_json_object(self.ask_image(system_prompt, question, image_base64, media_type, max_tokens))

    def _log_exchange(
        self,
        system_prompt: str,
        question: str,
        answer: str = "",
        error: Optional[str] = None,
        elapsed: float = 0.0,
    ) -> None:
        if self.debug_dir is None:
            return
        entry = {
            "call": self.call_count,
            "model": self.model,
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S"),
            "elapsed_s": round(elapsed, 2),
            "system": system_prompt,
            "question": question,
            "answer": answer,
            "error": error,
        }
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            with open(self.debug_dir / EXCHANGE_LOG_NAME, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.debug("Could not write vision exchange log: %s", e)
