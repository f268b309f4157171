from __future__ import annotations

import json
import logging
import os
from typing import Any

import anthropic

from leadscrub.providers.base import InferredContact

"""
Decision-maker extraction from website text using the Anthropic API.
"""

__all__ = ["ClaudeContactInferrer", "build_prompt", "parse_contact"]

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-latest"
MAX_TOKENS = 300

PROMPT_TEMPLATE = """You are extracting the key decision-maker contact from a business website.

Existing row data: {context}

Website text:
{text}

Find the most relevant decision-maker. Priority order: Owner > Founder > President > General Manager > Director > Head Pro > Manager.

Respond ONLY with valid JSON (no markdown, no explanation):
{{"first_name": "...", "last_name": "...", "title": "...", "confidence": 0.0-1.0}}

If no contact can be identified, respond with:
{{"confidence": 0}}"""


def build_prompt(text: str, context: dict[str, str]) -> str:
    existing = ", ".join(f"{k}: {v}" for k, v in context.items() if v)
    return PROMPT_TEMPLATE.format(context=existing or "none", text=text)


def parse_contact(response: str) -> InferredContact:
    """Parse the model's JSON answer, tolerating markdown code fences."""
    text = (response or "").strip()
    if "```" in text:
        start = text.find("```json") + 7 if "```json" in text else text.find("```") + 3
        end = text.find("```", start)
        text = text[start:end if end != -1 else None].strip()
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        logger.warning("unparseable contact response: %.80s", response)
        return InferredContact(confidence=0.0)
    if not isinstance(parsed, dict):
        return InferredContact(confidence=0.0)

    try:
        confidence = float(parsed.get("confidence") or 0)
    except (TypeError, ValueError):
        confidence = 0.0
    return InferredContact(
        first_name=_clean(parsed.get("first_name")),
        last_name=_clean(parsed.get("last_name")),
        title=_clean(parsed.get("title")),
        confidence=confidence,
    )


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class ClaudeContactInferrer:
    """Asks Claude for the single most senior decision-maker on a website."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        client: Any = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("ANTHROPIC_API_KEY", "")
        self.model = model
        self._client = client

    def is_available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    def infer(self, text: str, context: dict[str, str]) -> InferredContact:
        if not self.is_available():
            return InferredContact(confidence=0.0, error="Anthropic API key not configured")

        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                temperature=0,
                messages=[{"role": "user", "content": build_prompt(text, context)}],
            )
        except anthropic.AnthropicError as exc:
            logger.error("contact inference call failed: %s", exc)
            return InferredContact(confidence=0.0, error=str(exc))

        blocks = getattr(message, "content", None) or []
        first = blocks[0] if blocks else None
        response = getattr(first, "text", "") if getattr(first, "type", "text") == "text" else ""
        return parse_contact(response)
