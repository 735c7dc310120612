"""Utility to extract JSON from LLM responses."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")


@dataclass(frozen=True)
class ParsedJson:
    """The model output parsed cleanly."""

    value: Any


@dataclass(frozen=True)
class ParseFailure:
    """The model output could not be parsed; the raw text is kept for logs."""

    raw_text: str
    reason: str


ParseOutcome = Union[ParsedJson, ParseFailure]


def parse_model_json(text: str | None) -> ParseOutcome:
    """Parse an untrusted model response into a tagged outcome. Never raises."""
    if not text or not text.strip():
        return ParseFailure(raw_text=text or "", reason="empty response")
    try:
        return ParsedJson(extract_json(text))
    except ValueError as exc:
        return ParseFailure(raw_text=text, reason=str(exc))


def extract_json(text: str) -> dict | list:
    """Extract JSON from LLM response, handling ```json blocks.

    Tries in order:
    1. Direct json.loads on the full text
    2. Strip a fenced code block wrapper and parse its body
    3. Find first '{' to last '}' and parse
    4. Find first '[' to last ']' and parse (JSON array)
    """
    text = text.strip()

    # 1) Direct parse
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    # 2) Fenced code block, anywhere in the text
    stripped = strip_code_fences(text)
    if stripped != text:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass
        result = _extract_braces(stripped)
        if result is not None:
            return result

    # 3) First '{' to last '}' on original
    result = _extract_braces(text)
    if result is not None:
        return result

    # 4) First '[' to last ']' (JSON array)
    result = _extract_brackets(text)
    if result is not None:
        return result

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced code block, or the text unchanged."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()

    # Unterminated fence (response cut off after the opening marker)
    lines = text.split("\n")
    if lines and lines[0].strip().startswith("```"):
        return "\n".join(lines[1:]).strip()
    return text


def _extract_braces(text: str) -> dict | None:
    """Try to extract JSON object from first '{' to last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    return None


def _extract_brackets(text: str) -> list | None:
    """Try to extract JSON array from first '[' to last ']'."""
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    return None


def string_list(value: Any) -> list[str]:
    """Coerce an untrusted JSON value to a list of non-empty strings.

    Anything that is not a list yields ``[]``; non-string items are dropped.
    """
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def aligned_list(value: Any) -> list[str]:
    """Coerce an untrusted JSON value to a list of strings, keeping every position.

    For index-aligned lists such as bullets: ``None`` becomes ``""`` and
    other non-strings are converted with ``str``.
    """
    if not isinstance(value, list):
        return []
    return [
        item.strip() if isinstance(item, str) else "" if item is None else str(item)
        for item in value
    ]
