"""Helpers for the newline-delimited ingredient and instruction blocks."""
from __future__ import annotations

import re
from typing import Iterable

_WHITESPACE = re.compile(r"\s+")


def join_lines(value: str | Iterable[str] | None) -> str:
    """Normalize a text block or a list of lines into one newline-joined string."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if not isinstance(value, (list, tuple)):
        return str(value)
    return "\n".join(str(item) for item in value)


def split_lines(text: str | None) -> list[str]:
    """Split a text block into trimmed, non-empty lines."""

    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def strip_code_fence(content: str) -> str:
    """Remove a surrounding markdown code fence such as ```json ... ```."""

    content = content.strip()
    content = re.sub(r"^```(?:json)?\s*\n?", "", content)
    content = re.sub(r"\n?```$", "", content)
    return content.strip()
