"""Helpers for reading text out of LangChain messages and chunks."""

from __future__ import annotations

from typing import Any


def _stringify_content(content: Any) -> str:
    """Flatten message content (string or list of parts) to plain text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content)


def chunk_text(chunk: Any) -> str:
    """Text carried by one streamed chunk (message chunk or bare string)."""
    if isinstance(chunk, str):
        return chunk
    return _stringify_content(getattr(chunk, "content", None))
