"""Interfaces for agent factory dependencies."""

from __future__ import annotations

from typing import Protocol


class ModelResolver(Protocol):
    """Callable that returns a LangChain-compatible chat model."""

    def __call__(self, model_id: str):
        ...
