"""Shared typing helpers for model routing."""

from typing import Literal

ModelKey = Literal["base", "reason", "chat"]

Phase = Literal["plan", "modulate", "image", "synthesize"]
