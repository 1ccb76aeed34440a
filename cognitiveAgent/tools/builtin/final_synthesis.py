"""Final-synthesis steps are completed by the synthesize node after the loop."""

from __future__ import annotations

from ..registry import ToolContext, ToolOutcome


def final_synthesis_handler(ctx: ToolContext) -> ToolOutcome:
    return ToolOutcome()
