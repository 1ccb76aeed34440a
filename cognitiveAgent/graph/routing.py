"""Conditional routing helpers for the execution graph."""

from __future__ import annotations

import logging
from typing import Literal

from cognitiveAgent.utils.logging_utils import log_routing_decision

from .state import ExecutionState

LOGGER = logging.getLogger("cognitiveAgent.routing")


def step_route(state: ExecutionState) -> Literal["step_executor", "synthesize", "halt"]:
    """Route after a step: next step, synthesis, or stop on cancellation."""
    if state.get("halted"):
        decision, reason = "halt", "Cancellation observed"
    elif state.get("step_idx", 0) >= state.get("total_steps", 0):
        decision, reason = "synthesize", "All steps processed"
    else:
        decision, reason = "step_executor", f"Next step index {state.get('step_idx', 0)}"
    log_routing_decision(LOGGER, "step_executor", decision, reason)
    return decision
