"""Operator review of an unexecuted plan.

The gate is open while a model turn carries a plan that is awaiting execution
and has not been finalized. Every mutation leaves ordinals contiguous (1..N)
and the plan non-empty.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from .schema import (
    ConversationTurn,
    FinalSynthesisParams,
    PlanStep,
    StepStatus,
    ToolKind,
    TurnState,
)

LOGGER = logging.getLogger("cognitiveAgent.review")

DEFAULT_STEP_DESCRIPTION = "New step (edit to configure)"


def describe_step(step: PlanStep) -> str:
    """Human-readable description derived from a step's tool and parameters."""
    params = step.params
    kind = step.tool
    if kind is ToolKind.WEB_SEARCH:
        return f'Search the web for "{params.query}"'
    if kind is ToolKind.SANDBOXED_CODE:
        first_line = params.code.strip().splitlines()[0] if params.code.strip() else ""
        return f"Run sandboxed code: {first_line[:60]}"
    if kind is ToolKind.CONTEXT_MODULATION:
        return f'Adopt the cognitive context "{params.concept}"'
    if kind is ToolKind.IMAGE_SYNTHESIS:
        return f'Synthesize an image of "{params.concept}"'
    if kind is ToolKind.IMAGE_ANALYSIS:
        if params.input_ref is None:
            return "Analyze the attached image"
        return f"Analyze the image produced by step {params.input_ref}"
    return "Synthesize the final answer"


def renumber(plan: List[PlanStep]) -> None:
    for position, step in enumerate(plan, start=1):
        step.ordinal = position


def default_step(ordinal: int) -> PlanStep:
    return PlanStep(
        ordinal=ordinal,
        description=DEFAULT_STEP_DESCRIPTION,
        params=FinalSynthesisParams(),
    )


class PlanReviewGate:
    """Edit operations over one model turn's pending plan."""

    def __init__(self, turn: ConversationTurn, *, max_steps: int) -> None:
        self.turn = turn
        self.max_steps = max_steps

    @property
    def is_open(self) -> bool:
        return (
            bool(self.turn.plan)
            and not self.turn.finalized
            and self.turn.state == TurnState.AWAITING_EXECUTION
        )

    @property
    def plan(self) -> List[PlanStep]:
        if not self.is_open:
            raise RuntimeError(f"Plan of turn {self.turn.id} is not open for review")
        return self.turn.plan

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.plan):
            raise IndexError(f"Step index {index} out of range for a plan of {len(self.plan)} steps")

    def replace(self, index: int, new_step: Union[PlanStep, Dict[str, Any]]) -> PlanStep:
        """Replace the step at ``index`` after validating its tool-specific fields.

        The stored step is reset to pending, keeps the position's ordinal and
        gets a regenerated description.
        """
        self._check_index(index)
        data = new_step.model_dump() if isinstance(new_step, PlanStep) else dict(new_step)
        data.update(ordinal=index + 1, status=StepStatus.PENDING, result=None, citations=[])
        step = PlanStep.model_validate(data)
        step.description = describe_step(step)
        self.plan[index] = step
        LOGGER.info(f"Step {index + 1} replaced: [{step.tool.value}] {step.description}")
        return step

    def move(self, from_index: int, to_index: int) -> bool:
        """Swap two steps, then renumber."""
        self._check_index(from_index)
        self._check_index(to_index)
        plan = self.plan
        plan[from_index], plan[to_index] = plan[to_index], plan[from_index]
        renumber(plan)
        LOGGER.info(f"Steps at positions {from_index + 1} and {to_index + 1} swapped")
        return True

    def append_default(self) -> Optional[PlanStep]:
        plan = self.plan
        if len(plan) >= self.max_steps:
            LOGGER.warning(f"Plan already has the maximum of {self.max_steps} steps")
            return None
        step = default_step(len(plan) + 1)
        plan.append(step)
        return step

    def remove(self, index: int) -> bool:
        """Delete a step; a plan's sole step is never removed."""
        self._check_index(index)
        plan = self.plan
        if len(plan) <= 1:
            LOGGER.info("Refusing to delete the only remaining step")
            return False
        del plan[index]
        renumber(plan)
        return True

    def commit(self) -> List[PlanStep]:
        """Finalize the plan; no further edits are accepted."""
        plan = self.plan
        self.turn.finalized = True
        return plan
