"""Wire schema for planner output and its conversion into plan steps."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from cognitiveAgent.session.schema import PlanStep, ToolKind, ToolParams
from cognitiveAgent.utils.error_handler import PlanParseError

ToolName = Literal[
    "web_search",
    "sandboxed_code",
    "context_modulation",
    "image_synthesis",
    "image_analysis",
    "final_synthesis",
]

# Planner fields consumed by each tool kind, mapped to parameter names.
TOOL_FIELDS: Dict[ToolKind, Dict[str, str]] = {
    ToolKind.WEB_SEARCH: {"query": "query"},
    ToolKind.SANDBOXED_CODE: {"code": "code"},
    ToolKind.CONTEXT_MODULATION: {"concept": "concept"},
    ToolKind.IMAGE_SYNTHESIS: {"concept": "concept"},
    ToolKind.IMAGE_ANALYSIS: {"input_ref": "input_ref", "query": "prompt"},
    ToolKind.FINAL_SYNTHESIS: {},
}

_PARAMS_ADAPTER = TypeAdapter(ToolParams)


class StepModel(BaseModel):
    """Single planned step as returned by the planner model."""

    step: int = Field(ge=1, description="1-based position in the plan")
    description: str = Field(min_length=1)
    tool: ToolName
    query: Optional[str] = Field(default=None, description="web_search query, or image_analysis focus")
    code: Optional[str] = Field(default=None, description="sandboxed_code function body")
    concept: Optional[str] = Field(default=None, description="context_modulation / image_synthesis concept")
    input_ref: Optional[int] = Field(default=None, description="image_analysis: earlier image_synthesis step")


class PlanModel(BaseModel):
    """Structured plan with ordered steps."""

    steps: List[StepModel]


def default_plan() -> PlanModel:
    """Return the fallback plan used when the planner proposes no steps."""

    return PlanModel(
        steps=[
            StepModel(step=1, description="Answer the request directly.", tool="final_synthesis"),
        ]
    )


def to_plan_steps(plan: PlanModel, *, max_steps: int) -> List[PlanStep]:
    """Validate tool-specific fields and return pending steps numbered 1..N.

    Raises:
        PlanParseError: too many steps, or a step lacks a field its tool needs.
    """
    if not plan.steps:
        plan = default_plan()
    if len(plan.steps) > max_steps:
        raise PlanParseError(
            f"Plan has {len(plan.steps)} steps, more than the allowed {max_steps}",
            user_message=f"The proposed plan exceeded {max_steps} steps",
        )

    steps: List[PlanStep] = []
    for position, item in enumerate(sorted(plan.steps, key=lambda s: s.step), start=1):
        kind = ToolKind(item.tool)
        data: Dict[str, Any] = {"kind": kind.value}
        for wire_name, param_name in TOOL_FIELDS[kind].items():
            value = getattr(item, wire_name)
            if value is not None:
                data[param_name] = value
        try:
            params = _PARAMS_ADAPTER.validate_python(data)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][-1]) for err in e.errors())
            raise PlanParseError(
                f"Step {item.step} ({kind.value}) has invalid or missing fields: {fields}",
                user_message=f"Step {item.step} of the proposed plan is malformed",
            ) from e
        steps.append(PlanStep(ordinal=position, description=item.description, params=params))
    return steps


def plan_from_steps(steps: List[PlanStep]) -> PlanModel:
    """Inverse of :func:`to_plan_steps`, used when asking for a plan revision."""
    items = []
    for step in steps:
        fields = {wire: getattr(step.params, param) for wire, param in TOOL_FIELDS[step.tool].items()}
        items.append(StepModel(step=step.ordinal, description=step.description, tool=step.tool.value, **fields))
    return PlanModel(steps=items)


__all__ = ["StepModel", "PlanModel", "default_plan", "to_plan_steps", "plan_from_steps"]
