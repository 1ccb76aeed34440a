"""Typed records for one cognitive session.

Everything the notification bus publishes is built from these models, so a
snapshot is simply ``SessionSnapshot.model_dump(mode="json")``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from cognitiveAgent.utils.error_handler import InvalidTransitionError


class ProcessState(str, Enum):
    IDLE = "Idle"
    RECEIVING = "Receiving"
    PLANNING = "Planning"
    AWAITING_EXECUTION = "AwaitingExecution"
    EXECUTING = "Executing"
    SYNTHESIZING = "Synthesizing"
    DONE = "Done"
    CANCELLED = "Cancelled"
    ERROR = "Error"


TERMINAL_STATES: FrozenSet[ProcessState] = frozenset(
    {ProcessState.DONE, ProcessState.CANCELLED, ProcessState.ERROR}
)

# States from which a new submission is accepted.
LAUNCH_STATES: FrozenSet[ProcessState] = TERMINAL_STATES | {ProcessState.IDLE}

PROCESS_TRANSITIONS: Dict[ProcessState, FrozenSet[ProcessState]] = {
    ProcessState.IDLE: frozenset({ProcessState.RECEIVING, ProcessState.IDLE}),
    ProcessState.RECEIVING: frozenset({ProcessState.PLANNING, ProcessState.CANCELLED, ProcessState.ERROR}),
    ProcessState.PLANNING: frozenset(
        {ProcessState.AWAITING_EXECUTION, ProcessState.CANCELLED, ProcessState.ERROR}
    ),
    ProcessState.AWAITING_EXECUTION: frozenset(
        {ProcessState.EXECUTING, ProcessState.PLANNING, ProcessState.CANCELLED}
    ),
    ProcessState.EXECUTING: frozenset(
        {ProcessState.SYNTHESIZING, ProcessState.CANCELLED, ProcessState.ERROR}
    ),
    ProcessState.SYNTHESIZING: frozenset({ProcessState.DONE, ProcessState.CANCELLED, ProcessState.ERROR}),
    ProcessState.DONE: frozenset({ProcessState.RECEIVING, ProcessState.IDLE}),
    ProcessState.CANCELLED: frozenset({ProcessState.RECEIVING, ProcessState.IDLE}),
    ProcessState.ERROR: frozenset({ProcessState.RECEIVING, ProcessState.IDLE}),
}


class TurnState(str, Enum):
    """Per-turn sub-state carried by model turns."""

    PLANNING = "planning"
    AWAITING_EXECUTION = "awaiting_execution"
    EXECUTING = "executing"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    ERROR = "error"


class StepStatus(str, Enum):
    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETE = "complete"
    ERROR = "error"


STEP_TRANSITIONS: Dict[StepStatus, FrozenSet[StepStatus]] = {
    StepStatus.PENDING: frozenset({StepStatus.EXECUTING}),
    StepStatus.EXECUTING: frozenset({StepStatus.COMPLETE, StepStatus.ERROR}),
    StepStatus.COMPLETE: frozenset(),
    StepStatus.ERROR: frozenset(),
}


class ToolKind(str, Enum):
    WEB_SEARCH = "web_search"
    SANDBOXED_CODE = "sandboxed_code"
    CONTEXT_MODULATION = "context_modulation"
    IMAGE_SYNTHESIS = "image_synthesis"
    IMAGE_ANALYSIS = "image_analysis"
    FINAL_SYNTHESIS = "final_synthesis"


# ========== Tool parameters (one variant per tool kind) ==========

class WebSearchParams(BaseModel):
    kind: Literal["web_search"] = "web_search"
    query: str = Field(min_length=1)


class SandboxedCodeParams(BaseModel):
    kind: Literal["sandboxed_code"] = "sandboxed_code"
    code: str = Field(min_length=1, description="Body of a Python function; its return value is the result")


class ContextModulationParams(BaseModel):
    kind: Literal["context_modulation"] = "context_modulation"
    concept: str = Field(min_length=1)


class ImageSynthesisParams(BaseModel):
    kind: Literal["image_synthesis"] = "image_synthesis"
    concept: str = Field(min_length=1)


class ImageAnalysisParams(BaseModel):
    kind: Literal["image_analysis"] = "image_analysis"
    input_ref: Optional[int] = Field(
        default=None, ge=1, description="Ordinal of an earlier image_synthesis step"
    )
    prompt: Optional[str] = None


class FinalSynthesisParams(BaseModel):
    kind: Literal["final_synthesis"] = "final_synthesis"


ToolParams = Annotated[
    Union[
        WebSearchParams,
        SandboxedCodeParams,
        ContextModulationParams,
        ImageSynthesisParams,
        ImageAnalysisParams,
        FinalSynthesisParams,
    ],
    Field(discriminator="kind"),
]


# ========== Results ==========

class Citation(BaseModel):
    title: str = ""
    uri: str


class ImageDescriptor(BaseModel):
    """Abstract scoring descriptor standing in for a generated image."""

    id: str
    concept: str
    composition: float = Field(ge=0.0, le=1.0)
    palette: float = Field(ge=0.0, le=1.0)
    detail: float = Field(ge=0.0, le=1.0)
    coherence: float = Field(ge=0.0, le=1.0)


class CognitiveContextVector(BaseModel):
    """Transient affective state that shapes the tone of the synthesized answer."""

    valence: float = Field(ge=-1.0, le=1.0, description="Negative (-1) to positive (1) emotional tone")
    arousal: float = Field(ge=0.0, le=1.0, description="Calm (0) to energetic (1)")
    dominance: float = Field(ge=0.0, le=1.0, description="Yielding (0) to assertive (1)")
    novelty: float = Field(ge=0.0, le=1.0, description="Familiar (0) to surprising (1) framing")
    complexity: float = Field(ge=0.0, le=1.0, description="Plain (0) to intricate (1) language")
    temporality: float = Field(ge=-1.0, le=1.0, description="Past-oriented (-1) to future-oriented (1)")


class PlanStep(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    ordinal: int = Field(ge=1)
    description: str = ""
    params: ToolParams
    status: StepStatus = StepStatus.PENDING
    result: Optional[Union[ImageDescriptor, str]] = None
    citations: List[Citation] = Field(default_factory=list)

    @property
    def tool(self) -> ToolKind:
        return ToolKind(self.params.kind)

    def advance(self, status: StepStatus) -> None:
        """Move the status forward; statuses never revert."""
        if status not in STEP_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Step {self.ordinal}: cannot move from {self.status.value} to {status.value}"
            )
        self.status = status


class Attachment(BaseModel):
    """Image supplied alongside a user query (base64 payload)."""

    mime_type: str
    data: str
    name: Optional[str] = None

    @property
    def approx_bytes(self) -> int:
        return len(self.data) * 3 // 4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationTurn(BaseModel):
    id: str
    role: Literal["user", "model"]
    text: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    attachment: Optional[Attachment] = None

    # model turns only
    plan: Optional[List[PlanStep]] = None
    state: Optional[TurnState] = None
    current_step: Optional[int] = None
    finalized: bool = False
    context_snapshot: Optional[CognitiveContextVector] = None
    citations: Optional[List[Citation]] = None
    archived_at: Optional[datetime] = None
    user_query: Optional[str] = None
    user_turn_id: Optional[str] = None


class SessionSnapshot(BaseModel):
    state: ProcessState
    turns: List[ConversationTurn]
    context_vector: Optional[CognitiveContextVector] = None
