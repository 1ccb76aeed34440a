"""Tool dispatch table: one handler per tool kind."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

from cognitiveAgent.session.cancellation import CancellationToken
from cognitiveAgent.session.schema import (
    Attachment,
    Citation,
    CognitiveContextVector,
    ImageDescriptor,
    PlanStep,
    ToolKind,
)
from cognitiveAgent.utils.logging_utils import log_tool_call, log_tool_result

LOGGER = logging.getLogger("cognitiveAgent.tools")


@dataclass
class ToolContext:
    """Inputs a handler may read; handlers never write session state directly."""

    step: PlanStep
    plan: Sequence[PlanStep]
    token: CancellationToken
    attachment: Optional[Attachment] = None
    context_vector: Optional[CognitiveContextVector] = None


@dataclass
class ToolOutcome:
    """What a handler produced for its step.

    ``text`` is the step's line in the result context handed to synthesis
    (empty for none). ``context_vector``, when set, replaces the session vector.
    """

    payload: Union[str, ImageDescriptor, None] = None
    text: str = ""
    citations: List[Citation] = field(default_factory=list)
    context_vector: Optional[CognitiveContextVector] = None


Handler = Callable[[ToolContext], Union[ToolOutcome, Awaitable[ToolOutcome]]]


class ToolDispatcher:
    """Routes each step to the handler registered for its tool kind.

    Construction fails unless every ``ToolKind`` has a handler. Coroutine
    handlers are awaited through the cancellation token; plain functions run
    inline and never suspend.
    """

    def __init__(self, handlers: Mapping[ToolKind, Handler]) -> None:
        missing = [kind.value for kind in ToolKind if kind not in handlers]
        if missing:
            raise ValueError(f"No handler registered for tool kind(s): {', '.join(missing)}")
        self._handlers: Dict[ToolKind, Handler] = dict(handlers)

    async def dispatch(self, ctx: ToolContext) -> ToolOutcome:
        kind = ctx.step.tool
        handler = self._handlers[kind]
        log_tool_call(LOGGER, kind.value, ctx.step.params.model_dump(exclude={"kind"}))
        try:
            if inspect.iscoroutinefunction(handler):
                outcome = await ctx.token.guard(handler(ctx), label=f"step {ctx.step.ordinal} ({kind.value})")
            else:
                outcome = handler(ctx)
        except Exception as e:
            log_tool_result(LOGGER, kind.value, f"{type(e).__name__}: {e}", success=False)
            raise
        log_tool_result(LOGGER, kind.value, outcome.payload)
        return outcome

