"""Context-modulation tool: sets the session's cognitive context vector."""

from __future__ import annotations

import logging

from langchain_core.messages import HumanMessage, SystemMessage

from cognitiveAgent.agents import ModelResolver, invoke_structured
from cognitiveAgent.graph.prompts import CONTEXT_MODULATION_PROMPT
from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.session.schema import CognitiveContextVector
from cognitiveAgent.utils.error_handler import ModelInvocationError, handle_model_error

from ..registry import ToolContext, ToolOutcome

LOGGER = logging.getLogger("cognitiveAgent.tools.context_modulation")


def build_context_modulation_handler(*, model_registry: ModelRegistry, model_resolver: ModelResolver):
    async def context_modulation_handler(ctx: ToolContext) -> ToolOutcome:
        step = ctx.step
        concept = step.params.concept
        try:
            vector = await invoke_structured(
                model_registry=model_registry,
                model_resolver=model_resolver,
                phase="modulate",
                schema=CognitiveContextVector,
                messages=[SystemMessage(content=CONTEXT_MODULATION_PROMPT), HumanMessage(content=concept)],
            )
        except Exception as e:
            LOGGER.error(f"Context modulation failed for {concept!r}: {e}")
            raise ModelInvocationError(str(e), user_message=handle_model_error(e)) from e

        if not isinstance(vector, CognitiveContextVector):
            vector = CognitiveContextVector.model_validate(vector)
        LOGGER.info(f"Cognitive context set to {concept!r}: {vector.model_dump()}")
        summary = f'Cognitive context set to "{concept}".'
        return ToolOutcome(
            payload=summary,
            text=f"Step {step.ordinal} ({step.description}) Result: {summary}",
            context_vector=vector,
        )

    return context_modulation_handler
