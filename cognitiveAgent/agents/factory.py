"""Helpers that run the session's structured and streaming model calls."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, List, Type, TypeVar

from langchain_core.messages import BaseMessage
from pydantic import BaseModel

from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.utils.logging_utils import log_model_selection

from .interfaces import ModelResolver

LOGGER = logging.getLogger("cognitiveAgent.agents")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


async def invoke_structured(
    *,
    model_registry: ModelRegistry,
    model_resolver: ModelResolver,
    phase: str,
    schema: Type[SchemaT],
    messages: List[BaseMessage],
) -> SchemaT:
    """Run one structured-generation request and return the parsed schema instance."""

    spec = model_registry.prefer(phase=phase)
    log_model_selection(LOGGER, phase, spec.model_id, reason=f"structured output: {schema.__name__}")
    model = model_resolver(spec.model_id)
    runnable = model.with_structured_output(schema)
    return await runnable.ainvoke(messages)


async def stream_completion(
    *,
    model_registry: ModelRegistry,
    model_resolver: ModelResolver,
    messages: List[BaseMessage],
    phase: str = "synthesize",
) -> AsyncIterator[Any]:
    """Yield message chunks from a streaming generation request."""

    spec = model_registry.prefer(phase=phase)
    log_model_selection(LOGGER, phase, spec.model_id, reason="streaming completion")
    model = model_resolver(spec.model_id)
    async for chunk in model.astream(messages):
        yield chunk
