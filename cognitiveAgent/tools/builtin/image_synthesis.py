"""Image-synthesis tool producing an abstract scoring descriptor."""

from __future__ import annotations

import logging
import uuid

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from cognitiveAgent.agents import ModelResolver, invoke_structured
from cognitiveAgent.graph.prompts import IMAGE_SYNTHESIS_PROMPT
from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.session.schema import ImageDescriptor
from cognitiveAgent.utils.error_handler import ModelInvocationError, handle_model_error

from ..registry import ToolContext, ToolOutcome

LOGGER = logging.getLogger("cognitiveAgent.tools.image_synthesis")


class ImageScores(BaseModel):
    composition: float = Field(ge=0.0, le=1.0, description="Balance of the layout")
    palette: float = Field(ge=0.0, le=1.0, description="Richness of colour")
    detail: float = Field(ge=0.0, le=1.0, description="Density of fine structure")
    coherence: float = Field(ge=0.0, le=1.0, description="How clearly the concept is conveyed")


def build_image_synthesis_handler(*, model_registry: ModelRegistry, model_resolver: ModelResolver):
    async def image_synthesis_handler(ctx: ToolContext) -> ToolOutcome:
        step = ctx.step
        concept = step.params.concept
        try:
            scores = await invoke_structured(
                model_registry=model_registry,
                model_resolver=model_resolver,
                phase="image",
                schema=ImageScores,
                messages=[SystemMessage(content=IMAGE_SYNTHESIS_PROMPT), HumanMessage(content=concept)],
            )
        except Exception as e:
            LOGGER.error(f"Image synthesis failed for {concept!r}: {e}")
            raise ModelInvocationError(str(e), user_message=handle_model_error(e)) from e

        if not isinstance(scores, ImageScores):
            scores = ImageScores.model_validate(scores)
        descriptor = ImageDescriptor(id=f"img-{uuid.uuid4().hex[:12]}", concept=concept, **scores.model_dump())
        return ToolOutcome(
            payload=descriptor,
            text=f'Step {step.ordinal} ({step.description}) Result: Generated image descriptor {descriptor.id} for "{concept}"',
        )

    return image_synthesis_handler
