"""Planner: one structured-generation request per query or revision."""

from __future__ import annotations

import logging
from typing import List

from langchain_core.exceptions import OutputParserException
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from cognitiveAgent.agents import ModelResolver, invoke_structured
from cognitiveAgent.graph._plan import PlanModel, to_plan_steps
from cognitiveAgent.graph.prompts import (
    PLAN_REVISION_INSTRUCTIONS,
    PLANNER_SYSTEM_PROMPT,
    build_planning_prompt,
    build_revision_prompt,
)
from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.session.cancellation import CancellationToken
from cognitiveAgent.session.schema import PlanStep
from cognitiveAgent.utils.error_handler import (
    ModelInvocationError,
    OperationCancelled,
    PlanParseError,
    handle_model_error,
)
from cognitiveAgent.utils.logging_utils import log_prompt

LOGGER = logging.getLogger("cognitiveAgent.planner")


class Planner:
    def __init__(
        self,
        *,
        model_registry: ModelRegistry,
        model_resolver: ModelResolver,
        max_steps: int,
        log_prompt_max_length: int = 500,
    ) -> None:
        self.model_registry = model_registry
        self.model_resolver = model_resolver
        self.max_steps = max_steps
        self.log_prompt_max_length = log_prompt_max_length

    async def plan(self, query: str, *, token: CancellationToken, has_attachment: bool = False) -> List[PlanStep]:
        """Return pending steps for ``query``.

        Raises:
            OperationCancelled: the token was raised while the request was outstanding.
            PlanParseError: the response did not fit the plan schema.
            ModelInvocationError: the backend call failed.
        """
        return await self._request(build_planning_prompt(query, has_attachment=has_attachment), token)

    async def revise(self, query: str, plan: List[PlanStep], mode: str, *, token: CancellationToken) -> List[PlanStep]:
        """Ask for an expanded, optimized or alternative version of ``plan``."""
        if mode not in PLAN_REVISION_INSTRUCTIONS:
            raise ValueError(f"Unknown revision mode: {mode}")
        return await self._request(build_revision_prompt(query, plan, mode), token)

    async def _request(self, prompt: str, token: CancellationToken) -> List[PlanStep]:
        log_prompt(LOGGER, "planner", prompt, max_length=self.log_prompt_max_length)
        messages = [SystemMessage(content=PLANNER_SYSTEM_PROMPT), HumanMessage(content=prompt)]

        try:
            raw = await token.guard(
                invoke_structured(
                    model_registry=self.model_registry,
                    model_resolver=self.model_resolver,
                    phase="plan",
                    schema=PlanModel,
                    messages=messages,
                ),
                label="plan request",
            )
        except (ValidationError, OutputParserException) as e:
            raise PlanParseError(str(e), user_message="The planner returned a malformed plan") from e
        except (OperationCancelled, PlanParseError, ModelInvocationError):
            raise
        except Exception as e:
            LOGGER.error(f"Plan request failed: {e}")
            raise ModelInvocationError(str(e), user_message=handle_model_error(e)) from e

        if raw is None:
            raise PlanParseError("The planner returned no plan")
        if not isinstance(raw, PlanModel):
            try:
                raw = PlanModel.model_validate(raw)
            except ValidationError as e:
                raise PlanParseError(str(e), user_message="The planner returned a malformed plan") from e

        steps = to_plan_steps(raw, max_steps=self.max_steps)
        LOGGER.info(f"Planner produced {len(steps)} step(s)")
        return steps
