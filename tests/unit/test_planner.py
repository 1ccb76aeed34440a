"""Unit tests for plan parsing and the Planner.

Tests cover:
1. Conversion of planner output into pending, renumbered steps
2. Rejection of malformed or oversized plans
3. Backend failure mapping
"""

import asyncio

import pytest

from cognitiveAgent.graph import PlanModel, StepModel
from cognitiveAgent.graph._plan import plan_from_steps, to_plan_steps
from cognitiveAgent.graph.nodes import Planner
from cognitiveAgent.session.cancellation import CancellationToken
from cognitiveAgent.session.schema import StepStatus, ToolKind
from cognitiveAgent.utils.error_handler import ModelInvocationError, OperationCancelled, PlanParseError


def plan(*steps):
    return PlanModel(steps=list(steps))


class TestToPlanSteps:
    def test_steps_are_pending_and_sorted(self):
        steps = to_plan_steps(
            plan(
                StepModel(step=3, description="Answer", tool="final_synthesis"),
                StepModel(step=1, description="Look it up", tool="web_search", query="Eiffel tower height"),
            ),
            max_steps=12,
        )

        assert [s.ordinal for s in steps] == [1, 2]
        assert [s.tool for s in steps] == [ToolKind.WEB_SEARCH, ToolKind.FINAL_SYNTHESIS]
        assert all(s.status is StepStatus.PENDING for s in steps)
        assert steps[0].params.query == "Eiffel tower height"

    def test_empty_plan_falls_back_to_direct_answer(self):
        steps = to_plan_steps(plan(), max_steps=12)
        assert len(steps) == 1
        assert steps[0].tool is ToolKind.FINAL_SYNTHESIS

    def test_missing_tool_field(self):
        with pytest.raises(PlanParseError, match="code"):
            to_plan_steps(plan(StepModel(step=1, description="Compute", tool="sandboxed_code")), max_steps=12)

    def test_too_many_steps(self):
        steps = [StepModel(step=i, description="s", tool="final_synthesis") for i in range(1, 5)]
        with pytest.raises(PlanParseError):
            to_plan_steps(plan(*steps), max_steps=3)

    def test_image_analysis_query_becomes_prompt(self):
        steps = to_plan_steps(
            plan(
                StepModel(step=1, description="Draw", tool="image_synthesis", concept="storm"),
                StepModel(step=2, description="Look", tool="image_analysis", input_ref=1, query="colours"),
            ),
            max_steps=12,
        )
        assert steps[1].params.input_ref == 1
        assert steps[1].params.prompt == "colours"

    def test_plan_from_steps_is_inverse(self):
        original = plan(
            StepModel(step=1, description="Search", tool="web_search", query="q"),
            StepModel(step=2, description="Answer", tool="final_synthesis"),
        )
        rebuilt = plan_from_steps(to_plan_steps(original, max_steps=12))
        assert rebuilt == original


class TestPlanner:
    def _planner(self, model_registry, model_resolver, max_steps=12):
        return Planner(model_registry=model_registry, model_resolver=model_resolver, max_steps=max_steps)

    @pytest.mark.asyncio
    async def test_plan_uses_reasoning_slot(self, backend, model_registry, model_resolver):
        backend.queue(PlanModel, plan(StepModel(step=1, description="Answer", tool="final_synthesis")))
        steps = await self._planner(model_registry, model_resolver).plan("hi", token=CancellationToken())

        assert len(steps) == 1
        schema, messages = backend.structured_calls[0]
        assert schema is PlanModel
        assert "hi" in messages[-1].content

    @pytest.mark.asyncio
    async def test_dict_response_is_validated(self, backend, model_registry, model_resolver):
        backend.queue(PlanModel, {"steps": [{"step": 1, "description": "Answer", "tool": "final_synthesis"}]})
        steps = await self._planner(model_registry, model_resolver).plan("hi", token=CancellationToken())
        assert steps[0].tool is ToolKind.FINAL_SYNTHESIS

    @pytest.mark.asyncio
    async def test_malformed_dict_response(self, backend, model_registry, model_resolver):
        backend.queue(PlanModel, {"steps": [{"step": 1, "tool": "teleport"}]})
        with pytest.raises(PlanParseError):
            await self._planner(model_registry, model_resolver).plan("hi", token=CancellationToken())

    @pytest.mark.asyncio
    async def test_backend_failure(self, backend, model_registry, model_resolver):
        backend.queue(PlanModel, RuntimeError("Error code: 429 rate_limit"))
        with pytest.raises(ModelInvocationError) as exc_info:
            await self._planner(model_registry, model_resolver).plan("hi", token=CancellationToken())
        assert exc_info.value.user_message == "Too many requests, please try again shortly"

    @pytest.mark.asyncio
    async def test_cancel_while_planning(self, backend, model_registry, model_resolver):
        backend.gates[PlanModel] = asyncio.Event()
        backend.queue(PlanModel, plan())
        token = CancellationToken()

        task = asyncio.ensure_future(self._planner(model_registry, model_resolver).plan("hi", token=token))
        while not backend.structured_calls:
            await asyncio.sleep(0)
        token.cancel()

        with pytest.raises(OperationCancelled):
            await task

    @pytest.mark.asyncio
    async def test_revise_rejects_unknown_mode(self, model_registry, model_resolver):
        with pytest.raises(ValueError):
            await self._planner(model_registry, model_resolver).revise("q", [], "shuffle", token=CancellationToken())

    @pytest.mark.asyncio
    async def test_revise_sends_current_plan(self, backend, model_registry, model_resolver):
        current = to_plan_steps(plan(StepModel(step=1, description="Look", tool="web_search", query="tides")), max_steps=12)
        backend.queue(PlanModel, plan(StepModel(step=1, description="Answer", tool="final_synthesis")))

        await self._planner(model_registry, model_resolver).revise("q", current, "expand", token=CancellationToken())

        _, messages = backend.structured_calls[0]
        assert "Step 1: Look (Tool: web_search)" in messages[-1].content
        assert "EXPAND" in messages[-1].content
