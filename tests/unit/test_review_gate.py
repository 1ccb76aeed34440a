"""Unit tests for plan review edits."""

import pytest

from cognitiveAgent.session.review import (
    DEFAULT_STEP_DESCRIPTION,
    PlanReviewGate,
    describe_step,
)
from cognitiveAgent.session.schema import (
    ConversationTurn,
    PlanStep,
    StepStatus,
    ToolKind,
    TurnState,
)


def make_turn(*params, state=TurnState.AWAITING_EXECUTION):
    plan = [
        PlanStep(ordinal=i, description=f"step {i}", params=p)
        for i, p in enumerate(params, start=1)
    ]
    return ConversationTurn(id="model-1", role="model", plan=plan, state=state)


def ordinals(turn):
    return [step.ordinal for step in turn.plan]


@pytest.fixture
def turn():
    return make_turn(
        {"kind": "web_search", "query": "capital of France"},
        {"kind": "sandboxed_code", "code": "return 2 + 2"},
        {"kind": "final_synthesis"},
    )


class TestGateOpen:
    def test_open_while_awaiting(self, turn):
        assert PlanReviewGate(turn, max_steps=12).is_open

    def test_closed_after_commit(self, turn):
        gate = PlanReviewGate(turn, max_steps=12)
        gate.commit()
        assert turn.finalized
        assert not gate.is_open
        with pytest.raises(RuntimeError):
            gate.append_default()

    def test_closed_when_not_awaiting(self):
        turn = make_turn({"kind": "final_synthesis"}, state=TurnState.EXECUTING)
        assert not PlanReviewGate(turn, max_steps=12).is_open


class TestReplace:
    def test_replace_resets_and_describes(self, turn):
        gate = PlanReviewGate(turn, max_steps=12)
        step = gate.replace(1, {"params": {"kind": "web_search", "query": "weather in Oslo"}, "status": "complete"})

        assert turn.plan[1] is step
        assert step.ordinal == 2
        assert step.status is StepStatus.PENDING
        assert step.tool is ToolKind.WEB_SEARCH
        assert step.description == 'Search the web for "weather in Oslo"'

    def test_replace_rejects_missing_field(self, turn):
        gate = PlanReviewGate(turn, max_steps=12)
        with pytest.raises(ValueError):
            gate.replace(0, {"params": {"kind": "context_modulation"}})
        assert turn.plan[0].params.query == "capital of France"

    def test_replace_out_of_range(self, turn):
        with pytest.raises(IndexError):
            PlanReviewGate(turn, max_steps=12).replace(3, {"params": {"kind": "final_synthesis"}})


class TestMove:
    def test_move_swaps_and_renumbers(self, turn):
        gate = PlanReviewGate(turn, max_steps=12)
        gate.move(0, 2)

        assert [step.tool for step in turn.plan] == [
            ToolKind.FINAL_SYNTHESIS,
            ToolKind.SANDBOXED_CODE,
            ToolKind.WEB_SEARCH,
        ]
        assert ordinals(turn) == [1, 2, 3]

    def test_move_out_of_range(self, turn):
        with pytest.raises(IndexError):
            PlanReviewGate(turn, max_steps=12).move(0, 5)


class TestAppendAndRemove:
    def test_append_default(self, turn):
        step = PlanReviewGate(turn, max_steps=12).append_default()

        assert step.ordinal == 4
        assert step.description == DEFAULT_STEP_DESCRIPTION
        assert step.tool is ToolKind.FINAL_SYNTHESIS
        assert ordinals(turn) == [1, 2, 3, 4]

    def test_append_stops_at_max(self, turn):
        assert PlanReviewGate(turn, max_steps=3).append_default() is None
        assert len(turn.plan) == 3

    def test_remove_renumbers(self, turn):
        assert PlanReviewGate(turn, max_steps=12).remove(0)
        assert ordinals(turn) == [1, 2]
        assert turn.plan[0].tool is ToolKind.SANDBOXED_CODE

    def test_sole_step_is_kept(self):
        turn = make_turn({"kind": "final_synthesis"})
        assert not PlanReviewGate(turn, max_steps=12).remove(0)
        assert len(turn.plan) == 1


class TestDescribeStep:
    @pytest.mark.parametrize(
        "params, expected",
        [
            ({"kind": "sandboxed_code", "code": "x = 1\nreturn x"}, "Run sandboxed code: x = 1"),
            ({"kind": "context_modulation", "concept": "wistful"}, 'Adopt the cognitive context "wistful"'),
            ({"kind": "image_synthesis", "concept": "a lighthouse"}, 'Synthesize an image of "a lighthouse"'),
            ({"kind": "image_analysis"}, "Analyze the attached image"),
            ({"kind": "image_analysis", "input_ref": 1}, "Analyze the image produced by step 1"),
            ({"kind": "final_synthesis"}, "Synthesize the final answer"),
        ],
    )
    def test_descriptions(self, params, expected):
        assert describe_step(PlanStep(ordinal=2, params=params)) == expected
