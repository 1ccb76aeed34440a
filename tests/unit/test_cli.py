"""Unit tests for the interactive CLI."""

import pytest

from cognitiveAgent.cli import CognitiveCLI, SnapshotPrinter
from cognitiveAgent.graph import PlanModel, StepModel


def payload(state, text="", plan=None):
    return {
        "state": state,
        "turns": [
            {"id": "user-1", "role": "user", "text": "q"},
            {"id": "model-1", "role": "model", "text": text, "plan": plan},
        ],
    }


class TestSnapshotPrinter:
    def test_prints_only_new_text(self, capsys):
        printer = SnapshotPrinter()
        printer(payload("Synthesizing", "Hello"))
        printer(payload("Synthesizing", "Hello world"))
        printer(payload("Synthesizing", "Hello world"))

        assert capsys.readouterr().out == "Hello world"

    def test_prints_step_status_changes(self, capsys):
        printer = SnapshotPrinter()
        step = {"ordinal": 1, "status": "executing", "description": "Search"}
        printer(payload("Executing", plan=[step]))
        printer(payload("Executing", plan=[step]))

        assert capsys.readouterr().out.count("step 1 [executing] Search") == 1


class TestCognitiveCLI:
    @pytest.mark.asyncio
    async def test_plan_edit_commands(self, backend, make_session, capsys):
        session = make_session()
        cli = CognitiveCLI(session)
        backend.queue(
            PlanModel,
            PlanModel(
                steps=[
                    StepModel(step=1, description="Look", tool="web_search", query="tides"),
                    StepModel(step=2, description="Answer", tool="final_synthesis"),
                ]
            ),
        )
        turn_id = await session.submit_query("tides?")

        assert await cli._handle_add([])
        assert await cli._handle_move(["1", "3"])
        assert await cli._handle_delete(["x"])

        plan = session.ledger.get(turn_id).plan
        assert len(plan) == 3
        assert plan[2].description == "Look"
        assert "Usage: /delete <n>" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_cancel_with_nothing_running(self, make_session, capsys):
        cli = CognitiveCLI(make_session())
        assert await cli._handle_cancel([])
        assert "Nothing to cancel." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_quit(self, make_session):
        assert not await CognitiveCLI(make_session())._handle_quit([])
