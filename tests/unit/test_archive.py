"""Unit tests for the turn archives."""

from datetime import datetime, timedelta, timezone

import pytest

from cognitiveAgent.session.archive import InMemoryTurnArchive, SqliteTurnArchive
from cognitiveAgent.session.schema import ConversationTurn, PlanStep, TurnState


def archived_turn(turn_id, minutes_ago=0):
    return ConversationTurn(
        id=turn_id,
        role="model",
        text="Paris is the capital of France.",
        state=TurnState.DONE,
        user_query="capital of France?",
        plan=[PlanStep(ordinal=1, params={"kind": "final_synthesis"})],
        archived_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )


@pytest.fixture(params=["memory", "sqlite"])
def archive(request, tmp_path):
    if request.param == "memory":
        return InMemoryTurnArchive()
    return SqliteTurnArchive(str(tmp_path / "nested" / "archive.db"))


class TestTurnArchive:
    def test_save_and_load(self, archive):
        turn = archived_turn("model-1")
        user_turn = ConversationTurn(id="user-1", role="user", text="capital of France?")
        archive.save(turn, user_turn)

        loaded = archive.load("model-1")
        assert loaded == turn
        assert loaded is not turn

    def test_newest_first(self, archive):
        archive.save(archived_turn("model-old", minutes_ago=10))
        archive.save(archived_turn("model-new", minutes_ago=1))

        assert [t.id for t in archive.list_turns()] == ["model-new", "model-old"]

    def test_delete(self, archive):
        archive.save(archived_turn("model-1"))
        archive.delete("model-1")
        assert archive.load("model-1") is None
        assert archive.list_turns() == []


class TestSqliteTurnArchive:
    def test_requires_archive_timestamp(self, tmp_path):
        archive = SqliteTurnArchive(str(tmp_path / "archive.db"))
        with pytest.raises(ValueError):
            archive.save(ConversationTurn(id="model-1", role="model"))

    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "archive.db")
        SqliteTurnArchive(path).save(archived_turn("model-1"))
        assert [t.id for t in SqliteTurnArchive(path).list_turns()] == ["model-1"]
