"""Unit tests for ConversationLedger."""

import pytest

from cognitiveAgent.session.ledger import ConversationLedger


class TestConversationLedger:
    def test_append_exchange_links_turns(self):
        ledger = ConversationLedger()
        user_turn, model_turn = ledger.append_exchange("What is 2+2?")

        assert user_turn.role == "user" and model_turn.role == "model"
        assert model_turn.user_turn_id == user_turn.id
        assert model_turn.user_query == "What is 2+2?"
        assert ledger.user_turn_for(model_turn) is user_turn
        assert len(ledger) == 2

    def test_latest_model_turn(self):
        ledger = ConversationLedger()
        assert ledger.latest_model_turn() is None
        ledger.append_exchange("one")
        _, second = ledger.append_exchange("two")
        assert ledger.latest_model_turn() is second

    def test_history_before(self):
        ledger = ConversationLedger()
        first_user, first_model = ledger.append_exchange("one")
        _, second_model = ledger.append_exchange("two")

        assert ledger.history_before(second_model) == [first_user, first_model]
        assert ledger.history_before(first_model) == []

    def test_remove_exchange(self):
        ledger = ConversationLedger()
        ledger.append_exchange("one")
        user_turn, model_turn = ledger.append_exchange("two")

        removed = ledger.remove_exchange(model_turn.id)

        assert removed == [user_turn, model_turn]
        assert len(ledger) == 2
        assert ledger.find(model_turn.id) is None

    def test_get_unknown(self):
        with pytest.raises(KeyError):
            ConversationLedger().get("model-missing")
