"""Ordered conversation history for one session."""

from __future__ import annotations

import uuid
from typing import Iterator, List, Optional, Tuple

from .schema import Attachment, ConversationTurn


class ConversationLedger:
    """Turns in strict user/model alternation, one pair per submission."""

    def __init__(self) -> None:
        self._turns: List[ConversationTurn] = []

    @property
    def turns(self) -> Tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(list(self._turns))

    def append_exchange(
        self, query: str, attachment: Optional[Attachment] = None
    ) -> Tuple[ConversationTurn, ConversationTurn]:
        """Append a user turn and its (empty) model turn."""
        user_turn = ConversationTurn(
            id=f"user-{uuid.uuid4().hex}",
            role="user",
            text=query,
            attachment=attachment,
        )
        model_turn = ConversationTurn(
            id=f"model-{uuid.uuid4().hex}",
            role="model",
            user_query=query,
            user_turn_id=user_turn.id,
        )
        self._turns.extend([user_turn, model_turn])
        return user_turn, model_turn

    def find(self, turn_id: str) -> Optional[ConversationTurn]:
        for turn in self._turns:
            if turn.id == turn_id:
                return turn
        return None

    def get(self, turn_id: str) -> ConversationTurn:
        turn = self.find(turn_id)
        if turn is None:
            raise KeyError(f"Unknown turn: {turn_id}")
        return turn

    def latest_model_turn(self) -> Optional[ConversationTurn]:
        for turn in reversed(self._turns):
            if turn.role == "model":
                return turn
        return None

    def user_turn_for(self, model_turn: ConversationTurn) -> Optional[ConversationTurn]:
        if model_turn.user_turn_id is None:
            return None
        return self.find(model_turn.user_turn_id)

    def history_before(self, model_turn: ConversationTurn) -> List[ConversationTurn]:
        """Turns preceding the exchange that produced ``model_turn``."""
        anchor = model_turn.user_turn_id or model_turn.id
        history: List[ConversationTurn] = []
        for turn in self._turns:
            if turn.id == anchor:
                break
            history.append(turn)
        return history

    def remove_exchange(self, model_turn_id: str) -> List[ConversationTurn]:
        """Remove a model turn together with its user turn and return both."""
        model_turn = self.get(model_turn_id)
        removed_ids = {model_turn.id}
        if model_turn.user_turn_id:
            removed_ids.add(model_turn.user_turn_id)
        removed = [turn for turn in self._turns if turn.id in removed_ids]
        self._turns = [turn for turn in self._turns if turn.id not in removed_ids]
        return removed

    def clear(self) -> None:
        self._turns.clear()
