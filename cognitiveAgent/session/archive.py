"""Archive collaborators receiving turns moved out of the ledger."""

from __future__ import annotations

import os
import sqlite3
from typing import Dict, List, Optional, Protocol

from .schema import ConversationTurn


class TurnArchive(Protocol):
    def save(self, turn: ConversationTurn, user_turn: Optional[ConversationTurn] = None) -> None:
        ...

    def list_turns(self) -> List[ConversationTurn]:
        ...


class InMemoryTurnArchive:
    """Process-local archive, newest first."""

    def __init__(self) -> None:
        self._turns: Dict[str, ConversationTurn] = {}
        self._user_turns: Dict[str, ConversationTurn] = {}

    def save(self, turn: ConversationTurn, user_turn: Optional[ConversationTurn] = None) -> None:
        self._turns[turn.id] = turn.model_copy(deep=True)
        if user_turn is not None:
            self._user_turns[turn.id] = user_turn.model_copy(deep=True)

    def load(self, turn_id: str) -> Optional[ConversationTurn]:
        turn = self._turns.get(turn_id)
        return turn.model_copy(deep=True) if turn else None

    def list_turns(self) -> List[ConversationTurn]:
        turns = sorted(self._turns.values(), key=lambda t: t.archived_at or t.created_at, reverse=True)
        return [turn.model_copy(deep=True) for turn in turns]

    def delete(self, turn_id: str) -> None:
        self._turns.pop(turn_id, None)
        self._user_turns.pop(turn_id, None)


class SqliteTurnArchive:
    """Simple SQLite store for archived model turns."""

    def __init__(self, db_path: str = "data/archive.db"):
        """Initialize the archive.

        Args:
            db_path: Path to SQLite database file
        """
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

        self.db_path = db_path
        self._init_db()

    def _init_db(self):
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS archived_turns (
                    turn_id TEXT PRIMARY KEY,
                    user_query TEXT,
                    turn_json TEXT NOT NULL,
                    user_turn_json TEXT,
                    archived_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def save(self, turn: ConversationTurn, user_turn: Optional[ConversationTurn] = None) -> None:
        """Insert or replace an archived model turn.

        Args:
            turn: The model turn; ``archived_at`` must be set
            user_turn: The user turn that prompted it, if still available
        """
        if turn.archived_at is None:
            raise ValueError(f"Turn {turn.id} has no archive timestamp")
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(
                """INSERT OR REPLACE INTO archived_turns
                   (turn_id, user_query, turn_json, user_turn_json, archived_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    turn.id,
                    turn.user_query,
                    turn.model_dump_json(),
                    user_turn.model_dump_json() if user_turn is not None else None,
                    turn.archived_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def load(self, turn_id: str) -> Optional[ConversationTurn]:
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT turn_json FROM archived_turns WHERE turn_id = ?", (turn_id,)
            ).fetchone()
        finally:
            conn.close()
        return ConversationTurn.model_validate_json(row[0]) if row else None

    def list_turns(self) -> List[ConversationTurn]:
        """Return archived model turns, most recently archived first."""
        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute(
                "SELECT turn_json FROM archived_turns ORDER BY archived_at DESC"
            ).fetchall()
        finally:
            conn.close()
        return [ConversationTurn.model_validate_json(row[0]) for row in rows]

    def delete(self, turn_id: str) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("DELETE FROM archived_turns WHERE turn_id = ?", (turn_id,))
            conn.commit()
        finally:
            conn.close()
