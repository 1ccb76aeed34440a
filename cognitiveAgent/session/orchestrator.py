"""Single-flight orchestrator for one interactive cognitive session.

One instance owns the process state, the conversation ledger, the cognitive
context vector and the notification bus. Nothing here runs concurrently: the
process state is the only guard, and every shared write is preceded by a
check of the current task's cancellation token.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from cognitiveAgent.agents import ModelResolver
from cognitiveAgent.config.settings import GovernanceSettings
from cognitiveAgent.graph.builder import build_execution_graph
from cognitiveAgent.graph.nodes import Planner
from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.tools.registry import ToolDispatcher
from cognitiveAgent.utils.error_handler import InvalidTransitionError, OperationCancelled, with_error_boundary
from cognitiveAgent.utils.logging_utils import log_error, log_plan_created, log_state_transition, log_user_message

from .archive import InMemoryTurnArchive, TurnArchive
from .cancellation import CancellationToken
from .ledger import ConversationLedger
from .notifier import NotificationBus, Observer, Subscription
from .review import PlanReviewGate
from .schema import (
    LAUNCH_STATES,
    PROCESS_TRANSITIONS,
    Attachment,
    CognitiveContextVector,
    ConversationTurn,
    PlanStep,
    ProcessState,
    SessionSnapshot,
    TurnState,
)

LOGGER = logging.getLogger("cognitiveAgent.orchestrator")

CANCELLATION_MARKER = "\n\n-- PROCESS CANCELLED BY USER --"


class CognitiveOrchestrator:
    def __init__(
        self,
        *,
        model_registry: ModelRegistry,
        model_resolver: ModelResolver,
        dispatcher: ToolDispatcher,
        governance: Optional[GovernanceSettings] = None,
        archive: Optional[TurnArchive] = None,
        bus: Optional[NotificationBus] = None,
        log_prompt_max_length: int = 500,
    ) -> None:
        self.governance = governance or GovernanceSettings()
        self.ledger = ConversationLedger()
        self.archive: TurnArchive = archive if archive is not None else InMemoryTurnArchive()
        self.bus = bus or NotificationBus()
        self.context_vector: Optional[CognitiveContextVector] = None
        self.token = CancellationToken()
        self._state = ProcessState.IDLE

        self.planner = Planner(
            model_registry=model_registry,
            model_resolver=model_resolver,
            max_steps=self.governance.max_plan_steps,
            log_prompt_max_length=log_prompt_max_length,
        )
        self._graph = build_execution_graph(
            session=self,
            dispatcher=dispatcher,
            model_registry=model_registry,
            model_resolver=model_resolver,
            log_prompt_max_length=log_prompt_max_length,
        )

    # ========== State and notification ==========

    @property
    def state(self) -> ProcessState:
        return self._state

    def transition(self, new_state: ProcessState) -> None:
        if new_state not in PROCESS_TRANSITIONS[self._state]:
            raise InvalidTransitionError(f"Cannot move from {self._state.value} to {new_state.value}")
        log_state_transition(LOGGER, self._state.value, new_state.value)
        self._state = new_state

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            turns=[turn.model_copy(deep=True) for turn in self.ledger.turns],
            context_vector=self.context_vector,
        )

    def notify(self) -> None:
        self.bus.publish(self.snapshot())

    def subscribe(self, observer: Observer) -> Subscription:
        return self.bus.subscribe(observer)

    def close(self) -> None:
        """Cancel any running task and drop all observers."""
        if self._state not in LAUNCH_STATES:
            self.cancel_query()
        self.bus.close()

    def fail(self, turn: ConversationTurn, error: Exception) -> None:
        """Record an unrecovered stage failure on ``turn`` and enter Error."""
        if self.token.raised:
            return
        message = getattr(error, "user_message", None) or str(error)
        if self._state == ProcessState.PLANNING:
            turn.text = f"An error occurred during planning: {message}"
        else:
            turn.text = f"An error occurred during the '{self._state.value}' stage: {message}"
        turn.state = TurnState.ERROR
        turn.current_step = None
        self.transition(ProcessState.ERROR)
        self.notify()

    # ========== Submission and planning ==========

    async def submit_query(self, text: str, attachment: Optional[Attachment] = None) -> Optional[str]:
        """Start a new task; returns the model turn id, or None if rejected.

        Accepted only from Idle, Done, Cancelled or Error. The call returns once
        the plan is awaiting review (or planning failed or was cancelled).
        """
        if self._state not in LAUNCH_STATES:
            LOGGER.warning(f"Submission rejected: a task is already in progress (state {self._state.value})")
            return None

        self.token = CancellationToken()
        self.transition(ProcessState.RECEIVING)
        log_user_message(LOGGER, text)
        _, model_turn = self.ledger.append_exchange(text, attachment)
        self.notify()

        self.transition(ProcessState.PLANNING)
        model_turn.state = TurnState.PLANNING
        self.notify()

        await self._plan(model_turn, text, attachment is not None)
        return model_turn.id

    @with_error_boundary("planning")
    async def _plan(self, turn: ConversationTurn, query: str, has_attachment: bool) -> None:
        steps = await self.planner.plan(query, token=self.token, has_attachment=has_attachment)
        self.token.raise_if_cancelled("planning")
        self._attach_plan(turn, steps)

    def _attach_plan(self, turn: ConversationTurn, steps: List[PlanStep]) -> None:
        turn.plan = steps
        turn.state = TurnState.AWAITING_EXECUTION
        self.transition(ProcessState.AWAITING_EXECUTION)
        log_plan_created(LOGGER, turn.user_query or "", steps)
        self.notify()

    async def regenerate_plan(self, turn_id: str, mode: str) -> bool:
        """Replace an awaiting plan with an expanded, optimized or revised one."""
        turn = self._awaiting_turn(turn_id)
        if turn is None:
            return False
        self.transition(ProcessState.PLANNING)
        turn.state = TurnState.PLANNING
        self.notify()
        await self._replan(turn, mode)
        return True

    @with_error_boundary("replanning")
    async def _replan(self, turn: ConversationTurn, mode: str) -> None:
        try:
            steps = await self.planner.revise(turn.user_query or "", list(turn.plan or []), mode, token=self.token)
        except OperationCancelled:
            raise
        except Exception as e:
            # A failed manual revision keeps the reviewed plan.
            self.token.raise_if_cancelled("replanning")
            log_error(LOGGER, e, context=f"{mode} of turn {turn.id} failed; keeping the current plan")
            turn.state = TurnState.AWAITING_EXECUTION
            self.transition(ProcessState.AWAITING_EXECUTION)
            self.notify()
            return
        self.token.raise_if_cancelled("replanning")
        self._attach_plan(turn, steps)

    # ========== Cancellation ==========

    def cancel_query(self) -> bool:
        """Cancel the task in flight; a no-op in Idle and terminal states."""
        if self._state in LAUNCH_STATES:
            LOGGER.info(f"Nothing to cancel (state {self._state.value})")
            return False

        self.token.cancel()
        self.transition(ProcessState.CANCELLED)
        turn = self.ledger.latest_model_turn()
        if turn is not None:
            turn.state = TurnState.ERROR
            turn.current_step = None
            turn.text = (turn.text or "") + CANCELLATION_MARKER
        LOGGER.warning("Cognitive process cancelled by user")
        self.notify()
        return True

    def discard_plan(self, turn_id: str) -> bool:
        """Abandon an awaiting plan through the cancel path."""
        if self._awaiting_turn(turn_id) is None:
            return False
        return self.cancel_query()

    # ========== Plan review ==========

    def _awaiting_turn(self, turn_id: str) -> Optional[ConversationTurn]:
        turn = self.ledger.find(turn_id)
        if turn is None or self._state != ProcessState.AWAITING_EXECUTION:
            LOGGER.warning(f"Turn {turn_id} has no plan awaiting review (state {self._state.value})")
            return None
        if not PlanReviewGate(turn, max_steps=self.governance.max_plan_steps).is_open:
            LOGGER.warning(f"Plan of turn {turn_id} is not open for review")
            return None
        return turn

    def _gate(self, turn_id: str) -> Optional[PlanReviewGate]:
        turn = self._awaiting_turn(turn_id)
        if turn is None:
            return None
        return PlanReviewGate(turn, max_steps=self.governance.max_plan_steps)

    def _edit(self, turn_id: str, edit: Callable[[PlanReviewGate], object]) -> bool:
        """Apply ``edit`` to the open plan; falsy results and bad indexes reject it."""
        gate = self._gate(turn_id)
        if gate is None:
            return False
        try:
            applied = edit(gate)
        except IndexError as e:
            LOGGER.warning(f"Plan edit on turn {turn_id} ignored: {e}")
            return False
        if not applied:
            return False
        self.notify()
        return True

    def update_plan_step(self, turn_id: str, index: int, new_step: Union[PlanStep, Dict[str, Any]]) -> bool:
        return self._edit(turn_id, lambda gate: gate.replace(index, new_step))

    def reorder_plan(self, turn_id: str, from_index: int, to_index: int) -> bool:
        return self._edit(turn_id, lambda gate: gate.move(from_index, to_index))

    def add_plan_step(self, turn_id: str) -> bool:
        return self._edit(turn_id, lambda gate: gate.append_default())

    def delete_plan_step(self, turn_id: str, index: int) -> bool:
        return self._edit(turn_id, lambda gate: gate.remove(index))

    # ========== Execution ==========

    async def execute_plan(self, turn_id: str) -> bool:
        """Commit the plan and run it through synthesis; a no-op unless awaiting."""
        gate = self._gate(turn_id)
        if gate is None:
            return False
        plan = gate.commit()
        turn = gate.turn
        turn.state = TurnState.EXECUTING
        self.transition(ProcessState.EXECUTING)
        self.notify()
        LOGGER.info(f"Executing plan of {len(plan)} step(s) for turn {turn.id}")
        await self._execute(turn)
        return True

    @with_error_boundary("execution")
    async def _execute(self, turn: ConversationTurn) -> None:
        total = len(turn.plan or [])
        await self._graph.ainvoke(
            {"turn_id": turn.id, "step_idx": 0, "total_steps": total, "results": [], "halted": False},
            config={"recursion_limit": total + 10},
        )

    # ========== Session housekeeping ==========

    def start_new_chat(self) -> None:
        """Cancel anything in flight, clear the ledger and reset the context vector."""
        if self._state not in LAUNCH_STATES:
            self.cancel_query()
        self.ledger.clear()
        self.context_vector = None
        self.transition(ProcessState.IDLE)
        LOGGER.info("Started a new chat")
        self.notify()

    def archive_turn(self, turn_id: str) -> bool:
        """Move a finished model turn and its user turn to the archive."""
        turn = self.ledger.find(turn_id)
        if turn is None or turn.role != "model":
            LOGGER.warning(f"Cannot archive {turn_id}: not a model turn in the ledger")
            return False
        in_flight = self._state not in LAUNCH_STATES and turn is self.ledger.latest_model_turn()
        if in_flight or turn.state not in (TurnState.DONE, TurnState.ERROR):
            LOGGER.warning(f"Cannot archive {turn_id}: turn has not finished")
            return False

        user_turn = self.ledger.user_turn_for(turn)
        turn.archived_at = datetime.now(timezone.utc)
        self.archive.save(turn, user_turn)
        self.ledger.remove_exchange(turn_id)
        LOGGER.info(f"Archived turn {turn_id}")
        self.notify()
        return True

    def list_archived(self) -> List[ConversationTurn]:
        return self.archive.list_turns()
