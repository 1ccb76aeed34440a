"""Step executor node: runs exactly one plan step per visit."""

from __future__ import annotations

import logging

from cognitiveAgent.graph.state import ExecutionState
from cognitiveAgent.session.schema import StepStatus
from cognitiveAgent.tools.registry import ToolContext, ToolDispatcher
from cognitiveAgent.utils.error_handler import OperationCancelled, StepExecutionError
from cognitiveAgent.utils.logging_utils import log_node_entry, log_node_exit, log_step_execution

LOGGER = logging.getLogger("cognitiveAgent.step_executor")


def build_step_executor_node(*, session, dispatcher: ToolDispatcher):
    """Build the node around ``session``, which supplies ledger, token, context vector and notify()."""

    async def step_executor_node(state: ExecutionState) -> ExecutionState:
        log_node_entry(LOGGER, "step_executor", state)
        token = session.token
        if token.raised:
            LOGGER.info("Cancellation observed before the next step; halting")
            return {"halted": True}

        turn = session.ledger.get(state["turn_id"])
        plan = turn.plan
        idx = state.get("step_idx", 0)
        step = plan[idx]

        turn.current_step = idx
        step.advance(StepStatus.EXECUTING)
        log_step_execution(LOGGER, idx, step, len(plan))
        session.notify()

        user_turn = session.ledger.user_turn_for(turn)
        ctx = ToolContext(
            step=step,
            plan=plan,
            token=token,
            attachment=user_turn.attachment if user_turn else None,
            context_vector=session.context_vector,
        )

        try:
            outcome = await dispatcher.dispatch(ctx)
        except StepExecutionError as e:
            token.raise_if_cancelled(f"step {step.ordinal}")
            LOGGER.warning(f"Step {step.ordinal} ({step.description}) failed locally: {e}")
            step.result = f"Error: {e}"
            step.advance(StepStatus.ERROR)
            session.notify()
            updates = {
                "step_idx": idx + 1,
                "results": [f"Step {step.ordinal} ({step.description}) Error: {e}"],
            }
            log_node_exit(LOGGER, "step_executor", updates)
            return updates
        except OperationCancelled:
            raise
        except Exception as e:
            if not token.raised:
                LOGGER.error(f"Step {step.ordinal} ({step.description}) aborted the plan: {e}")
                step.result = f"Error: {getattr(e, 'user_message', str(e))}"
                step.advance(StepStatus.ERROR)
                session.notify()
            raise

        token.raise_if_cancelled(f"step {step.ordinal}")
        step.result = outcome.payload
        step.citations = list(outcome.citations)
        if outcome.context_vector is not None:
            session.context_vector = outcome.context_vector
        step.advance(StepStatus.COMPLETE)
        session.notify()

        updates: ExecutionState = {"step_idx": idx + 1}
        if outcome.text:
            updates["results"] = [outcome.text]
        log_node_exit(LOGGER, "step_executor", updates)
        return updates

    return step_executor_node
