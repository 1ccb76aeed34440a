"""Synthesize node that streams the final answer into the model turn."""

from __future__ import annotations

import logging
from typing import List

from langchain_core.messages import HumanMessage, SystemMessage

from cognitiveAgent.agents import ModelResolver, stream_completion
from cognitiveAgent.graph.message_utils import chunk_text
from cognitiveAgent.graph.prompts import SYNTHESIS_SYSTEM_PROMPT, build_synthesis_prompt
from cognitiveAgent.graph.state import ExecutionState
from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.session.schema import Citation, ProcessState, TurnState
from cognitiveAgent.utils.error_handler import ModelInvocationError, OperationCancelled, handle_model_error
from cognitiveAgent.utils.logging_utils import log_agent_response, log_node_entry, log_node_exit, log_prompt

LOGGER = logging.getLogger("cognitiveAgent.synthesizer")

EMPTY_SYNTHESIS_PLACEHOLDER = "[SYSTEM_ERROR: AI returned an empty response.]"


def collect_citations(turn) -> List[Citation]:
    """Union of step citations in plan order, first occurrence of each URI kept."""
    seen = set()
    citations: List[Citation] = []
    for step in turn.plan or []:
        for citation in step.citations:
            if citation.uri not in seen:
                seen.add(citation.uri)
                citations.append(citation)
    return citations


def build_synthesize_node(
    *,
    session,
    model_registry: ModelRegistry,
    model_resolver: ModelResolver,
    log_prompt_max_length: int = 500,
):
    async def synthesize_node(state: ExecutionState) -> ExecutionState:
        log_node_entry(LOGGER, "synthesize", state)
        token = session.token
        if token.raised:
            return {"halted": True}

        turn = session.ledger.get(state["turn_id"])
        turn.current_step = None
        turn.state = TurnState.SYNTHESIZING
        turn.text = ""
        session.transition(ProcessState.SYNTHESIZING)
        session.notify()

        vector = session.context_vector
        if vector is not None:
            turn.context_snapshot = vector.model_copy()
        prompt = build_synthesis_prompt(
            turn.user_query or "",
            list(state.get("results", [])),
            history=session.ledger.history_before(turn),
            context_vector=vector,
        )
        log_prompt(LOGGER, "synthesize", prompt, max_length=log_prompt_max_length)
        messages = [SystemMessage(content=SYNTHESIS_SYSTEM_PROMPT), HumanMessage(content=prompt)]

        async def consume() -> None:
            async for chunk in stream_completion(
                model_registry=model_registry,
                model_resolver=model_resolver,
                messages=messages,
            ):
                if token.raised:
                    LOGGER.info("Cancellation observed mid-stream; keeping partial text")
                    return
                text = chunk_text(chunk)
                if text:
                    turn.text += text
                    session.notify()

        try:
            await token.guard(consume(), label="synthesis stream")
        except OperationCancelled:
            raise
        except Exception as e:
            LOGGER.error(f"Synthesis stream failed: {e}")
            raise ModelInvocationError(str(e), user_message=handle_model_error(e)) from e

        token.raise_if_cancelled("synthesis")
        if not turn.text.strip():
            LOGGER.warning("Synthesis stream completed without text")
            turn.text = EMPTY_SYNTHESIS_PLACEHOLDER
        turn.citations = collect_citations(turn)
        turn.state = TurnState.DONE
        session.transition(ProcessState.DONE)
        log_agent_response(LOGGER, turn.text)
        session.notify()

        updates: ExecutionState = {}
        log_node_exit(LOGGER, "synthesize", updates)
        return updates

    return synthesize_node
