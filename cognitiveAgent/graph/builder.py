"""Factory for assembling the plan execution graph."""

from __future__ import annotations

import logging

from langgraph.graph import END, START, StateGraph

from cognitiveAgent.agents import ModelResolver
from cognitiveAgent.graph.nodes import build_step_executor_node, build_synthesize_node
from cognitiveAgent.graph.routing import step_route
from cognitiveAgent.graph.state import ExecutionState
from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.tools.registry import ToolDispatcher

LOGGER = logging.getLogger("cognitiveAgent.builder")


def build_execution_graph(
    *,
    session,
    dispatcher: ToolDispatcher,
    model_registry: ModelRegistry,
    model_resolver: ModelResolver,
    log_prompt_max_length: int = 500,
):
    """Compose the strictly sequential execution graph.

        START → step_executor ⟲ (one visit per step) → synthesize → END
                      ↓ cancellation observed
                     END

    ``session`` is the owning orchestrator; nodes read the plan from its
    ledger and publish through it.
    """

    step_executor_node = build_step_executor_node(session=session, dispatcher=dispatcher)
    synthesize_node = build_synthesize_node(
        session=session,
        model_registry=model_registry,
        model_resolver=model_resolver,
        log_prompt_max_length=log_prompt_max_length,
    )

    graph = StateGraph(ExecutionState)
    graph.add_node("step_executor", step_executor_node)
    graph.add_node("synthesize", synthesize_node)

    graph.add_edge(START, "step_executor")
    graph.add_conditional_edges(
        "step_executor",
        step_route,
        {
            "step_executor": "step_executor",
            "synthesize": "synthesize",
            "halt": END,
        },
    )
    graph.add_edge("synthesize", END)

    return graph.compile()
