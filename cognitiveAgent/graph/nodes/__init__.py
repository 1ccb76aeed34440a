"""Graph nodes exports."""

from .planner import Planner
from .step_executor import build_step_executor_node
from .synthesizer import EMPTY_SYNTHESIS_PLACEHOLDER, build_synthesize_node, collect_citations

__all__ = [
    "Planner",
    "build_step_executor_node",
    "build_synthesize_node",
    "collect_citations",
    "EMPTY_SYNTHESIS_PLACEHOLDER",
]
