"""Graph assembly exports."""

from .builder import build_execution_graph
from ._plan import PlanModel, StepModel
from .state import ExecutionState

__all__ = ["build_execution_graph", "PlanModel", "StepModel", "ExecutionState"]
