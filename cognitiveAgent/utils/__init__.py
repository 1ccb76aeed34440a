"""Utilities for the cognitive agent."""

from .logging_utils import (
    get_logger,
    log_agent_response,
    log_error,
    log_model_selection,
    log_state_transition,
    log_tool_call,
    log_tool_result,
    log_user_message,
    setup_logging,
)
from .error_handler import (
    with_error_boundary,
    handle_model_error,
    CognitiveAgentError,
    InvalidTransitionError,
    ModelInvocationError,
    OperationCancelled,
    PlanParseError,
    StepExecutionError,
    ToolExecutionError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_state_transition",
    "log_tool_call",
    "log_tool_result",
    "log_model_selection",
    "log_error",
    "log_user_message",
    "log_agent_response",
    "with_error_boundary",
    "handle_model_error",
    "CognitiveAgentError",
    "InvalidTransitionError",
    "ModelInvocationError",
    "OperationCancelled",
    "PlanParseError",
    "StepExecutionError",
    "ToolExecutionError",
]
