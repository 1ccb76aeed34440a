"""Unified error handling for the cognitive session.

Two families of failure exist. ``StepExecutionError`` describes a problem local
to one plan step (bad input, failing user code, an invalid image reference) and
is recorded on that step while execution continues. Every other exception
raised by a stage (model or transport failures, malformed plans) aborts the
stage and moves the session to ``Error``.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable

from .logging_utils import log_error

LOGGER = logging.getLogger("cognitiveAgent.errors")


class CognitiveAgentError(Exception):
    """Base exception for cognitive agent errors."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class PlanParseError(CognitiveAgentError):
    """The planner returned a plan that does not fit the step schema."""
    pass


class StepExecutionError(CognitiveAgentError):
    """Failure confined to a single step; recorded on the step."""
    pass


class ToolExecutionError(CognitiveAgentError):
    """A tool backend (search service, sandbox host) failed."""
    pass


class ModelInvocationError(CognitiveAgentError):
    """Error during model invocation."""
    pass


class InvalidTransitionError(CognitiveAgentError):
    """A process or step state change outside the allowed table."""
    pass


class OperationCancelled(Exception):
    """Raised at a checkpoint once the active task was cancelled.

    Not a ``CognitiveAgentError``: cancellation is a normal outcome and is
    never reported to the user as an error.
    """


def with_error_boundary(stage: str):
    """Decorator for orchestrator stage coroutines.

    The wrapped coroutine must be a method taking the model turn as its first
    argument. Cancellation ends the stage quietly; any other exception is
    logged and handed to ``self.fail(turn, exc)``.

    Example:
        @with_error_boundary("planning")
        async def _plan(self, turn, query):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, turn, *args, **kwargs):
            try:
                return await func(self, turn, *args, **kwargs)
            except OperationCancelled as e:
                LOGGER.info(f"{stage} stopped after cancellation: {e}")
                return None
            except Exception as e:
                log_error(LOGGER, e, context=f"stage={stage} turn={turn.id}")
                self.fail(turn, e)
                return None

        return wrapper

    return decorator


def handle_model_error(error: Exception) -> str:
    """Convert model invocation errors to user-friendly messages.

    Args:
        error: Exception raised during model invocation

    Returns:
        User-friendly error message
    """
    error_str = str(error).lower()

    if "rate_limit" in error_str or "429" in error_str:
        return "Too many requests, please try again shortly"

    if "timeout" in error_str:
        return "The AI service timed out, please retry"

    if "context_length" in error_str or "token" in error_str:
        return "The conversation is too long, please start a new chat"

    if "invalid_api_key" in error_str or "authentication" in error_str:
        return "Invalid API key, please contact the administrator"

    if "quota" in error_str or "insufficient" in error_str:
        return "AI service quota exhausted, please contact the administrator"

    return f"AI service temporarily unavailable: {str(error)}"
