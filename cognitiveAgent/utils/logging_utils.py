"""Logging utilities for the cognitive agent."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

LOGS_DIR = Path("logs")

ROOT_LOGGER_NAME = "cognitiveAgent"


def setup_logging(level: int = logging.INFO, logs_dir: Optional[Path] = None) -> logging.Logger:
    """Setup logging configuration for the cognitive agent.

    A detailed log file is written under ``logs/`` while the console only
    receives warnings and errors.

    Args:
        level: Console threshold is never lower than WARNING; ``level`` applies to the file
        logs_dir: Directory for log files (default: ./logs)

    Returns:
        Configured logger instance
    """
    target_dir = logs_dir or LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / f"cognitive_agent_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # children inherit, handlers filter
    logger.propagate = False

    logger.handlers = []

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(min(level, logging.INFO))
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("Cognitive agent session started")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger

RULE = "-" * 72
PREVIEW_CHARS = 100


def _preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def log_state_transition(logger: logging.Logger, from_state: str, to_state: str) -> None:
    """Log a process-level state change."""
    logger.info(f"Process state: {from_state} → {to_state}")


def log_tool_call(logger: logging.Logger, tool_kind: str, params: Dict[str, Any]) -> None:
    """Record a handler dispatch; parameters only reach the DEBUG level."""
    logger.info(f"Dispatching {tool_kind}")
    logger.debug(f"  params={json.dumps(params, ensure_ascii=False, default=str)}")


def log_tool_result(logger: logging.Logger, tool_kind: str, result: Any, success: bool = True) -> None:
    """Record the outcome of a handler dispatch.

    Args:
        logger: Logger instance
        tool_kind: Tool kind value of the dispatched step
        result: Payload, or the error text when ``success`` is False
        success: Whether the handler returned normally
    """
    if success:
        logger.info(f"{tool_kind} finished")
    else:
        logger.warning(f"{tool_kind} raised")
    logger.debug(f"  payload={_preview(str(result), 500)}")


def log_model_selection(logger: logging.Logger, phase: str, model_id: str, reason: str = "") -> None:
    """Log which model slot serves a session phase (plan/modulate/image/synthesize)."""
    logger.info(f"[{phase}] using model {model_id}")
    if reason:
        logger.debug(f"  ({reason})")


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """Log an unrecovered failure with its traceback.

    Args:
        logger: Logger instance
        error: The exception that ended a stage
        context: Where it happened, e.g. ``stage=execution turn=model-...``
    """
    suffix = f" ({context})" if context else ""
    logger.error(f"{type(error).__name__}: {error}{suffix}", exc_info=error)


def log_user_message(logger: logging.Logger, content: str) -> None:
    logger.info(f"Query received: {_preview(content)}")


def log_agent_response(logger: logging.Logger, content: str) -> None:
    logger.info(f"Answer synthesized: {_preview(content)}")


def log_prompt(logger: logging.Logger, phase: str, prompt: str, max_length: int = 500) -> None:
    """Write a prompt to the log file, cut at ``max_length`` characters."""
    logger.info(RULE)
    logger.info(f"{phase} prompt ({len(prompt)} chars):")
    logger.info(_preview(prompt, max_length))
    logger.info(RULE)


def log_routing_decision(logger: logging.Logger, from_node: str, decision: str, reason: str = "") -> None:
    message = f"Route {from_node} → {decision}"
    logger.info(f"{message} ({reason})" if reason else message)


def log_plan_created(logger: logging.Logger, query: str, steps: Iterable[Any]) -> None:
    """Log a freshly attached plan, one line per step.

    Args:
        logger: Logger instance
        query: User query the plan answers
        steps: Plan steps (objects exposing ordinal, tool and description)
    """
    steps = list(steps)
    logger.info(RULE)
    logger.info(f"Plan of {len(steps)} step(s) for: {_preview(query)}")
    for step in steps:
        logger.info(f"  {step.ordinal}. [{step.tool.value}] {step.description}")
    logger.info(RULE)


def log_step_execution(logger: logging.Logger, step_idx: int, step: Any, total: int) -> None:
    logger.info(
        f"Step {step_idx + 1}/{total} [{step.tool.value}] {step.description} "
        f"params={step.params.model_dump_json(exclude={'kind'})}"
    )


def log_node_entry(logger: logging.Logger, node_name: str, state: Dict[str, Any]) -> None:
    """Log node entry with the execution graph's bookkeeping."""
    logger.debug(
        f">> {node_name} turn={state.get('turn_id')} "
        f"step={state.get('step_idx', 0)}/{state.get('total_steps')} "
        f"results={len(state.get('results', []))}"
    )


def log_node_exit(logger: logging.Logger, node_name: str, updates: Dict[str, Any]) -> None:
    shown = {k: (f"+{len(v)} line(s)" if k == "results" else v) for k, v in updates.items()}
    logger.debug(f"<< {node_name} {shown}")


_global_logger = None


def get_logger() -> logging.Logger:
    """Get or create the global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = setup_logging()
    return _global_logger
