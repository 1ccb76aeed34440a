"""Runtime assembly for cognitive sessions."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from langchain_core.tools import BaseTool

from cognitiveAgent.agents import ModelResolver
from cognitiveAgent.config import get_settings
from cognitiveAgent.models import build_default_registry
from cognitiveAgent.session.archive import InMemoryTurnArchive, SqliteTurnArchive, TurnArchive
from cognitiveAgent.session.orchestrator import CognitiveOrchestrator
from cognitiveAgent.telemetry import configure_tracing
from cognitiveAgent.tools import build_tool_dispatcher

from .model_resolver import build_model_resolver, resolve_model_configs

LOGGER = logging.getLogger("cognitiveAgent.runtime")


def _create_archive(db_path: Optional[str]) -> TurnArchive:
    if db_path:
        LOGGER.info(f"Archiving turns to SQLite at {db_path}")
        return SqliteTurnArchive(db_path)
    LOGGER.info("Archive path not configured; archived turns stay in memory")
    return InMemoryTurnArchive()


def build_application(
    *,
    model_resolver: Optional[ModelResolver] = None,
    archive: Optional[TurnArchive] = None,
    search_tool: Optional[BaseTool] = None,
) -> Callable[[], CognitiveOrchestrator]:
    """Wire settings, models, tools and archive; return a session factory.

    Args:
        model_resolver: Optional custom model resolver (tests pass fakes here)
        archive: Optional archive collaborator shared by every session
        search_tool: Optional replacement for the Google search tool

    Returns:
        Callable creating a fresh, independent orchestrator per call
    """

    settings = get_settings()
    configure_tracing(settings.observability)

    model_configs = resolve_model_configs(settings)
    model_registry = build_default_registry(model_configs)
    resolver = model_resolver or build_model_resolver(model_configs)

    dispatcher = build_tool_dispatcher(
        model_registry=model_registry,
        model_resolver=resolver,
        governance=settings.governance,
        search=settings.search,
        search_tool=search_tool,
    )
    shared_archive = archive if archive is not None else _create_archive(settings.observability.archive_db_path)
    LOGGER.info(f"Application assembled (max plan steps: {settings.governance.max_plan_steps})")

    def new_session() -> CognitiveOrchestrator:
        return CognitiveOrchestrator(
            model_registry=model_registry,
            model_resolver=resolver,
            dispatcher=dispatcher,
            governance=settings.governance,
            archive=shared_archive,
            log_prompt_max_length=settings.observability.log_prompt_max_length,
        )

    return new_session
