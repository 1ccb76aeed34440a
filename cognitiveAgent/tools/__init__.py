"""Tool dispatch table and the default handler set."""

from __future__ import annotations

from typing import Optional

from langchain_core.tools import BaseTool

from cognitiveAgent.agents import ModelResolver
from cognitiveAgent.config.settings import GovernanceSettings, SearchSettings
from cognitiveAgent.models import ModelRegistry
from cognitiveAgent.session.schema import ToolKind

from .builtin import (
    SandboxLimits,
    build_context_modulation_handler,
    build_image_synthesis_handler,
    build_sandbox_handler,
    build_web_search_handler,
    final_synthesis_handler,
    image_analysis_handler,
    search_web,
)
from .registry import ToolContext, ToolDispatcher, ToolOutcome


def build_tool_dispatcher(
    *,
    model_registry: ModelRegistry,
    model_resolver: ModelResolver,
    governance: GovernanceSettings,
    search: Optional[SearchSettings] = None,
    search_tool: Optional[BaseTool] = None,
) -> ToolDispatcher:
    """Assemble the dispatcher with the built-in handler for every tool kind."""

    limits = SandboxLimits(
        timeout=governance.sandbox_timeout,
        memory_mb=governance.sandbox_memory_mb,
        cpu_seconds=governance.sandbox_cpu_seconds,
        allow_network=governance.allow_sandbox_network,
    )
    num_results = search.num_results if search is not None else 5
    handlers = {
        ToolKind.WEB_SEARCH: build_web_search_handler(search_tool or search_web, num_results=num_results),
        ToolKind.SANDBOXED_CODE: build_sandbox_handler(limits),
        ToolKind.CONTEXT_MODULATION: build_context_modulation_handler(
            model_registry=model_registry, model_resolver=model_resolver
        ),
        ToolKind.IMAGE_SYNTHESIS: build_image_synthesis_handler(
            model_registry=model_registry, model_resolver=model_resolver
        ),
        ToolKind.IMAGE_ANALYSIS: image_analysis_handler,
        ToolKind.FINAL_SYNTHESIS: final_synthesis_handler,
    }
    return ToolDispatcher(handlers)


__all__ = [
    "ToolContext",
    "ToolDispatcher",
    "ToolOutcome",
    "build_tool_dispatcher",
]
