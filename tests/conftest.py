"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
The fixtures replace every model backend with scripted fakes so no test talks
to a real provider.
"""

import asyncio
import json
import sys
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from langchain_core.messages import AIMessageChunk  # noqa: E402
from langchain_core.tools import tool  # noqa: E402

from cognitiveAgent.config.settings import GovernanceSettings  # noqa: E402
from cognitiveAgent.models import build_default_registry  # noqa: E402
from cognitiveAgent.session.orchestrator import CognitiveOrchestrator  # noqa: E402
from cognitiveAgent.tools import build_tool_dispatcher  # noqa: E402
from cognitiveAgent.utils.error_handler import ToolExecutionError  # noqa: E402

FAKE_MODEL_CONFIGS = {
    "base": {"id": "fake-base", "api_key": "test", "base_url": None},
    "reason": {"id": "fake-reason", "api_key": "test", "base_url": None},
    "chat": {"id": "fake-chat", "api_key": "test", "base_url": None},
}


class FakeBackend:
    """Scripted stand-in for every model call a session makes.

    ``structured`` holds queued responses per schema; an exception instance in
    the queue is raised instead of returned. The last queued response repeats.
    ``gates`` optionally block a schema's call until the event is set.
    """

    def __init__(self) -> None:
        self.structured: Dict[type, List[Any]] = defaultdict(list)
        self.gates: Dict[type, asyncio.Event] = {}
        self.stream_chunks: List[str] = ["The answer", " is 4."]
        self.stream_error: Optional[Exception] = None
        self.structured_calls: List[tuple] = []
        self.stream_calls: List[list] = []

    def queue(self, schema: type, *responses: Any) -> None:
        self.structured[schema].extend(responses)

    async def respond(self, schema: type, messages: list) -> Any:
        self.structured_calls.append((schema, messages))
        gate = self.gates.get(schema)
        if gate is not None:
            await gate.wait()
        responses = self.structured[schema]
        if not responses:
            raise AssertionError(f"No fake response queued for {schema.__name__}")
        response = responses.pop(0) if len(responses) > 1 else responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def stream(self, messages: list):
        self.stream_calls.append(messages)
        for text in self.stream_chunks:
            await asyncio.sleep(0)
            yield AIMessageChunk(content=text)
        if self.stream_error is not None:
            raise self.stream_error


class FakeStructuredRunnable:
    def __init__(self, backend: FakeBackend, schema: type) -> None:
        self.backend = backend
        self.schema = schema

    async def ainvoke(self, messages):
        return await self.backend.respond(self.schema, messages)


class FakeChatModel:
    def __init__(self, backend: FakeBackend, model_id: str) -> None:
        self.backend = backend
        self.model_id = model_id

    def with_structured_output(self, schema):
        return FakeStructuredRunnable(self.backend, schema)

    async def astream(self, messages):
        async for chunk in self.backend.stream(messages):
            yield chunk


SEARCH_RESULTS = [
    {"title": "Example Domain", "url": "https://example.com/a", "snippet": "First result"},
    {"title": "Second Source", "url": "https://example.org/b", "snippet": "Second result"},
]


@tool
async def fake_search(query: str, num_results: int = 5) -> str:
    """Return canned search results."""
    return json.dumps({"query": query, "results": SEARCH_RESULTS[:num_results]})


@tool
async def failing_search(query: str, num_results: int = 5) -> str:
    """Always fail like an unreachable search backend."""
    raise ToolExecutionError("Search API returned HTTP 503", user_message="Web search failed (HTTP 503)")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def model_registry():
    return build_default_registry(FAKE_MODEL_CONFIGS)


@pytest.fixture
def model_resolver(backend):
    def resolver(model_id: str):
        return FakeChatModel(backend, model_id)

    return resolver


@pytest.fixture
def make_session(model_registry, model_resolver):
    """Factory fixture building an orchestrator on the fake backend."""

    def factory(*, search_tool=fake_search, max_steps: int = 12, archive=None, sandbox_timeout: float = 10.0):
        governance = GovernanceSettings(max_plan_steps=max_steps, sandbox_timeout=sandbox_timeout)
        dispatcher = build_tool_dispatcher(
            model_registry=model_registry,
            model_resolver=model_resolver,
            governance=governance,
            search_tool=search_tool,
        )
        return CognitiveOrchestrator(
            model_registry=model_registry,
            model_resolver=model_resolver,
            dispatcher=dispatcher,
            governance=governance,
            archive=archive,
        )

    return factory


@pytest.fixture
def snapshots():
    """Collects every published snapshot; pass ``snapshots.append`` to subscribe()."""
    return []


@pytest.fixture
def failing_search_tool():
    return failing_search
