"""Google Custom Search JSON API backing the web-search tool kind."""

from __future__ import annotations

import json
import logging
from typing import List

import httpx
from langchain_core.tools import BaseTool, tool

from cognitiveAgent.config import get_settings
from cognitiveAgent.session.schema import Citation
from cognitiveAgent.utils.error_handler import ToolExecutionError

from ..registry import ToolContext, ToolOutcome

LOGGER = logging.getLogger("cognitiveAgent.tools.web_search")

GOOGLE_SEARCH_API = "https://www.googleapis.com/customsearch/v1"


@tool
async def search_web(query: str, num_results: int = 5) -> str:
    """Search the web and return a JSON list of results (title, url, snippet).

    Args:
        query: Specific search keywords
        num_results: Number of results (1-10, default 5)

    Returns:
        JSON object with ``query`` and a ``results`` array.
    """
    settings = get_settings().search
    if not settings.google_api_key or not settings.google_engine_id:
        raise ToolExecutionError(
            "Web search is not configured",
            user_message="GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID must be set",
        )

    params = {
        "key": settings.google_api_key,
        "cx": settings.google_engine_id,
        "q": query,
        "num": max(1, min(10, num_results)),
    }

    try:
        async with httpx.AsyncClient(timeout=settings.timeout) as client:
            response = await client.get(GOOGLE_SEARCH_API, params=params)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as e:
        raise ToolExecutionError(
            f"Search API returned HTTP {e.response.status_code}",
            user_message=f"Web search failed (HTTP {e.response.status_code})",
        ) from e
    except httpx.HTTPError as e:
        raise ToolExecutionError(f"Search request failed: {e}") from e

    results = [
        {
            "title": item.get("title", ""),
            "url": item.get("link", ""),
            "snippet": item.get("snippet", ""),
        }
        for item in data.get("items", [])
    ]
    return json.dumps({"query": query, "results": results}, ensure_ascii=False)


def format_search_results(raw: str) -> tuple[str, List[Citation]]:
    """Turn the search tool's JSON into numbered result text plus citations."""
    data = json.loads(raw)
    results = data.get("results", [])
    if not results:
        return f"No results found for \"{data.get('query', '')}\".", []

    lines = []
    citations: List[Citation] = []
    for number, item in enumerate(results, start=1):
        lines.append(f"[{number}] {item.get('title', '')}: {item.get('snippet', '')}")
        if item.get("url"):
            citations.append(Citation(title=item.get("title", ""), uri=item["url"]))
    return "\n".join(lines), citations


def build_web_search_handler(search_tool: BaseTool = search_web, num_results: int = 5):
    """Handler running ``search_tool``; any failure propagates out of the step."""

    async def web_search_handler(ctx: ToolContext) -> ToolOutcome:
        step = ctx.step
        raw = await search_tool.ainvoke({"query": step.params.query, "num_results": num_results})
        text, citations = format_search_results(raw)
        LOGGER.info(f"Search for {step.params.query!r} returned {len(citations)} citation(s)")
        return ToolOutcome(
            payload=text,
            text=f"Step {step.ordinal} ({step.description}) Result: {text}",
            citations=citations,
        )

    return web_search_handler
