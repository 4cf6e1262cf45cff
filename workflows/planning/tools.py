"""Tools for the automation planning workflow."""
import json
import logging
from typing import Annotated, Any, Dict, List, Optional

from langchain_tavily import TavilySearch
from langchain_core.messages import ToolMessage
from langchain_core.tools import tool, InjectedToolArg
from langchain_core.runnables import RunnableConfig

from plans.models import GroundingSource, clean_sources
from shared.config import Configuration

_logger = logging.getLogger("advisor")

# Lazily initialized Tavily tool to ensure env is loaded
_tavily_search: Optional[TavilySearch] = None


@tool
async def web_search(query: str, *, config: Annotated[RunnableConfig, InjectedToolArg]) -> str:
    """Search the web for current automation tools, integrations and prices.

    Args:
        query: The search query string
        config: Injected configuration (automatically provided)

    Returns:
        JSON with a "results" list of {url, title, content} entries
    """
    cfg = Configuration.from_runnable_config(config)

    try:
        # Initialize on first use so .env is loaded
        global _tavily_search
        if _tavily_search is None:
            if not cfg.tavily_api_key:
                return json.dumps({"results": [], "error": "Search unavailable: TAVILY_API_KEY is not set."})
            _tavily_search = TavilySearch(max_results=5, tavily_api_key=cfg.tavily_api_key)

        results = await _tavily_search.ainvoke({"query": query})
        if isinstance(results, str):
            return json.dumps({"results": [], "error": results})
        return json.dumps(results, ensure_ascii=False, default=str)

    except Exception as e:
        _logger.warning("web_search failed for %r: %r", query, e)
        return json.dumps({"results": [], "error": f"Search failed: {e}"})


def _search_payloads(messages: List[Any]) -> List[Dict[str, Any]]:
    payloads = []
    for message in messages:
        if not isinstance(message, ToolMessage) or message.name != "web_search":
            continue
        try:
            data = json.loads(message.content)
        except (TypeError, ValueError):
            continue
        if isinstance(data, dict):
            payloads.append(data)
    return payloads


def collect_sources(messages: List[Any]) -> List[GroundingSource]:
    """Citations from every web_search result in the conversation, deduplicated by URI."""
    seen = set()
    sources = []
    for payload in _search_payloads(messages):
        for source in clean_sources(payload.get("results")):
            if source.uri in seen:
                continue
            seen.add(source.uri)
            sources.append(source)
    return sources


def research_notes(messages: List[Any], limit: int = 400) -> str:
    """Compact bullet list of search findings for the plan writer."""
    lines = []
    for payload in _search_payloads(messages):
        for item in payload.get("results") or []:
            if not isinstance(item, dict):
                continue
            snippet = str(item.get("content") or "").strip().replace("\n", " ")
            if len(snippet) > limit:
                snippet = snippet[:limit] + "..."
            lines.append(f"- {item.get('title') or ''} ({item.get('url') or ''}): {snippet}")
    return "\n".join(lines) or "- Sin resultados de búsqueda."
