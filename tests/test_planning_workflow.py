import json

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from shared.config import Configuration
from shared.errors import GenerationError
from workflows.planning import graph as graph_module
from workflows.planning import nodes as nodes_module
from workflows.planning.nodes import (
    MAX_SEARCH_ROUNDS,
    initialize_planning,
    research_agent,
    route_research,
    write_plan,
)
from workflows.planning.orchestrator import PlanOrchestrator
from workflows.planning.state import GenerationResult, PlanningState, PlanSections
from workflows.planning.tools import collect_sources, research_notes, web_search


def _search_message(call_id: str, results) -> ToolMessage:
    return ToolMessage(
        content=json.dumps({"results": results}),
        name="web_search",
        tool_call_id=call_id,
    )


def _tool_call_message(call_id: str) -> AIMessage:
    return AIMessage(
        content="",
        tool_calls=[{"name": "web_search", "args": {"query": "crm"}, "id": call_id}],
    )


def test_collect_sources_dedupes_and_drops_empty_urls():
    messages = [
        _search_message("1", [
            {"url": "https://a.example", "title": "A", "content": "..."},
            {"url": "", "title": "vacío"},
        ]),
        _search_message("2", [
            {"url": "https://a.example", "title": "A otra vez"},
            {"url": "https://b.example"},
        ]),
        ToolMessage(content="not json", name="web_search", tool_call_id="3"),
    ]

    sources = collect_sources(messages)

    assert [s.uri for s in sources] == ["https://a.example", "https://b.example"]
    assert sources[0].title == "A"
    assert sources[1].title == "Fuente de información"


def test_research_notes_without_results():
    assert research_notes([HumanMessage(content="hola")]) == "- Sin resultados de búsqueda."


def test_research_notes_truncates_snippets():
    messages = [_search_message("1", [{"url": "https://a.example", "title": "A", "content": "x" * 50}])]
    notes = research_notes(messages, limit=10)
    assert notes == "- A (https://a.example): " + "x" * 10 + "..."


def test_route_research_follows_tool_calls():
    state = PlanningState(business_description="d", messages=[HumanMessage(content="d"), _tool_call_message("1")])
    assert route_research(state) == "tools"


def test_route_research_stops_without_tool_calls():
    state = PlanningState(business_description="d", messages=[AIMessage(content="listo")])
    assert route_research(state) == "write_plan"


def test_route_research_stops_when_budget_spent():
    messages = [HumanMessage(content="d")]
    for i in range(MAX_SEARCH_ROUNDS + 1):
        messages.append(_tool_call_message(str(i)))
        messages.append(_search_message(str(i), []))
    messages.pop()
    state = PlanningState(business_description="d", messages=messages)
    assert route_research(state) == "write_plan"


@pytest.mark.asyncio
async def test_generate_automation_plan_invokes_graph(monkeypatch):
    captured = {}

    async def fake_ainvoke(state, config=None):
        captured["state"] = state
        captured["config"] = config
        return {
            "raw_plan": {"analysis": "a", "roi": "r"},
            "sources": [{"uri": "https://a.example", "title": "A"}],
        }

    monkeypatch.setattr(graph_module.planning_graph, "ainvoke", fake_ainvoke)
    cfg = Configuration(openai_api_key="test", plan_output_format="markdown")

    result = await graph_module.generate_automation_plan("Clínica dental", cfg)

    assert isinstance(result, GenerationResult)
    assert result.raw == {"analysis": "a", "roi": "r"}
    assert captured["state"].business_description == "Clínica dental"
    assert captured["state"].output_format == "markdown"
    assert captured["config"]["configurable"]["openai_api_key"] == "test"


@pytest.mark.asyncio
async def test_orchestrator_parses_structured_output():
    async def generator(description):
        return GenerationResult(
            raw={"analysis": "a", "flows": "f", "stack": "s", "implementation": "i", "roi": "r"},
            sources=[{"uri": "https://a.example", "title": "A"}, {"uri": "", "title": "x"}],
        )

    orchestrator = PlanOrchestrator(generator, timeout=1.0)
    plan, sources = await orchestrator.generate("Agencia de viajes")

    assert plan.stack.content == "s"
    assert [s.uri for s in sources] == ["https://a.example"]
    assert orchestrator.is_loading is False


@pytest.mark.asyncio
async def test_orchestrator_unparseable_output_gives_empty_plan():
    async def generator(description):
        return GenerationResult(raw="Lo siento, no puedo ayudarte.")

    plan, sources = await PlanOrchestrator(generator).generate("Agencia de viajes")

    assert plan.is_empty()
    assert sources == []


@pytest.mark.asyncio
@pytest.mark.parametrize("result", [object(), GenerationResult(raw="### 1. A\nuno\n", sources=5)])
async def test_orchestrator_malformed_result_is_a_generation_error(result):
    async def generator(description):
        return result

    orchestrator = PlanOrchestrator(generator, timeout=1.0)

    with pytest.raises(GenerationError):
        await orchestrator.generate("Agencia de viajes")
    assert orchestrator.is_loading is False


# --------------------------------------------------------------------------- #
# Nodes
# --------------------------------------------------------------------------- #


class FakeLLM:
    """Records the messages it receives and answers with a canned reply."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = []
        self.schema = None

    async def ainvoke(self, messages, config=None):
        self.calls.append(messages)
        return self.reply

    def with_structured_output(self, schema):
        self.schema = schema
        return self


_SEARCH_RESULTS = [{"url": "https://make.example", "title": "Make", "content": "Automatiza flujos."}]


@pytest.mark.asyncio
async def test_initialize_planning_seeds_prompt_with_description():
    update = await initialize_planning(PlanningState(business_description="Clínica dental"))

    system, human = update["messages"]
    assert isinstance(system, SystemMessage)
    assert isinstance(human, HumanMessage)
    assert "Clínica dental" in human.content


@pytest.mark.asyncio
async def test_research_agent_binds_web_search(monkeypatch):
    reply = _tool_call_message("1")
    llm = FakeLLM(reply)
    captured = {}

    def fake_orchestrator_llm(cfg, tools=None):
        captured["tools"] = tools
        return llm

    monkeypatch.setattr(nodes_module, "get_orchestrator_llm", fake_orchestrator_llm)
    state = PlanningState(business_description="d", messages=[HumanMessage(content="d")])

    update = await research_agent(state)

    assert update == {"messages": [reply]}
    assert captured["tools"] == [web_search]
    assert llm.calls[0] == state.messages


@pytest.mark.asyncio
async def test_write_plan_markdown_returns_text_and_sources(monkeypatch, five_section_text):
    llm = FakeLLM(AIMessage(content=five_section_text))
    monkeypatch.setattr(nodes_module, "get_text_llm", lambda cfg: llm)
    state = PlanningState(
        business_description="Panadería",
        output_format="markdown",
        messages=[_tool_call_message("1"), _search_message("1", _SEARCH_RESULTS)],
    )

    update = await write_plan(state)

    assert update["raw_plan"] == five_section_text
    assert [s.uri for s in update["sources"]] == ["https://make.example"]
    assert llm.schema is None
    prompt = llm.calls[0][-1].content
    assert "Panadería" in prompt
    assert "https://make.example" in prompt


@pytest.mark.asyncio
async def test_write_plan_json_returns_structured_sections(monkeypatch):
    sections = PlanSections(analysis="a", flows="f", stack="s", implementation="i", roi="r")
    llm = FakeLLM(sections)
    monkeypatch.setattr(nodes_module, "get_text_llm", lambda cfg: llm)
    state = PlanningState(
        business_description="Panadería",
        messages=[_tool_call_message("1"), _search_message("1", _SEARCH_RESULTS)],
    )

    update = await write_plan(state)

    assert update["raw_plan"] is sections
    assert llm.schema is PlanSections
    assert [s.title for s in update["sources"]] == ["Make"]
    assert all(not isinstance(m, ToolMessage) for m in llm.calls[0])
