"""Nodes for the automation planning workflow."""
from typing import Dict, Literal, Optional

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_core.runnables import RunnableConfig

from shared.config import Configuration
from shared.utils import get_orchestrator_llm, get_text_llm
from .state import PlanningState, PlanSections
from .tools import collect_sources, research_notes, web_search
from . import prompts

MAX_SEARCH_ROUNDS = 3


async def initialize_planning(
    state: PlanningState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """Seed the research loop with the system prompt and the business description."""
    messages = [
        SystemMessage(content=prompts.SYSTEM_PROMPT),
        HumanMessage(content=prompts.INITIAL_ANALYSIS_PROMPT.format(
            description=state.business_description,
            max_searches=MAX_SEARCH_ROUNDS,
        )),
    ]

    return {"messages": messages}


async def research_agent(
    state: PlanningState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """Agent node that researches current tools with web_search.

    Uses the orchestrator LLM and decides itself when it has enough
    information to hand over to the plan writer.
    """
    cfg = Configuration.from_runnable_config(config)
    llm = get_orchestrator_llm(cfg, tools=[web_search])

    response = await llm.ainvoke(state.messages)

    return {"messages": [response]}


async def write_plan(
    state: PlanningState, *, config: Optional[RunnableConfig] = None
) -> Dict:
    """Write the five-section plan from the description and the research.

    In ``json`` mode the text LLM returns the sections as a structured
    object; in ``markdown`` mode it returns the legacy header-delimited text.
    The writer starts from a fresh prompt so pending tool calls of the
    research loop never reach it.
    """
    cfg = Configuration.from_runnable_config(config)
    llm = get_text_llm(cfg)
    research = research_notes(state.messages)

    if state.output_format == "markdown":
        prompt = prompts.PLAN_MARKDOWN_PROMPT.format(
            description=state.business_description, research=research
        )
        response = await llm.ainvoke([
            SystemMessage(content=prompts.SYSTEM_PROMPT),
            HumanMessage(content=prompt),
        ])
        raw_plan = response.content or ""
    else:
        prompt = prompts.PLAN_JSON_PROMPT.format(
            description=state.business_description, research=research
        )
        structured = llm.with_structured_output(PlanSections)
        raw_plan = await structured.ainvoke([
            SystemMessage(content=prompts.SYSTEM_PROMPT),
            HumanMessage(content=prompt),
        ])

    return {
        "raw_plan": raw_plan,
        "sources": collect_sources(state.messages),
    }


def route_research(
    state: PlanningState,
) -> Literal["tools", "write_plan"]:
    """Route between tool execution and plan writing.

    Follows tool calls until the agent stops asking for them or the
    search budget is spent.
    """
    messages = state.messages
    if not messages:
        return "write_plan"

    last_message = messages[-1]
    rounds = sum(1 for m in messages if isinstance(m, AIMessage) and m.tool_calls)

    if isinstance(last_message, AIMessage) and last_message.tool_calls and rounds <= MAX_SEARCH_ROUNDS:
        return "tools"

    return "write_plan"
