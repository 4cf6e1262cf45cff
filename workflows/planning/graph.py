"""Planning workflow graph definition and the generation entry point."""
from dataclasses import asdict
from typing import Optional

from langgraph.graph import StateGraph, START, END
from langgraph.prebuilt import ToolNode

from shared.config import Configuration
from .state import GenerationResult, PlanningState
from .nodes import initialize_planning, research_agent, write_plan, route_research
from .tools import web_search


def create_planning_workflow() -> StateGraph:
    """Create the automation planning workflow graph.

    Flow:
    1. Initialize with system prompt and business description
    2. Agent researches current tools, may call web_search
    3. Tools execute if needed, loop back to agent
    4. When ready, write the five-section plan
    5. Return raw plan and collected sources to caller

    Returns:
        Compiled planning workflow graph
    """
    workflow = StateGraph(PlanningState)

    workflow.add_node("initialize", initialize_planning)
    workflow.add_node("agent", research_agent)
    workflow.add_node("tools", ToolNode([web_search]))
    workflow.add_node("write_plan", write_plan)

    workflow.add_edge(START, "initialize")
    workflow.add_edge("initialize", "agent")

    workflow.add_conditional_edges(
        "agent",
        route_research,
        {
            "tools": "tools",
            "write_plan": "write_plan",
        },
    )

    workflow.add_edge("tools", "agent")
    workflow.add_edge("write_plan", END)

    return workflow.compile()


# Export the compiled graph
planning_graph = create_planning_workflow()


async def generate_automation_plan(
    business_description: str, config: Optional[Configuration] = None
) -> GenerationResult:
    """Run the planning graph for one business description.

    This is the plan-generation collaborator used by PlanOrchestrator.
    """
    cfg = config or Configuration()
    initial_state = PlanningState(
        business_description=business_description,
        output_format=cfg.plan_output_format,
    )
    result = await planning_graph.ainvoke(initial_state, {"configurable": asdict(cfg)})
    return GenerationResult(
        raw=result.get("raw_plan"),
        sources=list(result.get("sources") or []),
    )
