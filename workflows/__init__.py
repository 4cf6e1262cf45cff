"""Workflow subgraphs."""
from .planning import planning_graph, generate_automation_plan, PlanOrchestrator, GenerationResult

__all__ = [
    "planning_graph",
    "generate_automation_plan",
    "PlanOrchestrator",
    "GenerationResult",
]
