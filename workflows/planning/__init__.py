"""Automation planning workflow subgraph."""
from .graph import planning_graph, generate_automation_plan
from .orchestrator import PlanOrchestrator
from .state import GenerationResult, PlanningState

__all__ = [
    "planning_graph",
    "generate_automation_plan",
    "PlanOrchestrator",
    "GenerationResult",
    "PlanningState",
]
