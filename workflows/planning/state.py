"""State definition for the automation planning workflow."""
from dataclasses import dataclass, field
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, Field
from langgraph.graph import add_messages

from plans.models import GroundingSource


class PlanSections(BaseModel):
    """Structured output requested from the plan writer."""
    analysis: str = Field(default="", description="Manual processes that can be automated")
    flows: str = Field(default="", description="Design of the agent flows")
    stack: str = Field(default="", description="Recommended technology stack")
    implementation: str = Field(default="", description="Step by step implementation")
    roi: str = Field(default="", description="Estimated return on investment")


class PlanningState(BaseModel):
    """State for the planning workflow.

    This state tracks:
    - The business description being audited
    - Message history of the research loop
    - The raw plan produced by the writer (JSON object or markdown text)
    - Grounding sources collected from web searches
    """

    # Input
    business_description: str = Field(description="The business to audit")
    output_format: str = Field(default="json", description="'json' or 'markdown'")

    # Message history (append-only merge using LangGraph's add_messages reducer)
    messages: Annotated[list, add_messages] = Field(
        default_factory=list, description="LLM conversation history"
    )

    # Output
    raw_plan: Optional[Any] = Field(default=None, description="Writer output before parsing")
    sources: List[GroundingSource] = Field(default_factory=list)

    class Config:
        arbitrary_types_allowed = True


@dataclass
class GenerationResult:
    """What the plan-generation collaborator hands back to the orchestrator."""
    raw: Any
    sources: List[Any] = field(default_factory=list)
