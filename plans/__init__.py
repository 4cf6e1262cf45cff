"""Plan document model, parser and report rendering."""
from .models import (
    SECTION_KEYS,
    SECTION_TITLES,
    GroundingSource,
    Plan,
    PlanSection,
    SavedPlan,
    clean_sources,
)
from .parser import parse_plan
from .report import layout_report, render_markdown

__all__ = [
    "SECTION_KEYS",
    "SECTION_TITLES",
    "GroundingSource",
    "Plan",
    "PlanSection",
    "SavedPlan",
    "clean_sources",
    "parse_plan",
    "layout_report",
    "render_markdown",
]
