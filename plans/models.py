"""Plan document model: sections, plans, sources and saved projects."""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SECTION_KEYS: Tuple[str, ...] = ("analysis", "flows", "stack", "implementation", "roi")

SECTION_TITLES: Dict[str, str] = {
    "analysis": "1. Análisis de Procesos Manuales",
    "flows": "2. Diseño de Flujos de Agentes",
    "stack": "3. Stack Tecnológico Recomendado",
    "implementation": "4. Implementación Paso a Paso",
    "roi": "5. ROI Estimado",
}

DEFAULT_SOURCE_TITLE = "Fuente de información"

# 9999-12-31T23:59:59.999Z
MAX_TIMESTAMP_MS = 253_402_300_799_999


class PlanSection(BaseModel):
    """One titled block of the plan. Content is free-form markdown-ish text."""

    title: str
    content: str = ""


def _section(key: str):
    return Field(default_factory=lambda: PlanSection(title=SECTION_TITLES[key]))


class Plan(BaseModel):
    """The five-section automation plan.

    All five sections are always present; titles are fixed constants and are
    re-applied on validation, so a plan read from any source is normalized.
    """

    analysis: PlanSection = _section("analysis")
    flows: PlanSection = _section("flows")
    stack: PlanSection = _section("stack")
    implementation: PlanSection = _section("implementation")
    roi: PlanSection = _section("roi")

    @model_validator(mode="after")
    def _fixed_titles(self) -> "Plan":
        for key in SECTION_KEYS:
            getattr(self, key).title = SECTION_TITLES[key]
        return self

    @classmethod
    def from_contents(cls, contents: Dict[str, str]) -> "Plan":
        return cls(**{
            key: PlanSection(title=SECTION_TITLES[key], content=contents.get(key, ""))
            for key in SECTION_KEYS
        })

    def section(self, key: str) -> PlanSection:
        if key not in SECTION_KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def sections(self) -> Iterator[Tuple[str, PlanSection]]:
        for key in SECTION_KEYS:
            yield key, getattr(self, key)

    def is_empty(self) -> bool:
        return not any(s.content.strip() for _, s in self.sections())


class GroundingSource(BaseModel):
    """A citation returned by search-grounded generation."""

    uri: str = Field(min_length=1)
    title: str = DEFAULT_SOURCE_TITLE


def clean_sources(items: Any) -> List[GroundingSource]:
    """Normalize raw citation entries, discarding those without a URI."""
    if not isinstance(items, list):
        return []
    sources: List[GroundingSource] = []
    for item in items:
        if isinstance(item, GroundingSource):
            sources.append(item)
            continue
        if not isinstance(item, dict):
            continue
        uri = item.get("uri") or item.get("url") or ""
        if not isinstance(uri, str) or not uri.strip():
            continue
        title = item.get("title")
        sources.append(
            GroundingSource(
                uri=uri.strip(),
                title=title if isinstance(title, str) and title.strip() else DEFAULT_SOURCE_TITLE,
            )
        )
    return sources


class SavedPlan(BaseModel):
    """A named, persisted project.

    Serialized with camelCase ``businessDescription`` as in
    the stored record and exported files.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str = ""
    timestamp: int = Field(default=0, ge=0, le=MAX_TIMESTAMP_MS)
    business_description: str = Field(default="", alias="businessDescription")
    plan: Plan
    sources: List[GroundingSource] = Field(default_factory=list)

    @field_validator("sources", mode="before")
    @classmethod
    def _drop_sources_without_uri(cls, value: Any) -> List[GroundingSource]:
        return clean_sources(value)

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict using the stored (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)
