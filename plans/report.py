"""Printable renditions of a plan: paginated report pages and Markdown."""
from __future__ import annotations

import textwrap
from typing import List, Optional, Sequence

from .models import GroundingSource, Plan

REPORT_TITLE = "Plan de Automatización de Negocios"
SOURCES_TITLE = "Fuentes de Información"


def layout_report(
    plan: Plan,
    description: str = "",
    *,
    width: int = 90,
    lines_per_page: int = 48,
) -> List[List[str]]:
    """Lay out a plan as pages of word-wrapped lines.

    Sections without content are skipped. A section never starts on the
    last two lines of a page, and no page is left empty.
    """
    lines: List[str] = [REPORT_TITLE, ""]
    if description.strip():
        lines.extend(textwrap.wrap(description.strip(), width=width))
        lines.append("")

    blocks: List[List[str]] = []
    for _, section in plan.sections():
        if not section.content.strip():
            continue
        block = [section.title]
        for paragraph in section.content.splitlines():
            block.extend(textwrap.wrap(paragraph, width=width) or [""])
        block.append("")
        blocks.append(block)

    pages: List[List[str]] = [[]]

    def _emit(line: str) -> None:
        if len(pages[-1]) >= lines_per_page:
            pages.append([])
        pages[-1].append(line)

    for line in lines:
        _emit(line)
    for block in blocks:
        if pages[-1] and lines_per_page - len(pages[-1]) <= 2:
            pages.append([])
        for line in block:
            _emit(line)
    return pages


def render_markdown(
    plan: Plan,
    description: str = "",
    sources: Optional[Sequence[GroundingSource]] = None,
) -> str:
    """Render a plan (and its sources) as a Markdown document."""
    out = [f"# {REPORT_TITLE}", ""]
    if description.strip():
        out += [f"> {description.strip()}", ""]
    for _, section in plan.sections():
        out += [f"## {section.title}", "", section.content.strip() or "_Pendiente de generación..._", ""]
    if sources:
        out += [f"## {SOURCES_TITLE}", ""]
        out += [f"- [{s.title}]({s.uri})" for s in sources]
        out.append("")
    return "\n".join(out)
