"""Turn raw LLM output into a five-section Plan.

Two output shapes are understood:

* a JSON object (or mapping) keyed by the section keys (the default);
* legacy markdown with ``### N. Title`` headers, where fragments are assigned
  to sections by position and header text is ignored.

``parse_plan`` never raises; anything it cannot read yields empty sections.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Mapping

from .models import SECTION_KEYS, Plan

_logger = logging.getLogger("advisor")

SECTION_HEADER = re.compile(r"### \d+\.\s+.*?\n")


def split_markdown_sections(text: str) -> List[str]:
    """Return the non-blank fragments between ``### N.`` headers, preamble dropped."""
    parts = SECTION_HEADER.split(text)
    return [p.strip() for p in parts[1:] if p.strip()]


def extract_json_object(text: str) -> Mapping[str, Any] | None:
    """Return the JSON object carried by ``text`` (optionally fenced), if any."""
    content = text.strip()
    if content.startswith("```json"):
        content = content.split("```json")[1].split("```")[0].strip()
    elif content.startswith("```"):
        content = content.split("```")[1].split("```")[0].strip()
    if not content.startswith("{"):
        return None
    try:
        data = json.loads(content)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _from_mapping(data: Mapping[str, Any]) -> Plan:
    contents = {}
    for key in SECTION_KEYS:
        value = data.get(key)
        contents[key] = value if isinstance(value, str) else ""
    return Plan.from_contents(contents)


def _from_markdown(text: str) -> Plan:
    fragments = split_markdown_sections(text)
    if len(fragments) > len(SECTION_KEYS):
        _logger.info("Plan text had %d sections, keeping the first %d", len(fragments), len(SECTION_KEYS))
    return Plan.from_contents(dict(zip(SECTION_KEYS, fragments)))


def parse_plan(raw: Any) -> Plan:
    """Normalize raw generation output into a Plan.

    Args:
        raw: Markdown text, a JSON string, a mapping, or a pydantic model
            exposing the five section fields.

    Returns:
        A Plan with all five sections present (possibly empty).
    """
    if isinstance(raw, Plan):
        return raw.model_copy(deep=True)
    if hasattr(raw, "model_dump"):
        try:
            raw = raw.model_dump()
        except Exception:
            _logger.warning("Could not dump structured plan output of type %s", type(raw).__name__)
            return Plan()
    if isinstance(raw, Mapping):
        return _from_mapping(raw)
    if isinstance(raw, str):
        data = extract_json_object(raw)
        if data is not None:
            return _from_mapping(data)
        return _from_markdown(raw)
    _logger.warning("Unsupported plan output type %s; using an empty plan", type(raw).__name__)
    return Plan()
