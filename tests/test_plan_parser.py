import json

import pytest

from plans.models import SECTION_KEYS, SECTION_TITLES, Plan
from plans.parser import parse_plan, split_markdown_sections


def test_markdown_sections_assigned_in_order(five_section_text):
    """Bakery scenario: each header's paragraph lands in its section."""
    plan = parse_plan(five_section_text)

    assert plan.analysis.content == "Los pedidos llegan por WhatsApp y se copian a mano en una libreta."
    assert plan.flows.content == "Un agente lee los mensajes y crea el pedido en el sistema."
    assert plan.stack.content == "- WhatsApp Business API\n- Make"
    assert plan.implementation.content == "1. Conectar la cuenta de WhatsApp.\n2. Crear el escenario."
    assert plan.roi.content == "Ahorro de 10 horas semanales."


def test_preamble_is_not_a_section():
    text = "Introducción larga\n### 1. Uno\nprimero\n### 2. Dos\nsegundo\n"
    plan = parse_plan(text)
    assert plan.analysis.content == "primero"
    assert plan.flows.content == "segundo"


def test_missing_trailing_sections_are_empty():
    plan = parse_plan("### 1. A\nuno\n### 2. B\ndos\n")
    assert plan.analysis.content == "uno"
    assert plan.flows.content == "dos"
    assert plan.stack.content == ""
    assert plan.implementation.content == ""
    assert plan.roi.content == ""


def test_extra_sections_are_dropped():
    text = "".join(f"### {i}. T{i}\ncontenido {i}\n" for i in range(1, 8))
    plan = parse_plan(text)
    assert [s.content for _, s in plan.sections()] == [f"contenido {i}" for i in range(1, 6)]


def test_header_text_is_ignored_order_is_the_contract():
    text = "### 5. ROI\nprimero\n### 1. Análisis\nsegundo\n"
    plan = parse_plan(text)
    assert plan.analysis.content == "primero"
    assert plan.flows.content == "segundo"


def test_blank_fragments_are_skipped():
    text = "### 1. A\n\n   \n### 2. B\nreal\n"
    plan = parse_plan(text)
    assert plan.analysis.content == "real"
    assert plan.flows.content == ""


@pytest.mark.parametrize("raw", ["", "   ", "texto sin encabezados", None, 42, ["a"], b"### 1. x\ny\n"])
def test_parse_is_total(raw):
    plan = parse_plan(raw)
    assert isinstance(plan, Plan)
    assert all(section.content == "" for _, section in plan.sections())


def test_structured_mapping_is_copied_field_by_field():
    plan = parse_plan({"analysis": "a", "flows": "f", "stack": 3, "roi": "r", "extra": "x"})
    assert plan.analysis.content == "a"
    assert plan.flows.content == "f"
    assert plan.stack.content == ""
    assert plan.implementation.content == ""
    assert plan.roi.content == "r"


def test_json_text_is_treated_as_structured_output():
    payload = {key: f"contenido de {key}" for key in SECTION_KEYS}
    fenced = "```json\n" + json.dumps(payload) + "\n```"
    plan = parse_plan(fenced)
    assert plan.implementation.content == "contenido de implementation"


def test_pydantic_output_is_accepted():
    from workflows.planning.state import PlanSections

    plan = parse_plan(PlanSections(analysis="x", roi="y"))
    assert plan.analysis.content == "x"
    assert plan.roi.content == "y"
    assert plan.flows.content == ""


def test_titles_are_fixed_constants(five_section_text):
    for raw in (five_section_text, {"analysis": "a"}, ""):
        plan = parse_plan(raw)
        for key, section in plan.sections():
            assert section.title == SECTION_TITLES[key]


def test_split_markdown_sections_drops_preamble():
    assert split_markdown_sections("pre\n### 1. A\nx\n") == ["x"]
    assert split_markdown_sections("sin encabezados") == []
