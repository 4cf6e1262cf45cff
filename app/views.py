"""Text rendering shared by the terminal and Chainlit front ends."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from plans.models import SECTION_KEYS, GroundingSource, Plan, SavedPlan

PENDING = "_Pendiente de generación..._"

SECTION_ALIASES = {
    "analisis": "analysis",
    "análisis": "analysis",
    "flujos": "flows",
    "stack": "stack",
    "implementacion": "implementation",
    "implementación": "implementation",
    "roi": "roi",
}


def resolve_section(name: str) -> Optional[str]:
    """Accept a section key, its Spanish name, or its number (1-5)."""
    value = name.strip().lower()
    if value in SECTION_KEYS:
        return value
    if value.isdigit() and 1 <= int(value) <= len(SECTION_KEYS):
        return SECTION_KEYS[int(value) - 1]
    return SECTION_ALIASES.get(value)


def resolve_project(projects: Sequence[SavedPlan], ref: str) -> Optional[SavedPlan]:
    """Find a project by its position in the list (1-based) or by id."""
    ref = ref.strip()
    for project in projects:
        if project.id == ref:
            return project
    if ref.isdigit() and 1 <= int(ref) <= len(projects):
        return projects[int(ref) - 1]
    return None


def format_section(plan: Plan, key: str) -> str:
    section = plan.section(key)
    return f"### {section.title}\n\n{section.content.strip() or PENDING}"


def format_plan(plan: Plan, sources: Sequence[GroundingSource] = ()) -> str:
    parts = [format_section(plan, key) for key in SECTION_KEYS]
    parts.append(format_sources(sources))
    return "\n\n".join(parts)


def format_sources(sources: Sequence[GroundingSource]) -> str:
    if not sources:
        return "### Fuentes de Información\n\n_Sin fuentes externas._"
    lines = [f"- [{s.title}]({s.uri})" for s in sources]
    return "### Fuentes de Información\n\n" + "\n".join(lines)


def format_timestamp(millis: int) -> str:
    try:
        return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")
    except (ValueError, OverflowError, OSError):
        return "fecha desconocida"


def format_projects(projects: Sequence[SavedPlan], current_id: Optional[str] = None) -> str:
    if not projects:
        return "No hay proyectos guardados."
    lines: List[str] = []
    for idx, project in enumerate(projects, start=1):
        when = format_timestamp(project.timestamp)
        marker = " (activo)" if project.id == current_id else ""
        lines.append(f"{idx}) {project.name}{marker} - {when} - id {project.id}")
    return "\n".join(lines)


HELP_TEXT = """Comandos disponibles:
  <texto>                 Generar un plan para la descripción del negocio
  /new                    Nueva auditoría (borrador vacío)
  /show [sección]         Ver el plan o una sección (1-5, analysis, flows, ...)
  /edit <sección>         Reescribir una sección del borrador
  /save [nombre]          Guardar o actualizar el proyecto activo
  /projects               Listar proyectos guardados
  /load <n|id>            Abrir un proyecto guardado
  /delete <n|id>          Eliminar un proyecto (pide confirmación)
  /import <ruta>          Importar un proyecto exportado (.json)
  /export <n|id> [dir]    Exportar un proyecto como JSON
  /report [md|txt] [n|id] [dir]
                          Exportar el plan como informe (Markdown o texto paginado)
  /sync                   Reintentar el guardado tras un error de almacenamiento
  /chat <mensaje>         Preguntar al asistente
  /help                   Mostrar esta ayuda
  /quit                   Salir"""
