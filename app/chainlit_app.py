"""Chainlit front end: run with `chainlit run app/chainlit_app.py`."""
from pathlib import Path
import sys

# Ensure project root is importable before importing local modules
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import chainlit as cl
from dotenv import load_dotenv

load_dotenv()

from agents.chat_agent import ChatSession
from app.views import (
    HELP_TEXT,
    format_plan,
    format_projects,
    format_section,
    resolve_project,
    resolve_section,
)
from projects.session import AdvisorSession, create_advisor_session
from shared.config import Configuration
from shared.errors import AdvisorError


async def _send_status(session: AdvisorSession) -> None:
    """Surface the outcome of the last session action."""
    if session.error:
        await cl.Message(author="system", content=session.error, type="error").send()
    elif session.notice:
        await cl.Message(author="system", content=session.notice).send()
    if session.store.dirty:
        await cl.Message(
            author="system",
            content="Hay cambios sin sincronizar con el almacenamiento. Usa `/sync` para reintentar.",
        ).send()
    if not session.store.loaded:
        await cl.Message(
            author="system",
            content="No se pudo leer la lista de proyectos. Usa `/sync` para reintentar.",
            type="error",
        ).send()


async def _confirm(question: str) -> bool:
    res = await cl.AskActionMessage(
        content=question,
        actions=[
            cl.Action(name="confirm", payload={"value": "yes"}, label="Eliminar"),
            cl.Action(name="cancel", payload={"value": "no"}, label="Cancelar"),
        ],
    ).send()
    return bool(res) and (res.get("payload") or {}).get("value") == "yes"


async def _send_file(exported, caption: str) -> None:
    await cl.Message(
        author="assistant",
        content=caption,
        elements=[cl.File(name=exported.filename, content=exported.content, display="inline")],
    ).send()


@cl.on_chat_start
async def handle_start():
    """Create the advisor session when a browser session begins."""
    try:
        cfg = Configuration()
        cfg.validate()
    except ValueError as exc:
        await cl.Message(
            author="system",
            content=f"Configuration error: {exc}",
            type="error",
        ).send()
        return

    session = create_advisor_session(cfg)
    cl.user_session.set("advisor", session)
    cl.user_session.set("chat", ChatSession(cfg))
    await cl.Message(
        author="assistant",
        content=(
            "Describe tu negocio y generaré un plan de automatización en cinco secciones.\n\n"
            f"Proyectos guardados:\n{format_projects(session.projects)}\n\n```\n{HELP_TEXT}\n```"
        ),
    ).send()
    await _send_status(session)


async def _handle_project_command(session: AdvisorSession, command: str, arg: str) -> None:
    project = resolve_project(session.projects, arg.split(" ")[0]) if arg else None
    if project is None:
        await cl.Message(author="system", content="Proyecto no encontrado. Usa `/projects`.").send()
        return

    if command == "/load":
        if session.load_project(project.id):
            await cl.Message(author="assistant", content=format_plan(session.plan, session.sources)).send()
        await _send_status(session)
    elif command == "/delete":
        confirmed = await _confirm(f"¿Eliminar **{project.name}**? Esta acción no se puede deshacer.")
        if session.delete_project(project.id, confirmed=confirmed) or session.error:
            await _send_status(session)
        else:
            await cl.Message(author="system", content="Cancelado.").send()
    elif command == "/export":
        exported = session.export_project(project.id)
        if exported:
            await _send_file(exported, f"Exportado **{project.name}**.")
        await _send_status(session)


@cl.on_message
async def handle_message(message: cl.Message):
    """Dispatch commands and business descriptions to the advisor session."""
    session: AdvisorSession | None = cl.user_session.get("advisor")
    if session is None:
        await handle_start()
        session = cl.user_session.get("advisor")
        if session is None:
            return

    text = message.content.strip()
    command, _, arg = text.partition(" ")
    command = command.lower()
    arg = arg.strip()

    if command == "/help":
        await cl.Message(author="assistant", content=f"```\n{HELP_TEXT}\n```").send()
    elif command == "/new":
        session.new_audit()
        await cl.Message(author="assistant", content="Nueva auditoría. Describe tu negocio.").send()
    elif command == "/show":
        if session.plan is None:
            await cl.Message(author="system", content="Todavía no hay ningún plan.").send()
            return
        key = resolve_section(arg) if arg else None
        if arg and key is None:
            await cl.Message(author="system", content=f"Sección desconocida: {arg}").send()
            return
        content = format_section(session.plan, key) if key else format_plan(session.plan, session.sources)
        await cl.Message(author="assistant", content=content).send()
    elif command == "/edit":
        key, _, new_content = arg.partition(" ")
        key = resolve_section(key) if key else None
        if key is None or not new_content.strip():
            await cl.Message(author="system", content="Uso: `/edit <sección> <nuevo contenido>`").send()
            return
        if session.update_section(key, new_content.strip()):
            await cl.Message(author="assistant", content=format_section(session.plan, key)).send()
        await _send_status(session)
    elif command == "/save":
        name = arg
        if not session.is_bound and not name:
            res = await cl.AskUserMessage(content="Nombre del proyecto:", timeout=120).send()
            name = (res or {}).get("output", "")
        session.save(name)
        await _send_status(session)
    elif command == "/projects":
        await cl.Message(
            author="assistant",
            content=format_projects(session.projects, session.current_project_id),
        ).send()
    elif command in ("/load", "/delete", "/export"):
        await _handle_project_command(session, command, arg)
    elif command == "/report":
        parts = arg.split()
        fmt = parts.pop(0) if parts and parts[0] in ("md", "txt") else "md"
        project = resolve_project(session.projects, parts[0]) if parts else None
        if parts and project is None:
            await cl.Message(author="system", content="Proyecto no encontrado. Usa `/projects`.").send()
            return
        exported = session.export_report(project.id if project else None, fmt=fmt)
        if exported:
            await _send_file(exported, "Informe del plan.")
        await _send_status(session)
    elif command == "/import":
        files = await cl.AskFileMessage(
            content="Sube un proyecto exportado (.json).",
            accept=["application/json", ".json"],
            max_size_mb=5,
        ).send()
        if not files:
            return
        imported = session.import_project(Path(files[0].path).read_bytes())
        if imported:
            await cl.Message(author="assistant", content=format_plan(session.plan, session.sources)).send()
        await _send_status(session)
    elif command == "/sync":
        session.retry_sync()
        await _send_status(session)
    elif command == "/chat":
        chat: ChatSession = cl.user_session.get("chat")
        try:
            reply = await chat.send(arg)
        except AdvisorError as exc:
            await cl.Message(author="system", content=exc.user_message, type="error").send()
            return
        await cl.Message(author="assistant", content=reply).send()
    elif command.startswith("/"):
        await cl.Message(author="system", content=f"Comando desconocido: {command}. Usa `/help`.").send()
    else:
        async with cl.Step(name="Generando arquitectura"):
            plan = await session.generate(text)
        if plan:
            await cl.Message(author="assistant", content=format_plan(plan, session.sources)).send()
        await _send_status(session)


@cl.on_chat_end
async def handle_end():
    """Clear chat state when the session closes."""
    chat: ChatSession | None = cl.user_session.get("chat")
    if chat:
        chat.reset()
