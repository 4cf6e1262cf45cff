"""Terminal entrypoint for the automation advisor."""
import asyncio
import argparse
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file BEFORE importing modules that depend on them
load_dotenv()

from shared.config import Configuration
from shared.log_setup import enable_logging
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
from shared.errors import AdvisorError
from database import get_db_path


def _report(session: AdvisorSession) -> None:
    if session.error:
        print(f"Error: {session.error}")
    elif session.notice:
        print(session.notice)
    if session.store.dirty:
        print("(Hay cambios sin sincronizar con el almacenamiento. Usa /sync para reintentar.)")
    if not session.store.loaded:
        print("(No se pudo leer la lista de proyectos. Usa /sync para reintentar.)")


def _read_multiline(prompt: str) -> str:
    print(prompt)
    lines = []
    while True:
        line = input()
        if line.strip() == ".":
            break
        lines.append(line)
    return "\n".join(lines)


def _write_file(directory: str, exported) -> Path:
    target = Path(directory or ".").expanduser() / exported.filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(exported.content)
    return target


async def handle_command(session: AdvisorSession, chat: ChatSession, line: str) -> bool:
    """Run one user command. Returns False when the user wants to quit."""
    command, _, arg = line.partition(" ")
    command = command.lower()
    arg = arg.strip()

    if command in ("/quit", "/exit", "/q"):
        return False

    if command == "/help":
        print(HELP_TEXT)
    elif command == "/new":
        session.new_audit()
        print("Nueva auditoría. Describe tu negocio para empezar.")
    elif command == "/show":
        if session.plan is None:
            print("Todavía no hay ningún plan.")
        elif arg:
            key = resolve_section(arg)
            print(format_section(session.plan, key) if key else f"Sección desconocida: {arg}")
        else:
            print(format_plan(session.plan, session.sources))
    elif command == "/edit":
        key = resolve_section(arg) if arg else None
        if key is None:
            print("Indica la sección a editar, por ejemplo: /edit 2")
        elif session.plan is None:
            print("Todavía no hay ningún plan.")
        else:
            content = _read_multiline("Escribe el nuevo contenido. Termina con una línea que solo contenga '.'")
            session.update_section(key, content)
            _report(session)
    elif command == "/save":
        name = arg
        if not session.is_bound and not name:
            name = input("Nombre del proyecto: ").strip()
        project = session.save(name)
        _report(session)
        if project:
            print(f"id {project.id}")
    elif command == "/projects":
        print(format_projects(session.projects, session.current_project_id))
    elif command in ("/load", "/delete", "/export"):
        project = resolve_project(session.projects, arg.split(" ")[0]) if arg else None
        if project is None:
            print("Proyecto no encontrado. Usa /projects para ver la lista.")
        elif command == "/load":
            session.load_project(project.id)
            _report(session)
        elif command == "/delete":
            answer = input(f"¿Eliminar '{project.name}'? Esta acción no se puede deshacer [s/N]: ")
            if session.delete_project(project.id, confirmed=answer.strip().lower() in ("s", "si", "sí", "y", "yes")):
                _report(session)
            elif session.error:
                _report(session)
            else:
                print("Cancelado.")
        else:
            exported = session.export_project(project.id)
            if exported:
                directory = arg.split(" ", 1)[1] if " " in arg else "."
                print(f"Exportado a {_write_file(directory, exported)}")
            _report(session)
    elif command == "/report":
        parts = arg.split()
        fmt = parts.pop(0) if parts and parts[0] in ("md", "txt") else "md"
        project = resolve_project(session.projects, parts[0]) if parts else None
        if parts and project is None:
            print("Proyecto no encontrado. Usa /projects para ver la lista.")
        else:
            exported = session.export_report(project.id if project else None, fmt=fmt)
            if exported:
                directory = parts[1] if len(parts) > 1 else "."
                print(f"Informe guardado en {_write_file(directory, exported)}")
            _report(session)
    elif command == "/import":
        path = Path(arg).expanduser()
        if not arg or not path.is_file():
            print("Indica la ruta de un archivo .json exportado.")
        else:
            project = session.import_project(path.read_bytes())
            _report(session)
            if project:
                print(format_plan(session.plan, session.sources))
    elif command == "/sync":
        session.retry_sync()
        _report(session)
    elif command == "/chat":
        try:
            print(f"\nAsistente: {await chat.send(arg)}\n")
        except AdvisorError as e:
            print(f"Error: {e.user_message}")
    elif command.startswith("/"):
        print(f"Comando desconocido: {command}. Escribe /help.")
    else:
        print("\nAnalizando...")
        plan = await session.generate(line)
        _report(session)
        if plan:
            print(format_plan(plan, session.sources))
    return True


async def main(enable_log: bool = False, log_level: str = "info"):
    """Run the interactive advisor loop."""
    print("=" * 60)
    print("Asesor de Automatización de Negocios")
    print("=" * 60)
    print()
    if enable_log:
        level = {"debug": 10, "info": 20, "warning": 30, "error": 40}.get(log_level.lower(), 20)
        enable_logging(level=level)
        print(f"Logging enabled at level: {log_level.upper()}")

    try:
        config = Configuration()
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("\nPlease ensure:")
        print("1. You have a .env file with OPENAI_API_KEY (and TAVILY_API_KEY for web sources)")
        print("2. You have a model_config.json file (or use defaults)")
        return

    print("Using models:")
    print(f"  - Research: {config.orchestrator_model}")
    print(f"  - Writer: {config.text_model}")
    print()

    session = create_advisor_session(config)
    chat = ChatSession(config)
    print(f"Base de datos: {get_db_path()}")
    print(f"{len(session.projects)} proyecto(s) guardado(s).")
    _report(session)
    print(HELP_TEXT)
    print("-" * 60)

    while True:
        try:
            line = input("\nTú: ").strip()
            if not line:
                continue
            if not await handle_command(session, chat, line):
                print("\n¡Hasta luego!")
                break
        except (KeyboardInterrupt, EOFError):
            print("\n\n¡Hasta luego!")
            break


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Asesor de Automatización de Negocios")
    parser.add_argument("--log", action="store_true", help="Enable logging to console and logs/advisor.log")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"], help="Logging level when --log is set")
    args = parser.parse_args()
    asyncio.run(main(enable_log=args.log, log_level=args.log_level))
