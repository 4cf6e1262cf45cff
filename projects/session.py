"""Advisor session: the current draft and the edit/save workflow around it.

The session owns the in-memory draft (plan, sources, description) and the
binding to a saved project. Section edits only touch the draft; the store is
written by explicit save, delete and import actions.

Every public action is an error boundary: advisor errors are logged, their
message is exposed in ``error`` and the action returns ``None``/``False``.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Union

from plans.models import SECTION_KEYS, GroundingSource, Plan, SavedPlan
from plans.report import layout_report, render_markdown
from shared.config import Configuration
from shared.errors import AdvisorError, ValidationError
from workflows.planning.orchestrator import PlanOrchestrator
from .store import ProjectStore, now_millis
from .transfer import ExportedFile, decode_project, export_project, mark_imported, slugify

_logger = logging.getLogger("advisor")

DEFAULT_PROJECT_NAME = "Proyecto sin nombre"

REPORT_FORMATS = {"md": "text/markdown", "txt": "text/plain"}


class AdvisorSession:
    """Single-user draft state bound (or not) to a saved project."""

    def __init__(self, store: ProjectStore, orchestrator: PlanOrchestrator):
        self.store = store
        self.orchestrator = orchestrator

        self.plan: Optional[Plan] = None
        self.sources: List[GroundingSource] = []
        self.business_description: str = ""
        self.current_project_id: Optional[str] = None

        self.error: Optional[str] = None
        self.last_error: Optional[AdvisorError] = None
        self.notice: Optional[str] = None

    # ------------------------------------------------------------------ #
    # State helpers
    # ------------------------------------------------------------------ #

    @property
    def is_loading(self) -> bool:
        return self.orchestrator.is_loading

    @property
    def is_bound(self) -> bool:
        return self.current_project_id is not None

    @property
    def projects(self) -> List[SavedPlan]:
        return self.store.projects

    @property
    def current_project(self) -> Optional[SavedPlan]:
        if self.current_project_id is None:
            return None
        return self.store.get(self.current_project_id)

    def _fail(self, exc: AdvisorError) -> None:
        _logger.warning("%s: %s", type(exc).__name__, exc)
        self.error = exc.user_message
        self.last_error = exc
        self.notice = None

    def _ok(self, notice: Optional[str] = None) -> None:
        self.error = None
        self.last_error = None
        self.notice = notice

    def _clear_draft(self) -> None:
        self.plan = None
        self.sources = []
        self.business_description = ""
        self.current_project_id = None

    def _require_project(self, project_id: str) -> SavedPlan:
        self.store.ensure_loaded()
        project = self.store.get(project_id)
        if project is None:
            raise ValidationError("El proyecto no existe.")
        return project

    # ------------------------------------------------------------------ #
    # Generation
    # ------------------------------------------------------------------ #

    async def generate(self, business_description: str) -> Optional[Plan]:
        """Generate a new draft plan for a business description.

        The previous draft is cleared only once the request is accepted; a
        failed generation leaves the draft empty. The project binding is kept,
        so saving afterwards updates the bound project.
        """
        try:
            self.orchestrator.check_request(business_description)
        except AdvisorError as e:
            self._fail(e)
            return None

        self.plan = None
        self.sources = []
        self.business_description = business_description
        self._ok()

        try:
            plan, sources = await self.orchestrator.generate(business_description)
        except AdvisorError as e:
            self._fail(e)
            return None

        self.plan = plan
        self.sources = sources
        self._ok("Plan generado.")
        return plan

    # ------------------------------------------------------------------ #
    # Draft editing
    # ------------------------------------------------------------------ #

    def new_audit(self) -> None:
        """Start over with an empty, unbound draft. Saved projects are kept."""
        self._clear_draft()
        self._ok()

    def update_section(self, key: str, content: str) -> bool:
        """Replace one section's content in the draft (not persisted)."""
        try:
            if self.plan is None:
                raise ValidationError("No hay ningún plan que editar.")
            if key not in SECTION_KEYS:
                raise ValidationError(f"Sección desconocida: {key}.")
        except AdvisorError as e:
            self._fail(e)
            return False
        self.plan.section(key).content = content
        self._ok()
        return True

    # ------------------------------------------------------------------ #
    # Project store actions
    # ------------------------------------------------------------------ #

    def save(self, name: Optional[str] = None) -> Optional[SavedPlan]:
        """Save the draft: create a project when unbound, update it when bound."""
        try:
            if self.plan is None:
                raise ValidationError("Genera un plan antes de guardarlo.")
            self.store.ensure_loaded()
            existing = self.current_project
            if existing is not None:
                project = existing.model_copy(update={
                    "timestamp": now_millis(),
                    "business_description": self.business_description,
                    "plan": self.plan.model_copy(deep=True),
                    "sources": [s.model_copy() for s in self.sources],
                })
                self.store.replace(project)
                self._ok("Proyecto actualizado.")
            else:
                project = SavedPlan(
                    id=self.store.new_id(),
                    name=(name or "").strip() or DEFAULT_PROJECT_NAME,
                    timestamp=now_millis(),
                    business_description=self.business_description,
                    plan=self.plan.model_copy(deep=True),
                    sources=[s.model_copy() for s in self.sources],
                )
                self.current_project_id = project.id
                self.store.add(project)
                self._ok("Proyecto guardado.")
        except AdvisorError as e:
            self._fail(e)
            return None
        _logger.info("Saved project %s (%s)", project.id, project.name)
        return project

    def retry_sync(self) -> bool:
        """Write the in-memory project list again after a storage failure."""
        try:
            self.store.sync()
        except AdvisorError as e:
            self._fail(e)
            return False
        self._ok("Proyectos sincronizados.")
        return True

    def _open(self, project: SavedPlan) -> None:
        self.plan = project.plan.model_copy(deep=True)
        self.sources = [s.model_copy() for s in project.sources]
        self.business_description = project.business_description
        self.current_project_id = project.id

    def load_project(self, project_id: str) -> Optional[SavedPlan]:
        """Make a saved project the current draft and bind to it."""
        try:
            project = self._require_project(project_id)
        except AdvisorError as e:
            self._fail(e)
            return None
        self._open(project)
        self._ok(f"Proyecto cargado: {project.name}")
        return project

    def delete_project(self, project_id: str, *, confirmed: bool = False) -> bool:
        """Delete a saved project once the user has confirmed it."""
        if not confirmed:
            return False
        try:
            self._require_project(project_id)
            was_bound = project_id == self.current_project_id
            if was_bound:
                self._clear_draft()
            self.store.remove(project_id)
        except AdvisorError as e:
            self._fail(e)
            return False
        _logger.info("Deleted project %s", project_id)
        self._ok("Proyecto eliminado.")
        return True

    def import_project(self, data: Union[bytes, str]) -> Optional[SavedPlan]:
        """Add a project from an exported file and open it as the draft."""
        try:
            decoded = decode_project(data)
            self.store.ensure_loaded()
            project = decoded.model_copy(update={
                "id": self.store.new_id(reserved=[decoded.id]),
                "name": mark_imported(decoded.name),
            })
            self._open(project)
            self.store.add(project)
        except AdvisorError as e:
            self._fail(e)
            return None
        _logger.info("Imported project %s as %s", decoded.id, project.id)
        self._ok("Proyecto importado.")
        return project

    def export_project(self, project_id: str) -> Optional[ExportedFile]:
        """Serialize a saved project for download."""
        try:
            project = self._require_project(project_id)
        except AdvisorError as e:
            self._fail(e)
            return None
        return export_project(project)

    def export_report(self, project_id: Optional[str] = None, fmt: str = "md") -> Optional[ExportedFile]:
        """Report of a saved project, or of the current draft.

        ``fmt`` is ``"md"`` for Markdown or ``"txt"`` for paginated plain
        text, one form feed between pages.
        """
        try:
            if fmt not in REPORT_FORMATS:
                raise ValidationError(f"Formato de informe desconocido: {fmt}.")
            if project_id is not None:
                project = self._require_project(project_id)
                plan, description, sources = project.plan, project.business_description, project.sources
                stem = f"{slugify(project.name)}_{project.id}"
            elif self.plan is not None:
                plan, description, sources = self.plan, self.business_description, self.sources
                stem = "borrador"
            else:
                raise ValidationError("No hay ningún plan que exportar.")
        except AdvisorError as e:
            self._fail(e)
            return None
        if fmt == "txt":
            text = "\f".join("\n".join(page) for page in layout_report(plan, description))
        else:
            text = render_markdown(plan, description, sources)
        return ExportedFile(
            filename=f"plan_automatizacion_{stem}.{fmt}",
            content=text.encode("utf-8"),
            media_type=REPORT_FORMATS[fmt],
        )


def create_advisor_session(config: Configuration) -> AdvisorSession:
    """Wire a session to the SQLite store and the planning workflow.

    Args:
        config: Configuration with API keys, storage and generation settings

    Returns:
        AdvisorSession with the saved projects already loaded
    """
    from database.kv_store import SqliteKeyValueStore
    from workflows.planning.graph import generate_automation_plan

    storage = SqliteKeyValueStore(max_value_bytes=config.storage_quota_bytes)
    store = ProjectStore(storage, key=config.storage_key)

    async def _generate(description: str):
        return await generate_automation_plan(description, config)

    orchestrator = PlanOrchestrator(_generate, timeout=config.generation_timeout)
    return AdvisorSession(store, orchestrator)
