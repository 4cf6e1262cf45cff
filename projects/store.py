"""Project store: the saved project list and its persistence."""
from __future__ import annotations

import json
import logging
import time
from typing import Iterable, List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from plans.models import SavedPlan
from shared.errors import PersistenceError, StorageReadError

_logger = logging.getLogger("advisor")

DEFAULT_STORAGE_KEY = "automation_advisor.projects"

_saved_plan_list = TypeAdapter(List[SavedPlan])


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


def now_millis() -> int:
    return int(time.time() * 1000)


class ProjectStore:
    """Ordered list of saved projects, persisted wholesale under one key.

    Mutations apply to the in-memory list first and then write the full
    list. When a write fails the store stays usable but is marked ``dirty``
    until a later write (``sync`` or the next mutation) succeeds.

    When the storage cannot be read at all the store starts empty with
    ``loaded`` unset, and every write is refused until a read succeeds, so
    an unreadable list is never overwritten.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self.dirty = False
        self.loaded = False
        self._projects: List[SavedPlan] = []
        try:
            self.ensure_loaded()
        except StorageReadError as e:
            _logger.error("Project list under %s is unreadable: %r", self.key, e.__cause__ or e)

    @property
    def projects(self) -> List[SavedPlan]:
        """Snapshot of the project list, most recent creation first."""
        return list(self._projects)

    def __len__(self) -> int:
        return len(self._projects)

    def load(self) -> List[SavedPlan]:
        """Read the project list; missing or corrupt data yields an empty list.

        Raises:
            StorageReadError: the storage itself failed to answer.
        """
        try:
            raw = self.storage.get(self.key)
        except StorageReadError:
            raise
        except Exception as e:
            raise StorageReadError() from e
        if raw is None:
            return []
        try:
            return _saved_plan_list.validate_python(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            _logger.warning("Discarding unreadable project list under %s: %s", self.key, e)
            return []

    def ensure_loaded(self) -> None:
        """Read the list if no read has succeeded yet.

        Raises:
            StorageReadError: the storage is still unreadable.
        """
        if self.loaded:
            return
        self._projects = self.load()
        self.loaded = True
        self.dirty = False

    def persist(self, projects: Optional[List[SavedPlan]] = None) -> None:
        """Write the full list. Raises PersistenceError if storage rejects it."""
        self.ensure_loaded()
        items = self._projects if projects is None else projects
        payload = json.dumps([p.to_record() for p in items], ensure_ascii=False)
        try:
            self.storage.set(self.key, payload)
        except PersistenceError:
            self.dirty = True
            raise
        except Exception as e:
            self.dirty = True
            raise PersistenceError() from e
        self.dirty = False
        _logger.info("Persisted %d project(s)", len(items))

    def sync(self) -> None:
        """Retry the failed operation: the first read, or writing the in-memory list."""
        if not self.loaded:
            self.ensure_loaded()
            return
        self.persist()

    def get(self, project_id: str) -> Optional[SavedPlan]:
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def new_id(self, reserved: Iterable[str] = ()) -> str:
        """Timestamp-derived id, bumped until it is unique in the store."""
        candidate = now_millis()
        taken = {p.id for p in self._projects} | set(reserved)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def add(self, project: SavedPlan) -> SavedPlan:
        """Prepend a new project and persist."""
        self.ensure_loaded()
        self._projects.insert(0, project)
        self.persist()
        return project

    def replace(self, project: SavedPlan) -> SavedPlan:
        """Swap the entry with the same id in place and persist."""
        self.ensure_loaded()
        for index, existing in enumerate(self._projects):
            if existing.id == project.id:
                self._projects[index] = project
                self.persist()
                return project
        raise KeyError(project.id)

    def remove(self, project_id: str) -> SavedPlan:
        """Remove an entry by id and persist."""
        self.ensure_loaded()
        for index, existing in enumerate(self._projects):
            if existing.id == project_id:
                removed = self._projects.pop(index)
                self.persist()
                return removed
        raise KeyError(project_id)
