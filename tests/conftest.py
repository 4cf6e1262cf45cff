import importlib
import sys
from pathlib import Path
from typing import Dict, Generator, Optional

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class MemoryStorage:
    """In-memory stand-in for the key-value storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value


class FlakyStorage(MemoryStorage):
    """Storage whose writes fail while ``failing`` is set, reads while ``failing_reads`` is."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__(initial)
        self.failing = False
        self.failing_reads = False

    def get(self, key: str) -> Optional[str]:
        if self.failing_reads:
            from shared.errors import StorageReadError

            raise StorageReadError()
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        if self.failing:
            from shared.errors import StorageQuotaExceededError

            raise StorageQuotaExceededError()
        super().set(key, value)


FIVE_SECTION_TEXT = (
    "Aquí tienes tu plan.\n\n"
    "### 1. Análisis de Procesos Manuales\n"
    "Los pedidos llegan por WhatsApp y se copian a mano en una libreta.\n\n"
    "### 2. Diseño de Flujos de Agentes\n"
    "Un agente lee los mensajes y crea el pedido en el sistema.\n\n"
    "### 3. Stack Tecnológico Recomendado\n"
    "- WhatsApp Business API\n- Make\n\n"
    "### 4. Implementación Paso a Paso\n"
    "1. Conectar la cuenta de WhatsApp.\n2. Crear el escenario.\n\n"
    "### 5. ROI Estimado\n"
    "Ahorro de 10 horas semanales.\n"
)


@pytest.fixture()
def five_section_text() -> str:
    return FIVE_SECTION_TEXT


@pytest.fixture()
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def flaky_storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture()
def make_session():
    """Build an AdvisorSession over a given storage and fake generator."""
    from projects.session import AdvisorSession
    from projects.store import ProjectStore
    from workflows.planning.orchestrator import PlanOrchestrator
    from workflows.planning.state import GenerationResult

    async def default_generator(description: str) -> GenerationResult:
        return GenerationResult(
            raw=FIVE_SECTION_TEXT,
            sources=[
                {"uri": "https://example.com/whatsapp", "title": "WhatsApp Business"},
                {"uri": "", "title": "Sin enlace"},
            ],
        )

    def _make(storage=None, generator=None, timeout=5.0):
        store = ProjectStore(storage if storage is not None else MemoryStorage())
        orchestrator = PlanOrchestrator(generator or default_generator, timeout=timeout)
        return AdvisorSession(store, orchestrator)

    return _make


@pytest.fixture()
def temp_database(tmp_path, monkeypatch) -> Generator[Path, None, None]:
    """Create a temporary SQLite database and reload connection module."""
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_PATH", str(db_path))

    # Reload database.connection so it picks up the new env variable
    from database import connection as connection_module

    importlib.reload(connection_module)
    connection_module.init_db()

    yield db_path

    # Cleanup: remove env, reload to default state
    monkeypatch.delenv("DATABASE_PATH", raising=False)
    importlib.reload(connection_module)
