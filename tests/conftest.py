"""
Configuración de fixtures para pytest.
"""
import pytest

from tablesync.application.services.row_query_engine import RowQueryEngine
from tablesync.application.services.schema_store import SchemaStore
from tablesync.application.services.upsert_engine import UpsertEngine
from tablesync.core.config import Settings
from tablesync.infrastructure.storage.memory_backend import InMemoryTableBackend


@pytest.fixture
def settings() -> Settings:
    """Configuracion aislada del entorno y de cualquier .env local."""
    return Settings(_env_file=None, STORAGE_BACKEND="memory", DEFAULT_POSITION="bottom")


@pytest.fixture
def backend() -> InMemoryTableBackend:
    return InMemoryTableBackend(default_row_height=21)


@pytest.fixture
def schema_store(backend) -> SchemaStore:
    return SchemaStore(backend)


@pytest.fixture
def upsert_engine(schema_store, settings) -> UpsertEngine:
    return UpsertEngine(schema_store, settings)


@pytest.fixture
def query_engine(schema_store, settings) -> RowQueryEngine:
    return RowQueryEngine(schema_store, settings)


@pytest.fixture
def table_values(backend):
    """Valores de todas las filas de una tabla, para aserciones compactas."""
    def _values(name: str) -> list:
        return [[cell.value for cell in row] for row in backend.read_rows(name)]
    return _values
