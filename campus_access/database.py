# =======================================================================================
# campus_access/database.py - Database Management
# =======================================================================================
import logging
from contextlib import contextmanager
from typing import Iterator, Optional
from sqlalchemy import (
    Column, DateTime, Integer, MetaData, String, Table, create_engine, func, text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import QueuePool, StaticPool
from .config import config

logger = logging.getLogger("campus_access.database")

metadata = MetaData()

usuarios = Table(
    "usuarios",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("nombre", String(120), nullable=False),
    Column("correo", String(120), nullable=False, unique=True),
    Column("codigo_barra", String(64), nullable=False, unique=True),
    Column("carrera", String(120), nullable=True),
    Column("rol", String(16), nullable=False),
    Column("contrasena", String(255), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)

access_logs = Table(
    "access_logs",
    metadata,
    Column("log_id", Integer, primary_key=True, autoincrement=True),
    Column("user_code", String(64), nullable=False, index=True),
    Column("event_type", String(8), nullable=False),
    Column("event_timestamp", DateTime, nullable=False, server_default=func.now(), index=True),
)


def _engine_options(url: str) -> dict:
    """Pool settings per backend; SQLite in-memory needs a single shared connection."""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options
    return {
        "poolclass": QueuePool,
        "pool_size": config.DB_POOL_SIZE,
        "max_overflow": config.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
        "isolation_level": "READ COMMITTED",
    }


class DatabaseManager:
    """Manages database connections and transactions."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or config.DB_URL
        self.engine: Engine = create_engine(self.url, future=True, **_engine_options(self.url))

    def initialize(self) -> None:
        """Create the tables if they do not exist yet."""
        metadata.create_all(self.engine)
        logger.debug("Schema ready on %s", self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """Get a database connection with automatic commit/rollback."""
        with self.engine.begin() as conn:
            yield conn

    def fetch_one(self, query: str, params: dict = None):
        """Fetch a single result."""
        with self.get_connection() as conn:
            result = conn.execute(text(query), params or {})
            return result.mappings().first()

    def dispose(self) -> None:
        self.engine.dispose()

# Global database instance
db_manager = DatabaseManager()
