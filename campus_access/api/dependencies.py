# =======================================================================================
# campus_access/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
import logging
from typing import Iterator
from fastapi import HTTPException, Request
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError
from ..database import DatabaseManager

logger = logging.getLogger("campus_access.api")

def get_db_manager(request: Request) -> DatabaseManager:
    return request.app.state.db_manager

def get_db_connection(request: Request) -> Iterator[Connection]:
    """Dependency to get a transactional database connection."""
    manager = get_db_manager(request)
    try:
        with manager.get_connection() as conn:
            yield conn
    except OperationalError as e:
        logger.error("Database connection error: %s", e)
        raise HTTPException(status_code=500, detail=f"Database connection error: {e.orig}")
