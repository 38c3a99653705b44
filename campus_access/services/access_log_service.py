# =======================================================================================
# campus_access/services/access_log_service.py - Access Log Business Logic
# =======================================================================================
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import text
from sqlalchemy.engine import Connection
from ..models.enums import EVENT_KINDS, EventKind, KindFilter
from ..utils.exceptions import UserNotFoundError, ValidationError
from .user_service import UserService

logger = logging.getLogger("campus_access.access_logs")


class AccessLogService:
    """Records and lists entry/exit events."""

    def __init__(self, user_service: Optional[UserService] = None):
        self.user_service = user_service or UserService()

    @staticmethod
    def validate_request(user_code: Optional[str], event_type: Optional[str]) -> Tuple[str, EventKind]:
        """Check the record payload before touching the database."""
        code = (user_code or "").strip()
        if not code or not event_type:
            raise ValidationError("User code and event type are required.", status=400)
        if event_type not in EVENT_KINDS:
            raise ValidationError("Invalid event type. Must be 'entry' or 'exit'.", status=400)
        return code, event_type

    def record(self, conn: Connection, user_code: Optional[str], event_type: Optional[str]) -> str:
        """
        Insert one access event.

        The user is checked again here even though scanning clients look it up
        first; a direct API caller gets a 404 instead of an orphan log row.
        """
        code, kind = self.validate_request(user_code, event_type)

        if not self.user_service.exists(conn, code):
            raise UserNotFoundError("User not found.")

        conn.execute(
            text("""
                INSERT INTO access_logs (user_code, event_type, event_timestamp)
                VALUES (:user_code, :event_type, CURRENT_TIMESTAMP)
            """),
            {"user_code": code, "event_type": kind},
        )
        logger.info("Recorded %s for %s", kind, code)
        return "Access recorded successfully."

    # ---------- listing ----------

    @staticmethod
    def _build_filters(
        user_code: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        kind: KindFilter,
    ) -> Tuple[str, Dict[str, Any]]:
        clauses: List[str] = []
        params: Dict[str, Any] = {}

        if user_code:
            clauses.append("user_code = :user_code")
            params["user_code"] = user_code
        # Date bounds are inclusive on whole days.
        if start_date:
            clauses.append("DATE(event_timestamp) >= :start_date")
            params["start_date"] = start_date.isoformat()
        if end_date:
            clauses.append("DATE(event_timestamp) <= :end_date")
            params["end_date"] = end_date.isoformat()
        if kind != "all":
            clauses.append("event_type = :kind")
            params["kind"] = kind

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def list_events(
        self,
        conn: Connection,
        user_code: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        kind: KindFilter = "all",
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Return one page of events, newest first, and the total match count."""
        where, params = self._build_filters(user_code, start_date, end_date, kind)

        total = conn.execute(
            text(f"SELECT COUNT(*) FROM access_logs {where}"), params
        ).scalar_one()

        rows = conn.execute(
            text(f"""
                SELECT log_id, user_code, event_type, event_timestamp
                FROM access_logs
                {where}
                ORDER BY event_timestamp DESC, log_id DESC
                LIMIT :limit OFFSET :offset
            """),
            {**params, "limit": limit, "offset": (page - 1) * limit},
        ).mappings().all()

        return [dict(r) for r in rows], int(total)
