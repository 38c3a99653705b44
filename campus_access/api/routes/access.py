# =======================================================================================
# campus_access/api/routes/access.py - Access Log Endpoints
# =======================================================================================
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from ...models.enums import KindFilter
from ...models.schemas import (
    AccessLogItem, AccessLogPage, AccessRecordRequest, AccessRecordResponse,
)
from ...services.access_log_service import AccessLogService
from ...utils.exceptions import UserNotFoundError, ValidationError
from ..dependencies import get_db_connection

logger = logging.getLogger("campus_access.api.access")

router = APIRouter()
access_service = AccessLogService()


@router.post(
    "/accesslogs/record",
    response_model=AccessRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_access(request: AccessRecordRequest, conn: Connection = Depends(get_db_connection)):
    """Record one entry or exit for a scanned barcode."""
    try:
        message = access_service.record(conn, request.user_code, request.event_type)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SQLAlchemyError as e:
        logger.exception("Error recording access log")
        raise HTTPException(status_code=500, detail=f"Failed to record access log. {e}")

    return AccessRecordResponse(success=True, message=message)


@router.get("/accesslogs", response_model=AccessLogPage)
def list_access_logs(
    user_code: Optional[str] = Query(None, description="Only events for this barcode"),
    start_date: Optional[date] = Query(None, description="Inclusive lower bound (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound (YYYY-MM-DD)"),
    type: KindFilter = Query("all", description="entry | exit | all"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    conn: Connection = Depends(get_db_connection),
):
    try:
        rows, total = access_service.list_events(
            conn, user_code, start_date, end_date, type, page, limit
        )
    except SQLAlchemyError as e:
        logger.exception("Error listing access logs")
        raise HTTPException(status_code=500, detail=f"Failed to list access logs. {e}")

    return AccessLogPage(
        data=[AccessLogItem(**row) for row in rows],
        total=total,
        page=page,
        limit=limit,
    )
