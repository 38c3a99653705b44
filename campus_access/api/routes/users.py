# =======================================================================================
# campus_access/api/routes/users.py - User Lookup Endpoints
# =======================================================================================
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from ...models.schemas import UserLookupResponse, UserOut
from ...services.user_service import UserService
from ..dependencies import get_db_connection

logger = logging.getLogger("campus_access.api.users")

router = APIRouter()
user_service = UserService()


@router.get("/users/bycode/{user_code}", response_model=UserLookupResponse)
def get_user_by_code(user_code: str, conn: Connection = Depends(get_db_connection)):
    """Resolve a scanned barcode to its user."""
    code = user_code.strip()
    if not code:
        raise HTTPException(status_code=400, detail="User code parameter is required.")

    try:
        user = user_service.get_by_code(conn, code)
    except SQLAlchemyError as e:
        logger.exception("Lookup failed for %s", code)
        raise HTTPException(status_code=500, detail=f"Failed to fetch user. {e}")

    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return UserLookupResponse(usuario=UserOut(**user))
