# =======================================================================================
# campus_access/api/routes/auth.py - Registration and Login Endpoints
# =======================================================================================
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from ...models.schemas import (
    LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, UserOut,
)
from ...services.user_service import UserService
from ...utils.exceptions import DuplicateUserError
from ..dependencies import get_db_connection

logger = logging.getLogger("campus_access.api.auth")

router = APIRouter()
user_service = UserService()


@router.post("/registro", response_model=RegisterResponse)
def register_user(request: RegisterRequest, conn: Connection = Depends(get_db_connection)):
    try:
        user_service.register(conn, request)
    except DuplicateUserError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except SQLAlchemyError as e:
        logger.exception("Registration failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return RegisterResponse(success=True)


@router.post("/login", response_model=LoginResponse)
def login_user(request: LoginRequest, conn: Connection = Depends(get_db_connection)):
    try:
        user = user_service.authenticate(conn, request.correo, request.contrasena)
    except SQLAlchemyError as e:
        logger.exception("Login lookup failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    return LoginResponse(usuario=UserOut(**user), token=user_service.create_token(user))
