# =======================================================================================
# campus_access/services/user_service.py - User Management Service
# =======================================================================================
import logging
from typing import Optional, Dict, Any
from passlib.context import CryptContext
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError
from ..models.schemas import RegisterRequest
from ..utils.exceptions import DuplicateUserError

logger = logging.getLogger("campus_access.users")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Columns safe to hand back to clients; contrasena is never selected here.
PUBLIC_COLUMNS = "user_id, nombre, correo, carrera, rol, codigo_barra"


class UserService:
    """Registration, login and barcode lookup."""

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    def register(self, conn: Connection, request: RegisterRequest) -> int:
        """Insert a new user and return its id."""
        try:
            result = conn.execute(
                text("""
                    INSERT INTO usuarios (nombre, correo, codigo_barra, carrera, rol, contrasena)
                    VALUES (:nombre, :correo, :codigo_barra, :carrera, :rol, :contrasena)
                """),
                {
                    "nombre": request.nombre.strip(),
                    "correo": request.correo.strip().lower(),
                    "codigo_barra": request.codigo_barra.strip(),
                    "carrera": request.carrera.strip(),
                    "rol": request.rol,
                    "contrasena": self.hash_password(request.contrasena),
                }
            )
        except IntegrityError as e:
            logger.info("Rejected duplicate registration for %s: %s", request.correo, e.orig)
            raise DuplicateUserError("Email or barcode already registered") from e

        logger.info("Registered user %s with code %s", request.correo, request.codigo_barra)
        return result.lastrowid

    def authenticate(self, conn: Connection, correo: str, contrasena: str) -> Optional[Dict[str, Any]]:
        """Return the public user record when the credentials match."""
        row = conn.execute(
            text(f"SELECT {PUBLIC_COLUMNS}, contrasena FROM usuarios WHERE correo = :correo"),
            {"correo": correo.strip().lower()},
        ).mappings().first()

        if not row or not self.verify_password(contrasena, row["contrasena"]):
            return None

        user = dict(row)
        user.pop("contrasena")
        return user

    def get_by_code(self, conn: Connection, user_code: str) -> Optional[Dict[str, Any]]:
        """Look up a user by barcode."""
        row = conn.execute(
            text(f"SELECT {PUBLIC_COLUMNS} FROM usuarios WHERE codigo_barra = :user_code"),
            {"user_code": user_code},
        ).mappings().first()
        return dict(row) if row else None

    def exists(self, conn: Connection, user_code: str) -> bool:
        row = conn.execute(
            text("SELECT user_id FROM usuarios WHERE codigo_barra = :user_code"),
            {"user_code": user_code},
        ).first()
        return row is not None

    def create_token(self, user: Dict[str, Any]) -> str:
        """
        Opaque session token handed to the client at login.
        The API does not check it yet; clients only forward it.
        """
        return f"user-{user['user_id']}-{user['codigo_barra']}"
