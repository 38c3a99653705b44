# =======================================================================================
# campus_access/client/views.py - Account / Profile View
# =======================================================================================
from typing import Dict
from ..models.schemas import UserOut
from ..utils.exceptions import SessionError
from .session import SessionStore


class AccountView:
    """Profile, dashboard and account pages all read the same session."""

    def __init__(self, session: SessionStore):
        self.session = session

    def current_user(self) -> UserOut:
        current = self.session.load()
        if current is None:
            raise SessionError("No user data found. Please log in.")
        return current.usuario

    def summary(self) -> Dict[str, str]:
        user = self.current_user()
        return {
            "name": user.nombre,
            "email": user.correo,
            "code": user.codigo_barra or "N/A",
            "program": user.carrera or "N/A",
            "role": user.rol,
        }

    def logout(self) -> None:
        self.session.clear()
