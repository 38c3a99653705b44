# =======================================================================================
# campus_access/client/session.py - Current User Session Store
# =======================================================================================
import json
import logging
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ValidationError as PydanticValidationError
from ..models.schemas import UserOut
from ..utils.exceptions import SessionError

logger = logging.getLogger("campus_access.client.session")


class CurrentUser(BaseModel):
    """What the client keeps about the logged-in user. No credential."""
    usuario: UserOut
    token: Optional[str] = None


class SessionStore:
    """
    Persists the single "current user" record until logout.

    With ``path=None`` the session only lives in memory.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._current: Optional[CurrentUser] = None

    def load(self) -> Optional[CurrentUser]:
        """Return the stored user, or None when nobody is logged in."""
        if self.path is None:
            return self._current
        if not self.path.exists():
            self._current = None
            return None

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._current = CurrentUser.model_validate(raw)
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Unreadable session file %s: %s", self.path, e)
            raise SessionError("Could not read the stored user data. Please log in again.") from e
        return self._current

    def save(self, usuario: UserOut, token: Optional[str] = None) -> CurrentUser:
        current = CurrentUser(usuario=usuario, token=token)
        self._current = current
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(current.model_dump_json(indent=2), encoding="utf-8")
            logger.debug("Session saved to %s", self.path)
        return current

    def clear(self) -> None:
        """Explicit logout."""
        self._current = None
        if self.path is not None and self.path.exists():
            self.path.unlink()

    def token(self) -> Optional[str]:
        if self._current is None and self.path is not None and self.path.exists():
            self.load()
        return self._current.token if self._current else None
