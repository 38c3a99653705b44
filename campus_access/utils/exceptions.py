# =======================================================================================
# campus_access/utils/exceptions.py - Custom Exceptions
# =======================================================================================
from typing import Any, Optional
from ..models.enums import DecoderFailure

class CampusAccessError(Exception):
    """Base exception for the campus access system."""
    pass

# ---------- backend ----------

class UserNotFoundError(CampusAccessError):
    """Raised when no user matches a barcode."""
    pass

class DuplicateUserError(CampusAccessError):
    """Raised when the email or barcode is already registered."""
    pass

# ---------- client / API ----------

class ApiError(CampusAccessError):
    """
    Normalized failure of a backend call.

    status is the HTTP status code, or 0 when the request never reached the
    server. data holds the parsed JSON body when there was one.
    """

    def __init__(self, message: str, status: int = 0, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data if data is not None else {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"

class ValidationError(ApiError):
    """Missing or malformed request fields."""
    pass

class NotFoundError(ApiError):
    """The requested resource does not exist."""
    pass

class TransportError(ApiError):
    """Network unreachable, or a response that is not JSON."""
    pass

class ServerError(ApiError):
    """The backend reported a failure (status >= 500)."""
    pass

# ---------- scanner ----------

_DECODER_HINTS = {
    DecoderFailure.PERMISSION_DENIED: "Camera access denied. Check the camera permissions.",
    DecoderFailure.NO_DEVICE: "No camera found. Make sure it is connected.",
    DecoderFailure.DEVICE_BUSY: "The camera is busy or could not be started.",
    DecoderFailure.LIBRARY_MISSING: "Barcode decoder library not installed (pip install opencv-python).",
    DecoderFailure.TIMEOUT: "The camera did not respond in time. Try again.",
}

class DecoderUnavailable(CampusAccessError):
    """The camera or decoding library could not be initialized."""

    def __init__(self, reason: DecoderFailure, detail: Optional[str] = None):
        self.reason = reason
        self.hint = _DECODER_HINTS[reason]
        self.detail = detail
        super().__init__(f"{self.hint} ({detail})" if detail else self.hint)

# ---------- session ----------

class SessionError(CampusAccessError):
    """No usable current-user session."""
    pass
