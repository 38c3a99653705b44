# =======================================================================================
# campus_access/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *

__all__ = [
    "CampusAccessError", "UserNotFoundError", "DuplicateUserError", "ApiError",
    "ValidationError", "NotFoundError", "TransportError", "ServerError",
    "DecoderUnavailable", "SessionError",
]
