# =======================================================================================
# campus_access/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *

__all__ = [
    "RegisterRequest", "RegisterResponse", "LoginRequest", "LoginResponse", "UserOut",
    "UserLookupResponse", "AccessRecordRequest", "AccessRecordResponse", "AccessLogItem",
    "AccessLogPage", "HealthResponse", "Role", "EventKind", "KindFilter",
    "ROLES", "EVENT_KINDS", "ScanPhase", "DecoderFailure", "ScanResult",
]
