# =======================================================================================
# campus_access/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum
from typing import Literal, get_args

# Type aliases for better type hints
Role = Literal["member", "staff", "admin"]
EventKind = Literal["entry", "exit"]
KindFilter = Literal["entry", "exit", "all"]

ROLES = get_args(Role)
EVENT_KINDS = get_args(EventKind)

class ScanPhase(Enum):
    """Lifecycle of one scan session."""
    IDLE = "idle"
    ARMED = "armed"
    RESOLVING = "resolving"
    SUBMITTING = "submitting"

class DecoderFailure(Enum):
    """Why the camera decoder could not start."""
    PERMISSION_DENIED = "permission_denied"
    NO_DEVICE = "no_device"
    DEVICE_BUSY = "device_busy"
    LIBRARY_MISSING = "library_missing"
    TIMEOUT = "timeout"

class ScanResult(Enum):
    """Final outcome of an accepted detection."""
    RECORDED = "recorded"
    UNKNOWN_CODE = "unknown_code"
    NO_KIND_SELECTED = "no_kind_selected"
    LOOKUP_FAILED = "lookup_failed"
    RECORD_FAILED = "record_failed"
