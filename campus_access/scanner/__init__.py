# =======================================================================================
# campus_access/scanner/__init__.py - Scanner Package
# =======================================================================================
from .coordinator import ScanCoordinator, ScanOutcome
from .decoder import Decoder
from .state import ScanState

__all__ = ["ScanCoordinator", "ScanOutcome", "Decoder", "ScanState"]
