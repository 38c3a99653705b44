# =======================================================================================
# campus_access/workers/__init__.py - Workers Package
# =======================================================================================
from .camera_worker import CameraBarcodeDecoder

__all__ = ["CameraBarcodeDecoder"]
