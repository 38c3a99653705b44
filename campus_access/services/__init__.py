# =======================================================================================
# campus_access/services/__init__.py - Services Package
# =======================================================================================
from .access_log_service import AccessLogService
from .user_service import UserService

__all__ = ["AccessLogService", "UserService"]
