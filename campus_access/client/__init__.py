# =======================================================================================
# campus_access/client/__init__.py - Client Package
# =======================================================================================
from .gateway import ApiGateway
from .history import (
    AccessHistoryViewModel, GatewayHistorySource, HistoryFilter, MockHistorySource,
)
from .session import CurrentUser, SessionStore
from .views import AccountView

__all__ = [
    "ApiGateway", "AccessHistoryViewModel", "GatewayHistorySource", "HistoryFilter",
    "MockHistorySource", "CurrentUser", "SessionStore", "AccountView",
]
