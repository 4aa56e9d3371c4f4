from quartermaster.session.context import SessionContext
from quartermaster.session.gate import GateAction, GateDecision, SessionGate, normalize_path
from quartermaster.session.guards import (
    DEFAULT_RULES,
    AuthorizationTable,
    GuardDecision,
    PageRule,
    RouteGuard,
    check_route_sets,
    ensure_route_sets,
)
from quartermaster.session.storage import CookieTokenStorage, MemoryTokenStorage, TokenStorage
from quartermaster.session.store import AuthStateStore, landing_path_for

__all__ = [
    "AuthStateStore",
    "AuthorizationTable",
    "CookieTokenStorage",
    "DEFAULT_RULES",
    "GateAction",
    "GateDecision",
    "GuardDecision",
    "MemoryTokenStorage",
    "PageRule",
    "RouteGuard",
    "SessionContext",
    "SessionGate",
    "TokenStorage",
    "check_route_sets",
    "ensure_route_sets",
    "landing_path_for",
    "normalize_path",
]
