from __future__ import annotations

from typing import Optional
from uuid import uuid4

import requests
from fastapi import HTTPException, Request

from quartermaster.config import settings
from quartermaster.services.api import ApiClient
from quartermaster.services.resources import AuthService
from quartermaster.session import (
    AuthStateStore,
    CookieTokenStorage,
    RouteGuard,
    SessionContext,
    SessionGate,
    landing_path_for,
)
from quartermaster.views.notifications import NotificationStore

# Global/Cached instances
_http_session: Optional[requests.Session] = None
_gate: Optional[SessionGate] = None
_guard: Optional[RouteGuard] = None

# Shared notice store (in-memory)
notification_store = NotificationStore(ttl_seconds=86400)


def get_http_session() -> requests.Session:
    global _http_session
    if _http_session is None:
        _http_session = requests.Session()
    return _http_session


def get_gate() -> SessionGate:
    global _gate
    if _gate is None:
        routing = settings.routing
        _gate = SessionGate(
            public_paths=routing.public_paths,
            login_path=routing.login_path,
            landing=lambda user: landing_path_for(user, routing),
        )
    return _gate


def get_guard() -> RouteGuard:
    global _guard
    if _guard is None:
        _guard = RouteGuard()
    return _guard


def build_context(request: Request) -> SessionContext:
    storage = CookieTokenStorage(
        request,
        key=settings.session.token_key,
        secure=settings.session.cookie_secure,
        max_age=settings.session.cookie_max_age,
    )
    client = ApiClient(
        base_url=settings.backend.base_url,
        token_provider=storage.get,
        session=get_http_session(),
        timeout=settings.backend.timeout_seconds,
    )
    store = AuthStateStore(auth=AuthService(client), storage=storage, routing=settings.routing)
    session_id = request.cookies.get(settings.session.session_key) or uuid4().hex
    return SessionContext(
        store=store,
        client=client,
        notifications=notification_store,
        session_id=session_id,
    )


def get_context(request: Request) -> SessionContext:
    ctx = getattr(request.state, "session_ctx", None)
    if ctx is None:
        # Only gated paths carry a context; exempt paths never ask for one.
        raise HTTPException(status_code=500, detail="Session context unavailable")
    return ctx

