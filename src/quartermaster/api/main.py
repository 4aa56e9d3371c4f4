import logging
from typing import Optional

import requests
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quartermaster.config import settings
from quartermaster.exceptions import ApiError, FormValidationError, NetworkError
from quartermaster.api import deps
from quartermaster.api.middleware import add_request_id, enforce_session, log_requests
from quartermaster.api.rendering import redirect, render_page
from quartermaster.session import ensure_route_sets

# Routers
from quartermaster.api.routers import admin, auth, records

# Configure logging
logging.basicConfig(level=getattr(logging, settings.logging.level.upper(), logging.INFO))
logger = logging.getLogger("quartermaster.api")

SESSION_EXPIRED = "Your session has expired. Please log in again."


def _error_payload(request: Request, error: str, detail) -> dict:
    payload = {"error": error, "detail": detail}
    rid = getattr(request.state, "request_id", None)
    if rid:
        payload["request_id"] = rid
    return payload


def create_app(http_session: Optional[requests.Session] = None) -> FastAPI:
    """
    Factory to build the FastAPI application.
    `http_session` replaces the shared backend session (tests pass a fake).
    """
    ensure_route_sets(settings.routing, deps.get_guard().table)

    deps._http_session = http_session
    deps._gate = None  # rebuilt from current routing settings

    app = FastAPI(title=f"{settings.app.name} API", version=settings.app.version)

    # Last added runs first: logging wraps request ids, which wrap the session gate.
    app.middleware("http")(enforce_session)
    app.middleware("http")(add_request_id)
    if settings.logging.log_requests:
        app.middleware("http")(log_requests)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": settings.app.version}

    app.include_router(auth.router)
    app.include_router(admin.router)
    for router in records.routers:
        app.include_router(router)

    @app.exception_handler(ApiError)
    async def api_exception_handler(request: Request, exc: ApiError):
        ctx = getattr(request.state, "session_ctx", None)
        if ctx is None:
            return JSONResponse(status_code=exc.status, content=_error_payload(request, "api_error", exc.message))
        if exc.status == 401:
            ctx.store.logout()
            ctx.toast("error", SESSION_EXPIRED)
            return redirect(settings.routing.login_path)
        ctx.toast("error", exc.message)
        status = exc.status if exc.status >= 400 else 502
        return render_page(ctx, "error", data=_error_payload(request, "api_error", exc.message), status_code=status)

    @app.exception_handler(NetworkError)
    async def network_exception_handler(request: Request, exc: NetworkError):
        ctx = getattr(request.state, "session_ctx", None)
        payload = _error_payload(request, "backend_unreachable", str(exc))
        if ctx is None:
            return JSONResponse(status_code=502, content=payload)
        ctx.toast("error", str(exc))
        return render_page(ctx, "error", data=payload, status_code=502)

    @app.exception_handler(FormValidationError)
    async def validation_exception_handler(request: Request, exc: FormValidationError):
        payload = _error_payload(request, "validation_error", "Invalid form")
        payload["fields"] = exc.errors
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        from starlette.exceptions import HTTPException as StarletteHTTPException
        if isinstance(exc, StarletteHTTPException):
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

        rid = getattr(request.state, "request_id", None)
        logger.exception("Unhandled error", extra={"path": str(request.url), "request_id": rid})
        payload = {"error": "internal_error", "detail": "Unexpected server error"}
        if rid:
            payload["request_id"] = rid
        return JSONResponse(status_code=500, content=payload)

    return app

# Module-level app for uvicorn entrypoint
app = create_app()
