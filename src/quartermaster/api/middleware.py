import time
import logging
from uuid import uuid4
from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.concurrency import run_in_threadpool

from quartermaster.api import deps
from quartermaster.config import settings
from quartermaster.exceptions import AccessDenied
from quartermaster.session import GateAction, SessionContext

logger = logging.getLogger("quartermaster.api")


async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or uuid4().hex
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["x-request-id"] = rid
    return response


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        status = getattr(response, "status_code", "error")
        rid = getattr(request.state, "request_id", None)
        logger.info(
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "request_id": rid,
            },
        )


def is_exempt(path: str) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") for prefix in settings.routing.exempt_prefixes)


def persist_session(ctx: SessionContext, response: Response) -> Response:
    ctx.store.storage.apply(response)
    response.set_cookie(
        settings.session.session_key,
        ctx.session_id,
        httponly=True,
        samesite="lax",
        secure=settings.session.cookie_secure,
    )
    return response


async def enforce_session(request: Request, call_next):
    """
    App shell: restore the session, apply the auth gate, then the role
    guard, before any page handler runs.
    """
    path = request.url.path
    if is_exempt(path):
        return await call_next(request)

    ctx = deps.build_context(request)
    await run_in_threadpool(ctx.store.initialize)

    decision = deps.get_gate().decide(path, ctx.store.session)
    if decision.action == GateAction.LOADING:
        return JSONResponse(status_code=202, content={"page": "loading"})
    if decision.action == GateAction.REDIRECT:
        return persist_session(ctx, RedirectResponse(url=decision.redirect_to, status_code=303))

    try:
        deps.get_guard().enforce(path, ctx.user)
    except AccessDenied as exc:
        logger.info(
            "page denied",
            extra={"path": path, "role": ctx.user.role.value, "redirect_to": exc.redirect_to},
        )
        ctx.toast("error", str(exc))
        return persist_session(ctx, RedirectResponse(url=exc.redirect_to, status_code=303))

    ctx.show_chrome = decision.show_chrome
    request.state.session_ctx = ctx
    response = await call_next(request)
    return persist_session(ctx, response)
