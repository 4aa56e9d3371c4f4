from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from quartermaster.config import settings
from quartermaster.session import SessionContext
from quartermaster.views.forms import SubmitFailure


def dump(value: Any) -> Any:
    """Wire-shaped (camelCase) JSON for models, lists of models and dicts."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, (list, tuple)):
        return [dump(v) for v in value]
    if isinstance(value, dict):
        return {k: dump(v) for k, v in value.items()}
    return jsonable_encoder(value)


def render_page(ctx: SessionContext, page: str, data: Any = None, status_code: int = 200, title: Optional[str] = None) -> JSONResponse:
    user = ctx.user
    body = {
        "page": page,
        "title": f"{title} | {settings.app.title}" if title else settings.app.title,
        "chrome": ctx.show_chrome,
        "user": dump(user) if user else None,
        "notices": [n.as_dict() for n in ctx.notifications.drain(ctx.session_id)],
        "unreadNotifications": ctx.notifications.unread_count(ctx.session_id) if user else 0,
        "data": dump(data),
    }
    return JSONResponse(status_code=status_code, content=body)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def render_failure(ctx: SessionContext, page: str, failure: SubmitFailure, values: Any = None) -> JSONResponse:
    ctx.toast("error", failure.message)
    return render_page(
        ctx,
        page,
        data={"values": values, "errors": failure.errors},
        status_code=failure.status if failure.status >= 400 else 400,
    )
