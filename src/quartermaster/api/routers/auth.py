import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from quartermaster.api.deps import get_context
from quartermaster.api.rendering import redirect, render_failure, render_page
from quartermaster.config import settings
from quartermaster.domain.forms import LoginForm, PasswordChangeForm
from quartermaster.exceptions import ApiError, FormValidationError, NetworkError
from quartermaster.session import SessionContext
from quartermaster.views.forms import failure_from

logger = logging.getLogger("quartermaster.api.auth")
router = APIRouter(tags=["auth"])

ROLE_LABELS = {
    "Admin": "Administrator",
    "BaseCommander": "Base Commander",
    "LogisticsOfficer": "Logistics Officer",
}


@router.get("/")
def root(ctx: SessionContext = Depends(get_context)):
    return redirect(ctx.store.landing_path())


@router.get("/login")
def login_page(ctx: SessionContext = Depends(get_context)):
    return render_page(ctx, "login", data={"values": {"username": "", "password": ""}}, title="Login")


@router.post("/login")
def login(payload: dict[str, Any] = Body(default={}), ctx: SessionContext = Depends(get_context)):
    try:
        form = LoginForm.parse_form(payload)
        ctx.store.login(form.username, form.password)
    except (FormValidationError, ApiError, NetworkError) as exc:
        logger.info("login failed", extra={"username": payload.get("username"), "error": str(exc)})
        failure = failure_from(exc, "Invalid username or password")
        return render_failure(ctx, "login", failure, values={"username": payload.get("username", "")})

    ctx.toast("success", "Login successful")
    return redirect(ctx.store.landing_path())


@router.post("/logout")
def logout(ctx: SessionContext = Depends(get_context)):
    ctx.store.logout()
    ctx.toast("info", "You have been signed out")
    return redirect(settings.routing.login_path)


@router.get("/register")
def register_page(ctx: SessionContext = Depends(get_context)):
    return render_page(ctx, "register", title="Register")


@router.get("/forgot-password")
def forgot_password_page(ctx: SessionContext = Depends(get_context)):
    return render_page(ctx, "forgot-password", title="Forgot password")


@router.get("/reset-password")
def reset_password_page(ctx: SessionContext = Depends(get_context)):
    return render_page(ctx, "reset-password", title="Reset password")


@router.get("/profile")
def profile(ctx: SessionContext = Depends(get_context)):
    user = ctx.store.refresh_user() or ctx.user
    return render_page(
        ctx,
        "profile",
        data={"profile": user, "roleLabel": ROLE_LABELS.get(user.role.value, user.role.value)},
        title="Profile",
    )


@router.post("/profile/password")
def change_password(payload: dict[str, Any] = Body(default={}), ctx: SessionContext = Depends(get_context)):
    try:
        form = PasswordChangeForm.parse_form(payload)
        message = ctx.store.auth.change_password(form.current_password, form.new_password)
    except (FormValidationError, ApiError, NetworkError) as exc:
        return render_failure(ctx, "profile", failure_from(exc, "Failed to change password"))

    ctx.toast("success", message)
    return redirect("/profile")


@router.get("/notifications")
def notifications(ctx: SessionContext = Depends(get_context)):
    items = ctx.notifications.notifications(ctx.session_id)
    return render_page(ctx, "notifications", data=[n.as_dict() for n in items], title="Notifications")


@router.post("/notifications/read-all")
def mark_all_notifications_read(ctx: SessionContext = Depends(get_context)):
    ctx.notifications.mark_all_read(ctx.session_id)
    return {"unread": 0}


@router.post("/notifications/{notification_id}/read")
def mark_notification_read(notification_id: str, ctx: SessionContext = Depends(get_context)):
    if ctx.notifications.mark_read(ctx.session_id, notification_id) is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"unread": ctx.notifications.unread_count(ctx.session_id)}
