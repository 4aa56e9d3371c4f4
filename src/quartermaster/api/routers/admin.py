from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request

from quartermaster.api.deps import get_context
from quartermaster.api.rendering import redirect, render_failure, render_page
from quartermaster.config import settings
from quartermaster.domain.forms import UserForm
from quartermaster.domain.models import Role
from quartermaster.services.resources import ActivityLogService, DashboardService, UserService
from quartermaster.session import SessionContext
from quartermaster.views.dashboard import filters_for
from quartermaster.views.forms import FormSubmitter

router = APIRouter(tags=["admin"])


@router.get("/dashboard")
def dashboard(request: Request, ctx: SessionContext = Depends(get_context)):
    filters = filters_for(ctx.user, request.query_params)
    data = ctx.service(DashboardService).get(filters.to_query())
    return render_page(
        ctx,
        "dashboard",
        data={
            "filters": filters.as_dict(),
            "options": {"bases": settings.catalog.bases, "assetTypes": settings.catalog.asset_types},
            "dashboard": data,
        },
        title="Dashboard",
    )


@router.get("/activity-logs/summary")
def activity_summary(
    days: int = Query(30, ge=1, le=365),
    ctx: SessionContext = Depends(get_context),
):
    svc = ctx.service(ActivityLogService)
    return render_page(
        ctx,
        "activity-logs/summary",
        data={
            "actions": svc.actions_summary(),
            "resources": svc.resources_summary(),
            "users": svc.users_summary(),
            "daily": svc.daily_summary(days),
            "options": {
                "actions": ["All", *settings.catalog.activity_actions],
                "resourceTypes": ["All", *settings.catalog.activity_resource_types],
            },
        },
        title="Activity Summary",
    )


@router.get("/settings")
def system_settings(ctx: SessionContext = Depends(get_context)):
    catalog = settings.catalog
    return render_page(
        ctx,
        "settings",
        data={
            "general": {"name": settings.app.name, "version": settings.app.version, "backend": settings.backend.base_url},
            "assetTypes": catalog.asset_types,
            "bases": catalog.bases,
            "suppliers": catalog.suppliers,
        },
        title="Settings",
    )


@router.get("/users")
def users(ctx: SessionContext = Depends(get_context)):
    result = ctx.service(UserService).list()
    return render_page(ctx, "users", data={"items": result.items, "total": result.total}, title="Users")


@router.get("/users/new")
def new_user(ctx: SessionContext = Depends(get_context)):
    return render_page(
        ctx,
        "users/new",
        data={
            "values": {
                "username": "",
                "password": "",
                "email": "",
                "fullName": "",
                "role": Role.LOGISTICS_OFFICER.value,
                "assignedBase": "",
            },
            "options": {"roles": [r.value for r in Role], "bases": settings.catalog.bases},
        },
        title="New User",
    )


@router.post("/users/new")
def create_user(payload: dict[str, Any] = Body(default={}), ctx: SessionContext = Depends(get_context)):
    submitter = FormSubmitter(
        schema=UserForm,
        create=ctx.service(UserService).create,
        detail_path="/users",
        success_message="User created successfully",
        failure_message="Failed to create user",
    )
    result = submitter.submit(payload)
    if not result.ok:
        values = {k: v for k, v in payload.items() if k != "password"}
        return render_failure(ctx, "users/new", result, values=values)
    ctx.toast("success", result.message)
    return redirect(result.redirect_to)
