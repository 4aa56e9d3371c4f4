import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from quartermaster.api.deps import get_context, get_guard
from quartermaster.api.rendering import redirect, render_failure, render_page
from quartermaster.config import settings
from quartermaster.services.resources import AssetService, ListParams
from quartermaster.session import SessionContext
from quartermaster.views.forms import FormSubmitter
from quartermaster.views.pagination import Pagination
from quartermaster.views.resources import RESOURCE_PAGES, ResourcePage

logger = logging.getLogger("quartermaster.api.records")

ASSET_PICKER_LIMIT = 100


def _options() -> dict[str, list[str]]:
    catalog = settings.catalog
    return {
        "bases": catalog.bases,
        "assetTypes": catalog.asset_types,
        "suppliers": catalog.suppliers,
        "reasons": catalog.expenditure_reasons,
    }


def _available_assets(ctx: SessionContext, page: ResourcePage) -> list:
    result = ctx.service(AssetService).list(ListParams(limit=ASSET_PICKER_LIMIT, sort_by="name", sort_order="asc"))
    assets = result.items
    if page.pins_base(ctx.user):
        assets = [a for a in assets if a.base == ctx.user.assigned_base]
    return assets


def build_router(page: ResourcePage) -> APIRouter:
    router = APIRouter(prefix=f"/{page.name}", tags=[page.name])
    plural = page.label + "s"

    @router.get("")
    def list_records(request: Request, ctx: SessionContext = Depends(get_context)):
        requested_page, params = page.list_params(ctx.user, request.query_params)
        result = ctx.service(page.service).list(params)
        pagination = Pagination(total=result.total, page=requested_page, page_size=params.limit)
        if requested_page != pagination.page:
            target = request.url.include_query_params(page=pagination.page)
            logger.info("page out of range", extra={"resource": page.name, "requested": requested_page, "page": pagination.page})
            return redirect(f"{target.path}?{target.query}")
        return render_page(
            ctx,
            page.name,
            data={
                "items": result.items,
                "pagination": pagination.as_dict(),
                "sortBy": params.sort_by,
                "sortOrder": params.sort_order,
                "filters": params.filters,
                "lockedFilters": ["base"] if page.pins_base(ctx.user) else [],
                "canCreate": page.creatable and _can_create(ctx, page),
            },
            title=plural,
        )

    if page.creatable:
        submitter_for = _submitter_factory(page)

        @router.get("/new")
        def new_record(request: Request, ctx: SessionContext = Depends(get_context)):
            values = page.initial_values(ctx.user)
            selected = None
            assets = []
            if page.asset_picker:
                assets = _available_assets(ctx, page)
                asset_id = request.query_params.get("asset")
                selected = next((a for a in assets if a.id == asset_id), None)
                if selected is not None:
                    values.update(_prefill_from_asset(page, selected))
            return render_page(
                ctx,
                f"{page.name}/new",
                data={
                    "values": values,
                    "lockedFields": page.locked_fields(ctx.user),
                    "options": _options(),
                    "assets": assets,
                    "selectedAsset": selected,
                },
                title=f"New {page.label}",
            )

        @router.post("/new")
        def create_record(payload: dict[str, Any] = Body(default={}), ctx: SessionContext = Depends(get_context)):
            data = page.prepare_submission(ctx.user, payload)
            result = submitter_for(ctx).submit(data)
            if not result.ok:
                return render_failure(ctx, f"{page.name}/new", result, values=data)

            logger.info("record created", extra={"resource": page.name, "record_id": result.record.id})
            ctx.notify("success", f"{page.label} Created", f"{page.label} {result.record.id} has been created successfully.")
            ctx.toast("success", result.message)
            return redirect(result.redirect_to)

    @router.get("/{record_id}")
    def record_detail(record_id: str, ctx: SessionContext = Depends(get_context)):
        record = ctx.service(page.service).get(record_id)
        return render_page(ctx, f"{page.name}/detail", data={"record": record}, title=page.label)

    return router


def _can_create(ctx: SessionContext, page: ResourcePage) -> bool:
    return ctx.user is not None and get_guard().table.allows(f"/{page.name}/new", ctx.user.role)


def _submitter_factory(page: ResourcePage):
    def make(ctx: SessionContext) -> FormSubmitter:
        service = ctx.service(page.service)
        return FormSubmitter(
            schema=page.schema,
            create=service.create,
            detail_path=page.detail_path(),
            success_message=f"{page.label} created successfully",
            failure_message=f"Failed to create {page.label.lower()}",
        )

    return make


def _prefill_from_asset(page: ResourcePage, asset) -> dict[str, Any]:
    if page.name == "purchases":
        return {"assetName": asset.name, "assetType": asset.type, "base": asset.base}
    if page.name == "transfers":
        return {"asset": asset.id, "fromBase": asset.base}
    return {"asset": asset.id, "base": asset.base}


routers = [build_router(page) for page in RESOURCE_PAGES.values()]
