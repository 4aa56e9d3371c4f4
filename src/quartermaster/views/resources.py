"""
Per-resource page configuration: list defaults, filters, form schema and
how a viewer's assigned base shapes both.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from quartermaster.domain.forms import (
    AssetForm,
    AssignmentForm,
    ExpenditureForm,
    FormSchema,
    PurchaseForm,
    TransferForm,
)
from quartermaster.domain.models import Role, User
from quartermaster.services.resources import (
    ActivityLogService,
    AssetService,
    AssignmentService,
    ExpenditureService,
    ListParams,
    PurchaseService,
    ResourceService,
    TransferService,
)
from quartermaster.views.forms import today
from quartermaster.views.pagination import request_window


@dataclass(frozen=True)
class ResourcePage:
    name: str  # url segment, e.g. "assets"
    label: str  # singular, e.g. "Asset"
    service: type[ResourceService]
    sort_by: str
    page_size: int = 10
    sort_order: str = "desc"
    filters: tuple[str, ...] = ()
    # Roles whose list and form base is pinned to their assigned base.
    pinned_base_roles: frozenset[Role] = frozenset()
    base_field: str = "base"
    schema: Optional[type[FormSchema]] = None
    form_defaults: Callable[[], dict[str, Any]] = field(default=dict)
    asset_picker: bool = False

    @property
    def creatable(self) -> bool:
        return self.schema is not None

    def detail_path(self) -> str:
        return f"/{self.name}/{{id}}"

    def pins_base(self, user: Optional[User]) -> bool:
        return bool(user and user.assigned_base and user.has_role(*self.pinned_base_roles))

    def list_params(self, user: Optional[User], query: Mapping[str, Any]) -> tuple[int, ListParams]:
        page_size = _positive(query.get("limit"), self.page_size)
        page, skip = request_window(_positive(query.get("page"), 1), page_size)
        sort_order = query.get("sortOrder") if query.get("sortOrder") in ("asc", "desc") else self.sort_order
        filters = {name: query.get(name) for name in self.filters if query.get(name) not in (None, "", "All")}
        if self.pins_base(user):
            filters["base"] = user.assigned_base
        params = ListParams(
            limit=page_size,
            skip=skip,
            sort_by=query.get("sortBy") or self.sort_by,
            sort_order=sort_order,
            filters=filters,
        )
        return page, params

    def initial_values(self, user: Optional[User]) -> dict[str, Any]:
        values = self.form_defaults()
        if self.pins_base(user):
            values[self.base_field] = user.assigned_base
        return values

    def locked_fields(self, user: Optional[User]) -> list[str]:
        return [self.base_field] if self.pins_base(user) else []

    def prepare_submission(self, user: Optional[User], data: Mapping[str, Any]) -> dict[str, Any]:
        values = dict(data)
        if self.pins_base(user):
            values[self.base_field] = user.assigned_base
        return values


def _positive(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


ADMIN = Role.ADMIN
COMMANDER = Role.BASE_COMMANDER
LOGISTICS = Role.LOGISTICS_OFFICER

RESOURCE_PAGES: dict[str, ResourcePage] = {
    page.name: page
    for page in (
        ResourcePage(
            name="assets",
            label="Asset",
            service=AssetService,
            sort_by="name",
            sort_order="asc",
            filters=("base", "type", "search"),
            pinned_base_roles=frozenset({LOGISTICS}),
            schema=AssetForm,
            form_defaults=lambda: {"name": "", "type": "", "base": "", "openingBalance": 0},
        ),
        ResourcePage(
            name="purchases",
            label="Purchase",
            service=PurchaseService,
            sort_by="purchaseDate",
            filters=("base", "assetType", "supplier", "startDate", "endDate", "search"),
            pinned_base_roles=frozenset({LOGISTICS}),
            schema=PurchaseForm,
            form_defaults=lambda: {
                "assetName": "",
                "assetType": "",
                "base": "",
                "supplier": "",
                "quantity": 1,
                "unitCost": 0,
                "purchaseDate": today(),
                "invoiceNumber": "",
                "notes": "",
            },
            asset_picker=True,
        ),
        ResourcePage(
            name="transfers",
            label="Transfer",
            service=TransferService,
            sort_by="createdAt",
            filters=("fromBase", "toBase", "status", "assetType", "startDate", "endDate", "search"),
            pinned_base_roles=frozenset({COMMANDER, LOGISTICS}),
            base_field="fromBase",
            schema=TransferForm,
            form_defaults=lambda: {"asset": "", "fromBase": "", "toBase": "", "quantity": 1, "transferDate": today()},
            asset_picker=True,
        ),
        ResourcePage(
            name="assignments",
            label="Assignment",
            service=AssignmentService,
            sort_by="startDate",
            filters=("base", "status", "assetType", "startDate", "endDate", "search"),
            pinned_base_roles=frozenset({COMMANDER}),
            schema=AssignmentForm,
            form_defaults=lambda: {
                "asset": "",
                "base": "",
                "quantity": 1,
                "assignedTo": {"name": "", "rank": "", "id": ""},
                "purpose": "",
                "startDate": today(),
                "endDate": None,
                "notes": "",
            },
            asset_picker=True,
        ),
        ResourcePage(
            name="expenditures",
            label="Expenditure",
            service=ExpenditureService,
            sort_by="expenditureDate",
            filters=("base", "assetType", "reason", "startDate", "endDate", "search"),
            pinned_base_roles=frozenset({COMMANDER}),
            schema=ExpenditureForm,
            form_defaults=lambda: {
                "asset": "",
                "base": "",
                "quantity": 1,
                "reason": "",
                "expendedBy": {"name": "", "rank": "", "id": ""},
                "expenditureDate": today(),
                "operationName": "",
                "location": "",
                "notes": "",
            },
            asset_picker=True,
        ),
        ResourcePage(
            name="activity-logs",
            label="Activity log",
            service=ActivityLogService,
            sort_by="timestamp",
            page_size=20,
            filters=("username", "action", "resourceType", "resourceId", "startDate", "endDate"),
        ),
    )
}
