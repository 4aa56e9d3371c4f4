from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ADMIN = "Admin"
    BASE_COMMANDER = "BaseCommander"
    LOGISTICS_OFFICER = "LogisticsOfficer"


class WireModel(BaseModel):
    """
    Backend payloads are camelCase; attributes stay snake_case.
    Dump with by_alias=True to get the wire shape back.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _id_field(**kwargs: Any) -> Any:
    return Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id", **kwargs)


class User(WireModel):
    """
    Represents an authenticated user of the console.
    """
    id: Optional[str] = _id_field(default=None)
    username: str
    role: Role
    assigned_base: Optional[str] = None  # Admins are not bound to a base
    email: Optional[str] = None
    full_name: Optional[str] = None

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles


class Session(BaseModel):
    user: Optional[User] = None
    is_authenticated: bool = False
    is_initialized: bool = False


class Record(WireModel):
    id: str = _id_field()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Personnel(WireModel):
    name: str
    rank: Optional[str] = None
    id: Optional[str] = None


class Asset(Record):
    name: str
    type: str
    base: str
    opening_balance: int = 0
    closing_balance: Optional[int] = None
    assigned: int = 0
    available: Optional[int] = None
    status: Optional[str] = None


class Purchase(Record):
    asset_name: str
    asset_type: Optional[str] = None
    base: str
    supplier: Optional[str] = None
    quantity: int
    unit_cost: Optional[float] = None
    total_cost: Optional[float] = None
    purchase_date: Optional[datetime] = None
    invoice_number: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class Transfer(Record):
    asset: Optional[str] = None
    asset_name: Optional[str] = None
    from_base: str
    to_base: str
    quantity: int
    status: Optional[str] = None
    transfer_date: Optional[datetime] = None
    notes: Optional[str] = None


class Assignment(Record):
    asset: Optional[str] = None
    asset_name: Optional[str] = None
    base: str
    quantity: int
    assigned_to: Optional[Personnel] = None
    purpose: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class Expenditure(Record):
    asset: Optional[str] = None
    asset_name: Optional[str] = None
    base: str
    quantity: int
    reason: str
    expended_by: Optional[Personnel] = None
    expenditure_date: Optional[datetime] = None
    operation_name: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class ActivityLog(Record):
    user: Optional[str] = None
    username: Optional[str] = None
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    details: Any = None
    ip_address: Optional[str] = None
    timestamp: Optional[datetime] = None


class DashboardSummary(WireModel):
    total_assets: int = 0
    total_opening_balance: int = 0
    total_closing_balance: int = 0
    total_purchases: int = 0
    total_transfer_in: int = 0
    total_transfer_out: int = 0
    total_assigned: int = 0
    total_expended: int = 0
    total_available: int = 0


class AssetTypeStats(WireModel):
    type: str
    count: int = 0
    opening_balance: int = 0
    closing_balance: int = 0
    assigned: int = 0
    available: int = 0


class DashboardData(WireModel):
    summary: DashboardSummary = Field(default_factory=DashboardSummary)
    assets_by_type: list[AssetTypeStats] = Field(default_factory=list)
    # Partial records; the backend trims them for the overview cards.
    recent_transfers: list[dict[str, Any]] = Field(default_factory=list)
    recent_purchases: list[dict[str, Any]] = Field(default_factory=list)
    recent_assignments: list[dict[str, Any]] = Field(default_factory=list)
    recent_expenditures: list[dict[str, Any]] = Field(default_factory=list)
