from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from quartermaster.domain.models import (
    ActivityLog,
    Asset,
    Assignment,
    DashboardData,
    Expenditure,
    Purchase,
    Transfer,
    User,
)
from quartermaster.domain.forms import FormSchema
from quartermaster.exceptions import ApiError, InvalidResponseError
from quartermaster.services.api import ApiClient

T = TypeVar("T", bound=BaseModel)


@dataclass
class ListParams:
    limit: int = 10
    skip: int = 0
    sort_by: Optional[str] = None
    sort_order: str = "desc"
    filters: dict[str, Any] = field(default_factory=dict)

    def to_query(self) -> dict[str, Any]:
        query: dict[str, Any] = {"limit": self.limit, "skip": max(self.skip, 0)}
        if self.sort_by:
            query["sortBy"] = self.sort_by
            query["sortOrder"] = self.sort_order
        query.update(self.filters)
        return query


@dataclass
class ListResult(Generic[T]):
    items: list[T]
    total: int


def _extract_items(payload: Any, collection_key: str) -> tuple[list[Any], Optional[int]]:
    if isinstance(payload, list):
        return payload, None
    if not isinstance(payload, dict):
        raise InvalidResponseError("list payload is not an object")
    for key in (collection_key, "items", "data", "results"):
        if isinstance(payload.get(key), list):
            items = payload[key]
            break
    else:
        items = []
    total = payload.get("total", payload.get("totalCount", payload.get("count")))
    if total is None:
        return items, None
    try:
        return items, int(total)
    except (TypeError, ValueError) as exc:
        raise InvalidResponseError(f"total is not a number: {total!r}") from exc


def _parse(model: type[T], data: Any) -> T:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidResponseError(f"{model.__name__} ({exc.error_count()} invalid fields)") from exc


def _unwrap(payload: Any, key: str) -> Any:
    # Some endpoints wrap the single record, e.g. {"asset": {...}}.
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload


class ResourceService(Generic[T]):
    path: str = ""
    collection_key: str = ""
    item_key: str = ""
    model: type[T]

    def __init__(self, client: ApiClient):
        self.client = client

    def _parse_list(self, payload: Any) -> ListResult[T]:
        raw, total = _extract_items(payload, self.collection_key)
        items = [_parse(self.model, item) for item in raw]
        return ListResult(items=items, total=total if total is not None else len(items))

    def list(self, params: Optional[ListParams | Mapping[str, Any]] = None) -> ListResult[T]:
        query = params.to_query() if isinstance(params, ListParams) else dict(params or {})
        return self._parse_list(self.client.get(self.path, params=query))

    def get(self, record_id: str) -> T:
        payload = self.client.get(f"{self.path}/{record_id}")
        return _parse(self.model, _unwrap(payload, self.item_key))

    def create(self, payload: Mapping[str, Any] | BaseModel) -> T:
        body = payload.to_payload() if isinstance(payload, FormSchema) else dict(payload)
        created = self.client.post(self.path, json=body)
        return _parse(self.model, _unwrap(created, self.item_key))


class AssetService(ResourceService[Asset]):
    path = "/assets"
    collection_key = "assets"
    item_key = "asset"
    model = Asset


class PurchaseService(ResourceService[Purchase]):
    path = "/purchases"
    collection_key = "purchases"
    item_key = "purchase"
    model = Purchase


class TransferService(ResourceService[Transfer]):
    path = "/transfers"
    collection_key = "transfers"
    item_key = "transfer"
    model = Transfer


class AssignmentService(ResourceService[Assignment]):
    path = "/assignments"
    collection_key = "assignments"
    item_key = "assignment"
    model = Assignment


class ExpenditureService(ResourceService[Expenditure]):
    path = "/expenditures"
    collection_key = "expenditures"
    item_key = "expenditure"
    model = Expenditure


class ActivityLogService(ResourceService[ActivityLog]):
    path = "/activity-logs"
    collection_key = "logs"
    item_key = "log"
    model = ActivityLog

    def _summary(self, kind: str, params: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        payload = self.client.get(f"{self.path}/summary/{kind}", params=params)
        if isinstance(payload, dict):
            payload = payload.get("summary", payload.get("data", []))
        return list(payload or [])

    def actions_summary(self) -> list[dict[str, Any]]:
        return self._summary("actions")

    def resources_summary(self) -> list[dict[str, Any]]:
        return self._summary("resources")

    def users_summary(self) -> list[dict[str, Any]]:
        return self._summary("users")

    def daily_summary(self, days: Optional[int] = None) -> list[dict[str, Any]]:
        return self._summary("daily", {"days": days})


class UserService(ResourceService[User]):
    path = "/users"
    collection_key = "users"
    item_key = "user"
    model = User


class DashboardService:
    path = "/dashboard"

    def __init__(self, client: ApiClient):
        self.client = client

    def get(self, filters: Optional[Mapping[str, Any]] = None) -> DashboardData:
        return _parse(DashboardData, self.client.get(self.path, params=filters))


class AuthService:
    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, username: str, password: str) -> tuple[User, str]:
        payload = self.client.post("/auth/login", json={"username": username, "password": password})
        payload = payload if isinstance(payload, dict) else {}
        token, user = payload.get("token"), payload.get("user")
        if not token or not isinstance(user, dict):
            raise ApiError(200, "Authentication failed. Please try again.")
        return _parse(User, user), token

    def me(self) -> User:
        return _parse(User, _unwrap(self.client.get("/auth/me"), "user"))

    def change_password(self, current_password: str, new_password: str) -> str:
        payload = self.client.post(
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )
        message = payload.get("message") if isinstance(payload, dict) else None
        return message or "Password changed successfully"


RECORD_SERVICES: dict[str, type[ResourceService[Any]]] = {
    "assets": AssetService,
    "purchases": PurchaseService,
    "transfers": TransferService,
    "assignments": AssignmentService,
    "expenditures": ExpenditureService,
    "activity-logs": ActivityLogService,
}

__all__ = [
    "ActivityLogService",
    "AssetService",
    "AssignmentService",
    "AuthService",
    "DashboardService",
    "ExpenditureService",
    "ListParams",
    "ListResult",
    "PurchaseService",
    "RECORD_SERVICES",
    "ResourceService",
    "TransferService",
    "UserService",
]
