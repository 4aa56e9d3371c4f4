from dataclasses import dataclass
from typing import Any, Mapping, Optional

from quartermaster.domain.models import Role, User

FILTER_KEYS = ("base", "assetType", "startDate", "endDate")


@dataclass(frozen=True)
class DashboardFilters:
    base: Optional[str] = None
    asset_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    base_locked: bool = False

    def to_query(self) -> dict[str, Any]:
        query = {
            "base": self.base,
            "assetType": self.asset_type,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }
        return {k: v for k, v in query.items() if v}

    def as_dict(self) -> dict[str, Any]:
        return {**{k: None for k in FILTER_KEYS}, **self.to_query(), "baseLocked": self.base_locked}


def filters_for(user: Optional[User], requested: Optional[Mapping[str, Any]] = None) -> DashboardFilters:
    """Base commanders always see their own base, whatever was requested."""
    requested = requested or {}
    base = requested.get("base") or None
    locked = bool(user and user.has_role(Role.BASE_COMMANDER) and user.assigned_base)
    if locked:
        base = user.assigned_base
    return DashboardFilters(
        base=base,
        asset_type=requested.get("assetType") or None,
        start_date=requested.get("startDate") or None,
        end_date=requested.get("endDate") or None,
        base_locked=locked,
    )
