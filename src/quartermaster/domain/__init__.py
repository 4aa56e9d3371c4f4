from quartermaster.domain.models import (
    ActivityLog,
    Asset,
    Assignment,
    DashboardData,
    Expenditure,
    Personnel,
    Purchase,
    Role,
    Session,
    Transfer,
    User,
)

__all__ = [
    "ActivityLog",
    "Asset",
    "Assignment",
    "DashboardData",
    "Expenditure",
    "Personnel",
    "Purchase",
    "Role",
    "Session",
    "Transfer",
    "User",
]
