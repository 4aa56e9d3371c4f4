from quartermaster.services.api import ApiClient, clean_params
from quartermaster.services.resources import (
    RECORD_SERVICES,
    ActivityLogService,
    AssetService,
    AssignmentService,
    AuthService,
    DashboardService,
    ExpenditureService,
    ListParams,
    ListResult,
    PurchaseService,
    ResourceService,
    TransferService,
    UserService,
)

__all__ = [
    "ActivityLogService",
    "ApiClient",
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
    "clean_params",
]
