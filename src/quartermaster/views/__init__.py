from quartermaster.views.dashboard import DashboardFilters, filters_for
from quartermaster.views.forms import FormSubmitter, SubmitFailure, SubmitResult, SubmitSuccess
from quartermaster.views.notifications import Notice, Notification, NotificationStore
from quartermaster.views.pagination import Pagination, request_window
from quartermaster.views.resources import RESOURCE_PAGES, ResourcePage

__all__ = [
    "DashboardFilters",
    "FormSubmitter",
    "Notice",
    "Notification",
    "NotificationStore",
    "Pagination",
    "RESOURCE_PAGES",
    "ResourcePage",
    "SubmitFailure",
    "SubmitResult",
    "SubmitSuccess",
    "filters_for",
    "request_window",
]
