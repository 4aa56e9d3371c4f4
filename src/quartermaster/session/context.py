from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar

from quartermaster.domain.models import User
from quartermaster.services.api import ApiClient
from quartermaster.session.store import AuthStateStore
from quartermaster.views.notifications import NoticeKind, NotificationStore

S = TypeVar("S")


@dataclass
class SessionContext:
    """
    Everything a page handler needs for one browser request: the auth
    store, a backend client carrying this viewer's credential, and the
    viewer's notice queue. Built per request and passed explicitly.
    """
    store: AuthStateStore
    client: ApiClient
    notifications: NotificationStore
    session_id: str
    show_chrome: bool = False
    _services: dict[type, Any] = field(default_factory=dict, repr=False)

    @property
    def user(self) -> Optional[User]:
        return self.store.user

    def service(self, service_cls: type[S]) -> S:
        if service_cls not in self._services:
            self._services[service_cls] = service_cls(self.client)
        return self._services[service_cls]

    def toast(self, kind: NoticeKind, text: str) -> None:
        self.notifications.push(self.session_id, kind, text)

    def notify(self, kind: NoticeKind, title: str, text: str) -> None:
        self.notifications.add(self.session_id, kind, title, text)
