import logging
from typing import Optional

from quartermaster.config import RoutingSettings
from quartermaster.domain.models import Session, User
from quartermaster.exceptions import ApiError, InvalidResponseError, NetworkError
from quartermaster.services.resources import AuthService
from quartermaster.session.storage import TokenStorage

logger = logging.getLogger("quartermaster.session")


class AuthStateStore:
    """
    Single source of truth for who is logged in.

    One instance per browser request; nothing here is shared between
    requests. The persisted credential lives in `storage`.
    """

    def __init__(self, auth: AuthService, storage: TokenStorage, routing: Optional[RoutingSettings] = None):
        self.auth = auth
        self.storage = storage
        self.routing = routing or RoutingSettings()
        self.session = Session()

    @property
    def user(self) -> Optional[User]:
        return self.session.user

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def is_initialized(self) -> bool:
        return self.session.is_initialized

    def initialize(self) -> Session:
        """
        Restore the session from the stored credential. Always leaves the
        store initialized; a rejected credential is dropped from storage.
        """
        if self.session.is_initialized:
            return self.session
        try:
            token = self.storage.get()
            if token:
                self._restore()
        finally:
            self.session.is_initialized = True
        return self.session

    def _restore(self) -> None:
        try:
            user = self.auth.me()
        except ApiError as exc:
            if exc.is_auth_rejection or isinstance(exc, InvalidResponseError):
                # An unreadable profile counts as a rejected credential.
                logger.info("stored credential rejected", extra={"status": exc.status, "error": exc.message})
                self.storage.clear()
            else:
                logger.warning("session restore failed", extra={"status": exc.status})
            return
        except NetworkError:
            logger.warning("session restore failed: backend unreachable")
            return
        self.session.user = user
        self.session.is_authenticated = True

    def login(self, username: str, password: str) -> User:
        # Failures propagate untouched; the session is only written on success.
        user, token = self.auth.login(username, password)
        self.storage.set(token)
        self.session.user = user
        self.session.is_authenticated = True
        self.session.is_initialized = True
        logger.info("login", extra={"username": user.username, "role": user.role.value})
        return user

    def logout(self) -> None:
        if self.session.user:
            logger.info("logout", extra={"username": self.session.user.username})
        self.storage.clear()
        self.session.user = None
        self.session.is_authenticated = False

    def refresh_user(self) -> Optional[User]:
        if not self.session.is_authenticated:
            return None
        self.session.user = self.auth.me()
        return self.session.user

    def landing_path(self) -> str:
        return landing_path_for(self.session.user, self.routing)


def landing_path_for(user: Optional[User], routing: RoutingSettings) -> str:
    if user is None:
        return routing.default_landing
    return routing.role_landing.get(user.role.value, routing.default_landing)
