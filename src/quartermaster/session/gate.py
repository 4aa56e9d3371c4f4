from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from quartermaster.domain.models import Session, User


class GateAction(str, Enum):
    RENDER = "render"
    LOADING = "loading"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    redirect_to: Optional[str] = None
    show_chrome: bool = False


def normalize_path(path: str) -> str:
    path = path.split("?", 1)[0] or "/"
    if len(path) > 1:
        path = path.rstrip("/")
    return path


class SessionGate:
    """
    Reconciles the requested path with the session on every navigation.

    Unauthenticated viewers only see public paths; authenticated viewers
    never see them. Both rules rely on a path being either public or not,
    which is what keeps the two redirects from chasing each other.
    """

    def __init__(
        self,
        public_paths: Iterable[str],
        login_path: str,
        landing: Callable[[Optional[User]], str],
    ):
        self.public_paths = frozenset(normalize_path(p) for p in public_paths)
        self.login_path = normalize_path(login_path)
        self.landing = landing

    def is_public(self, path: str) -> bool:
        return normalize_path(path) in self.public_paths

    def decide(self, path: str, session: Session) -> GateDecision:
        if not session.is_initialized:
            return GateDecision(GateAction.LOADING)

        public = self.is_public(path)
        if not session.is_authenticated and not public:
            return GateDecision(GateAction.REDIRECT, redirect_to=self.login_path)
        if session.is_authenticated and public:
            return GateDecision(GateAction.REDIRECT, redirect_to=self.landing(session.user))

        return GateDecision(GateAction.RENDER, show_chrome=session.is_authenticated and not public)
