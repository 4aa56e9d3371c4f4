from typing import Optional, Protocol

from starlette.requests import Request
from starlette.responses import Response


class TokenStorage(Protocol):
    def get(self) -> Optional[str]:
        ...

    def set(self, token: str) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryTokenStorage:
    def __init__(self, token: Optional[str] = None):
        self.token = token

    def get(self) -> Optional[str]:
        return self.token

    def set(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None


class CookieTokenStorage:
    """
    Credential persisted in a browser cookie under a fixed name.
    Reads come from the incoming request; writes are staged and flushed onto
    the outgoing response with `apply`.
    """

    _UNSET = object()

    def __init__(
        self,
        request: Request,
        key: str = "token",
        secure: bool = False,
        max_age: Optional[int] = None,
    ):
        self.key = key
        self.secure = secure
        self.max_age = max_age
        self._current: Optional[str] = request.cookies.get(key) or None
        self._pending = self._UNSET

    def get(self) -> Optional[str]:
        return self._current

    def set(self, token: str) -> None:
        self._current = token
        self._pending = token

    def clear(self) -> None:
        self._current = None
        self._pending = None

    @property
    def dirty(self) -> bool:
        return self._pending is not self._UNSET

    def apply(self, response: Response) -> None:
        if not self.dirty:
            return
        if self._pending is None:
            response.delete_cookie(self.key)
        else:
            response.set_cookie(
                self.key,
                self._pending,
                max_age=self.max_age,
                httponly=True,
                samesite="lax",
                secure=self.secure,
            )
