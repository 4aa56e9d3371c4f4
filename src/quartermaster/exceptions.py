from typing import Optional


class QuartermasterError(Exception):
    """Base exception for Quartermaster errors."""
    pass

class ConfigError(QuartermasterError):
    """Configuration loading specific errors."""
    pass

class ApiError(QuartermasterError):
    """
    The backend answered with a non-2xx status.
    `message` is the server-provided text when there was one.
    """

    def __init__(self, status: int, message: str, payload: Optional[dict] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.payload = payload or {}

    @property
    def is_auth_rejection(self) -> bool:
        return self.status in (401, 403)

class NetworkError(QuartermasterError):
    """The request was sent but no response was received."""
    pass

class FormValidationError(QuartermasterError):
    """Field-level validation failures; never reaches the backend."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors

class AccessDenied(QuartermasterError):
    """Role mismatch for a guarded page."""

    def __init__(self, message: str, redirect_to: str):
        super().__init__(message)
        self.redirect_to = redirect_to

class InvalidResponseError(ApiError):
    """The backend answered 2xx with a body that does not parse as expected."""

    def __init__(self, detail: str = "", status: int = 502):
        message = "Invalid response from server"
        super().__init__(status, f"{message}: {detail}" if detail else message)
