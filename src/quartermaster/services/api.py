import logging
from typing import Any, Callable, Mapping, Optional

import requests

from quartermaster.exceptions import ApiError, InvalidResponseError, NetworkError

logger = logging.getLogger("quartermaster.services.api")

GENERIC_FAILURE = "Request failed"
NO_RESPONSE = "No response from server. Please try again later."


def clean_params(params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Drop unset filters so they never reach the query string."""
    if not params:
        return {}
    return {k: v for k, v in params.items() if v is not None and v != ""}


def _error_message(resp: requests.Response) -> tuple[str, dict]:
    try:
        data = resp.json()
    except ValueError:
        return GENERIC_FAILURE, {}
    if not isinstance(data, dict):
        return GENERIC_FAILURE, {}
    message = data.get("error") or data.get("message") or GENERIC_FAILURE
    return str(message), data


class ApiClient:
    """
    Thin JSON client for the inventory backend.
    One call per method invocation; no retries and no caching. The bearer
    credential is read from `token_provider` on every request.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        headers = {"Accept": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = self.session.request(
                method,
                self._url(path),
                params=clean_params(params),
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("backend unreachable", extra={"method": method, "path": path, "error": str(exc)})
            raise NetworkError(NO_RESPONSE) from exc

        if not resp.ok:
            message, payload = _error_message(resp)
            logger.info("backend error", extra={"method": method, "path": path, "status": resp.status_code})
            raise ApiError(resp.status_code, message, payload)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise InvalidResponseError(str(exc)) from exc

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)
