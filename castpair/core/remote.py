"""HTTP access to the forwarding control plane."""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from castpair.core.config import Settings
from castpair.core.errors import MalformedResponseError, RemoteError, RemoteRejectedError, RemoteUnreachableError
from castpair.core.model import CallResult, RemoteErrorKind

LOGGER = logging.getLogger(__name__)


def failure_result(exc: RemoteError) -> CallResult:
    if isinstance(exc, RemoteUnreachableError):
        kind = RemoteErrorKind.UNREACHABLE
    elif isinstance(exc, MalformedResponseError):
        kind = RemoteErrorKind.MALFORMED
    else:
        kind = RemoteErrorKind.REJECTED
    return CallResult.failure(kind, str(exc))


class _TimeoutHTTPAdapter(HTTPAdapter):
    """HTTP adapter that injects a default timeout when none is given."""

    def __init__(self, *args: Any, timeout: float | tuple[float, float], **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._timeout = timeout

    def send(self, request, **kwargs):  # type: ignore[override]
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self._timeout
        return super().send(request, **kwargs)


def build_session(timeout_s: float) -> Session:
    session = requests.Session()
    # Single attempt: callers decide whether a user action is retried.
    adapter = _TimeoutHTTPAdapter(max_retries=0, timeout=(timeout_s, timeout_s))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.setdefault("Accept", "application/json")
    return session


class ControlPlaneClient:
    def __init__(self, settings: Settings, *, session: Session | None = None) -> None:
        self.base_url = settings.api_base
        self.timeout_s = settings.http_timeout_s
        self._session = session

    @property
    def session(self) -> Session:
        if self._session is None:
            self._session = build_session(self.timeout_s)
        return self._session

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, payload: Any | None = None) -> requests.Response:
        url = self.url(path)
        try:
            response = self.session.request(method, url, json=payload)
        except requests.Timeout as exc:
            raise RemoteUnreachableError(f"{method} {url} timed out after {self.timeout_s:g}s") from exc
        except requests.RequestException as exc:
            raise RemoteUnreachableError(f"{method} {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            body = (response.text or "").strip()[:200]
            detail = f": {body}" if body else ""
            raise RemoteRejectedError(
                f"{method} {url} returned HTTP {response.status_code}{detail}",
                status_code=response.status_code,
            )
        return response

    def get_json(self, path: str) -> Any:
        response = self.request("GET", path)
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"GET {self.url(path)} returned invalid JSON") from exc

    def send_json(self, method: str, path: str, payload: Any) -> None:
        self.request(method, path, payload)
