"""HTTP client wrapper for the REST service under test."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests
import structlog
from requests.structures import CaseInsensitiveDict

from restchain.core.config import SuiteConfig
from restchain.core.exceptions import NetworkFailure

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    "User-Agent": "restchain",
}


@dataclass(slots=True)
class ApiResponse:
    """Normalized result of a single HTTP call."""

    status_code: int
    body: Any = None
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    method: str = ""
    url: str = ""
    elapsed: float = 0.0

    @classmethod
    def from_requests(cls, response: requests.Response) -> ApiResponse:
        return cls(
            status_code=response.status_code,
            body=_parse_body(response),
            headers=CaseInsensitiveDict(response.headers),
            method=response.request.method if response.request is not None else "",
            url=response.url,
            elapsed=response.elapsed.total_seconds() if response.elapsed is not None else 0.0,
        )


def _parse_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """
    Blocking HTTP client bound to the configured base URL.

    Paths are resolved relative to ``config.base_url``. Error statuses are
    returned to the caller; only transport failures raise.
    """

    def __init__(
        self,
        config: SuiteConfig,
        session: requests.Session | None = None,
        timeout: float | None = None,
        default_headers: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout
        self._owns_session = session is None
        self.session = requests.Session() if session is None else session
        # sent per request so a borrowed session is left as the caller built it
        self.headers = dict(DEFAULT_HEADERS)
        if default_headers:
            self.headers.update(default_headers)

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """
        Perform one HTTP call.

        Raises:
            NetworkFailure: If the call could not complete. Not retried.
        """
        method = method.upper()
        url = self.url_for(path)
        logger.debug("client.request", method=method, url=url)
        try:
            raw = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers={**self.headers, **(headers or {})},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("client.request_failed", method=method, url=url, error=str(exc))
            raise NetworkFailure(method, url, exc) from exc

        response = ApiResponse.from_requests(raw)
        logger.info(
            "client.response",
            method=method,
            url=url,
            status_code=response.status_code,
            elapsed=response.elapsed,
        )
        return response

    def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return self.request("PUT", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return self.request("DELETE", path, **kwargs)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
