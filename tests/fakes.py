"""In-memory HTTP fakes for exercising the runner without a live service."""

from __future__ import annotations

import json
from datetime import timedelta
from typing import Any
from urllib.parse import urlparse

import requests

BASE_URL = "http://users.test"


def make_response(
    status_code: int,
    body: Any = None,
    method: str = "GET",
    url: str = BASE_URL,
    text: str | None = None,
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    if text is not None:
        response._content = text.encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    response.url = url
    response.request = requests.Request(method, url).prepare()
    response.elapsed = timedelta(milliseconds=5)
    return response


class FakeUsersService:
    """Minimal stand-in for the /users REST resource."""

    def __init__(self, first_id: int = 42) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.next_id = first_id
        self.calls: list[tuple[str, str]] = []
        self.overrides: dict[tuple[str, str], Any] = {}

    def fail(self, method: str, path: str, outcome: Any) -> None:
        """Force ``method path`` to return a status code or raise an exception."""
        self.overrides[(method.upper(), path)] = outcome

    def handle(self, method: str, url: str, json: Any = None, **_: Any) -> requests.Response:
        method = method.upper()
        path = urlparse(url).path
        self.calls.append((method, path))

        override = self.overrides.get((method, path))
        if isinstance(override, Exception):
            raise override
        if isinstance(override, int):
            return make_response(override, {"error": "forced"}, method, url)

        parts = [part for part in path.split("/") if part]
        if parts == ["users"] and method == "POST":
            user_id = str(self.next_id)
            self.next_id += 1
            self.users[user_id] = {"id": user_id, **(json or {})}
            return make_response(201, self.users[user_id], method, url)

        if len(parts) == 2 and parts[0] == "users":
            user = self.users.get(parts[1])
            if user is None:
                return make_response(404, {}, method, url)
            if method == "GET":
                return make_response(200, user, method, url)
            if method == "PUT":
                user.update(json or {})
                return make_response(200, user, method, url)
            if method == "DELETE":
                del self.users[parts[1]]
                return make_response(204, None, method, url)

        return make_response(404, {}, method, url)
