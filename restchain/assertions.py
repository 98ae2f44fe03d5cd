"""Assertions comparing response values to expected literals.

The first mismatch raises and ends the scenario; nothing is aggregated.
"""

from __future__ import annotations

from typing import Any

from restchain.client import ApiResponse
from restchain.core.exceptions import AssertionMismatch

MISSING = object()


def assert_equal(actual: Any, expected: Any, message: str) -> None:
    """Raise ``AssertionMismatch`` carrying ``message`` when ``actual != expected``."""
    if actual != expected:
        raise AssertionMismatch(message, expected=expected, actual=actual)


def assert_status(response: ApiResponse, expected: int, message: str | None = None) -> None:
    assert_equal(
        response.status_code,
        expected,
        message or f"Unexpected status for {response.method} {response.url}",
    )


def find(body: Any, path: str) -> Any:
    """Walk a JSON body along a dotted path (``address.city``, ``items.0.id``).

    Returns ``MISSING`` when any segment does not resolve.
    """
    current = body
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, list) and segment.lstrip("-").isdigit():
            index = int(segment)
            if not -len(current) <= index < len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def assert_field(response: ApiResponse, path: str, expected: Any, message: str | None = None) -> None:
    """Compare one body field to ``expected``; an unresolved path counts as a mismatch."""
    message = message or f"Field '{path}' mismatch"
    actual = find(response.body, path)
    if actual is MISSING:
        raise AssertionMismatch(message, expected=expected, actual="<missing>")
    assert_equal(actual, expected, message)


def extract(response: ApiResponse, path: str) -> Any:
    """Return the value at ``path`` in the body, failing the scenario if it is absent."""
    value = find(response.body, path)
    if value is MISSING:
        raise AssertionMismatch(f"Field '{path}' missing from response body", expected="<present>", actual="<missing>")
    return value
