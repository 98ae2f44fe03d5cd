"""Custom exceptions for restchain suite errors.

Exception Hierarchy:
    RestChainError (base)
    ├── ConfigurationMissing
    ├── ScenarioRegistrationError
    └── ScenarioError
        ├── NetworkFailure
        ├── AssertionMismatch
        └── CapturedValueMissing

A skipped dependency is not an error. It is reported through the
``skipped`` scenario status with the ``DependencySkipped`` error code.
"""

from __future__ import annotations

from typing import Any

DEPENDENCY_SKIPPED = "DependencySkipped"
UNEXPECTED_ERROR = "UnexpectedError"


class RestChainError(Exception):
    """Base exception for all restchain errors.

    Attributes:
        message: Descriptive error message
        error_code: Machine-readable error identifier
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for reports."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details if self.details else None,
        }


# ============================================================================
# SUITE INITIALIZATION ERRORS
# ============================================================================


class ConfigurationMissing(RestChainError):
    """Raised when the configuration file or a required key is absent.

    Fatal: the suite aborts before any scenario runs.

    Example:
        >>> raise ConfigurationMissing(
        ...     message="Required configuration key 'base.url' is missing",
        ...     details={"key": "base.url", "source": "config/config.properties"},
        ... )
    """


class ScenarioRegistrationError(RestChainError):
    """Raised when the scenario registration list cannot be turned into a run plan.

    Reasons might include:
    - Two scenarios share a name
    - A scenario depends on a name that was never registered
    - A scenario depends on itself, directly or through a cycle
    """


# ============================================================================
# SCENARIO-LEVEL ERRORS
# ============================================================================


class ScenarioError(RestChainError):
    """Base class for errors that fail a single scenario without aborting the suite."""


class NetworkFailure(ScenarioError):
    """Raised when an HTTP call could not complete (unreachable host, timeout).

    Never retried; the scenario that issued the call fails.
    """

    def __init__(self, method: str, url: str, cause: Exception) -> None:
        super().__init__(
            message=f"{method} {url} failed: {cause}",
            details={"method": method, "url": url, "cause": type(cause).__name__},
        )
        self.method = method
        self.url = url
        self.cause = cause


class AssertionMismatch(ScenarioError):
    """Raised when an actual response value differs from the expected literal."""

    def __init__(self, message: str, expected: Any, actual: Any) -> None:
        super().__init__(
            message=f"{message}: expected {expected!r} but was {actual!r}",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class CapturedValueMissing(ScenarioError):
    """Raised when a scenario reads a captured value nobody has published in this run."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message=f"No captured value published under '{key}'",
            details={"key": key},
        )
        self.key = key
