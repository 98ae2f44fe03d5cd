from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from restchain.core.exceptions import CapturedValueMissing

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from restchain.client import ApiClient
    from restchain.core.config import SuiteConfig


class ScenarioStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


ScenarioAction = Callable[["RunContext"], None]


@dataclass(frozen=True, slots=True)
class Scenario:
    """One ordered test unit exercising a single API behavior."""

    name: str
    action: ScenarioAction
    priority: int = 0
    depends_on: str | None = None
    description: str = ""


@dataclass(slots=True)
class ScenarioResult:
    name: str
    status: ScenarioStatus
    message: str = ""
    error_code: str | None = None
    duration: float = 0.0
    depends_on: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    @property
    def passed(self) -> bool:
        return self.status is ScenarioStatus.PASSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "error_code": self.error_code,
            "duration": round(self.duration, 6),
            "depends_on": self.depends_on,
            "description": self.description,
            "details": self.details or None,
        }


class CapturedValues(Mapping[str, Any]):
    """Run-scoped store for values threaded between chained scenarios.

    Values staged by the running scenario become visible only once the
    runner commits them after that scenario passes.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._pending: tuple[str, Any] | None = None

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def view(self) -> Mapping[str, Any]:
        return MappingProxyType(self._values)

    def stage(self, key: str, value: Any) -> None:
        # one captured value per scenario; a second publish replaces the first
        self._pending = (key, value)

    def commit(self) -> tuple[str, Any] | None:
        pending, self._pending = self._pending, None
        if pending is not None:
            key, value = pending
            self._values[key] = value
        return pending

    def discard(self) -> None:
        self._pending = None


@dataclass
class RunContext:
    """Everything a scenario action may touch during one run."""

    client: ApiClient
    config: SuiteConfig
    captured: CapturedValues = field(default_factory=CapturedValues)
    scenario: Scenario | None = None

    def publish(self, key: str, value: Any) -> None:
        """Publish the scenario's captured value; committed when the scenario passes."""
        self.captured.stage(key, value)

    def require(self, key: str) -> Any:
        """Read a captured value published by an earlier scenario in this run."""
        try:
            return self.captured[key]
        except KeyError:
            raise CapturedValueMissing(key) from None

    @property
    def values(self) -> Mapping[str, Any]:
        return self.captured.view()


@dataclass
class RunReport:
    env: str
    base_url: str
    started_at: datetime
    finished_at: datetime | None = None
    results: list[ScenarioResult] = field(default_factory=list)

    def count(self, status: ScenarioStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def passed(self) -> int:
        return self.count(ScenarioStatus.PASSED)

    @property
    def failed(self) -> int:
        return self.count(ScenarioStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(ScenarioStatus.SKIPPED)

    @property
    def succeeded(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    @property
    def duration(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def result_for(self, name: str) -> ScenarioResult | None:
        return next((result for result in self.results if result.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "env": self.env,
            "base_url": self.base_url,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration": round(self.duration, 6),
            "totals": {
                "total": len(self.results),
                "passed": self.passed,
                "failed": self.failed,
                "skipped": self.skipped,
            },
            "succeeded": self.succeeded,
            "results": [result.to_dict() for result in self.results],
        }
