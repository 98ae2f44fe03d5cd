"""Scenario runner: priority-ordered execution with request chaining.

The registration list is resolved into a run plan once, when the runner is
built. Scenarios then run one at a time in plan order against a fresh
``RunContext``. A scenario whose dependency did not pass is skipped without
being executed; a failure never stops the rest of the suite.
"""

from __future__ import annotations

import heapq
import time
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

import structlog

from restchain.client import ApiClient
from restchain.core.config import SuiteConfig
from restchain.core.exceptions import (
    DEPENDENCY_SKIPPED,
    UNEXPECTED_ERROR,
    ScenarioError,
    ScenarioRegistrationError,
)
from restchain.models import (
    CapturedValues,
    RunContext,
    RunReport,
    Scenario,
    ScenarioResult,
    ScenarioStatus,
)

logger = structlog.get_logger(__name__)


def resolve_plan(scenarios: Sequence[Scenario]) -> list[Scenario]:
    """Order scenarios by ascending priority while keeping every dependency first.

    Among scenarios whose dependency is already scheduled, the lowest
    priority goes next; ties keep registration order.

    Raises:
        ScenarioRegistrationError: On duplicate names, unknown or self
            dependencies, and dependency cycles.
    """
    by_name: dict[str, Scenario] = {}
    for scenario in scenarios:
        if scenario.name in by_name:
            raise ScenarioRegistrationError(
                message=f"Scenario '{scenario.name}' is registered more than once",
                details={"scenario": scenario.name},
            )
        by_name[scenario.name] = scenario

    dependents: dict[str, list[int]] = {name: [] for name in by_name}
    ready: list[tuple[int, int]] = []
    for index, scenario in enumerate(scenarios):
        dependency = scenario.depends_on
        if dependency is None:
            heapq.heappush(ready, (scenario.priority, index))
            continue
        if dependency == scenario.name:
            raise ScenarioRegistrationError(
                message=f"Scenario '{scenario.name}' depends on itself",
                details={"scenario": scenario.name},
            )
        if dependency not in by_name:
            raise ScenarioRegistrationError(
                message=f"Scenario '{scenario.name}' depends on unknown scenario '{dependency}'",
                details={"scenario": scenario.name, "depends_on": dependency},
            )
        dependents[dependency].append(index)

    plan: list[Scenario] = []
    while ready:
        _, index = heapq.heappop(ready)
        scenario = scenarios[index]
        plan.append(scenario)
        for child in dependents[scenario.name]:
            heapq.heappush(ready, (scenarios[child].priority, child))

    if len(plan) != len(scenarios):
        planned = {scenario.name for scenario in plan}
        stuck = sorted(scenario.name for scenario in scenarios if scenario.name not in planned)
        raise ScenarioRegistrationError(
            message=f"Dependency cycle between scenarios: {', '.join(stuck)}",
            details={"scenarios": stuck},
        )
    return plan


class ScenarioRunner:
    def __init__(self, scenarios: Iterable[Scenario]) -> None:
        self.scenarios = list(scenarios)
        self._plan = resolve_plan(self.scenarios)

    def plan(self) -> list[Scenario]:
        return list(self._plan)

    def run(self, client: ApiClient, config: SuiteConfig) -> RunReport:
        """Execute every scenario once, in plan order."""
        report = RunReport(env=config.env, base_url=config.base_url, started_at=datetime.now(timezone.utc))
        context = RunContext(client=client, config=config, captured=CapturedValues())
        outcomes: dict[str, ScenarioStatus] = {}

        logger.info("runner.started", env=config.env, base_url=config.base_url, scenarios=len(self._plan))
        for scenario in self._plan:
            result = self._run_one(scenario, context, outcomes)
            outcomes[scenario.name] = result.status
            report.results.append(result)

        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            "runner.finished",
            passed=report.passed,
            failed=report.failed,
            skipped=report.skipped,
            duration=report.duration,
        )
        return report

    def _run_one(
        self,
        scenario: Scenario,
        context: RunContext,
        outcomes: dict[str, ScenarioStatus],
    ) -> ScenarioResult:
        log = logger.bind(scenario=scenario.name)
        dependency = scenario.depends_on
        if dependency is not None and outcomes.get(dependency) is not ScenarioStatus.PASSED:
            upstream = outcomes.get(dependency)
            log.info("runner.scenario_skipped", depends_on=dependency, upstream=upstream.value if upstream else None)
            return ScenarioResult(
                name=scenario.name,
                status=ScenarioStatus.SKIPPED,
                message=f"Dependency '{dependency}' did not pass",
                error_code=DEPENDENCY_SKIPPED,
                depends_on=dependency,
                description=scenario.description,
            )

        log.info("runner.scenario_started", priority=scenario.priority)
        context.scenario = scenario
        started = time.perf_counter()
        try:
            scenario.action(context)
        except ScenarioError as exc:
            context.captured.discard()
            log.warning("runner.scenario_failed", error=exc.error_code, reason=exc.message)
            return ScenarioResult(
                name=scenario.name,
                status=ScenarioStatus.FAILED,
                message=exc.message,
                error_code=exc.error_code,
                duration=time.perf_counter() - started,
                depends_on=dependency,
                description=scenario.description,
                details=exc.details,
            )
        except Exception as exc:
            context.captured.discard()
            log.exception("runner.scenario_errored", error=type(exc).__name__)
            return ScenarioResult(
                name=scenario.name,
                status=ScenarioStatus.FAILED,
                message=f"{type(exc).__name__}: {exc}",
                error_code=UNEXPECTED_ERROR,
                duration=time.perf_counter() - started,
                depends_on=dependency,
                description=scenario.description,
            )
        finally:
            context.scenario = None

        published = context.captured.commit()
        if published is not None:
            log.info("runner.value_captured", key=published[0], value=published[1])
        duration = time.perf_counter() - started
        log.info("runner.scenario_passed", duration=duration)
        return ScenarioResult(
            name=scenario.name,
            status=ScenarioStatus.PASSED,
            duration=duration,
            depends_on=dependency,
            description=scenario.description,
        )
