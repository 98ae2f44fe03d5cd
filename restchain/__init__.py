"""restchain: chained REST API scenarios with JUnit/JSON reports."""

from restchain.client import ApiClient, ApiResponse
from restchain.core.config import SuiteConfig, load_suite_config
from restchain.models import RunContext, RunReport, Scenario, ScenarioResult, ScenarioStatus
from restchain.runner import ScenarioRunner

__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ApiResponse",
    "RunContext",
    "RunReport",
    "Scenario",
    "ScenarioResult",
    "ScenarioRunner",
    "ScenarioStatus",
    "SuiteConfig",
    "load_suite_config",
]
