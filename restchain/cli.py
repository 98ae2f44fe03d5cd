"""Command line entry point: load config, run the suite, write reports."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from restchain.client import ApiClient
from restchain.core.config import LOG_LEVELS, RunnerSettings, get_settings, load_suite_config
from restchain.core.exceptions import ConfigurationMissing, ScenarioRegistrationError
from restchain.core.logging import configure_logging
from restchain.report import render_summary, write_report
from restchain.runner import ScenarioRunner
from restchain.suites import SUITES

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG = 2


def build_parser(settings: RunnerSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the restchain API scenarios against a configured REST service.")
    parser.add_argument(
        "--config",
        default=str(settings.config_file),
        help="Properties file with base.url and env (default: %(default)s)",
    )
    parser.add_argument(
        "--report-dir",
        default=str(settings.report_dir),
        help="Directory for junit.xml and summary.json (default: %(default)s)",
    )
    parser.add_argument(
        "--suite",
        choices=sorted(SUITES),
        default="users",
        help="Scenario suite to run (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=settings.log_json_output,
        help="Emit JSON log lines instead of console output",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run one suite and return the process exit code.

    0 when no scenario failed, 1 when any failed, 2 when settings, config
    or the scenario list are invalid (no request is sent). Invalid flags
    exit through argparse, also with 2.
    """
    try:
        settings = get_settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"RESTCHAIN_{'_'.join(str(part) for part in error['loc']).upper()}: {error['msg']}"
            for error in exc.errors()
        )
        print(f"restchain: invalid settings: {problems}", file=sys.stderr)
        return EXIT_CONFIG

    args = build_parser(settings).parse_args(argv)
    configure_logging(level=args.log_level, json_output=args.json_logs)

    try:
        config = load_suite_config(args.config, settings=settings)
        runner = ScenarioRunner(SUITES[args.suite]())
    except (ConfigurationMissing, ScenarioRegistrationError) as exc:
        logger.error("suite.initialization_failed", error=exc.error_code, reason=exc.message)
        print(f"restchain: {exc.message}", file=sys.stderr)
        return EXIT_CONFIG

    with ApiClient(config, timeout=settings.request_timeout) as client:
        report = runner.run(client, config)

    write_report(report, Path(args.report_dir))
    print(render_summary(report))
    return EXIT_OK if report.succeeded else EXIT_FAILURES


def run() -> None:
    sys.exit(main())
