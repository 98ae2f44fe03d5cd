"""Report artifacts for a finished run.

Writes ``junit.xml`` for CI report viewers and ``summary.json`` with the
same outcomes in structured form.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path

import structlog

from restchain.models import RunReport, ScenarioStatus

logger = structlog.get_logger(__name__)

JUNIT_FILENAME = "junit.xml"
SUMMARY_FILENAME = "summary.json"
SUITE_NAME = "restchain"


def build_junit_tree(report: RunReport, suite_name: str = SUITE_NAME) -> ET.ElementTree:
    suite = ET.Element(
        "testsuite",
        {
            "name": f"{suite_name}.{report.env}",
            "tests": str(len(report.results)),
            "failures": str(report.failed),
            "errors": "0",
            "skipped": str(report.skipped),
            "time": f"{report.duration:.3f}",
            "timestamp": report.started_at.isoformat(),
        },
    )
    properties = ET.SubElement(suite, "properties")
    ET.SubElement(properties, "property", {"name": "env", "value": report.env})
    ET.SubElement(properties, "property", {"name": "base.url", "value": report.base_url})

    for result in report.results:
        case = ET.SubElement(
            suite,
            "testcase",
            {"classname": suite_name, "name": result.name, "time": f"{result.duration:.3f}"},
        )
        if result.description:
            case_properties = ET.SubElement(case, "properties")
            ET.SubElement(case_properties, "property", {"name": "description", "value": result.description})
        if result.status is ScenarioStatus.FAILED:
            failure = ET.SubElement(case, "failure", {"message": result.message, "type": result.error_code or ""})
            failure.text = result.message
        elif result.status is ScenarioStatus.SKIPPED:
            ET.SubElement(case, "skipped", {"message": result.message})

    tree = ET.ElementTree(suite)
    ET.indent(tree)
    return tree


def write_report(report: RunReport, directory: Path | str) -> list[Path]:
    """Write the report artifacts into ``directory`` and return their paths."""
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)

    junit_path = target / JUNIT_FILENAME
    build_junit_tree(report).write(junit_path, encoding="utf-8", xml_declaration=True)

    summary_path = target / SUMMARY_FILENAME
    summary_path.write_text(json.dumps(report.to_dict(), indent=2, default=str), encoding="utf-8")

    logger.info("report.written", directory=str(target), files=[junit_path.name, summary_path.name])
    return [junit_path, summary_path]


def render_summary(report: RunReport) -> str:
    """Human-readable outcome table for the console."""
    width = max([len(result.name) for result in report.results] + [8])
    lines = [f"restchain run against {report.base_url} (env: {report.env})", ""]
    for result in report.results:
        line = f"  {result.status.value.upper():<8} {result.name:<{width}} {result.duration:7.3f}s"
        if result.message:
            line += f"  {result.message}"
        lines.append(line)
        if result.description:
            lines.append(f"  {'':<8} {result.description}")
    lines.append("")
    lines.append(
        f"{len(report.results)} scenarios: {report.passed} passed, "
        f"{report.failed} failed, {report.skipped} skipped in {report.duration:.2f}s"
    )
    return "\n".join(lines)
