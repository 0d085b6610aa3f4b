"""Static checks for GitHub Actions workflow files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..errors import NotFoundError
from ..utils import log


_PINNED_RE = re.compile(r"@(v[0-9]|[0-9a-f]{40}$)")


@dataclass
class WorkflowReport:
    path: Path
    name: str = "Unnamed"
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class ValidationReport:
    files: List[WorkflowReport] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(len(f.errors) for f in self.files)

    @property
    def warning_count(self) -> int:
        return sum(len(f.warnings) for f in self.files)

    @property
    def ok(self) -> bool:
        return self.error_count == 0


def _has_trigger(doc: Dict[Any, Any]) -> bool:
    # YAML 1.1 reads a bare `on` key as boolean True.
    return "on" in doc or True in doc


def _check_job(report: WorkflowReport, job_name: str, job: Any) -> None:
    if not isinstance(job, dict):
        report.errors.append(f"Job '{job_name}' must be a mapping")
        return
    if "uses" in job:
        # Reusable workflow call; runner and timeout come from the callee.
        return
    if "runs-on" not in job:
        report.errors.append(f"Job '{job_name}' missing 'runs-on'")
    if "timeout-minutes" not in job:
        report.warnings.append(f"Job '{job_name}' missing timeout-minutes")

    for i, step in enumerate(job.get("steps") or []):
        if not isinstance(step, dict):
            continue
        uses = str(step.get("uses") or "")
        if "actions/checkout" in uses and not _PINNED_RE.search(uses):
            step_name = step.get("name") or f"Step {i}"
            report.warnings.append(
                f"Step '{step_name}' in job '{job_name}' should pin action version (currently: {uses})"
            )


def validate_workflow(path: Path) -> WorkflowReport:
    report = WorkflowReport(path=path)
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        report.errors.append(f"YAML syntax error: {e}")
        return report

    if not isinstance(doc, dict):
        report.errors.append("Workflow must be a YAML mapping")
        return report

    report.name = str(doc.get("name") or "Unnamed")
    if not _has_trigger(doc):
        report.errors.append("Missing required field 'on'")

    jobs = doc.get("jobs")
    if not isinstance(jobs, dict) or not jobs:
        report.errors.append("No jobs defined")
        return report
    for job_name, job in jobs.items():
        _check_job(report, str(job_name), job)
    return report


def workflow_files(directory: Path) -> List[Path]:
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix in (".yml", ".yaml"))


def validate_workflows(directory: Path) -> ValidationReport:
    """Validate every ``*.yml``/``*.yaml`` file directly under ``directory``."""
    if not directory.is_dir():
        raise NotFoundError(f"Workflows directory not found: {directory}")
    result = ValidationReport()
    for path in workflow_files(directory):
        report = validate_workflow(path)
        for msg in report.errors:
            log.error("workflows", f"{path.name}: {msg}")
        for msg in report.warnings:
            log.warn("workflows", f"{path.name}: {msg}")
        if report.ok:
            log.info("workflows", f"Workflow validation passed: {path.name}")
        result.files.append(report)
    return result
