from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ..workflows.validator import ValidationReport


# (row label, feature flag). A None flag is a job that always runs.
PRE_RELEASE_JOBS: Tuple[Tuple[str, Optional[str]], ...] = (
    ("Setup", None),
    ("Compile", "compile"),
    ("Lint", "lint"),
    ("Unit Tests", "unit_tests"),
    ("Integration Tests", "integration_tests"),
    ("E2E Tests", "e2e_tests"),
    ("Security Scan", "security_scan"),
    ("Bundle", "bundle"),
)

RELEASE_TARGETS: Tuple[Tuple[str, str], ...] = (
    ("NPM", "npm_publish"),
    ("GitHub", "github_release"),
    ("Docker", "docker_publish"),
    ("Documentation", "documentation"),
)

MAINTENANCE_TASKS: Tuple[Tuple[str, str], ...] = (
    ("Cleanup", "cleanup"),
    ("File Sync", "file_sync"),
    ("Deprecate Old Versions", "deprecation"),
    ("Security Audit", "security_audit"),
    ("Dependency Update", "dependency_update"),
)

POST_RELEASE_ACTIONS: Tuple[str, ...] = ("Verify Deployment", "Tag Stable", "Tag Unstable", "Rollback")


def _flag(enabled: Mapping[str, bool], feature: Optional[str]) -> str:
    if feature is None:
        return "Always"
    return "true" if enabled.get(feature, False) else "false"


def _result(results: Sequence[str], i: int) -> str:
    value = results[i] if i < len(results) else ""
    return str(value or "").strip() or "unknown"


def _table(header: Tuple[str, ...], rows: Iterable[Tuple[str, ...]]) -> List[str]:
    lines = ["| " + " | ".join(header) + " |", "|" + "|".join("-" * (len(h) + 2) for h in header) + "|"]
    lines.extend("| " + " | ".join(r) + " |" for r in rows)
    return lines


def pre_release_summary(results: Sequence[str], enabled: Mapping[str, bool]) -> str:
    """Job results in PRE_RELEASE_JOBS order; missing results read ``unknown``."""
    rows = [(label, _result(results, i), _flag(enabled, feature)) for i, (label, feature) in enumerate(PRE_RELEASE_JOBS)]
    return "\n".join(["## Pre-Release Pipeline Summary", "", *_table(("Job", "Status", "Enabled"), rows)])


def release_summary(version: str, is_prerelease: bool, results: Sequence[str], enabled: Mapping[str, bool]) -> str:
    rows = [(label, _result(results, i), _flag(enabled, feature)) for i, (label, feature) in enumerate(RELEASE_TARGETS)]
    return "\n".join(
        [
            "## Release Summary",
            "",
            f"**Version:** {version or 'unknown'}",
            f"**Pre-release:** {'true' if is_prerelease else 'false'}",
            "",
            *_table(("Target", "Status", "Enabled"), rows),
        ]
    )


def maintenance_summary(results: Sequence[str], enabled: Mapping[str, bool]) -> str:
    rows = [(label, _result(results, i), _flag(enabled, feature)) for i, (label, feature) in enumerate(MAINTENANCE_TASKS)]
    return "\n".join(["## Maintenance Pipeline Summary", "", *_table(("Task", "Status", "Enabled"), rows)])


def post_release_summary(results: Sequence[str]) -> str:
    rows = [(label, _result(results, i)) for i, label in enumerate(POST_RELEASE_ACTIONS)]
    return "\n".join(["## Post-Release Actions Summary", "", *_table(("Action", "Status"), rows)])


def post_release_verify_summary(version: str) -> str:
    return "\n".join(
        [
            "## Deployment Verification Results",
            "",
            f"**Version:** {version or 'unknown'}",
            "",
            "All deployment targets verified successfully!",
        ]
    )


def rollback_summary(version: str, rollback_tag: str = "", target: str = "") -> str:
    lines = ["## Rollback Summary", "", f"**Version:** {version or 'unknown'}"]
    if target:
        lines.append(f"**Rolled back to:** `{target}`")
    if rollback_tag:
        lines.append(f"**Tracking tag:** `{rollback_tag}`")
    lines += ["", "Rollback completed successfully"]
    return "\n".join(lines)


def stability_tagging_summary(version: str, tag_name: str) -> str:
    return f"## Stability Tagging\n\n**Version {version} tagged as {tag_name}**"


def tag_assignment_summary(tag: str, kind: str, commit: str, previous: Optional[str] = None) -> str:
    lines = ["## Tag Assignment", "", f"**Tag:** `{tag}`", f"**Type:** {kind}", f"**Commit:** `{commit[:7]}`"]
    if previous and previous != commit:
        lines.append(f"**Moved from:** `{previous[:7]}`")
    return "\n".join(lines)


def changes_summary(title: str, has_changes: bool, changed: str, unchanged: str) -> str:
    """Two-state summary used by file sync and dependency update."""
    return f"## {title}\n\n{changed if has_changes else unchanged}"


def file_sync_summary(has_changes: bool) -> str:
    return changes_summary(
        "File Sync Summary", has_changes, "Files were out of sync. PR created for review.", "All files are in sync."
    )


def dependency_update_summary(has_changes: bool) -> str:
    return changes_summary(
        "Dependency Update Summary",
        has_changes,
        "Dependencies updated. PR created for review.",
        "All dependencies are up to date.",
    )


def timestamped_summary(title: str, what: str, now: Optional[datetime] = None) -> str:
    ts = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S UTC")
    return f"## {title}\n\n{what} completed at {ts}"


def deprecation_summary() -> str:
    return "## Deprecation Summary\n\nDeprecated versions checked and updated"


def workflow_validation_summary(report: ValidationReport) -> str:
    lines = ["## Workflow Validation Results", ""]
    if report.ok:
        lines.append("✅ All workflows passed validation")
    else:
        lines.append(f"❌ Validation failed with {report.error_count} error(s)")
    if report.warning_count:
        lines.append(f"⚠️ {report.warning_count} warning(s) found")
    lines += ["", f"- Workflows checked: {len(report.files)}"]
    for f in report.files:
        for msg in f.errors:
            lines.append(f"- ❌ `{f.path.name}`: {msg}")
        for msg in f.warnings:
            lines.append(f"- ⚠️ `{f.path.name}`: {msg}")
    return "\n".join(lines)
