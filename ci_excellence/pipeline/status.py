from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from ..github.actions import GithubContext


NotificationLevel = Literal["success", "failure", "warning", "info"]


@dataclass(frozen=True)
class PipelineStatus:
    status: NotificationLevel
    message: str


def _norm(result: str) -> str:
    return str(result or "").strip().lower()


def pre_release_status(summary_result: str, ctx: GithubContext) -> PipelineStatus:
    """Notification status for the pre-release pipeline.

    Outputs:
      - failure: the summary job failed
      - success: the summary job succeeded
      - warning: anything else (cancelled, skipped, unknown)
    """
    r = _norm(summary_result)
    if r == "failure":
        status, headline = "failure", "❌ Pre-Release Pipeline Failed"
    elif r == "success":
        status, headline = "success", "✅ Pre-Release Pipeline Passed"
    else:
        status, headline = "warning", "⚠️ Pre-Release Pipeline Completed with Issues"

    lines = [
        headline,
        "",
        f"**Build:** #{ctx.run_number or '???'}",
        f"**Branch:** `{ctx.ref_name or 'unknown'}`",
        f"**Commit:** `{ctx.short_sha}`",
    ]
    if ctx.actor:
        lines.append(f"**Triggered by:** {ctx.actor}")
    if ctx.run_url:
        lines += ["", f"[View Logs]({ctx.run_url})"]
    return PipelineStatus(status, "\n".join(lines))  # type: ignore[arg-type]


def maintenance_status(cleanup: str, sync: str, deprecation: str, security: str, dependency: str) -> PipelineStatus:
    if _norm(security) == "failure":
        return PipelineStatus("failure", "Maintenance: Security Audit Failed ❌")
    if _norm(dependency) == "success":
        return PipelineStatus("warning", "Maintenance: Dependencies Updated ⚠️")
    if _norm(sync) == "success":
        return PipelineStatus("warning", "Maintenance: Files Synced ⚠️")
    return PipelineStatus("success", "Maintenance Completed ✅")


def post_release_status(verify: str, tag_stable: str, tag_unstable: str, rollback: str) -> PipelineStatus:
    if _norm(rollback) == "success":
        return PipelineStatus("warning", "Rollback Completed ⚠️")
    if _norm(tag_stable) == "success":
        return PipelineStatus("success", "Version Tagged as Stable ✅")
    if _norm(verify) == "success":
        return PipelineStatus("success", "Deployment Verified ✅")
    if _norm(rollback) == "failure":
        return PipelineStatus("failure", "Rollback Failed ❌")
    return PipelineStatus("info", "Post-Release Actions Completed ℹ️")


def release_status(version: str, prepare: str, npm: str, github: str, docker: str) -> PipelineStatus:
    v = version or "unknown"
    if any(_norm(r) == "failure" for r in (prepare, npm, github, docker)):
        return PipelineStatus("failure", f"Release {v} Failed ❌")
    return PipelineStatus("success", f"Release {v} Published ✅")


def any_failed(results: Iterable[str]) -> bool:
    return any(_norm(r) == "failure" for r in results)
