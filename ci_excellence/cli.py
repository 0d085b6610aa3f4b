from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import CiConfig, load_ci_config
from .errors import CiError, NotFoundError
from .github import git, releases
from .github.actions import CiResult, GithubContext
from .hooks.commit_msg import validate_commit_message
from .notify.apprise import apprise_urls, send_apprise
from .notify.message import format_notification
from .notify.policy import notifications_enabled
from .notify.telegram import TelegramConfig, TelegramNotifier
from .pipeline.modes import ModeResolver, StepMode
from .pipeline.status import (
    PipelineStatus,
    any_failed,
    maintenance_status,
    post_release_status,
    pre_release_status,
    release_status,
)
from .pipeline.steps import STEPS, run_step
from .reports import summaries
from .reports.release_notes import generate_release_notes
from .tags.assign import ASSIGNABLE_KINDS, assign_tag
from .tags.classify import TAG_KIND_VALUES, validate_tag
from .tags.protection import check_pushed_refs
from .tags.rollback import confirm_rollback_message, create_rollback_tag, find_rollback_target
from .tags.stability import apply_stability_tag
from .utils import log
from .utils.env import env_get, env_truthy
from .versioning.calculator import RELEASE_TYPE_VALUES
from .versioning.determine import determine_next_version, post_release_version, select_version, version_outputs
from .versioning.semver import COMPARE_OPERATORS, CORE_PARTS, compare_versions, increment_version, parse_version
from .workflows.validator import ValidationReport, validate_workflow, validate_workflows


def _repo_root(args: argparse.Namespace) -> Path:
    return Path(args.repo).resolve()


def _config(args: argparse.Namespace) -> CiConfig:
    return load_ci_config(_repo_root(args), args.config)


def _enabled(config: CiConfig, features) -> dict:
    return {f: config.feature_enabled(f) for f in features if f}


def _status_outputs(result: CiResult, status: PipelineStatus) -> int:
    result.set_output("status", status.status)
    result.set_output("message", status.message)
    print(status.status)
    return 0


# --- versioning -------------------------------------------------------------


def cmd_determine_version(args: argparse.Namespace, result: CiResult) -> int:
    new = determine_next_version(args.release_type, args.label, _config(args), _repo_root(args))
    result.set_output("version", str(new))
    print(new)
    return 0


def cmd_set_version_outputs(args: argparse.Namespace, result: CiResult) -> int:
    out = version_outputs(args.release_type, args.prerelease, _config(args), _repo_root(args), args.label)
    result.set_output("version", out.version)
    result.set_output("is-prerelease", out.is_prerelease)
    print(out.version)
    return 0


def cmd_select_version(args: argparse.Namespace, result: CiResult) -> int:
    event = args.event or env_get("GITHUB_EVENT_NAME")
    version = select_version(event, args.release_tag, args.input_version)
    result.set_output("version", version)
    print(version)
    return 0


def cmd_post_release_version(args: argparse.Namespace, result: CiResult) -> int:
    event = args.event or env_get("GITHUB_EVENT_NAME")
    version = post_release_version(event, args.release_tag, args.input_version)
    result.set_output("version", version)
    print(version)
    return 0


def cmd_semver_parse(args: argparse.Namespace, result: CiResult) -> int:
    v = parse_version(args.version)
    print(f"major={v.major}")
    print(f"minor={v.minor}")
    print(f"patch={v.patch}")
    print(f"prerelease={v.prerelease}")
    print(f"build={v.build}")
    return 0


def cmd_semver_compare(args: argparse.Namespace, result: CiResult) -> int:
    ok = compare_versions(args.a, args.op, args.b)
    print("true" if ok else "false")
    return 0 if ok else 1


def cmd_semver_increment(args: argparse.Namespace, result: CiResult) -> int:
    print(increment_version(args.version, args.part))
    return 0


# --- tags -------------------------------------------------------------------


def cmd_apply_stability_tag(args: argparse.Namespace, result: CiResult) -> int:
    config = _config(args)
    res = apply_stability_tag(
        args.tag_name,
        args.version,
        repo=_repo_root(args),
        remote=args.remote,
        push=not args.no_push,
        tag_prefix=config.versioning.tag_prefix,
    )
    result.set_output("tag", res.tag)
    result.set_output("commit", res.commit)
    result.add_summary(summaries.stability_tagging_summary(res.version, res.tag))
    return 0


def cmd_classify_tag(args: argparse.Namespace, result: CiResult) -> int:
    kind = validate_tag(args.tag, args.expect or "")
    result.set_output("kind", kind)
    print(kind)
    return 0


def cmd_tag_assign(args: argparse.Namespace, result: CiResult) -> int:
    config = _config(args)
    res = assign_tag(
        args.kind,
        version=args.version,
        environment=args.environment,
        state=args.state,
        subproject=args.subproject,
        commit=args.commit,
        force_move=args.force_move,
        repo=_repo_root(args),
        remote=args.remote,
        push=args.push,
        tag_prefix=config.versioning.tag_prefix,
    )
    result.set_output("tag-name", res.tag)
    result.set_output("tag-type", res.kind)
    result.set_output("commit-sha", res.commit)
    result.set_output("should-deploy", res.should_deploy)
    result.add_summary(summaries.tag_assignment_summary(res.tag, res.kind, res.commit, res.previous))
    print(res.tag)
    return 0


def cmd_check_tag_push(args: argparse.Namespace, result: CiResult) -> int:
    res = check_pushed_refs(sys.stdin, allow_override=env_truthy("ALLOW_PROTECTED_TAG_PUSH"))
    if res.checked:
        log.info("tag-protection", f"Tag protection check passed for {len(res.checked)} tag(s)")
    return 0


def cmd_confirm_rollback(args: argparse.Namespace, result: CiResult) -> int:
    config = _config(args)
    enabled = [f for f in ("npm_publish", "github_release", "docker_publish") if config.feature_enabled(f)]
    print(confirm_rollback_message(args.version, enabled if args.enabled_only else None))
    return 0


def cmd_rollback(args: argparse.Namespace, result: CiResult) -> int:
    repo = _repo_root(args)
    target = find_rollback_target(
        explicit_tag=args.tag,
        use_latest_stable=args.use_latest_stable,
        environment=args.environment,
        repo=repo,
    )
    dry_run = args.dry_run or ModeResolver().mode_for("rollback") == StepMode.DRY_RUN
    tag = create_rollback_tag(args.environment, target, repo=repo, dry_run=dry_run)
    if args.push and not dry_run:
        git.push_tag(tag, remote=args.remote, cwd=repo)
    result.set_output("rollback-tag", tag)
    result.set_output("target-ref", target.ref)
    result.set_output("target-commit", target.commit)
    result.add_summary(summaries.rollback_summary(args.version or target.ref, tag, target.ref))
    return 0


# --- github -----------------------------------------------------------------


def cmd_commit_version_changes(args: argparse.Namespace, result: CiResult) -> int:
    committed = git.commit_version_changes(args.branch, args.version, remote=args.remote, cwd=_repo_root(args))
    result.set_output("committed", committed)
    return 0


def cmd_verify_release(args: argparse.Namespace, result: CiResult) -> int:
    releases.verify_release(args.tag)
    log.info("release", f"GitHub release {args.tag} verified")
    return 0


def cmd_mark_release_draft(args: argparse.Namespace, result: CiResult) -> int:
    releases.mark_release_draft(args.tag)
    log.info("release", f"GitHub release {args.tag} marked as draft")
    return 0


def cmd_upload_assets(args: argparse.Namespace, result: CiResult) -> int:
    files = [Path(f) for f in args.files]
    missing = [str(f) for f in files if not f.is_file()]
    if missing:
        raise NotFoundError(f"Release asset(s) not found: {', '.join(missing)}")
    releases.upload_release_assets(args.tag, files)
    log.info("release", f"Uploaded {len(files)} asset(s) to {args.tag}")
    return 0


def cmd_release_notes(args: argparse.Namespace, result: CiResult) -> int:
    config = _config(args)
    notes = generate_release_notes(args.version, _repo_root(args), f"{config.versioning.tag_prefix}*")
    result.set_output("notes", notes)
    print(notes)
    return 0


# --- pipeline ---------------------------------------------------------------


def cmd_run_step(args: argparse.Namespace, result: CiResult) -> int:
    outcome = run_step(args.step, ModeResolver(), _config(args))
    result.set_output("result", outcome.result)
    result.set_output("mode", outcome.mode.value)
    return outcome.exit_code


def cmd_status(args: argparse.Namespace, result: CiResult) -> int:
    r = args.results
    if args.pipeline == "pre-release":
        status = pre_release_status(r[0] if r else "", GithubContext.from_env())
    elif args.pipeline == "maintenance":
        status = maintenance_status(*_pad(r, 5))
    elif args.pipeline == "post-release":
        status = post_release_status(*_pad(r, 4))
    else:
        status = release_status(args.version, *_pad(r, 4))
    return _status_outputs(result, status)


def _pad(values: List[str], n: int) -> List[str]:
    return (list(values) + ["unknown"] * n)[:n]


def cmd_check_failures(args: argparse.Namespace, result: CiResult) -> int:
    if any_failed(args.results):
        print("::error::One or more pipeline jobs failed")
        return 1
    log.info("pipeline", "No failed jobs")
    return 0


def cmd_summary(args: argparse.Namespace, result: CiResult) -> int:
    kind = args.kind
    r = args.results
    if kind == "pre-release":
        features = [f for _, f in summaries.PRE_RELEASE_JOBS]
        md = summaries.pre_release_summary(r, _enabled(_config(args), features))
    elif kind == "release":
        features = [f for _, f in summaries.RELEASE_TARGETS]
        md = summaries.release_summary(args.version, args.prerelease, r, _enabled(_config(args), features))
    elif kind == "maintenance":
        features = [f for _, f in summaries.MAINTENANCE_TASKS]
        md = summaries.maintenance_summary(r, _enabled(_config(args), features))
    elif kind == "post-release":
        md = summaries.post_release_summary(r)
    elif kind == "verify":
        md = summaries.post_release_verify_summary(args.version)
    elif kind == "rollback":
        md = summaries.rollback_summary(args.version)
    elif kind == "file-sync":
        md = summaries.file_sync_summary(args.has_changes)
    elif kind == "dependency-update":
        md = summaries.dependency_update_summary(args.has_changes)
    elif kind == "security-audit":
        md = summaries.timestamped_summary("Security Audit Summary", "Security audit")
    elif kind == "cleanup":
        md = summaries.timestamped_summary("Cleanup Summary", "Cleanup")
    else:
        md = summaries.deprecation_summary()
    result.add_summary(md)
    return 0


def cmd_validate_workflows(args: argparse.Namespace, result: CiResult) -> int:
    target = Path(args.path)
    if not target.is_absolute():
        target = _repo_root(args) / target
    if target.is_file():
        report = ValidationReport(files=[validate_workflow(target)])
    else:
        report = validate_workflows(target)
    result.set_output("errors", report.error_count)
    result.set_output("warnings", report.warning_count)
    result.add_summary(summaries.workflow_validation_summary(report))
    if not report.ok:
        log.error("workflows", f"{report.error_count} error(s) found")
        return 1
    return 0


# --- hooks / notify ---------------------------------------------------------


def cmd_validate_commit_msg(args: argparse.Namespace, result: CiResult) -> int:
    path = Path(args.file)
    if not path.is_file():
        raise NotFoundError(f"Commit message file not found: {path}")
    for w in validate_commit_message(path.read_text(encoding="utf-8")):
        log.warn("commit-msg", w)
    log.info("commit-msg", "Commit message format is valid")
    return 0


def cmd_notify_enabled(args: argparse.Namespace, result: CiResult) -> int:
    decision = notifications_enabled(config_enabled=_config(args).notifications_enabled)
    if decision.missing:
        log.info("notify", f"Notifications disabled: missing {', '.join(decision.missing)}")
    else:
        log.info("notify", f"Notifications {'enabled' if decision.enabled else 'disabled'}: {decision.reason}")
    result.set_output("enabled", decision.enabled)
    print("true" if decision.enabled else "false")
    return 0


def cmd_notify(args: argparse.Namespace, result: CiResult) -> int:
    decision = notifications_enabled(config_enabled=_config(args).notifications_enabled)
    transport = args.transport
    if transport == "auto":
        transport = "apprise" if apprise_urls() else "telegram"

    if decision.opted_out or (transport == "telegram" and not decision.enabled):
        log.info("notify", f"Notifications skipped: {decision.reason}")
        result.set_output("sent", False)
        return 0

    body = format_notification(args.title, args.message, args.type, GithubContext.from_env())
    if transport == "apprise":
        sent = send_apprise(args.title, body, args.type)
    else:
        notifier = TelegramNotifier(TelegramConfig.from_env())
        if args.new_thread:
            notifier.start_thread()
        sent = notifier.send(body) is not None
    result.set_output("sent", sent)
    return 0


# --- parser -----------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ci-excellence")
    p.add_argument("--repo", default=".", help="Repository root (default: current directory)")
    p.add_argument("--config", default=None, help="Path to ci-config.yml")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("determine-version", help="Compute the next version from the latest release tag")
    sp.add_argument("release_type", nargs="?", default="patch", help="|".join(RELEASE_TYPE_VALUES) + " (default: patch)")
    sp.add_argument("label", nargs="?", default=None)
    sp.set_defaults(func=cmd_determine_version)

    sp = sub.add_parser("set-version-outputs", help="Compute the next version and the is-prerelease output")
    sp.add_argument("release_type")
    sp.add_argument("--prerelease", action="store_true")
    sp.add_argument("--label", default=None)
    sp.set_defaults(func=cmd_set_version_outputs)

    for name, func in (("select-version", cmd_select_version), ("post-release-version", cmd_post_release_version)):
        sp = sub.add_parser(name)
        sp.add_argument("--event", default="")
        sp.add_argument("--release-tag", default="")
        sp.add_argument("--input-version", default="")
        sp.set_defaults(func=func)

    sp = sub.add_parser("semver", help="Semantic version utilities")
    semver = sp.add_subparsers(dest="semver_cmd", required=True)
    s = semver.add_parser("parse")
    s.add_argument("version")
    s.set_defaults(func=cmd_semver_parse)
    s = semver.add_parser("compare")
    s.add_argument("a")
    s.add_argument("op", choices=COMPARE_OPERATORS)
    s.add_argument("b")
    s.set_defaults(func=cmd_semver_compare)
    s = semver.add_parser("increment")
    s.add_argument("version")
    s.add_argument("part", choices=CORE_PARTS)
    s.set_defaults(func=cmd_semver_increment)

    sp = sub.add_parser("apply-stability-tag", help="Move stable/unstable to a released version")
    sp.add_argument("tag_name", nargs="?", default="")
    sp.add_argument("version", nargs="?", default="")
    sp.add_argument("--remote", default="origin")
    sp.add_argument("--no-push", action="store_true")
    sp.set_defaults(func=cmd_apply_stability_tag)

    sp = sub.add_parser("classify-tag")
    sp.add_argument("tag")
    sp.add_argument("--expect", choices=TAG_KIND_VALUES, default=None)
    sp.set_defaults(func=cmd_classify_tag)

    sp = sub.add_parser("tag-assign", help="Create or move a version, environment or state tag")
    sp.add_argument("kind", choices=ASSIGNABLE_KINDS)
    sp.add_argument("--version", default="")
    sp.add_argument("--environment", default="")
    sp.add_argument("--state", default="")
    sp.add_argument("--subproject", default="")
    sp.add_argument("--commit", default="HEAD")
    sp.add_argument("--force-move", action="store_true", help="Rewrite an existing version or state tag")
    sp.add_argument("--push", action="store_true")
    sp.add_argument("--remote", default="origin")
    sp.set_defaults(func=cmd_tag_assign)

    sp = sub.add_parser("check-tag-push", help="pre-push hook: refuse protected environment tags (reads stdin)")
    sp.set_defaults(func=cmd_check_tag_push)

    sp = sub.add_parser("confirm-rollback")
    sp.add_argument("version")
    sp.add_argument("--enabled-only", action="store_true", help="List only the actions enabled in the config")
    sp.set_defaults(func=cmd_confirm_rollback)

    sp = sub.add_parser("rollback", help="Find a rollback target and create the tracking tag")
    sp.add_argument("--environment", default="")
    sp.add_argument("--tag", default="")
    sp.add_argument("--version", default="")
    sp.add_argument("--use-latest-stable", action="store_true")
    sp.add_argument("--dry-run", action="store_true")
    sp.add_argument("--push", action="store_true")
    sp.add_argument("--remote", default="origin")
    sp.set_defaults(func=cmd_rollback)

    sp = sub.add_parser("commit-version-changes")
    sp.add_argument("branch")
    sp.add_argument("version")
    sp.add_argument("--remote", default="origin")
    sp.set_defaults(func=cmd_commit_version_changes)

    sp = sub.add_parser("verify-release")
    sp.add_argument("tag")
    sp.set_defaults(func=cmd_verify_release)

    sp = sub.add_parser("mark-release-draft")
    sp.add_argument("tag")
    sp.set_defaults(func=cmd_mark_release_draft)

    sp = sub.add_parser("upload-assets")
    sp.add_argument("tag")
    sp.add_argument("files", nargs="+")
    sp.set_defaults(func=cmd_upload_assets)

    sp = sub.add_parser("release-notes")
    sp.add_argument("version")
    sp.set_defaults(func=cmd_release_notes)

    sp = sub.add_parser("run-step", help="Run a pipeline step under its testability mode")
    sp.add_argument("step", help=", ".join(sorted(STEPS)) + " (hyphens accepted)")
    sp.set_defaults(func=cmd_run_step)

    sp = sub.add_parser("status", help="Notification status for a finished pipeline")
    sp.add_argument("pipeline", choices=("pre-release", "maintenance", "post-release", "release"))
    sp.add_argument("results", nargs="*")
    sp.add_argument("--version", default="")
    sp.set_defaults(func=cmd_status)

    sp = sub.add_parser("check-failures")
    sp.add_argument("results", nargs="*")
    sp.set_defaults(func=cmd_check_failures)

    sp = sub.add_parser("summary", help="Append a markdown summary to the step summary")
    sp.add_argument(
        "kind",
        choices=(
            "pre-release", "release", "maintenance", "post-release", "verify", "rollback",
            "file-sync", "dependency-update", "security-audit", "cleanup", "deprecations",
        ),
    )
    sp.add_argument("results", nargs="*")
    sp.add_argument("--version", default="")
    sp.add_argument("--prerelease", action="store_true")
    sp.add_argument("--has-changes", action="store_true")
    sp.set_defaults(func=cmd_summary)

    sp = sub.add_parser("validate-workflows")
    sp.add_argument("path", nargs="?", default=".github/workflows")
    sp.set_defaults(func=cmd_validate_workflows)

    sp = sub.add_parser("validate-commit-msg", help="commit-msg hook")
    sp.add_argument("file")
    sp.set_defaults(func=cmd_validate_commit_msg)

    sp = sub.add_parser("notify-enabled")
    sp.set_defaults(func=cmd_notify_enabled)

    sp = sub.add_parser("notify")
    sp.add_argument("--title", required=True)
    sp.add_argument("--message", required=True)
    sp.add_argument("--type", default="info", choices=("success", "failure", "warning", "info"))
    sp.add_argument("--transport", default="auto", choices=("auto", "apprise", "telegram"))
    sp.add_argument("--new-thread", action="store_true")
    sp.set_defaults(func=cmd_notify)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    result = CiResult()
    try:
        code = int(args.func(args, result) or 0)
    except CiError as e:
        log.error(args.cmd, str(e))
        return 1
    result.exit_code = code
    result.write()
    return code


if __name__ == "__main__":
    raise SystemExit(main())
