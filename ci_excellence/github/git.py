from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import GitError, ValidationError
from ..utils import log


BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"


def _run(cmd: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, check=False, text=True, capture_output=True, cwd=str(cwd) if cwd else None)


def _git(args: List[str], cwd: Optional[Path] = None) -> str:
    cmd = ["git", *args]
    cp = _run(cmd, cwd)
    if cp.returncode != 0:
        raise GitError(cmd, cp.returncode, cp.stderr)
    return cp.stdout.strip()


def _describe_args(pattern: str, exclude: Iterable[str]) -> List[str]:
    args = ["git", "describe", "--tags", "--match", pattern]
    for ex in exclude:
        args += ["--exclude", ex]
    return args + ["--abbrev=0"]


def describe_latest_tag(pattern: str = "v*", cwd: Optional[Path] = None, exclude: Iterable[str] = ()) -> Optional[str]:
    """Closest reachable tag matching ``pattern``, or None when there is none."""
    return describe_latest_tag_from("HEAD", pattern, cwd, exclude)


def previous_tag(ref: str = "HEAD", pattern: str = "v*", cwd: Optional[Path] = None, exclude: Iterable[str] = ()) -> Optional[str]:
    """Closest tag reachable from the parent of ``ref``."""
    return describe_latest_tag_from(f"{ref}^", pattern, cwd, exclude)


def describe_latest_tag_from(
    ref: str,
    pattern: str = "v*",
    cwd: Optional[Path] = None,
    exclude: Iterable[str] = (),
) -> Optional[str]:
    cp = _run([*_describe_args(pattern, exclude), ref], cwd)
    if cp.returncode != 0:
        return None
    return cp.stdout.strip() or None


def rev_parse(ref: str, cwd: Optional[Path] = None) -> str:
    return _git(["rev-parse", "--verify", "--quiet", ref], cwd)


def commit_of(ref: str, cwd: Optional[Path] = None) -> str:
    """Resolve any ref (including annotated tags) to its commit sha."""
    return rev_parse(f"{ref}^{{commit}}", cwd)


def ref_exists(ref: str, cwd: Optional[Path] = None) -> bool:
    return _run(["git", "rev-parse", "--verify", "--quiet", ref], cwd).returncode == 0


def tag_exists(tag: str, cwd: Optional[Path] = None) -> bool:
    return ref_exists(f"refs/tags/{tag}", cwd)


def short_sha(ref: str = "HEAD", cwd: Optional[Path] = None) -> str:
    cp = _run(["git", "rev-parse", "--short", ref], cwd)
    if cp.returncode != 0:
        return "unknown"
    return cp.stdout.strip()


def list_tags(pattern: str = "*", sort: str = "-creatordate", cwd: Optional[Path] = None) -> List[str]:
    out = _git(["tag", "-l", pattern, f"--sort={sort}"], cwd)
    return [line.strip() for line in out.splitlines() if line.strip()]


def force_tag(tag: str, target: str, cwd: Optional[Path] = None, message: Optional[str] = None) -> None:
    """Create or move ``tag`` to ``target``. Lightweight unless a message is given."""
    args = ["tag", "-f"]
    if message:
        args += ["-a", "-m", message]
    args += [tag, target]
    _git(args, cwd)



def push_tag(tag: str, remote: str = "origin", force: bool = False, cwd: Optional[Path] = None) -> None:
    args = ["push"]
    if force:
        args.append("-f")
    args += [remote, f"refs/tags/{tag}"]
    _git(args, cwd)


def configure_bot_identity(cwd: Optional[Path] = None) -> None:
    _git(["config", "user.name", BOT_NAME], cwd)
    _git(["config", "user.email", BOT_EMAIL], cwd)
    log.info("git", f"configured identity {BOT_NAME} <{BOT_EMAIL}>")


def log_subjects(rev_range: Optional[str] = None, cwd: Optional[Path] = None) -> List[str]:
    """Commit lines formatted ``subject (short sha)``, oldest first."""
    args = ["log", "--reverse", "--pretty=format:%s (%h)"]
    if rev_range:
        args.append(rev_range)
    out = _git(args, cwd)
    return [line for line in out.splitlines() if line.strip()]


def commit_and_push(message: str, branch: str, remote: str = "origin", cwd: Optional[Path] = None) -> bool:
    """Stage everything, commit, and push to ``branch``.

    An empty commit or a failed push is reported and tolerated; returns True
    when a commit was created.
    """
    _git(["add", "."], cwd)
    cp = _run(["git", "commit", "-m", message], cwd)
    committed = cp.returncode == 0
    if not committed:
        log.warn("git", "No changes to commit")

    cp = _run(["git", "push", remote, f"HEAD:{branch}"], cwd)
    if cp.returncode != 0:
        log.warn("git", f"Nothing to push: {cp.stderr.strip()}")
    return committed


def commit_version_changes(branch: str, version: str, remote: str = "origin", cwd: Optional[Path] = None) -> bool:
    """Commit the files touched by a version bump as the Actions bot and push them."""
    if not branch or not version:
        raise ValidationError("Usage: commit-version-changes <branch> <version>")
    configure_bot_identity(cwd)
    return commit_and_push(f"chore(release): bump version to {version}", branch, remote, cwd)
