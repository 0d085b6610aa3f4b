from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from ..config import CiConfig
from ..errors import ValidationError
from ..utils import log
from ..utils.env import env_get, env_key
from .modes import ModeResolver, StepMode


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_TIMEOUT = 124

BANNER = "=" * 41

BuiltinCommand = Callable[[], Optional[List[str]]]


@dataclass(frozen=True)
class StepDefinition:
    name: str
    title: str
    done: str
    stub_label: str
    default_timeout: int
    builtin: Optional[BuiltinCommand] = None


@dataclass(frozen=True)
class StepOutcome:
    step: str
    mode: StepMode
    exit_code: int
    detail: str = ""

    @property
    def result(self) -> str:
        """Job-style result string (success/failure/skipped/timeout)."""
        if self.mode == StepMode.SKIP:
            return "skipped"
        if self.exit_code == EXIT_TIMEOUT:
            return "timeout"
        return "success" if self.exit_code == EXIT_OK else "failure"


def _gitleaks_command() -> Optional[List[str]]:
    if shutil.which("gitleaks") is None:
        return None
    return [
        "gitleaks", "detect",
        "--source", ".",
        "--report-format", "json",
        "--report-path", "gitleaks-report.json",
        "--redact",
    ]


_DEFINITIONS = [
    StepDefinition("install_tools", "Installing Tools", "Tools Installed", "Tool installation", 300),
    StepDefinition("install_dependencies", "Installing Dependencies", "Dependencies Installed", "Dependency installation", 600),
    StepDefinition("compile", "Compiling/Building Project", "Build Complete", "Build", 900),
    StepDefinition("lint", "Running Linters", "Lint Complete", "Lint", 300),
    StepDefinition("security_scan", "Running Security Scan", "Security Scan Complete", "Security scan", 600, _gitleaks_command),
    StepDefinition("bundle", "Bundling Artifacts", "Bundle Complete", "Bundle", 600),
    StepDefinition("unit_tests", "Running Unit Tests", "Unit Tests Complete", "Unit test", 600),
    StepDefinition("integration_tests", "Running Integration Tests", "Integration Tests Complete", "Integration test", 1200),
    StepDefinition("e2e_tests", "Running E2E Tests", "E2E Tests Complete", "E2E test", 1800),
    StepDefinition("smoke_tests", "Running Smoke Tests", "Smoke Tests Complete", "Smoke test", 300),
    StepDefinition("version_update", "Updating Version", "Version Updated", "Version update", 180),
    StepDefinition("changelog", "Generating Changelog", "Changelog Generated", "Changelog generation", 180),
    StepDefinition("publish_npm", "Publishing to NPM", "NPM Publish Complete", "NPM publish", 300),
    StepDefinition("publish_docker", "Publishing Docker Image", "Docker Publish Complete", "Docker publish", 900),
    StepDefinition("publish_documentation", "Publishing Documentation", "Documentation Published", "Documentation publish", 600),
    StepDefinition("upload_assets", "Uploading Release Assets", "Release Assets Uploaded", "Asset upload", 300),
    StepDefinition("verify_deployment", "Verifying Deployment", "Deployment Verification Complete", "Deployment verification", 300),
    StepDefinition("rollback_npm", "Rolling Back NPM Package", "NPM Rollback Complete", "NPM rollback", 300),
    StepDefinition("rollback_docker", "Rolling Back Docker Images", "Docker Rollback Complete", "Docker rollback", 600),
    StepDefinition("cleanup", "Cleaning Up", "Cleanup Complete", "Cleanup", 600),
    StepDefinition("sync_files", "Syncing Files", "File Sync Complete", "File sync", 180),
    StepDefinition("security_audit", "Running Security Audit", "Security Audit Complete", "Security audit", 600),
    StepDefinition("dependency_update", "Updating Dependencies", "Dependency Update Complete", "Dependency update", 600),
    StepDefinition("deprecations", "Deprecating Old Versions", "Deprecation Complete", "Deprecation", 300),
]

STEPS: Dict[str, StepDefinition] = {d.name: d for d in _DEFINITIONS}


def get_step(name: str) -> StepDefinition:
    key = name.strip().lower().replace("-", "_")
    if key not in STEPS:
        raise ValidationError(f"Unknown pipeline step {name!r}; known steps: {sorted(STEPS)}")
    return STEPS[key]


def step_timeout(step: StepDefinition, config: CiConfig, env: Optional[Mapping[str, str]] = None) -> int:
    """Timeout in seconds: TIMEOUT_<STEP> env, then the config, then the built-in default."""
    raw = env_get(f"TIMEOUT_{env_key(step.name)}", env)
    if raw:
        try:
            seconds = int(raw)
        except ValueError:
            raise ValidationError(f"TIMEOUT_{env_key(step.name)} must be an integer, got {raw!r}") from None
        if seconds <= 0:
            raise ValidationError(f"TIMEOUT_{env_key(step.name)} must be positive, got {seconds}")
        return seconds
    configured = config.step(step.name).timeout_seconds
    return configured if configured else step.default_timeout


def _print_stub(step: StepDefinition) -> None:
    print(BANNER)
    print(step.title)
    print(BANNER)
    print(f"✓ {step.stub_label} stub executed")
    print(f"  Customize steps.{step.name}.command in .config/ci-config.yml")
    print(BANNER)
    print(step.done)
    print(BANNER)


def _simulate(step: StepDefinition, mode: StepMode, command: Optional[List[str]]) -> StepOutcome:
    if mode == StepMode.DRY_RUN:
        planned = " ".join(command) if command else "stub banner"
        print(f"🔍 DRY RUN: Would run {step.name}: {planned}")
        return StepOutcome(step.name, mode, EXIT_OK, planned)
    if mode == StepMode.PASS:
        print(f"✅ PASS MODE: {step.stub_label} simulated successfully")
        return StepOutcome(step.name, mode, EXIT_OK)
    if mode == StepMode.FAIL:
        print(f"❌ FAIL MODE: Simulating {step.stub_label.lower()} failure")
        return StepOutcome(step.name, mode, EXIT_FAILURE)
    if mode == StepMode.SKIP:
        print(f"⏭️ SKIP MODE: {step.stub_label} skipped")
        return StepOutcome(step.name, mode, EXIT_OK)
    print(f"⏰ TIMEOUT MODE: Simulating {step.stub_label.lower()} timeout")
    return StepOutcome(step.name, mode, EXIT_TIMEOUT)


def run_step(
    name: str,
    resolver: ModeResolver,
    config: CiConfig,
    env: Optional[Mapping[str, str]] = None,
) -> StepOutcome:
    """Run one pipeline step under its resolved testability mode.

    In EXECUTE mode a configured command (or the step's built-in command) runs
    with the step timeout; without one the step prints its stub banner.
    """
    step = get_step(name)
    mode = resolver.mode_for(step.name)

    command = list(config.step(step.name).command)
    if not command and step.builtin is not None:
        command = step.builtin() or []

    if mode != StepMode.EXECUTE:
        return _simulate(step, mode, command or None)

    if not command:
        _print_stub(step)
        return StepOutcome(step.name, mode, EXIT_OK, "stub")

    timeout = step_timeout(step, config, env)
    child_env = dict(os.environ if env is None else env)
    child_env.update(config.environment_variables)

    log.info(step.name, f"🚀 EXECUTE: {' '.join(command)} (timeout {timeout}s)")
    try:
        cp = subprocess.run(command, env=child_env, timeout=timeout, check=False)
    except subprocess.TimeoutExpired:
        log.error(step.name, f"Command timed out after {timeout}s")
        return StepOutcome(step.name, mode, EXIT_TIMEOUT, f"timed out after {timeout}s")
    except FileNotFoundError:
        log.error(step.name, f"Command not found: {command[0]}")
        return StepOutcome(step.name, mode, EXIT_FAILURE, f"command not found: {command[0]}")

    if cp.returncode == 0:
        log.info(step.name, f"{step.done}")
    else:
        log.error(step.name, f"{step.stub_label} failed with exit code {cp.returncode}")
    return StepOutcome(step.name, mode, cp.returncode, " ".join(command))
