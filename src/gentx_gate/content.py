"""Content validation through the external chain tooling.

The chain binary's verdict is opaque to the gate: only the exit code decides
pass/fail and the captured output is passed through as-is.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from gentx_gate.config import ContentSettings
from gentx_gate.errors import SubprocessUnavailable
from gentx_gate.exec import run_command
from gentx_gate.types import ContentResult

logger = logging.getLogger(__name__)

GENTX_PLACEHOLDER = "{gentx}"
GENTX_ENV_VAR = "GENTX_FILE"
LAUNCH_FAILURE_CODES = (126, 127)


def build_argv(command: tuple[str, ...], gentx_path: str) -> list[str]:
    """Substitute the gentx path into the configured command."""
    return [part.replace(GENTX_PLACEHOLDER, gentx_path) for part in command]


def _repo_path(value: str, repo_root: Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else repo_root / path


def ensure_available(
    command: tuple[str, ...],
    required_binaries: tuple[str, ...],
    repo_root: Path,
) -> None:
    """Refuse to start when the launcher, a script argument or a required binary is missing.

    An executable or argument containing ``/`` is a path relative to
    ``repo_root``, where the command runs; bare names are looked up on PATH.
    """
    missing: list[str] = []

    launcher = command[0]
    if "/" in launcher:
        target = _repo_path(launcher, repo_root)
        if not (target.is_file() and os.access(target, os.X_OK)):
            missing.append(f"{launcher} (not an executable file under {repo_root})")
    elif shutil.which(launcher) is None:
        missing.append(f"{launcher} (not found on PATH)")

    for part in command[1:]:
        if GENTX_PLACEHOLDER in part or part.startswith("-") or "/" not in part:
            continue
        if not _repo_path(part, repo_root).exists():
            missing.append(f"{part} (no such file under {repo_root})")

    missing.extend(f"{name} (not found on PATH)" for name in required_binaries if shutil.which(name) is None)

    if missing:
        raise SubprocessUnavailable(
            f"content validator unavailable: {', '.join(dict.fromkeys(missing))}"
        )


def run_content_validation(
    gentx_path: str,
    *,
    repo_root: Path,
    settings: ContentSettings | None = None,
    environ: Mapping[str, str] | None = None,
) -> ContentResult:
    """Run the content validator against one gentx file and capture its output.

    Exit codes 126 and 127 mean the shell could not execute something, which
    is a setup problem rather than a verdict on the gentx file.

    Raises:
        SubprocessUnavailable: the validator or a required binary cannot be invoked
    """
    settings = settings or ContentSettings()
    ensure_available(settings.command, settings.required_binaries, repo_root)
    argv = build_argv(settings.command, gentx_path)

    env = dict(os.environ if environ is None else environ)
    env[GENTX_ENV_VAR] = gentx_path

    try:
        result = run_command(argv, cwd=repo_root, check=False, env=env)
    except OSError as exc:
        raise SubprocessUnavailable(f"content validator could not be started: {exc}") from exc

    if result.returncode in LAUNCH_FAILURE_CODES:
        detail = (result.stderr or result.stdout).strip()
        raise SubprocessUnavailable(
            f"content validator could not run (exit {result.returncode}): {' '.join(argv)}\n{detail}"
        )

    logger.info("content validation for %s exited %d", gentx_path, result.returncode)
    return ContentResult(
        argv=result.argv,
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )
