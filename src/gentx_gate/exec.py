"""Subprocess runners for git, gh and the content validator."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str


class ExecError(RuntimeError):
    """Raised when a command returns non-zero in check mode."""

    def __init__(self, result: ExecResult):
        rendered = " ".join(result.argv)
        detail = (result.stderr or result.stdout).strip()
        super().__init__(f"command failed ({result.returncode}): {rendered}\n{detail}")
        self.result = result


def run_command(
    argv: list[str],
    *,
    cwd: Path,
    check: bool = True,
    env: Mapping[str, str] | None = None,
) -> ExecResult:
    """Run command and return structured result.

    Output is decoded as UTF-8 with undecodable bytes replaced. OSError from
    spawning (missing executable, bad cwd) propagates to the caller.
    """
    logger.debug("exec: %s (cwd=%s)", " ".join(argv), cwd)
    completed = subprocess.run(
        argv,
        cwd=cwd,
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        check=False,
        env=dict(env) if env is not None else None,
    )
    result = ExecResult(
        argv=tuple(argv),
        cwd=cwd.resolve(),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
    logger.debug("exec: exit %d", result.returncode)
    if check and result.returncode != 0:
        raise ExecError(result)
    return result


def run_git(
    args: list[str],
    *,
    repo_root: Path,
    check: bool = True,
) -> ExecResult:
    """Run git command rooted at repo."""
    return run_command(["git", *args], cwd=repo_root, check=check)


def run_gh(
    args: list[str],
    *,
    repo_root: Path,
    check: bool = True,
) -> ExecResult:
    """Run GitHub CLI command rooted at repo."""
    return run_command(["gh", *args], cwd=repo_root, check=check)
