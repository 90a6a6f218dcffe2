"""Change-set collection from git history or a GitHub pull request."""

from __future__ import annotations

import logging
from pathlib import Path

from gentx_gate.errors import CollectorError
from gentx_gate.exec import ExecError, ExecResult, run_gh, run_git
from gentx_gate.types import ChangeSet

logger = logging.getLogger(__name__)


def _git(args: list[str], repo_root: Path, failure: str | None = None) -> ExecResult:
    """Run git, turning any failure into CollectorError (``failure`` replaces the git detail)."""
    try:
        return run_git(args, repo_root=repo_root)
    except ExecError as exc:
        raise CollectorError(failure or str(exc)) from exc
    except OSError as exc:
        raise CollectorError(f"unable to run git in {repo_root}: {exc}") from exc


def _require_full_history(repo_root: Path) -> None:
    out = _git(["rev-parse", "--is-shallow-repository"], repo_root).stdout.strip()
    if out == "true":
        raise CollectorError(
            f"{repo_root} is a shallow clone; fetch full history (fetch-depth: 0) before validating"
        )


def _resolve_commit(ref: str, repo_root: Path) -> str:
    failure = f"unable to resolve ref {ref!r} to a commit"
    result = _git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], repo_root, failure)
    sha = result.stdout.strip()
    if not sha:
        raise CollectorError(f"unable to resolve ref {ref!r} to a commit")
    return sha


def collect(base_ref: str, head_ref: str, repo_root: Path) -> ChangeSet:
    """Return files changed on ``head_ref`` since it forked from ``base_ref``.

    Uses the three-dot diff, so only changes made on the head side count.

    Raises:
        CollectorError: shallow history, unknown refs, no merge base, or git unavailable
    """
    if not repo_root.is_dir():
        raise CollectorError(f"repository root does not exist: {repo_root}")

    _require_full_history(repo_root)
    base_sha = _resolve_commit(base_ref, repo_root)
    head_sha = _resolve_commit(head_ref, repo_root)

    _git(
        ["merge-base", base_sha, head_sha],
        repo_root,
        f"no merge base between {base_ref!r} and {head_ref!r}",
    )

    # -z keeps paths unquoted; plain --name-only C-quotes non-ASCII names.
    diff = _git(["diff", "--name-only", "-z", f"{base_sha}...{head_sha}"], repo_root)
    change_set = ChangeSet.from_nul(diff.stdout)
    logger.info("collected %d changed file(s) between %s and %s", len(change_set), base_ref, head_ref)
    return change_set


def collect_pull_request(number: int, repo_root: Path) -> ChangeSet:
    """Return files changed by a pull request via ``gh pr diff --name-only``.

    Raises:
        CollectorError: gh missing, unauthenticated, or the PR cannot be read
    """
    try:
        diff = run_gh(["pr", "diff", str(number), "--name-only"], repo_root=repo_root)
    except ExecError as exc:
        raise CollectorError(f"unable to list files for PR #{number}: {exc}") from exc
    except OSError as exc:
        raise CollectorError(f"unable to run gh for PR #{number}: {exc}") from exc

    change_set = ChangeSet.from_lines(diff.stdout)
    logger.info("collected %d changed file(s) from PR #%d", len(change_set), number)
    return change_set
