"""Pytest configuration and fixtures for gentx-gate tests."""
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest


def pytest_sessionfinish(session, exitstatus):
    """Check that coverage data was collected if --cov was requested.

    This prevents silent "no data collected" scenarios that produce 0% coverage
    without failing the test run.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)

    if not cov_enabled:
        return

    cwd = Path.cwd()
    coverage_files = list(cwd.glob(".coverage*"))

    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "This suggests tests are not importing/executing package code. "
            "Check that tests import from 'gentx_gate' (the package) not 'src/gentx_gate' (filesystem path).",
            returncode=1
        )


def _git(repo: Path, *args: str) -> str:
    completed = subprocess.run(["git", *args], cwd=repo, capture_output=True, text=True, check=True)
    return completed.stdout.strip()


class LaunchRepo:
    """Throwaway mainnet launch repository with a `main` base commit."""

    def __init__(self, root: Path):
        self.root = root

    def write(self, rel_path: str, content: str = "{}\n") -> None:
        target = self.root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def commit(self, message: str) -> str:
        _git(self.root, "add", "-A")
        _git(self.root, "commit", "-q", "-m", message)
        return _git(self.root, "rev-parse", "HEAD")

    def branch(self, name: str) -> None:
        _git(self.root, "checkout", "-q", "-b", name)

    def git(self, *args: str) -> str:
        return _git(self.root, *args)


@pytest.fixture
def launch_repo(tmp_path: Path) -> LaunchRepo:
    """Real git repo holding mainnet/genesis.json and one accepted gentx on main."""
    if shutil.which("git") is None:
        pytest.skip("git is not available")

    root = tmp_path / "launch"
    root.mkdir()
    _git(root, "init", "-q", "-b", "main")
    _git(root, "config", "user.email", "ci@example.invalid")
    _git(root, "config", "user.name", "CI")
    _git(root, "config", "commit.gpgsign", "false")

    repo = LaunchRepo(root)
    repo.write("README.md", "# mainnet launch\n")
    repo.write("mainnet/genesis.json", '{"chain_id": "lumera-mainnet-1"}\n')
    repo.write("mainnet/gentx/gentx-existing.json")
    repo.commit("initial")
    return repo
