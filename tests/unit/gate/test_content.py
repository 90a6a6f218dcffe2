"""Unit tests for the content validator wrapper."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from gentx_gate.config import ContentSettings
from gentx_gate.content import build_argv, run_content_validation
from gentx_gate.errors import SubprocessUnavailable
from gentx_gate.exec import ExecResult, run_command


def _which_all(name: str) -> str:
    return f"/usr/bin/{name}"


def _default_script(repo: Path) -> Path:
    script = repo / "scripts" / "ci" / "validate_gentx.sh"
    script.parent.mkdir(parents=True)
    script.write_text("#!/usr/bin/env bash\nexit 0\n", encoding="utf-8")
    return script


def _exec_result(argv, cwd, returncode: int, stdout: str = "", stderr: str = "") -> ExecResult:
    return ExecResult(argv=tuple(argv), cwd=cwd, returncode=returncode, stdout=stdout, stderr=stderr)


def test_build_argv_substitutes_gentx_path() -> None:
    argv = build_argv(("lumerad", "validate", "--file={gentx}"), "mainnet/gentx/gentx-a.json")

    assert argv == ["lumerad", "validate", "--file=mainnet/gentx/gentx-a.json"]


def test_content_output_passes_through(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _default_script(tmp_path)
    seen: dict[str, object] = {}

    def _run(argv, *, cwd, check=True, env=None):
        seen.update(argv=argv, cwd=cwd, check=check, env=env)
        return _exec_result(
            argv,
            cwd,
            3,
            stdout="Error: invalid signature\n",
            stderr="  min-self-delegation < 1\n",
        )

    monkeypatch.setattr("gentx_gate.content.shutil.which", _which_all)
    monkeypatch.setattr("gentx_gate.content.run_command", _run)

    result = run_content_validation(
        "mainnet/gentx/gentx-a.json",
        repo_root=tmp_path,
        environ={"PATH": "/usr/bin"},
    )

    assert seen["argv"] == ["bash", "scripts/ci/validate_gentx.sh", "mainnet/gentx/gentx-a.json"]
    assert seen["cwd"] == tmp_path
    assert seen["check"] is False
    assert seen["env"] == {"PATH": "/usr/bin", "GENTX_FILE": "mainnet/gentx/gentx-a.json"}
    assert not result.passed
    assert result.returncode == 3
    assert result.diagnostics == "Error: invalid signature\n  min-self-delegation < 1\n"


def test_missing_required_binary(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _default_script(tmp_path)
    monkeypatch.setattr(
        "gentx_gate.content.shutil.which",
        lambda name: None if name == "lumerad" else f"/usr/bin/{name}",
    )

    with pytest.raises(SubprocessUnavailable, match="lumerad"):
        run_content_validation("mainnet/gentx/gentx-a.json", repo_root=tmp_path)


def test_missing_command_executable(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("gentx_gate.content.shutil.which", lambda name: None)
    settings = ContentSettings(command=("chain-check", "{gentx}"), required_binaries=())

    with pytest.raises(SubprocessUnavailable, match="chain-check"):
        run_content_validation("mainnet/gentx/gentx-a.json", repo_root=tmp_path, settings=settings)


def test_missing_script_argument_is_unavailable(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def _run(*_args, **_kwargs):
        raise AssertionError("validator must not be launched")

    monkeypatch.setattr("gentx_gate.content.shutil.which", _which_all)
    monkeypatch.setattr("gentx_gate.content.run_command", _run)

    with pytest.raises(SubprocessUnavailable, match="scripts/ci/validate_gentx.sh"):
        run_content_validation("mainnet/gentx/gentx-a.json", repo_root=tmp_path)


def test_relative_launcher_resolves_against_repo_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    script = repo / "scripts" / "check.sh"
    script.parent.mkdir(parents=True)
    script.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    script.chmod(0o755)
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    monkeypatch.setattr(
        "gentx_gate.content.run_command",
        lambda argv, *, cwd, check=True, env=None: _exec_result(argv, cwd, 0, stdout="ok\n"),
    )
    settings = ContentSettings(command=("scripts/check.sh", "{gentx}"), required_binaries=())

    result = run_content_validation("mainnet/gentx/gentx-a.json", repo_root=repo, settings=settings)

    assert result.passed
    assert result.argv == ("scripts/check.sh", "mainnet/gentx/gentx-a.json")


def test_relative_launcher_missing_under_repo_root(tmp_path: Path) -> None:
    settings = ContentSettings(command=("scripts/check.sh", "{gentx}"), required_binaries=())

    with pytest.raises(SubprocessUnavailable, match="scripts/check.sh"):
        run_content_validation("mainnet/gentx/gentx-a.json", repo_root=tmp_path, settings=settings)


@pytest.mark.parametrize("code", [126, 127])
def test_launch_failure_exit_codes_are_unavailable(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, code: int
) -> None:
    _default_script(tmp_path)
    monkeypatch.setattr("gentx_gate.content.shutil.which", _which_all)
    monkeypatch.setattr(
        "gentx_gate.content.run_command",
        lambda argv, *, cwd, check=True, env=None: _exec_result(
            argv, cwd, code, stderr="lumerad: command not found\n"
        ),
    )

    with pytest.raises(SubprocessUnavailable, match=f"exit {code}"):
        run_content_validation("mainnet/gentx/gentx-a.json", repo_root=tmp_path)


def test_spawn_failure_is_unavailable(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _default_script(tmp_path)

    def _run(argv, *, cwd, check=True, env=None):
        raise PermissionError("not executable")

    monkeypatch.setattr("gentx_gate.content.shutil.which", _which_all)
    monkeypatch.setattr("gentx_gate.content.run_command", _run)

    with pytest.raises(SubprocessUnavailable, match="could not be started"):
        run_content_validation("mainnet/gentx/gentx-a.json", repo_root=tmp_path)


def test_undecodable_validator_output_is_reported(tmp_path: Path) -> None:
    script = tmp_path / "emit.py"
    script.write_text(
        "import sys\n"
        "sys.stdout.buffer.write(b'bad \\xff\\xfe sig\\n')\n"
        "sys.exit(1)\n",
        encoding="utf-8",
    )
    settings = ContentSettings(command=(sys.executable, str(script), "{gentx}"), required_binaries=())

    result = run_content_validation("mainnet/gentx/gentx-a.json", repo_root=tmp_path, settings=settings)

    assert not result.passed
    assert result.stdout == "bad \ufffd\ufffd sig\n"


def test_run_command_replaces_invalid_utf8(tmp_path: Path) -> None:
    result = run_command(
        [sys.executable, "-c", "import sys; sys.stderr.buffer.write(b'\\xc3(')"],
        cwd=tmp_path,
        check=False,
    )

    assert result.returncode == 0
    assert result.stderr == "\ufffd("
