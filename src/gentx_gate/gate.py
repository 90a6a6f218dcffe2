"""Gate orchestration: pre-check, collect, validate, content-check, report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from gentx_gate.collector import collect, collect_pull_request
from gentx_gate.config import GateConfig
from gentx_gate.content import run_content_validation
from gentx_gate.errors import CollectorError
from gentx_gate.report import format_report, skipped_report
from gentx_gate.rules import has_gentx_files, validate
from gentx_gate.types import ChangeSet, Report

logger = logging.getLogger(__name__)

NOTHING_TO_VALIDATE = "No gentx files found in {gentx_dir}/; nothing to validate."


@dataclass(frozen=True)
class GateRequest:
    """Inputs for one gate run. Either both refs or ``pr_number`` select the diff."""

    repo_root: Path
    base_ref: str | None = None
    head_ref: str | None = None
    pr_number: int | None = None
    run_content: bool = True
    skip_if_empty: bool = False
    timestamp_mode: str = "deterministic"


def _collect(request: GateRequest) -> ChangeSet:
    if request.pr_number is not None:
        return collect_pull_request(request.pr_number, request.repo_root)
    if not request.base_ref or not request.head_ref:
        raise ValueError("base and head refs are required unless a PR number is given")
    return collect(request.base_ref, request.head_ref, request.repo_root)


def run_gate(request: GateRequest, config: GateConfig | None = None) -> Report:
    """Run every stage in order and return the report.

    Raises:
        CollectorError: missing repository root, or the change set could not be determined
        SubprocessUnavailable: the content validator could not be invoked
    """
    config = config or GateConfig()
    layout = config.layout

    if not request.repo_root.is_dir():
        raise CollectorError(f"repository root does not exist: {request.repo_root}")

    if request.skip_if_empty and not has_gentx_files(request.repo_root, layout):
        logger.info("no gentx files under %s; skipping", layout.gentx_dir)
        return skipped_report(
            NOTHING_TO_VALIDATE.format(gentx_dir=layout.gentx_dir),
            timestamp_mode=request.timestamp_mode,
        )

    change_set = _collect(request)
    outcome = validate(change_set, layout)

    content = None
    if outcome.passed and outcome.candidate is not None and request.run_content:
        content = run_content_validation(
            outcome.candidate,
            repo_root=request.repo_root,
            settings=config.content,
        )

    return format_report(
        outcome,
        content,
        timestamp_mode=request.timestamp_mode,
        change_set=change_set,
    )
