"""Structural rules for gentx pull requests.

Every rule sees the full change set and reports independently, so a
contributor gets all problems in a single round-trip. Rule order fixes the
order of reasons in the outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from gentx_gate.config import Layout
from gentx_gate.types import ChangeSet, ValidationOutcome, Violation

logger = logging.getLogger(__name__)

GENESIS_MODIFIED = "genesis_modified"
NO_GENTX = "no_gentx"
MULTIPLE_GENTX = "multiple_gentx"

GENESIS_REASON = "genesis file modification forbidden"
NO_GENTX_REASON = "no gentx file present"


def is_gentx_path(path: str, layout: Layout) -> bool:
    """True for a ``.json`` file directly inside the gentx directory."""
    prefix = f"{layout.gentx_dir}/"
    if not path.startswith(prefix):
        return False
    name = path[len(prefix):]
    return "/" not in name and name.endswith(".json")


def gentx_paths(change_set: ChangeSet, layout: Layout) -> tuple[str, ...]:
    return tuple(p for p in change_set if is_gentx_path(p, layout))


def check_genesis_untouched(change_set: ChangeSet, layout: Layout) -> Violation | None:
    if layout.genesis_path not in change_set:
        return None
    return Violation(
        code=GENESIS_MODIFIED,
        reason=GENESIS_REASON,
        summary=f"PRs must not modify {layout.genesis_path}",
        guidance=(
            "The genesis file is only updated by maintainers after collecting all gentx files.",
            "Your genesis account is created automatically from the public key in your gentx file.",
            f"Remove {layout.genesis_path} from this PR.",
            f"Only include your gentx file in {layout.gentx_dir}/.",
        ),
        paths=(layout.genesis_path,),
    )


def check_single_gentx(change_set: ChangeSet, layout: Layout) -> Violation | None:
    found = gentx_paths(change_set, layout)
    if len(found) == 1:
        return None
    if not found:
        return Violation(
            code=NO_GENTX,
            reason=NO_GENTX_REASON,
            summary="No gentx files found in this PR",
            guidance=(
                f"PRs should add exactly one gentx file to {layout.gentx_dir}/.",
                f"Add your gentx file to the {layout.gentx_dir}/ directory.",
                "Name it following the convention gentx-<validator-address>.json.",
            ),
        )
    return Violation(
        code=MULTIPLE_GENTX,
        reason=f"multiple gentx files present ({len(found)} found)",
        summary=f"Multiple gentx files found in this PR ({len(found)} files)",
        guidance=(
            f"PRs should add exactly one gentx file to {layout.gentx_dir}/.",
            "Keep only one gentx file in this PR.",
            "Create separate PRs for additional validators.",
        ),
        paths=found,
    )


Rule = Callable[[ChangeSet, Layout], Violation | None]

RULES: tuple[Rule, ...] = (check_genesis_untouched, check_single_gentx)


def validate(change_set: ChangeSet, layout: Layout | None = None) -> ValidationOutcome:
    """Apply every structural rule and accumulate the violations."""
    layout = layout or Layout()
    violations = [v for v in (rule(change_set, layout) for rule in RULES) if v is not None]

    found = gentx_paths(change_set, layout)
    candidate = found[0] if len(found) == 1 else None

    if violations:
        logger.info("structural validation failed: %s", ", ".join(v.code for v in violations))
        return ValidationOutcome.failed(violations, candidate=candidate)
    logger.info("structural validation passed: candidate=%s", candidate)
    return ValidationOutcome(candidate=candidate)


def has_gentx_files(repo_root: Path, layout: Layout | None = None) -> bool:
    """Presence pre-check: does the gentx directory hold any ``.json`` file?"""
    layout = layout or Layout()
    gentx_dir = repo_root / layout.gentx_dir
    if not gentx_dir.is_dir():
        return False
    return any(p.is_file() for p in gentx_dir.glob("*.json"))
