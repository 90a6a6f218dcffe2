"""Markdown and JSON report rendering for the gentx gate."""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path

from gentx_gate.types import ChangeSet, ContentResult, Report, ValidationOutcome, Violation

REPORT_JSON = "GENTX_REPORT.json"
REPORT_MD = "GENTX_REPORT.md"

TITLE = "## 🔍 Gentx Validation Results"
CONTENT_SECTION = "### Content Validation Output"
BLOCK_SEPARATOR = "---"


def _get_deterministic_timestamp() -> str:
    """Get deterministic timestamp for testing."""
    return "1970-01-01T00:00:00Z"


def _get_wallclock_timestamp() -> str:
    """Get current wallclock timestamp."""
    return datetime.now(UTC).isoformat()


def _timestamp(mode: str) -> str:
    if mode == "deterministic":
        return _get_deterministic_timestamp()
    return _get_wallclock_timestamp()


def _fence(text: str) -> str:
    """Pick a backtick fence longer than any run inside ``text``."""
    longest = max((len(m) for m in re.findall(r"`+", text)), default=0)
    return "`" * max(3, longest + 1)


def _violation_block(index: int, violation: Violation) -> list[str]:
    lines = [
        f"### ❌ {index}. {violation.reason}",
        "",
        f"**ERROR: {violation.summary}**",
        "",
    ]
    if violation.paths:
        lines.append("**Files:**")
        lines.extend(f"- `{path}`" for path in violation.paths)
        lines.append("")
    if violation.guidance:
        lines.append("**Required changes:**")
        lines.extend(f"- {step}" for step in violation.guidance)
        lines.append("")
    return lines


def _content_block(content: ContentResult) -> list[str]:
    diagnostics = content.diagnostics
    fence = _fence(diagnostics)
    verdict = "✅ passed" if content.passed else "❌ failed"
    lines = [
        CONTENT_SECTION,
        "",
        f"**Result**: {verdict} (exit code {content.returncode})",
        "",
        fence,
    ]
    if diagnostics:
        # The line join supplies the newline that closes the diagnostics.
        lines.append(diagnostics.removesuffix("\n"))
    lines.extend([fence, ""])
    return lines


def format_report(
    outcome: ValidationOutcome,
    content: ContentResult | None = None,
    *,
    timestamp_mode: str = "deterministic",
    change_set: ChangeSet | None = None,
) -> Report:
    """Render the gate result.

    Final status is the structural status AND the content verdict when the
    content validator ran. In deterministic mode the body depends only on the
    inputs.
    """
    passed = outcome.passed and (content is None or content.passed)
    status = "passed" if passed else "failed"

    lines = [TITLE, ""]
    lines.append("✅ **Status: PASSED**" if passed else "❌ **Status: FAILED**")
    lines.append("")

    if outcome.passed:
        lines.append(
            f"Structural checks passed: exactly one gentx file (`{outcome.candidate}`), "
            "no genesis file modifications."
        )
        lines.append("")
        if content is None:
            lines.append("Content validation was not run.")
            lines.append("")
        elif content.passed:
            lines.append("All gentx files have been successfully validated! 🎉")
            lines.append("")
    else:
        count = len(outcome.violations)
        lines.append(f"Found {count} problem{'s' if count != 1 else ''} with this PR:")
        lines.append("")
        for index, violation in enumerate(outcome.violations, start=1):
            if index > 1:
                lines.extend([BLOCK_SEPARATOR, ""])
            lines.extend(_violation_block(index, violation))

    if content is not None:
        lines.extend(_content_block(content))

    if not passed:
        lines.extend([BLOCK_SEPARATOR, "", "**This PR is blocked from merging until these issues are resolved.**", ""])

    generated_at = _timestamp(timestamp_mode)
    if timestamp_mode != "deterministic":
        lines.extend([f"_Validation run at {generated_at}_", ""])

    extra = {}
    if change_set is not None:
        extra["change_set"] = list(change_set.paths)

    return Report(
        status=status,
        body="\n".join(lines),
        diagnostics=None if content is None else content.diagnostics,
        outcome=outcome,
        content=content,
        generated_at=generated_at,
        timestamp_mode=timestamp_mode,
        extra=extra,
    )


def skipped_report(reason: str, *, timestamp_mode: str = "deterministic") -> Report:
    """Neutral report for runs that found nothing to validate."""
    generated_at = _timestamp(timestamp_mode)
    lines = [TITLE, "", "⏭️ **Status: SKIPPED**", "", reason, ""]
    if timestamp_mode != "deterministic":
        lines.extend([f"_Validation run at {generated_at}_", ""])
    return Report(
        status="skipped",
        body="\n".join(lines),
        generated_at=generated_at,
        timestamp_mode=timestamp_mode,
        extra={"skip_reason": reason},
    )


def write_report(report: Report, out_dir: Path) -> tuple[Path, Path]:
    """Write JSON and markdown copies of the report for the comment step."""
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / REPORT_JSON
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, sort_keys=True)
        f.write("\n")

    md_path = out_dir / REPORT_MD
    with open(md_path, "w", encoding="utf-8") as f:
        f.write(report.body)

    return json_path, md_path
