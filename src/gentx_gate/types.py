"""Types shared by the gentx gate stages."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Literal

ReportStatus = Literal["passed", "failed", "skipped"]

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ENVIRONMENT = 2


@dataclass(frozen=True)
class ChangeSet:
    """Files touched between two revisions, in diff order."""

    paths: tuple[str, ...] = ()

    @classmethod
    def from_paths(cls, paths: Iterable[str]) -> ChangeSet:
        """Build a change set, dropping repeats but keeping first-seen order."""
        seen: dict[str, None] = {}
        for path in paths:
            if path and path not in seen:
                seen[path] = None
        return cls(paths=tuple(seen))

    @classmethod
    def from_lines(cls, text: str) -> ChangeSet:
        """Parse newline separated `--name-only` output."""
        return cls.from_paths(line.strip() for line in text.splitlines())

    @classmethod
    def from_nul(cls, text: str) -> ChangeSet:
        """Parse NUL separated ``--name-only -z`` output; paths are taken verbatim."""
        return cls.from_paths(text.split("\0"))

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def __iter__(self):
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True)
class Violation:
    """One structural rule failure with contributor-facing guidance."""

    code: str
    reason: str
    summary: str
    guidance: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "reason": self.reason,
            "summary": self.summary,
            "guidance": list(self.guidance),
            "paths": list(self.paths),
        }


@dataclass(frozen=True)
class ValidationOutcome:
    """Structural validation result.

    The outcome is failed exactly when at least one violation is present, so a
    failed outcome always carries reasons. ``candidate`` is the single gentx
    path found by the count rule, or None when zero or several matched.
    """

    violations: tuple[Violation, ...] = ()
    candidate: str | None = None

    @classmethod
    def failed(cls, violations: Iterable[Violation], candidate: str | None = None) -> ValidationOutcome:
        collected = tuple(violations)
        if not collected:
            raise ValueError("a failed outcome requires at least one violation")
        return cls(violations=collected, candidate=candidate)

    @property
    def passed(self) -> bool:
        return not self.violations

    @property
    def status(self) -> Literal["passed", "failed"]:
        return "passed" if self.passed else "failed"

    @property
    def reasons(self) -> tuple[str, ...]:
        return tuple(v.reason for v in self.violations)


@dataclass(frozen=True)
class ContentResult:
    """Captured run of the external content validator."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def passed(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostics(self) -> str:
        """Stdout followed by stderr, otherwise untouched."""
        if self.stdout and self.stderr and not self.stdout.endswith("\n"):
            return f"{self.stdout}\n{self.stderr}"
        return f"{self.stdout}{self.stderr}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "argv": list(self.argv),
            "returncode": self.returncode,
            "passed": self.passed,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


@dataclass(frozen=True)
class Report:
    """Final gate result handed to the CI caller."""

    status: ReportStatus
    body: str
    diagnostics: str | None = None
    outcome: ValidationOutcome | None = None
    content: ContentResult | None = None
    generated_at: str = ""
    timestamp_mode: str = "deterministic"
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def exit_code(self) -> int:
        return EXIT_FAILED if self.status == "failed" else EXIT_PASSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": "1.0",
            "status": self.status,
            "exit_code": self.exit_code,
            "generated_at": self.generated_at,
            "timestamp_mode": self.timestamp_mode,
            "structural": None
            if self.outcome is None
            else {
                "status": self.outcome.status,
                "candidate": self.outcome.candidate,
                "reasons": list(self.outcome.reasons),
                "violations": [v.to_dict() for v in self.outcome.violations],
            },
            "content": None if self.content is None else self.content.to_dict(),
            **self.extra,
        }
