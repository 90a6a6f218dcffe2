"""gentx-gate - pull request gate for mainnet gentx submissions."""

from gentx_gate.types import ChangeSet, ContentResult, Report, ValidationOutcome, Violation

__version__ = "0.3.0"

__all__ = [
    "ChangeSet",
    "ContentResult",
    "Report",
    "ValidationOutcome",
    "Violation",
    "__version__",
]
