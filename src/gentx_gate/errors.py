"""Environment errors that abort a gate run with exit code 2."""

from __future__ import annotations


class GateEnvironmentError(RuntimeError):
    """Tooling or setup failure, distinct from a validation rejection."""


class CollectorError(GateEnvironmentError):
    """Raised when the changed-file list cannot be determined."""


class SubprocessUnavailable(GateEnvironmentError):
    """Raised when the content validator cannot be invoked."""


class ConfigError(GateEnvironmentError):
    """Raised when a gate config file is malformed or invalid."""
