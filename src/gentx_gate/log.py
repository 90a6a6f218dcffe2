"""Logging setup for the gentx_gate.* logger tree."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "gentx_gate"

err_console = Console(stderr=True)


def resolve_level(*, verbose: bool = False, quiet: bool = False, default: str | None = None) -> int:
    """--verbose/--quiet win over the configured default level."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    if default:
        level = logging.getLevelName(default.upper())
        if isinstance(level, int):
            return level
    return logging.WARNING


def configure_logging(level: int) -> logging.Logger:
    """Route gentx_gate.* records to stderr through rich."""
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=err_console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.propagate = False
    return root
