"""Gate configuration loader.

Reads an optional ``.gentx-gate.yaml`` at the repository root (or an explicit
path) and applies ``GENTX_GATE_*`` environment overrides on top of defaults.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from gentx_gate.errors import ConfigError

DEFAULT_CONFIG_FILENAME = ".gentx-gate.yaml"
DEFAULT_GENESIS_PATH = "mainnet/genesis.json"
DEFAULT_GENTX_DIR = "mainnet/gentx"
DEFAULT_CONTENT_COMMAND = ("bash", "scripts/ci/validate_gentx.sh", "{gentx}")
DEFAULT_REQUIRED_BINARIES = ("lumerad",)

ENV_CONTENT_COMMAND = "GENTX_GATE_CONTENT_COMMAND"
ENV_LOG_LEVEL = "GENTX_GATE_LOG_LEVEL"

_KNOWN_SECTIONS = {"layout", "content"}


@dataclass(frozen=True)
class Layout:
    """Repository paths the structural rules look at."""

    genesis_path: str = DEFAULT_GENESIS_PATH
    gentx_dir: str = DEFAULT_GENTX_DIR


@dataclass(frozen=True)
class ContentSettings:
    """How to invoke the external content validator."""

    command: tuple[str, ...] = DEFAULT_CONTENT_COMMAND
    required_binaries: tuple[str, ...] = DEFAULT_REQUIRED_BINARIES


@dataclass(frozen=True)
class GateConfig:
    layout: Layout = field(default_factory=Layout)
    content: ContentSettings = field(default_factory=ContentSettings)
    log_level: str | None = None
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Path | None = None) -> GateConfig:
        """Parse and validate a config mapping."""
        unknown = set(data) - _KNOWN_SECTIONS
        if unknown:
            raise ValueError(f"unknown config section(s): {sorted(unknown)}")

        layout_data = _section(data, "layout")
        layout = Layout(
            genesis_path=_clean_path(_string(layout_data, "genesis_path", DEFAULT_GENESIS_PATH)),
            gentx_dir=_clean_path(_string(layout_data, "gentx_dir", DEFAULT_GENTX_DIR)),
        )

        content_data = _section(data, "content")
        command = _string_list(content_data, "command", DEFAULT_CONTENT_COMMAND)
        if not command:
            raise ValueError("content.command must not be empty")
        content = ContentSettings(
            command=command,
            required_binaries=_string_list(content_data, "required_binaries", DEFAULT_REQUIRED_BINARIES),
        )
        return cls(layout=layout, content=content, source=source)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, Mapping):
        raise TypeError(f"{name} must be a mapping")
    return value


def _string(data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise TypeError(f"{key} must be a non-empty string")
    return value


def _string_list(data: Mapping[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key, list(default))
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"{key} must be a list of strings")
    return tuple(value)


def _clean_path(value: str) -> str:
    return value.strip().strip("/")


def load_config(
    repo_root: Path,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> GateConfig:
    """Load gate configuration.

    Priority order:
    1. Environment overrides (``GENTX_GATE_CONTENT_COMMAND``, ``GENTX_GATE_LOG_LEVEL``)
    2. ``config_path`` when given, else ``<repo_root>/.gentx-gate.yaml`` if present
    3. Built-in defaults

    Raises:
        ConfigError: explicit config missing, malformed YAML, or invalid structure
    """
    env = os.environ if environ is None else environ

    path = config_path or (repo_root / DEFAULT_CONFIG_FILENAME)
    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    config = GateConfig()
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML config at {path}: {e}") from e
        if not isinstance(data, Mapping):
            raise ConfigError(f"Invalid config structure in {path}: top level must be a mapping")
        try:
            config = GateConfig.from_dict(data, source=path)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config structure in {path}: {e}") from e

    raw_command = env.get(ENV_CONTENT_COMMAND, "").strip()
    if raw_command:
        config = replace(config, content=replace(config.content, command=tuple(shlex.split(raw_command))))

    raw_level = env.get(ENV_LOG_LEVEL, "").strip()
    if raw_level:
        config = replace(config, log_level=raw_level.upper())

    return config
