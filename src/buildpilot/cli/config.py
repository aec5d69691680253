"""Configuration loading for the buildpilot command line."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema

from buildpilot.domain.models import Command
from buildpilot.infrastructure.backend import HttpBackendConfig
from buildpilot.schemas import validate_config

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class PreviewConfig:
    """Commands and limits for the preview orchestrator."""

    install: str = "npm install"
    dev: str = "npm run dev"
    ready_timeout: float | None = None
    fail_on_dev_exit: bool = False

    @property
    def install_command(self) -> Command:
        return Command.parse(self.install)

    @property
    def dev_command(self) -> Command:
        return Command.parse(self.dev)


@dataclass(frozen=True)
class BuilderConfig:
    """Complete CLI configuration."""

    backend: HttpBackendConfig = field(default_factory=HttpBackendConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    sandbox: str = "local"
    sandbox_options: dict[str, Any] = field(default_factory=dict)


def normalize_base_url(url: str) -> str:
    """
    Normalize the backend base URL.

    Strips trailing slashes so endpoint paths can be appended directly.

    Args:
        url: Raw URL from CLI, environment or config

    Returns:
        URL without trailing slash
    """
    return url.rstrip("/")


def load_config(path: Path | None) -> BuilderConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: Path to the config file, or None for defaults

    Returns:
        BuilderConfig with defaults for anything the file leaves out

    Raises:
        ConfigurationError: If file is missing, not JSON, or fails the schema
    """
    if path is None:
        return BuilderConfig()

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected object in {path}, got {type(data).__name__}")

    try:
        validate_config(data)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "(root)"
        raise ConfigurationError(f"Invalid config {path} at {location}: {e.message}") from e

    backend_data = dict(data.get("backend", {}))
    if "base_url" in backend_data:
        backend_data["base_url"] = normalize_base_url(backend_data["base_url"])

    return BuilderConfig(
        backend=HttpBackendConfig(**backend_data),
        preview=PreviewConfig(**data.get("preview", {})),
        sandbox=data.get("sandbox", "local"),
        sandbox_options=dict(data.get("sandbox_options", {})),
    )


def apply_overrides(
    config: BuilderConfig,
    backend_url: str | None = None,
    sandbox: str | None = None,
    ready_timeout: float | None = None,
) -> BuilderConfig:
    """Return a copy of config with command line values taking precedence."""
    if backend_url:
        config = replace(
            config,
            backend=replace(config.backend, base_url=normalize_base_url(backend_url)),
        )
    if sandbox:
        config = replace(config, sandbox=sandbox)
    if ready_timeout is not None:
        config = replace(
            config, preview=replace(config.preview, ready_timeout=ready_timeout)
        )
    return config
