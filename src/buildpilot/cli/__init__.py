"""
Command line interface for buildpilot.

Provides:
- Command group (cli): parse, export, build
- Configuration loading (load_config, apply_overrides)
- Logging setup (setup_logging)
- Console output (print_steps, print_tree, print_preview_result, ...)
"""

from .config import BuilderConfig, PreviewConfig, apply_overrides, load_config
from .exceptions import ConfigurationError
from .logging_setup import setup_logging
from .main import cli

__all__ = [
    "BuilderConfig",
    "PreviewConfig",
    "ConfigurationError",
    "apply_overrides",
    "load_config",
    "setup_logging",
    "cli",
]
