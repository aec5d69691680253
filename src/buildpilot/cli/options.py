"""Click option groups shared by buildpilot commands."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])


def common_options(func: F) -> F:
    """
    Decorator adding backend/sandbox/logging options to a click command.

    Options added:
        --config: Path to a JSON config file
        --backend-url: Template/chat backend URL (env BUILDPILOT_BACKEND_URL)
        --sandbox: Sandbox name from the registry
        --log-file: Path to log file
        -v/--verbose: Enable verbose logging
    """

    @click.option(
        "--config",
        "config_path",
        default=None,
        type=click.Path(exists=True, dir_okay=False),
        help="Path to a JSON config file",
    )
    @click.option(
        "--backend-url",
        default=None,
        envvar="BUILDPILOT_BACKEND_URL",
        help="Backend URL (default: http://localhost:3000)",
    )
    @click.option(
        "--sandbox",
        default=None,
        help="Sandbox to run the preview in (default: local)",
    )
    @click.option(
        "--log-file",
        default=None,
        type=click.Path(),
        help="Path to log file",
    )
    @click.option(
        "-v",
        "--verbose",
        is_flag=True,
        help="Enable verbose (DEBUG) logging to console",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
