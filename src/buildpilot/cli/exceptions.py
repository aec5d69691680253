"""Exceptions raised by the command line layer."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when configuration files are invalid or missing."""

    pass
