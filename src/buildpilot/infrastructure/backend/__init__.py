"""
Backend adapters for template and chat requests.
"""

from buildpilot.infrastructure.backend.http import (
    DEFAULT_BACKEND_URL,
    HttpBackend,
    HttpBackendConfig,
)
from buildpilot.infrastructure.backend.mock import MockBackend

__all__ = [
    "DEFAULT_BACKEND_URL",
    "HttpBackend",
    "HttpBackendConfig",
    "MockBackend",
]
