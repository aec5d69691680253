"""
Infrastructure layer for the build pipeline.

Contains adapters for external concerns (backend, sandboxes, persistence, registry).
"""

from buildpilot.infrastructure.backend import HttpBackend, HttpBackendConfig, MockBackend
from buildpilot.infrastructure.persistence import InMemoryPreviewEventStore, write_tree
from buildpilot.infrastructure.registry import SandboxRegistry
from buildpilot.infrastructure.sandbox import InMemorySandbox, LocalSandbox

__all__ = [
    # Backend
    "HttpBackend",
    "HttpBackendConfig",
    "MockBackend",
    # Sandboxes
    "InMemorySandbox",
    "LocalSandbox",
    # Persistence
    "InMemoryPreviewEventStore",
    "write_tree",
    # Registry
    "SandboxRegistry",
]
