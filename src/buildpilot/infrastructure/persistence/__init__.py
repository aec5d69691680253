"""
Persistence adapters: preview event store and file tree export.
"""

from buildpilot.infrastructure.persistence.filesystem import write_tree
from buildpilot.infrastructure.persistence.preview_events import (
    InMemoryPreviewEventStore,
)

__all__ = [
    "InMemoryPreviewEventStore",
    "write_tree",
]
