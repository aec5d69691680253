"""
Sandbox adapters for running previews.
"""

from buildpilot.infrastructure.sandbox.local import LocalSandbox, find_server_url
from buildpilot.infrastructure.sandbox.memory import InMemoryProcess, InMemorySandbox
from buildpilot.infrastructure.sandbox.notifier import ReadyNotifier

__all__ = [
    "InMemoryProcess",
    "InMemorySandbox",
    "LocalSandbox",
    "ReadyNotifier",
    "find_server_url",
]
