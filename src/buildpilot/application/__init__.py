"""
Application layer for the build pipeline.

Contains session state, the preview orchestrator and the builder service.
Depends on domain ports only.
"""

from buildpilot.application.builder import BuilderService
from buildpilot.application.orchestrator import (
    DEFAULT_DEV_COMMAND,
    DEFAULT_INSTALL_COMMAND,
    PreviewOrchestrator,
)
from buildpilot.application.preview_event_emitter import PreviewEventEmitter
from buildpilot.application.session import BuildSession, ConversationSession

__all__ = [
    "BuilderService",
    "BuildSession",
    "ConversationSession",
    "PreviewOrchestrator",
    "PreviewEventEmitter",
    "DEFAULT_INSTALL_COMMAND",
    "DEFAULT_DEV_COMMAND",
]
