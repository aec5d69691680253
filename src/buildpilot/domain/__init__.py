"""
Domain layer for the build pipeline.

Contains the artifact parser, the file-tree merge engine, models and ports.
No dependency on the application or infrastructure layers.
"""

from buildpilot.domain.artifact_parser import ArtifactParser, parse, parse_artifact
from buildpilot.domain.exceptions import BackendError, PathConflictError, SandboxError
from buildpilot.domain.file_tree import merge
from buildpilot.domain.interfaces import (
    BackendInterface,
    PreviewEventStoreInterface,
    ProcessHandle,
    SandboxInterface,
    Subscription,
)
from buildpilot.domain.models import (
    Artifact,
    Command,
    ConversationMessage,
    FileNode,
    FileTree,
    NodeKind,
    Phase,
    PreviewResult,
    ReadyEvent,
    Role,
    Step,
    StepStatus,
    StepType,
    TemplateResponse,
)
from buildpilot.domain.preview_event import PreviewEvent, PreviewEventType

__all__ = [
    # Models
    "Artifact",
    "Command",
    "ConversationMessage",
    "FileNode",
    "FileTree",
    "NodeKind",
    "Phase",
    "PreviewResult",
    "ReadyEvent",
    "Role",
    "Step",
    "StepStatus",
    "StepType",
    "TemplateResponse",
    "PreviewEvent",
    "PreviewEventType",
    # Parsing and merging
    "ArtifactParser",
    "parse",
    "parse_artifact",
    "merge",
    # Interfaces
    "BackendInterface",
    "SandboxInterface",
    "ProcessHandle",
    "Subscription",
    "PreviewEventStoreInterface",
    # Exceptions
    "BackendError",
    "SandboxError",
    "PathConflictError",
]
