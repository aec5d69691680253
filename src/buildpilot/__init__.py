"""
buildpilot: LLM artifact text -> file tree -> live preview.

Parses the tagged artifact format an assistant emits into typed build steps,
merges them incrementally into a virtual file tree, and drives a sandbox
through install/start/launch to a preview URL.

Example:
    from buildpilot import BuildSession, PreviewOrchestrator, parse
    from buildpilot.infrastructure import LocalSandbox

    session = BuildSession()
    session.add_steps(parse(model_output))
    tree = session.apply_pending()

    async with PreviewOrchestrator(LocalSandbox()) as orchestrator:
        result = await orchestrator.run(tree)
        print(result.phase, result.url)
"""

# Application layer (orchestration)
from buildpilot.application.builder import BuilderService
from buildpilot.application.orchestrator import PreviewOrchestrator
from buildpilot.application.session import BuildSession, ConversationSession

# Domain parsing and merging
from buildpilot.domain.artifact_parser import ArtifactParser, parse, parse_artifact

# Domain exceptions
from buildpilot.domain.exceptions import BackendError, PathConflictError, SandboxError
from buildpilot.domain.file_tree import merge

# Domain interfaces (for type hints and custom implementations)
from buildpilot.domain.interfaces import BackendInterface, SandboxInterface
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
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Domain models
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
    # Parsing and merging
    "ArtifactParser",
    "parse",
    "parse_artifact",
    "merge",
    # Domain interfaces
    "BackendInterface",
    "SandboxInterface",
    # Domain exceptions
    "BackendError",
    "SandboxError",
    "PathConflictError",
    # Application layer
    "BuilderService",
    "BuildSession",
    "ConversationSession",
    "PreviewOrchestrator",
]
