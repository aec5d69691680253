"""
Domain models for the artifact build pipeline.

Pure data structures shared by the parser, the file-tree merger and the
preview orchestrator. Models are immutable (frozen dataclasses); FileTree is
an arena of FileNodes keyed by path and is never mutated after construction.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

# =============================================================================
# STEPS
# =============================================================================


class StepType(str, Enum):
    """Kind of build instruction derived from one artifact action."""

    CREATE_FOLDER = "CreateFolder"  # Grouping marker, no tree effect
    CREATE_FILE = "CreateFile"
    RUN_SCRIPT = "RunScript"


class StepStatus(str, Enum):
    """Lifecycle of a step within a session."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Step:
    """Normalized, typed instruction produced by the artifact parser."""

    step_id: int
    title: str
    description: str
    step_type: StepType
    status: StepStatus = StepStatus.PENDING
    code: str | None = None
    path: str | None = None  # CreateFile only

    @property
    def is_pending(self) -> bool:
        return self.status == StepStatus.PENDING

    def with_id(self, step_id: int) -> "Step":
        return replace(self, step_id=step_id)

    def completed(self) -> "Step":
        return replace(self, status=StepStatus.COMPLETED)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.step_id,
            "title": self.title,
            "description": self.description,
            "type": self.step_type.value,
            "status": self.status.value,
        }
        if self.code is not None:
            data["code"] = self.code
        if self.path is not None:
            data["path"] = self.path
        return data


@dataclass(frozen=True)
class Artifact:
    """One parsed unit of model output: a title and its ordered steps."""

    title: str
    steps: tuple[Step, ...] = ()


# =============================================================================
# FILE TREE
# =============================================================================


class NodeKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class FileNode:
    """
    A single entry of the virtual file system.

    The path is the node's identity. Folders reference their children by
    path, in creation order; files carry their content.
    """

    name: str
    path: str
    kind: NodeKind
    content: str = ""
    children: tuple[str, ...] = ()

    @property
    def is_folder(self) -> bool:
        return self.kind == NodeKind.FOLDER


class FileTree:
    """
    Arena of FileNodes indexed by path, with ordered root entries.

    Instances are read-only views; the merge engine builds new trees
    instead of editing existing ones.
    """

    def __init__(
        self,
        nodes: Mapping[str, FileNode] | None = None,
        roots: tuple[str, ...] = (),
    ) -> None:
        self._nodes: dict[str, FileNode] = dict(nodes or {})
        self._roots = tuple(roots)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileTree):
            return NotImplemented
        return self._roots == other._roots and self._nodes == other._nodes

    def __repr__(self) -> str:
        return f"FileTree(roots={list(self._roots)!r}, nodes={len(self._nodes)})"

    @property
    def root_paths(self) -> tuple[str, ...]:
        return self._roots

    @property
    def nodes(self) -> Mapping[str, FileNode]:
        return dict(self._nodes)

    def get(self, path: str) -> FileNode | None:
        return self._nodes.get(path)

    def roots(self) -> list[FileNode]:
        return [self._nodes[p] for p in self._roots]

    def children(self, node: FileNode) -> list[FileNode]:
        return [self._nodes[p] for p in node.children]

    def walk(self) -> Iterator[FileNode]:
        """Depth-first, pre-order traversal in creation order."""
        stack = list(reversed(self.roots()))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(self.children(node)))

    def files(self) -> list[FileNode]:
        return [n for n in self.walk() if n.kind == NodeKind.FILE]

    def to_nested(self) -> list[dict[str, Any]]:
        """Nested dict view: ``{name, path, kind, content | children}``."""

        def build(node: FileNode) -> dict[str, Any]:
            item: dict[str, Any] = {
                "name": node.name,
                "path": node.path,
                "kind": node.kind.value,
            }
            if node.is_folder:
                item["children"] = [build(c) for c in self.children(node)]
            else:
                item["content"] = node.content
            return item

        return [build(n) for n in self.roots()]

    def to_mount_structure(self) -> dict[str, Any]:
        """Sandbox mount shape keyed by entry name at each level."""

        def build(entries: list[FileNode]) -> dict[str, Any]:
            structure: dict[str, Any] = {}
            for node in entries:
                if node.is_folder:
                    structure[node.name] = {"directory": build(self.children(node))}
                else:
                    structure[node.name] = {"file": {"contents": node.content}}
            return structure

        return build(self.roots())


# =============================================================================
# CONVERSATION
# =============================================================================


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationMessage:
    """Single exchanged message; the wire shape is ``{role, content}``."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class TemplateResponse:
    """Body of the backend's template endpoint."""

    prompts: tuple[str, ...] = ()
    ui_prompts: tuple[str, ...] = ()


# =============================================================================
# PREVIEW
# =============================================================================


class Phase(str, Enum):
    """Preview orchestrator stage."""

    IDLE = "idle"
    INSTALLING = "installing"
    STARTING = "starting"
    LAUNCHING = "launching"
    READY = "ready"
    FAILED = "failed"


# Success path order; a run may only move one position forward at a time.
SUCCESS_PATH: tuple[Phase, ...] = (
    Phase.IDLE,
    Phase.INSTALLING,
    Phase.STARTING,
    Phase.LAUNCHING,
    Phase.READY,
)


@dataclass(frozen=True)
class Command:
    """Executable plus arguments, spawned inside the sandbox."""

    command: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, line: str) -> "Command":
        parts = line.split()
        if not parts:
            raise ValueError("Command line must not be empty")
        return cls(parts[0], tuple(parts[1:]))

    def __str__(self) -> str:
        return " ".join((self.command, *self.args))


@dataclass(frozen=True)
class ReadyEvent:
    """Readiness notification emitted by a sandbox."""

    port: int
    url: str


@dataclass(frozen=True)
class PreviewResult:
    """Outcome of one orchestration run."""

    phase: Phase
    url: str = ""
    error: str = ""
    history: tuple[Phase, ...] = field(default=())

    @property
    def ready(self) -> bool:
        return self.phase == Phase.READY
