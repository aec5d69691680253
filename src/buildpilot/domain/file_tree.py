"""
File-tree merge engine (step applier).

Projects pending CreateFile steps onto a FileTree. The merge is pure: the
input tree is left untouched and a new tree is returned, so successive
merges can be compared and replayed.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace

from buildpilot.domain.exceptions import PathConflictError
from buildpilot.domain.models import FileNode, FileTree, NodeKind, Step, StepType

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def split_path(path: str) -> list[str]:
    """Split a slash-delimited path, ignoring empty and ``.`` segments."""
    return [s for s in path.split(PATH_SEPARATOR) if s and s != "."]


def merge(
    tree: FileTree, steps: Sequence[Step], strict: bool = False
) -> tuple[FileTree, list[Step]]:
    """
    Apply pending steps to a tree.

    CreateFile steps find-or-create every ancestor folder along their path
    and find-or-create the file, overwriting its content. CreateFolder and
    RunScript steps leave the tree alone. Every pending step in the input is
    returned completed; other steps are returned as they were.

    Args:
        tree: Current file tree (not modified)
        steps: Session steps, in order
        strict: Raise on file/folder conflicts instead of skipping the step

    Returns:
        Tuple of (new tree, steps with pending ones marked completed)

    Raises:
        PathConflictError: In strict mode, if a path would be both a file
            and a folder
    """
    nodes = dict(tree.nodes)
    roots = list(tree.root_paths)

    for step in steps:
        if not step.is_pending:
            continue
        if step.step_type == StepType.CREATE_FILE and step.path:
            try:
                _put_file(nodes, roots, step.path, step.code or "")
            except PathConflictError as e:
                if strict:
                    raise
                logger.warning("Skipping step %d: %s", step.step_id, e)

    merged = [step.completed() if step.is_pending else step for step in steps]
    return FileTree(nodes, tuple(roots)), merged


def _put_file(
    nodes: dict[str, FileNode], roots: list[str], path: str, content: str
) -> None:
    segments = split_path(path)
    if not segments:
        return

    parent: str | None = None
    cumulative = ""
    for index, segment in enumerate(segments):
        cumulative = f"{cumulative}{PATH_SEPARATOR}{segment}" if cumulative else segment
        is_last = index == len(segments) - 1
        kind = NodeKind.FILE if is_last else NodeKind.FOLDER

        existing = nodes.get(cumulative)
        if existing is None:
            nodes[cumulative] = FileNode(
                name=segment,
                path=cumulative,
                kind=kind,
                content=content if is_last else "",
            )
            _attach(nodes, roots, parent, cumulative)
        elif existing.kind != kind:
            raise PathConflictError(cumulative, existing.kind.value, kind.value)
        elif is_last:
            nodes[cumulative] = replace(existing, content=content)

        parent = cumulative


def _attach(
    nodes: dict[str, FileNode], roots: list[str], parent: str | None, child: str
) -> None:
    if parent is None:
        roots.append(child)
        return
    folder = nodes[parent]
    nodes[parent] = replace(folder, children=(*folder.children, child))
