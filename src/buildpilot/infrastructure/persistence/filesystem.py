"""
Filesystem export of a FileTree.

Writes folders and files under a root directory, refusing paths that would
land outside it.
"""

from pathlib import Path

from buildpilot.domain.models import FileTree, NodeKind


def resolve_inside(root: Path, relative: str) -> Path:
    """
    Resolve a tree path against root.

    Raises:
        ValueError: If the path is absolute or escapes root
    """
    if relative.startswith("/"):
        raise ValueError(f"Absolute path not allowed: {relative}")
    base = root.resolve()
    target = (base / relative).resolve()
    if target != base and base not in target.parents:
        raise ValueError(f"Path escapes root: {relative}")
    return target


def write_tree(tree: FileTree, root: Path) -> list[Path]:
    """
    Write every node of the tree under root.

    Existing files at the same paths are overwritten; other files under
    root are left alone.

    Args:
        tree: Tree to export
        root: Target directory (created if missing)

    Returns:
        Paths of the files written, in tree order
    """
    root.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for node in tree.walk():
        target = resolve_inside(root, node.path)
        if node.kind == NodeKind.FOLDER:
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(node.content, encoding="utf-8")
            written.append(target)
    return written
