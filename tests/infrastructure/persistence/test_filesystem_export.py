"""Tests for writing a FileTree to disk."""

from pathlib import Path

import pytest

from buildpilot.domain.models import FileNode, FileTree, NodeKind
from buildpilot.infrastructure.persistence.filesystem import resolve_inside, write_tree


def tree_with(*files: tuple[str, str]) -> FileTree:
    nodes = {path: FileNode(name=path, path=path, kind=NodeKind.FILE, content=content) for path, content in files}
    return FileTree(nodes, tuple(nodes))


class TestResolveInside:
    """Paths must stay under the root."""

    def test_relative_path(self, tmp_path: Path) -> None:
        assert resolve_inside(tmp_path, "src/a.js") == (tmp_path / "src" / "a.js").resolve()

    @pytest.mark.parametrize("path", ["/etc/passwd", "../outside.txt", "src/../../x"])
    def test_rejects_escaping_paths(self, tmp_path: Path, path: str) -> None:
        with pytest.raises(ValueError):
            resolve_inside(tmp_path, path)


class TestWriteTree:
    """Export of folders and files."""

    def test_writes_nested_tree(self, tmp_path: Path) -> None:
        folder = FileNode(name="src", path="src", kind=NodeKind.FOLDER, children=("src/a.js",))
        file = FileNode(name="a.js", path="src/a.js", kind=NodeKind.FILE, content="a")
        empty = FileNode(name="assets", path="assets", kind=NodeKind.FOLDER)
        tree = FileTree(
            {"src": folder, "src/a.js": file, "assets": empty},
            ("src", "assets"),
        )

        written = write_tree(tree, tmp_path / "out")

        assert written == [(tmp_path / "out" / "src" / "a.js").resolve()]
        assert (tmp_path / "out" / "src" / "a.js").read_text() == "a"
        assert (tmp_path / "out" / "assets").is_dir()

    def test_overwrites_and_keeps_other_files(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("old")
        (tmp_path / "keep.txt").write_text("keep")

        write_tree(tree_with(("a.txt", "new")), tmp_path)

        assert (tmp_path / "a.txt").read_text() == "new"
        assert (tmp_path / "keep.txt").read_text() == "keep"

    def test_unsafe_path_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="escapes root"):
            write_tree(tree_with(("../evil.txt", "x")), tmp_path / "out")

    def test_utf8_content(self, tmp_path: Path) -> None:
        write_tree(tree_with(("hello.txt", "héllo ✓")), tmp_path)

        assert (tmp_path / "hello.txt").read_text(encoding="utf-8") == "héllo ✓"
