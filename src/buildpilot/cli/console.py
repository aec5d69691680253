"""Rich console utilities for the buildpilot command line."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from buildpilot.domain.models import (
    FileNode,
    FileTree,
    Phase,
    PreviewResult,
    Step,
    StepStatus,
)
from buildpilot.domain.preview_event import PreviewEvent

# Shared console instances
console = Console()
error_console = Console(stderr=True)

_STATUS_ICONS = {
    StepStatus.PENDING: ("○", "dim"),
    StepStatus.IN_PROGRESS: ("◔", "blue"),
    StepStatus.COMPLETED: ("✔", "green"),
}


def print_header(title: str, subtitle: str | None = None) -> None:
    """Print a styled header panel."""
    content = Text(title, style="bold blue")
    if subtitle:
        content.append(f"\n{subtitle}", style="dim")
    console.print(Panel(content, expand=False))


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_success(message: str) -> None:
    """Print success message."""
    console.print(Panel(message, title="Success", border_style="green"))


def print_failure(message: str, details: str | None = None) -> None:
    """Print failure message."""
    content = Text(message, style="bold red")
    if details:
        content.append(f"\n{details}", style="dim")
    console.print(Panel(content, title="Failed", border_style="red"))


def print_steps(steps: Sequence[Step], title: str = "Build Steps") -> None:
    """Print steps with their status, type and target path."""
    table = Table(title=title, show_header=True, box=None)
    table.add_column("", width=2)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Type", style="magenta")
    table.add_column("Title")
    table.add_column("Command", style="yellow")

    for step in steps:
        icon, style = _STATUS_ICONS[step.status]
        command = step.code.splitlines()[0] if step.code and not step.path else ""
        table.add_row(
            Text(icon, style=style),
            str(step.step_id),
            step.step_type.value,
            step.title,
            command,
        )

    console.print(table)


def build_tree(tree: FileTree, label: str = "Files") -> Tree:
    """Render a FileTree as a rich Tree."""
    root = Tree(f"[bold]{label}[/bold]")

    def add(branch: Tree, node: FileNode) -> None:
        if node.is_folder:
            child = branch.add(f"[bold blue]{node.name}/[/bold blue]")
            for grandchild in tree.children(node):
                add(child, grandchild)
        else:
            lines = node.content.count("\n") + 1 if node.content else 0
            branch.add(f"{node.name} [dim]({lines} lines)[/dim]")

    for node in tree.roots():
        add(root, node)
    return root


def print_tree(tree: FileTree, label: str = "Files") -> None:
    """Print the file tree."""
    console.print(build_tree(tree, label))


def print_preview_result(result: PreviewResult) -> None:
    """Print the outcome of a preview run with its phase history."""
    history = " → ".join(p.value for p in result.history)
    if result.phase == Phase.READY:
        print_success(f"Preview ready: {result.url}\n[dim]{history}[/dim]")
    else:
        print_failure(f"Preview ended in '{result.phase.value}'", f"{result.error}\n{history}")


def print_preview_events(events: Sequence[PreviewEvent], title: str = "Preview Timeline") -> None:
    """Print the recorded events of a preview run in order."""
    table = Table(title=title, show_header=True, box=None)
    table.add_column("Time", style="dim")
    table.add_column("Event", style="magenta")
    table.add_column("Phase", style="cyan")
    table.add_column("Detail")

    for event in events:
        table.add_row(
            event.created_at[11:23],
            event.event_type.value,
            event.phase.value,
            event.url or event.summary,
        )

    console.print(table)
