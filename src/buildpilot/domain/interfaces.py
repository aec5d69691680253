"""
Domain interfaces (Ports) for the build pipeline.

These abstract base classes define the contracts that adapters must satisfy:
the chat/template backend, the sandbox that runs the preview, and the store
for preview events. They have no external dependencies.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from buildpilot.domain.models import (
        ConversationMessage,
        FileTree,
        ReadyEvent,
        TemplateResponse,
    )
    from buildpilot.domain.preview_event import PreviewEvent, PreviewEventType


ReadyCallback = Callable[["ReadyEvent"], None]


class BackendInterface(ABC):
    """
    Port for the template/chat backend.

    Implementations raise BackendError when a request is rejected or cannot
    be sent.
    """

    @abstractmethod
    async def template(self, prompt: str) -> "TemplateResponse":
        """
        Request the base prompts for a new project.

        Args:
            prompt: The user's project description

        Returns:
            TemplateResponse with model prompts and UI prompts (artifact text)
        """
        pass

    @abstractmethod
    async def chat(self, messages: Sequence["ConversationMessage"]) -> str:
        """
        Send the conversation and return the assistant's reply text.

        Args:
            messages: Full conversation, oldest first

        Returns:
            Reply text, fed to the artifact parser
        """
        pass

    async def close(self) -> None:
        """Release connections held by the backend."""
        return None


class ProcessHandle(ABC):
    """A command spawned inside a sandbox."""

    @property
    @abstractmethod
    def returncode(self) -> int | None:
        """Exit status, or None while the process is running."""
        pass

    @abstractmethod
    async def wait(self) -> int:
        """Wait for the process to exit and return its exit status."""
        pass

    @abstractmethod
    def kill(self) -> None:
        """Terminate the process. No-op if it already exited."""
        pass


class Subscription(ABC):
    """Handle for a readiness subscription; revocable exactly once."""

    @property
    @abstractmethod
    def active(self) -> bool:
        pass

    @abstractmethod
    def unsubscribe(self) -> None:
        """Detach the callback. Calling it again is a no-op."""
        pass


class SandboxInterface(ABC):
    """
    Port for the sandboxed execution environment.

    The sandbox is an opaque capability: it accepts a file tree, spawns
    commands against it and notifies subscribers when a server becomes
    reachable. Mount and spawn failures are raised as exceptions.
    """

    @abstractmethod
    async def mount(self, tree: "FileTree") -> None:
        """
        Make the tree the sandbox's working file system.

        Args:
            tree: Snapshot to mount; replaces any previous mount
        """
        pass

    @abstractmethod
    async def spawn(self, command: str, args: Sequence[str] = ()) -> ProcessHandle:
        """
        Start a command against the mounted tree.

        Args:
            command: Executable name
            args: Arguments

        Returns:
            Handle exposing the exit status
        """
        pass

    @abstractmethod
    def subscribe_ready(self, callback: ReadyCallback) -> Subscription:
        """
        Register for readiness notifications.

        The callback may fire any number of times until the subscription is
        revoked.
        """
        pass

    async def close(self) -> None:
        """Kill remaining processes and release sandbox resources."""
        return None


class PreviewEventStoreInterface(ABC):
    """Port for recording preview run events."""

    @abstractmethod
    def store_event(self, event: "PreviewEvent") -> str:
        """Store an event and return its id."""
        pass

    @abstractmethod
    def get_events(
        self,
        run_id: str,
        event_type: "PreviewEventType | None" = None,
    ) -> list["PreviewEvent"]:
        """Events of a run in creation order, optionally filtered by type."""
        pass
