"""
In-memory sandbox.

Records mounts and spawned commands, exits them with scripted statuses and
emits readiness on demand. Useful for testing and dry runs.
"""

import asyncio
from collections.abc import Mapping, Sequence

from buildpilot.domain.exceptions import SandboxError
from buildpilot.domain.interfaces import (
    ProcessHandle,
    ReadyCallback,
    SandboxInterface,
    Subscription,
)
from buildpilot.domain.models import Command, FileTree, ReadyEvent
from buildpilot.infrastructure.sandbox.notifier import ReadyNotifier

# Command line -> exit status; None keeps the process running until killed
DEFAULT_EXIT_CODES: dict[str, int | None] = {
    "npm install": 0,
    "npm run dev": None,
}

KILLED_EXIT_CODE = -9


class InMemoryProcess(ProcessHandle):
    """Process stand-in whose exit is scripted or triggered by the test."""

    def __init__(self, command: Command, exit_code: int | None = None) -> None:
        self.command = command
        self.killed = False
        self._returncode: int | None = None
        self._exited = asyncio.Event()
        if exit_code is not None:
            self.exit(exit_code)

    @property
    def returncode(self) -> int | None:
        return self._returncode

    async def wait(self) -> int:
        await self._exited.wait()
        return self._returncode if self._returncode is not None else KILLED_EXIT_CODE

    def kill(self) -> None:
        if self._returncode is None:
            self.killed = True
            self.exit(KILLED_EXIT_CODE)

    def exit(self, code: int) -> None:
        """Finish the process with the given status."""
        if self._returncode is not None:
            return
        self._returncode = code
        self._exited.set()


class InMemorySandbox(SandboxInterface):
    """Simple in-memory sandbox for testing."""

    def __init__(
        self,
        exit_codes: Mapping[str, int | None] | None = None,
        ready_port: int | None = None,
        ready_url: str | None = None,
        ready_after: str = "npm run dev",
        mount_error: str | None = None,
        spawn_errors: Sequence[str] = (),
    ) -> None:
        """
        Args:
            exit_codes: Command line -> exit status (None: runs until killed).
                Unlisted commands exit 0.
            ready_port: Port for the automatic readiness notification
            ready_url: URL for the automatic readiness notification; when set,
                readiness fires soon after ``ready_after`` is spawned
            ready_after: Command line that triggers the automatic notification
            mount_error: If set, mount() raises SandboxError with this message
            spawn_errors: Command lines whose spawn() raises SandboxError
        """
        self._exit_codes = dict(DEFAULT_EXIT_CODES)
        self._exit_codes.update(exit_codes or {})
        self._ready = (
            ReadyEvent(port=ready_port or 0, url=ready_url) if ready_url else None
        )
        self._ready_after = ready_after
        self._mount_error = mount_error
        self._spawn_errors = set(spawn_errors)
        self._notifier = ReadyNotifier()
        self.mounts: list[FileTree] = []
        self.processes: list[InMemoryProcess] = []

    @property
    def commands(self) -> list[str]:
        """Spawned command lines in order."""
        return [str(p.command) for p in self.processes]

    @property
    def subscriber_count(self) -> int:
        return self._notifier.subscriber_count

    async def mount(self, tree: FileTree) -> None:
        if self._mount_error is not None:
            raise SandboxError(self._mount_error)
        self.mounts.append(tree)

    async def spawn(self, command: str, args: Sequence[str] = ()) -> ProcessHandle:
        line = Command(command, tuple(args))
        if str(line) in self._spawn_errors:
            raise SandboxError(f"Cannot spawn '{line}'")

        process = InMemoryProcess(line, self._exit_codes.get(str(line), 0))
        self.processes.append(process)

        if self._ready is not None and str(line) == self._ready_after:
            ready = self._ready
            asyncio.get_running_loop().call_soon(self._notifier.notify, ready)
        return process

    def subscribe_ready(self, callback: ReadyCallback) -> Subscription:
        return self._notifier.subscribe(callback)

    def emit_ready(self, port: int, url: str) -> None:
        """Deliver a readiness notification to every subscriber."""
        self._notifier.notify(ReadyEvent(port=port, url=url))

    async def close(self) -> None:
        for process in self.processes:
            process.kill()
        self._notifier.clear()
