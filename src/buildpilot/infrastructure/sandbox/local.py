"""
Local subprocess sandbox.

Mounts the tree into a working directory on disk and runs commands there
with asyncio subprocesses. Output is scanned line by line; the first
``http(s)://host:port`` URL a process prints becomes a readiness
notification.

Every command runs as the leader of its own session, so killing a handle
takes down the whole process group (``npm run dev`` and the node/vite
children it forks).
"""

import asyncio
import contextlib
import logging
import os
import re
import shutil
import signal
import tempfile
from collections import deque
from collections.abc import Mapping, Sequence
from pathlib import Path

from buildpilot.domain.exceptions import SandboxError
from buildpilot.domain.interfaces import (
    ProcessHandle,
    ReadyCallback,
    SandboxInterface,
    Subscription,
)
from buildpilot.domain.models import FileTree, ReadyEvent
from buildpilot.infrastructure.persistence.filesystem import write_tree
from buildpilot.infrastructure.sandbox.notifier import ReadyNotifier

logger = logging.getLogger(__name__)

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_URL_WITH_PORT = re.compile(r"(https?://(?:\[[0-9a-fA-F:]*\]|[\w.\-]+):(\d{1,5})(?:/[^\s'\"]*)?)")


def find_server_url(line: str) -> ReadyEvent | None:
    """Extract the first URL carrying an explicit port from an output line."""
    match = _URL_WITH_PORT.search(_ANSI_ESCAPE.sub("", line))
    if match is None:
        return None
    return ReadyEvent(port=int(match.group(2)), url=match.group(1))


class LocalProcess(ProcessHandle):
    """Wraps an asyncio subprocess and the task reading its output."""

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        reader: asyncio.Task[None],
        output: deque[str],
    ) -> None:
        self._process = process
        self._reader = reader
        self.output = output

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def wait(self) -> int:
        return await self._process.wait()

    @property
    def finished(self) -> bool:
        """True once the process has exited and its output is drained."""
        return self._process.returncode is not None and self._reader.done()

    def kill(self) -> None:
        if self.finished:
            return
        # The group can outlive its leader
        with contextlib.suppress(ProcessLookupError, PermissionError):
            os.killpg(self._process.pid, signal.SIGKILL)

    async def stop(self) -> None:
        """Kill the process and finish the output reader."""
        self.kill()
        if not self._reader.done():
            self._reader.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._reader


class LocalSandbox(SandboxInterface):
    """
    Runs the preview on the local machine.

    Without a workdir a temporary directory is created on first mount,
    replaced on every later mount, and removed on close(). With a workdir,
    mounts write into it without deleting anything else.
    """

    def __init__(
        self,
        workdir: str | Path | None = None,
        env: Mapping[str, str] | None = None,
        output_lines: int = 200,
    ) -> None:
        """
        Args:
            workdir: Directory to mount into (temporary directory if None)
            env: Extra environment variables for spawned commands
            output_lines: Output lines kept per process
        """
        self._workdir = Path(workdir) if workdir is not None else None
        self._env = dict(env or {})
        self._output_lines = output_lines
        self._tempdir: Path | None = None
        self._notifier = ReadyNotifier()
        self._processes: list[LocalProcess] = []

    @property
    def processes(self) -> tuple[LocalProcess, ...]:
        """Handles still tracked for cleanup."""
        return tuple(self._processes)

    @property
    def root(self) -> Path | None:
        """Directory holding the mounted tree, None before the first mount."""
        return self._workdir if self._workdir is not None else self._tempdir

    async def mount(self, tree: FileTree) -> None:
        if self._workdir is not None:
            root = self._workdir
        else:
            if self._tempdir is not None:
                shutil.rmtree(self._tempdir, ignore_errors=True)
            self._tempdir = Path(tempfile.mkdtemp(prefix="buildpilot-"))
            root = self._tempdir

        try:
            written = write_tree(tree, root)
        except (OSError, ValueError) as e:
            raise SandboxError(f"Mount failed: {e}") from e
        logger.info("Mounted %d file(s) into %s", len(written), root)

    async def spawn(self, command: str, args: Sequence[str] = ()) -> ProcessHandle:
        root = self.root
        if root is None:
            raise SandboxError("Nothing mounted: call mount() before spawn()")

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=str(root),
                env={**os.environ, **self._env},
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            raise SandboxError(f"Cannot spawn '{command}': {e}") from e

        logger.info("Spawned '%s' (pid %d)", " ".join((command, *args)), process.pid)
        output: deque[str] = deque(maxlen=self._output_lines)
        reader = asyncio.create_task(self._read_output(process, command, output))
        handle = LocalProcess(process, reader, output)
        self._processes = [p for p in self._processes if not p.finished]
        self._processes.append(handle)
        return handle

    def subscribe_ready(self, callback: ReadyCallback) -> Subscription:
        return self._notifier.subscribe(callback)

    async def close(self) -> None:
        for process in self._processes:
            await process.stop()
        self._processes.clear()
        self._notifier.clear()
        if self._tempdir is not None:
            shutil.rmtree(self._tempdir, ignore_errors=True)
            self._tempdir = None

    async def _read_output(
        self,
        process: asyncio.subprocess.Process,
        command: str,
        output: deque[str],
    ) -> None:
        if process.stdout is None:
            return
        announced = False
        try:
            async for raw in process.stdout:
                line = raw.decode(errors="replace").rstrip()
                output.append(line)
                logger.debug("[%s] %s", command, line)
                if announced:
                    continue
                event = find_server_url(line)
                if event is not None:
                    announced = True
                    self._notifier.notify(event)
        except ValueError:
            # Line longer than the stream limit; stop scanning this process
            logger.warning("Output of '%s' exceeded the line limit", command)
