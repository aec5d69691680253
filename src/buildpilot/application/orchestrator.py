"""
PreviewOrchestrator: drives a sandbox from a mounted tree to a live URL.

Phases on the success path: idle -> installing -> starting -> launching ->
ready. Install failure ends the run in ``failed``; mount and spawn errors
end it in ``idle`` (retryable by starting a new run). Failures are reported
through the returned PreviewResult, never raised.

Each run owns its readiness subscription and spawned processes. Starting a
new run, closing the orchestrator, or cancelling the run task releases the
run's resources before anything else happens and returns the orchestrator to
``idle`` with no URL.
"""

import asyncio
import logging
import uuid
from types import TracebackType
from typing import Any

from buildpilot.application.preview_event_emitter import PreviewEventEmitter
from buildpilot.domain.interfaces import ProcessHandle, SandboxInterface, Subscription
from buildpilot.domain.models import (
    Command,
    FileTree,
    Phase,
    PreviewResult,
    ReadyEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_COMMAND = Command("npm", ("install",))
DEFAULT_DEV_COMMAND = Command("npm", ("run", "dev"))


class _Run:
    """Resources and trace of a single orchestration run."""

    def __init__(self, run_id: str, emitter: PreviewEventEmitter | None) -> None:
        self.run_id = run_id
        self.emitter = emitter
        self.ready = asyncio.Event()
        self.subscription: Subscription | None = None
        self.processes: list[ProcessHandle] = []
        self.history: list[Phase] = []
        self.released = False

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        if self.subscription is not None:
            self.subscription.unsubscribe()
        for process in self.processes:
            process.kill()
        # Wake a run still waiting for readiness so it can return
        self.ready.set()


class PreviewOrchestrator:
    """
    Phase machine over a sandbox capability.

    Only ``ready`` guarantees a non-empty URL. After a run reaches ready its
    subscription stays attached: later readiness notifications replace the
    URL (last write wins) until the run is superseded or closed.
    """

    def __init__(
        self,
        sandbox: SandboxInterface,
        install: Command = DEFAULT_INSTALL_COMMAND,
        dev: Command = DEFAULT_DEV_COMMAND,
        emitter: PreviewEventEmitter | None = None,
        ready_timeout: float | None = None,
        fail_on_dev_exit: bool = False,
    ):
        """
        Args:
            sandbox: Execution environment (not owned; not closed here)
            install: Dependency install command, must exit 0
            dev: Long-lived server command, never awaited
            emitter: Optional event emitter; each run emits under its own id
            ready_timeout: Seconds to wait for readiness (None waits forever)
            fail_on_dev_exit: Fail the run if the dev command exits before
                readiness instead of waiting
        """
        self._sandbox = sandbox
        self._install = install
        self._dev = dev
        self._emitter = emitter
        self._ready_timeout = ready_timeout
        self._fail_on_dev_exit = fail_on_dev_exit
        self._phase = Phase.IDLE
        self._url = ""
        self._current: _Run | None = None

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def url(self) -> str:
        return self._url

    @property
    def run_id(self) -> str | None:
        return self._current.run_id if self._current else None

    @property
    def history(self) -> tuple[Phase, ...]:
        """Phases entered by the current run, in order."""
        return tuple(self._current.history) if self._current else ()

    async def __aenter__(self) -> "PreviewOrchestrator":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """
        Detach the current run's subscription and kill its processes.

        A run that had not failed drops back to ``idle`` with an empty URL.
        """
        if self._current is not None:
            self._detach(self._current)

    async def run(self, tree: FileTree) -> PreviewResult:
        """
        Mount the tree and drive it to a reachable URL.

        Args:
            tree: File tree snapshot to mount

        Returns:
            PreviewResult with the final phase, URL (ready only) and error text
        """
        await self.close()

        run_id = str(uuid.uuid4())
        run = _Run(run_id, self._emitter.for_run(run_id) if self._emitter else None)
        self._current = run
        self._url = ""
        self._enter(run, Phase.IDLE)

        try:
            return await self._drive(run, tree)
        except asyncio.CancelledError:
            self._detach(run)
            raise
        except Exception as e:
            if run.released:
                return self._abandoned(run)
            logger.exception("Preview run %s failed in %s", run_id, self._phase.value)
            return self._fail(run, Phase.IDLE, f"{type(e).__name__}: {e}")

    async def _drive(self, run: _Run, tree: FileTree) -> PreviewResult:
        await self._sandbox.mount(tree)
        if run.released:
            return self._abandoned(run)

        self._enter(run, Phase.INSTALLING)
        install = await self._spawn(run, self._install)
        if install is None:
            return self._abandoned(run)
        exit_code = await install.wait()
        if run.released:
            return self._abandoned(run)
        if exit_code != 0:
            return self._fail(
                run, Phase.FAILED, f"'{self._install}' exited with status {exit_code}"
            )

        self._enter(run, Phase.STARTING)
        run.subscription = self._sandbox.subscribe_ready(
            lambda event: self._on_ready(run, event)
        )
        dev = await self._spawn(run, self._dev)
        if dev is None:
            return self._abandoned(run)

        self._enter(run, Phase.LAUNCHING)
        dev_exited = await self._wait_for_ready(run, dev)
        if run.released:
            return self._abandoned(run)
        if run.ready.is_set():
            self._enter(run, Phase.READY)
            return PreviewResult(
                phase=Phase.READY, url=self._url, history=tuple(run.history)
            )
        if dev_exited:
            return self._fail(
                run,
                Phase.FAILED,
                f"'{self._dev}' exited with status {dev.returncode} before ready",
            )
        return self._fail(
            run,
            Phase.FAILED,
            f"No readiness notification within {self._ready_timeout}s",
        )

    async def _spawn(self, run: _Run, command: Command) -> ProcessHandle | None:
        logger.debug("Spawning '%s'", command)
        process = await self._sandbox.spawn(command.command, command.args)
        if run.released:
            process.kill()
            return None
        run.processes.append(process)
        return process

    async def _wait_for_ready(self, run: _Run, dev: ProcessHandle) -> bool:
        """Wait for readiness; returns True if the dev process exited first."""
        ready_waiter = asyncio.ensure_future(run.ready.wait())
        waiters: set[asyncio.Future[Any]] = {ready_waiter}
        exit_waiter = None
        if self._fail_on_dev_exit:
            exit_waiter = asyncio.ensure_future(dev.wait())
            waiters.add(exit_waiter)

        try:
            await asyncio.wait(
                waiters,
                timeout=self._ready_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        return exit_waiter is not None and exit_waiter.done() and not ready_waiter.done()

    def _on_ready(self, run: _Run, event: ReadyEvent) -> None:
        if run.released or run is not self._current:
            return
        self._url = event.url
        logger.info("Preview ready on port %d: %s", event.port, event.url)
        if run.emitter:
            run.emitter.url_update(self._phase, event.url)
        run.ready.set()

    def _detach(self, run: _Run) -> None:
        run.release()
        if run is not self._current or self._phase == Phase.FAILED:
            return
        self._url = ""
        self._enter(run, Phase.IDLE)

    def _enter(self, run: _Run, phase: Phase) -> None:
        if run.history and run.history[-1] == phase:
            return
        self._phase = phase
        run.history.append(phase)
        logger.info("Preview run %s -> %s", run.run_id[:8], phase.value)
        if run.emitter:
            run.emitter.phase_change(phase)

    def _fail(self, run: _Run, phase: Phase, error: str) -> PreviewResult:
        logger.warning("Preview run %s ended in %s: %s", run.run_id[:8], phase.value, error)
        self._url = ""
        run.release()
        self._enter(run, phase)
        if run.emitter:
            run.emitter.run_failed(phase, error)
        return PreviewResult(
            phase=phase, url="", error=error, history=tuple(run.history)
        )

    def _abandoned(self, run: _Run) -> PreviewResult:
        logger.info("Preview run %s superseded", run.run_id[:8])
        return PreviewResult(
            phase=Phase.IDLE, error="superseded", history=tuple(run.history)
        )
