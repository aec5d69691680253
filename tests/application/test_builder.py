"""Tests for BuilderService."""

import pytest

from buildpilot.application.builder import BuilderService
from buildpilot.application.orchestrator import PreviewOrchestrator
from buildpilot.domain.exceptions import BackendError
from buildpilot.domain.models import Phase, Role, StepStatus, StepType, TemplateResponse
from buildpilot.infrastructure.backend.mock import MockBackend
from buildpilot.infrastructure.sandbox.memory import InMemorySandbox

FOLLOW_UP = (
    '<boltArtifact title="Counter App"><boltAction type="file" filePath="src/main.js">'
    "console.log(2);</boltAction></boltArtifact>"
)


class UnreachableBackend(MockBackend):
    """Backend whose template endpoint is down."""

    async def template(self, prompt: str) -> TemplateResponse:
        raise BackendError("/template returned HTTP 503", status_code=503)


class TestInitialize:
    """initialize(): template request, base steps, first chat round."""

    @pytest.mark.asyncio
    async def test_builds_steps_and_tree(self, mock_backend: MockBackend) -> None:
        """UI prompt and chat reply are both parsed and merged."""
        builder = BuilderService(mock_backend)

        ok = await builder.initialize("a counter app")

        assert ok
        assert builder.template_set
        assert not builder.loading
        assert [n.path for n in builder.tree.files()] == [
            "index.html",
            "package.json",
            "src/main.js",
        ]
        assert [s.step_id for s in builder.steps] == list(range(1, 7))
        assert all(s.status == StepStatus.COMPLETED for s in builder.steps)

    @pytest.mark.asyncio
    async def test_chat_request_contents(self, mock_backend: MockBackend) -> None:
        """Template prompts precede the user prompt, all as user messages."""
        builder = BuilderService(mock_backend)

        await builder.initialize("  a counter app  ")

        [request] = mock_backend.chat_requests
        assert [m.content for m in request] == ["You are building a web app.", "a counter app"]
        assert all(m.role == Role.USER for m in request)
        assert mock_backend.template_requests == ["a counter app"]

    @pytest.mark.asyncio
    async def test_conversation_recorded(self, mock_backend: MockBackend, counter_artifact: str) -> None:
        """User messages and the assistant reply are appended."""
        builder = BuilderService(mock_backend)

        await builder.initialize("a counter app")

        messages = builder.session.conversation.messages()
        assert [m.role for m in messages] == [Role.USER, Role.USER, Role.ASSISTANT]
        assert messages[-1].content == counter_artifact

    @pytest.mark.asyncio
    async def test_blank_prompt_ignored(self, mock_backend: MockBackend) -> None:
        """Whitespace-only prompts send nothing."""
        builder = BuilderService(mock_backend)

        assert await builder.initialize("   ") is False
        assert mock_backend.template_requests == []

    @pytest.mark.asyncio
    async def test_template_failure(self) -> None:
        """A template error returns False and leaves the session empty."""
        builder = BuilderService(UnreachableBackend(responses=[]))

        assert await builder.initialize("a counter app") is False
        assert not builder.template_set
        assert not builder.loading
        assert builder.steps == ()

    @pytest.mark.asyncio
    async def test_chat_failure_resets_loading(self) -> None:
        """A chat error returns False with loading cleared."""
        backend = MockBackend(responses=[])
        builder = BuilderService(backend)

        assert await builder.initialize("a counter app") is False
        assert builder.template_set
        assert not builder.loading
        assert len(builder.session.conversation) == 0


class TestSend:
    """send(): follow-up prompts carry the full conversation."""

    @pytest.mark.asyncio
    async def test_follow_up_updates_file(self, counter_artifact: str) -> None:
        """A follow-up reply overwrites files and adds new steps."""
        backend = MockBackend(responses=[counter_artifact, FOLLOW_UP])
        builder = BuilderService(backend)
        await builder.initialize("a counter app")

        ok = await builder.send("log 2 instead")

        assert ok
        assert builder.tree.get("src/main.js").content == "console.log(2);"
        assert builder.steps[-1].step_type == StepType.CREATE_FILE
        assert builder.steps[-1].step_id == 6

    @pytest.mark.asyncio
    async def test_history_sent(self, counter_artifact: str) -> None:
        """The chat request holds prior messages plus the new one."""
        backend = MockBackend(responses=[counter_artifact, FOLLOW_UP])
        builder = BuilderService(backend)
        await builder.initialize("a counter app")

        await builder.send("log 2 instead")

        assert [m.content for m in backend.chat_requests[1]] == [
            "a counter app",
            counter_artifact,
            "log 2 instead",
        ]
        assert len(builder.session.conversation) == 4

    @pytest.mark.asyncio
    async def test_failure_keeps_conversation(self, counter_artifact: str) -> None:
        """A failed send leaves history untouched."""
        backend = MockBackend(responses=[counter_artifact])
        builder = BuilderService(backend)
        await builder.initialize("a counter app")

        assert await builder.send("more") is False
        assert not builder.loading
        assert len(builder.session.conversation) == 2

    @pytest.mark.asyncio
    async def test_reply_without_artifact(self, counter_artifact: str) -> None:
        """Plain replies are recorded but add no steps."""
        backend = MockBackend(responses=[counter_artifact, "Done, nothing to change."])
        builder = BuilderService(backend)
        await builder.initialize("a counter app")
        count = len(builder.steps)

        assert await builder.send("anything else?")
        assert len(builder.steps) == count


class TestPreview:
    """preview() runs the orchestrator on the current tree."""

    @pytest.mark.asyncio
    async def test_preview_mounts_current_tree(self, mock_backend: MockBackend) -> None:
        """The merged tree is mounted and the run reaches ready."""
        sandbox = InMemorySandbox(ready_port=5173, ready_url="http://localhost:5173")
        builder = BuilderService(mock_backend, orchestrator=PreviewOrchestrator(sandbox))
        await builder.initialize("a counter app")

        result = await builder.preview()

        assert result.phase == Phase.READY
        assert sandbox.mounts == [builder.tree]

    @pytest.mark.asyncio
    async def test_preview_requires_orchestrator(self, mock_backend: MockBackend) -> None:
        with pytest.raises(RuntimeError, match="without an orchestrator"):
            await BuilderService(mock_backend).preview()
