"""
BuilderService: the prompt -> steps -> file tree -> preview loop.

Wires the backend, the artifact parser, the build session and the preview
orchestrator. Network failures are caught here, logged, and leave the
service ready for the next request; nothing is retried.
"""

import logging

from buildpilot.application.orchestrator import PreviewOrchestrator
from buildpilot.application.session import BuildSession
from buildpilot.domain.artifact_parser import ArtifactParser
from buildpilot.domain.exceptions import BackendError
from buildpilot.domain.interfaces import BackendInterface
from buildpilot.domain.models import (
    ConversationMessage,
    FileTree,
    PreviewResult,
    Role,
    Step,
)

logger = logging.getLogger(__name__)


class BuilderService:
    """
    Drives one build session against a backend.

    ``initialize`` starts a project from a prompt; ``send`` asks for
    follow-up changes; ``preview`` mounts the current tree and runs it.
    """

    def __init__(
        self,
        backend: BackendInterface,
        session: BuildSession | None = None,
        parser: ArtifactParser | None = None,
        orchestrator: PreviewOrchestrator | None = None,
    ):
        """
        Args:
            backend: Template/chat backend
            session: Session to accumulate into (creates a new one if None)
            parser: Artifact parser (default vocabulary if None)
            orchestrator: Preview orchestrator, required only for preview()
        """
        self._backend = backend
        self._session = session or BuildSession()
        self._parser = parser or ArtifactParser()
        self._orchestrator = orchestrator
        self.loading = False
        self.template_set = False

    @property
    def session(self) -> BuildSession:
        return self._session

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._session.steps

    @property
    def tree(self) -> FileTree:
        return self._session.tree

    async def initialize(self, prompt: str) -> bool:
        """
        Start a project: template request, base steps, first chat round.

        Args:
            prompt: The user's project description

        Returns:
            True if both requests succeeded, False otherwise
        """
        prompt = prompt.strip()
        if not prompt:
            return False

        try:
            template = await self._backend.template(prompt)
            self.template_set = True

            if template.ui_prompts:
                self._ingest(template.ui_prompts[0])

            user_messages = [
                ConversationMessage(Role.USER, content)
                for content in (*template.prompts, prompt)
            ]
            self.loading = True
            response = await self._backend.chat(user_messages)
            self.loading = False
        except BackendError as e:
            self.loading = False
            logger.error("Error during init: %s", e)
            return False

        self._ingest(response)
        self._session.conversation.extend(user_messages)
        self._session.conversation.append(Role.ASSISTANT, response)
        return True

    async def send(self, prompt: str) -> bool:
        """
        Send a follow-up prompt with the full conversation.

        Args:
            prompt: Additional instruction for the assistant

        Returns:
            True if the request succeeded, False otherwise
        """
        if not prompt.strip():
            return False

        message = ConversationMessage(Role.USER, prompt)
        self.loading = True
        try:
            response = await self._backend.chat(
                [*self._session.conversation.messages(), message]
            )
        except BackendError as e:
            logger.error("Error sending prompt: %s", e)
            return False
        finally:
            self.loading = False

        self._session.conversation.extend([message])
        self._session.conversation.append(Role.ASSISTANT, response)
        self._ingest(response)
        return True

    async def preview(self) -> PreviewResult:
        """Run the orchestrator against the current tree."""
        if self._orchestrator is None:
            raise RuntimeError("BuilderService was created without an orchestrator")
        return await self._orchestrator.run(self._session.tree)

    def _ingest(self, text: str) -> list[Step]:
        parsed = self._parser.parse(text)
        if not parsed:
            logger.debug("No artifact found in response (%d chars)", len(text))
            return []
        added = self._session.add_steps(parsed)
        self._session.apply_pending()
        return added
