"""
Mock backend for testing without a server.

Returns predefined chat responses in sequence.
"""

from collections.abc import Sequence

from buildpilot.domain.exceptions import BackendError
from buildpilot.domain.interfaces import BackendInterface
from buildpilot.domain.models import ConversationMessage, TemplateResponse


class MockBackend(BackendInterface):
    """Returns predefined template and chat responses for testing."""

    def __init__(
        self,
        responses: list[str],
        template: TemplateResponse | None = None,
    ):
        """
        Args:
            responses: Chat response strings to return in sequence
            template: Template response (empty prompts if None)
        """
        self._responses = responses
        self._template = template or TemplateResponse()
        self._call_count = 0
        self.template_requests: list[str] = []
        self.chat_requests: list[tuple[ConversationMessage, ...]] = []

    async def template(self, prompt: str) -> TemplateResponse:
        self.template_requests.append(prompt)
        return self._template

    async def chat(self, messages: Sequence[ConversationMessage]) -> str:
        """Return the next predefined response."""
        self.chat_requests.append(tuple(messages))
        if self._call_count >= len(self._responses):
            raise BackendError("MockBackend exhausted responses")

        content = self._responses[self._call_count]
        self._call_count += 1
        return content

    @property
    def call_count(self) -> int:
        """Number of chat responses returned."""
        return self._call_count

    def reset(self) -> None:
        """Reset the call counter to reuse responses."""
        self._call_count = 0
