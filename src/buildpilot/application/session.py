"""
Session state: the conversation history and the build session that owns
steps and the file tree.

A session is an explicit object handed to whoever needs it; there is no
process-wide instance.
"""

import itertools
import logging
from collections.abc import Iterable, Sequence

from buildpilot.domain.file_tree import merge
from buildpilot.domain.models import (
    ConversationMessage,
    FileTree,
    Role,
    Step,
)

logger = logging.getLogger(__name__)


class ConversationSession:
    """
    Append-only record of exchanged messages.

    No deduplication, truncation or summarization. Growth is unbounded;
    callers that need bounded memory must apply their own policy when
    building requests.
    """

    def __init__(self, messages: Iterable[ConversationMessage] = ()) -> None:
        self._messages: list[ConversationMessage] = list(messages)

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, role: Role | str, content: str) -> ConversationMessage:
        message = ConversationMessage(role=Role(role), content=content)
        self._messages.append(message)
        return message

    def extend(self, messages: Iterable[ConversationMessage]) -> None:
        self._messages.extend(messages)

    def messages(self) -> tuple[ConversationMessage, ...]:
        return tuple(self._messages)

    def to_payload(self) -> list[dict[str, str]]:
        """Messages in the chat request shape."""
        return [m.to_dict() for m in self._messages]


class BuildSession:
    """
    Owns everything one build accumulates: conversation, steps, file tree.

    Step ids come from a counter owned by the session, so ids stay unique
    and increasing however many parse results are appended. Merges must be
    serialized through this object.
    """

    def __init__(
        self,
        conversation: ConversationSession | None = None,
        tree: FileTree | None = None,
    ) -> None:
        self._conversation = conversation or ConversationSession()
        self._tree = tree or FileTree()
        self._steps: list[Step] = []
        self._ids = itertools.count(1)

    @property
    def conversation(self) -> ConversationSession:
        return self._conversation

    @property
    def tree(self) -> FileTree:
        return self._tree

    @property
    def steps(self) -> tuple[Step, ...]:
        return tuple(self._steps)

    def pending_steps(self) -> list[Step]:
        return [s for s in self._steps if s.is_pending]

    def add_steps(self, steps: Sequence[Step]) -> list[Step]:
        """
        Append parsed steps, renumbering them from the session counter.

        Args:
            steps: Steps from one parse call (ids 1..n)

        Returns:
            The appended steps with their session ids
        """
        added = [step.with_id(next(self._ids)) for step in steps]
        self._steps.extend(added)
        if added:
            logger.debug(
                "Added steps %d..%d", added[0].step_id, added[-1].step_id
            )
        return added

    def apply_pending(self) -> FileTree:
        """Merge pending steps into the tree and mark them completed."""
        pending = len(self.pending_steps())
        if not pending:
            return self._tree
        self._tree, self._steps = merge(self._tree, self._steps)
        logger.info(
            "Applied %d pending step(s); tree has %d node(s)", pending, len(self._tree)
        )
        return self._tree
