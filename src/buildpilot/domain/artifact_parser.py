"""
Artifact parser: model output text -> ordered build steps.

Grammar:

    <boltArtifact id="project-import" title="Project Files">
      <boltAction type="file" filePath="src/index.js">
        ...file contents...
      </boltAction>
      <boltAction type="shell">
        npm run build
      </boltAction>
    </boltArtifact>

The scanner walks the text once through three states (seeking the artifact,
between actions, inside an action). Action bodies are raw text up to their
closing tag, so markup inside generated files is never read as structure.
Malformed or incomplete output yields no steps; it never raises.
"""

import itertools
import re
from dataclasses import dataclass
from enum import Enum

from buildpilot.domain.models import Artifact, Step, StepStatus, StepType

DEFAULT_ARTIFACT_TAG = "boltArtifact"
DEFAULT_ACTION_TAG = "boltAction"
DEFAULT_ARTIFACT_TITLE = "Project Files"

_ATTRIBUTE = re.compile(r"""([A-Za-z_][\w:.-]*)\s*=\s*(?:"([^"]*)"|'([^']*)')""")


def parse_attributes(source: str) -> dict[str, str]:
    """Parse ``name="value"`` / ``name='value'`` pairs from a tag's attribute text."""
    attributes: dict[str, str] = {}
    for match in _ATTRIBUTE.finditer(source):
        name, double_quoted, single_quoted = match.groups()
        attributes[name] = double_quoted if double_quoted is not None else single_quoted
    return attributes


class _ScanState(Enum):
    SEEK_ARTIFACT = "seek_artifact"
    BETWEEN_ACTIONS = "between_actions"
    IN_ACTION = "in_action"


@dataclass(frozen=True)
class RawAction:
    """An action element as scanned, before conversion to a Step."""

    attributes: dict[str, str]
    body: str

    @property
    def action_type(self) -> str | None:
        return self.attributes.get("type")


@dataclass(frozen=True)
class ScannedArtifact:
    """Outer artifact attributes plus its actions in document order."""

    attributes: dict[str, str]
    actions: tuple[RawAction, ...]


class ArtifactParser:
    """
    Converts artifact markup into Steps.

    Only the first artifact in the text is read. Its title becomes a leading
    CreateFolder step; ``file`` actions become CreateFile steps and ``shell``
    actions become RunScript steps. Other action types are skipped.
    """

    def __init__(
        self,
        artifact_tag: str = DEFAULT_ARTIFACT_TAG,
        action_tag: str = DEFAULT_ACTION_TAG,
        default_title: str = DEFAULT_ARTIFACT_TITLE,
    ):
        """
        Args:
            artifact_tag: Name of the outer element
            action_tag: Name of the nested action elements
            default_title: Title used when the artifact has no title attribute
        """
        self._artifact_open = re.compile(rf"<{re.escape(artifact_tag)}\b([^>]*)>")
        self._artifact_close = f"</{artifact_tag}>"
        self._action_open = re.compile(rf"<{re.escape(action_tag)}\b([^>]*)>")
        self._action_close = f"</{action_tag}>"
        self._default_title = default_title

    def parse(self, text: str) -> list[Step]:
        """
        Parse model output into pending steps numbered from 1.

        Args:
            text: Raw model output, possibly with prose around the artifact

        Returns:
            Ordered steps, or an empty list when no complete artifact is present
        """
        artifact = self.parse_artifact(text)
        return list(artifact.steps) if artifact is not None else []

    def parse_artifact(self, text: str) -> Artifact | None:
        """Parse the first artifact, or return None when there is none."""
        scanned = self.scan(text)
        if scanned is None:
            return None

        title = scanned.attributes.get("title", self._default_title)
        ids = itertools.count(1)
        steps = [
            Step(
                step_id=next(ids),
                title=title,
                description="",
                step_type=StepType.CREATE_FOLDER,
            )
        ]
        for action in scanned.actions:
            step = self._to_step(action)
            if step is not None:
                steps.append(step.with_id(next(ids)))

        return Artifact(title=title, steps=tuple(steps))

    def scan(self, text: str) -> ScannedArtifact | None:
        """
        Locate the first artifact and split it into raw actions.

        Returns None when the artifact is missing or never closed. An action
        without a closing tag is dropped; actions before it are kept.
        """
        state = _ScanState.SEEK_ARTIFACT
        pos = 0
        attributes: dict[str, str] = {}
        action_attributes: dict[str, str] = {}
        actions: list[RawAction] = []

        while True:
            if state is _ScanState.SEEK_ARTIFACT:
                match = self._artifact_open.search(text, pos)
                if match is None:
                    return None
                match = self._last_open_before_body(text, match)
                attributes = parse_attributes(match.group(1))
                pos = match.end()
                state = _ScanState.BETWEEN_ACTIONS

            elif state is _ScanState.BETWEEN_ACTIONS:
                close = text.find(self._artifact_close, pos)
                match = self._action_open.search(text, pos)
                if match is None or (close != -1 and close < match.start()):
                    if close == -1:
                        return None
                    return ScannedArtifact(attributes, tuple(actions))

                raw_attributes = match.group(1)
                pos = match.end()
                if raw_attributes.rstrip().endswith("/"):
                    # Self-closing action: no body
                    actions.append(
                        RawAction(parse_attributes(raw_attributes.rstrip()[:-1]), "")
                    )
                    continue
                action_attributes = parse_attributes(raw_attributes)
                state = _ScanState.IN_ACTION

            else:
                end = text.find(self._action_close, pos)
                if end == -1:
                    if text.find(self._artifact_close, pos) == -1:
                        return None
                    return ScannedArtifact(attributes, tuple(actions))
                actions.append(RawAction(action_attributes, text[pos:end]))
                pos = end + len(self._action_close)
                state = _ScanState.BETWEEN_ACTIONS

    def _last_open_before_body(self, text: str, match: re.Match[str]) -> re.Match[str]:
        """
        Skip open tags that prose mentions ahead of the real artifact.

        The open tag kept is the last one before the first action or
        artifact close tag.
        """
        while True:
            following = self._artifact_open.search(text, match.end())
            if following is None:
                return match
            starts = []
            close = text.find(self._artifact_close, match.end())
            if close != -1:
                starts.append(close)
            action = self._action_open.search(text, match.end())
            if action is not None:
                starts.append(action.start())
            if starts and min(starts) < following.start():
                return match
            match = following

    def _to_step(self, action: RawAction) -> Step | None:
        """Convert one action; ids are assigned by the caller."""
        if action.action_type == "file":
            file_path = action.attributes.get("filePath") or None
            return Step(
                step_id=0,
                title=f"Create {file_path or 'file'}",
                description="",
                step_type=StepType.CREATE_FILE,
                status=StepStatus.PENDING,
                code=action.body.strip(),
                path=file_path,
            )
        if action.action_type == "shell":
            return Step(
                step_id=0,
                title="Run command",
                description="",
                step_type=StepType.RUN_SCRIPT,
                status=StepStatus.PENDING,
                code=action.body.strip(),
            )
        return None


_default_parser = ArtifactParser()


def parse(text: str) -> list[Step]:
    """Parse with the default ``boltArtifact`` / ``boltAction`` vocabulary."""
    return _default_parser.parse(text)


def parse_artifact(text: str) -> Artifact | None:
    return _default_parser.parse_artifact(text)
