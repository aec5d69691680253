"""Tests for the artifact parser."""

import pytest

from buildpilot.domain.artifact_parser import (
    ArtifactParser,
    parse,
    parse_artifact,
    parse_attributes,
)
from buildpilot.domain.models import StepStatus, StepType

DEMO = (
    '<boltArtifact title="Demo"><boltAction type="file" filePath="index.js">'
    "console.log(1)</boltAction></boltArtifact>"
)


class TestParseAttributes:
    """Tests for attribute text parsing."""

    def test_double_and_single_quotes(self) -> None:
        """Both quote styles are accepted."""
        attrs = parse_attributes(""" type="file" filePath='src/a.js' """)

        assert attrs == {"type": "file", "filePath": "src/a.js"}

    def test_empty_source(self) -> None:
        """No attributes gives an empty dict."""
        assert parse_attributes("") == {}


class TestParseScenarios:
    """End-to-end parse results for known inputs."""

    def test_demo_artifact(self) -> None:
        """A single file action parses to a folder marker plus one file step."""
        steps = parse(DEMO)

        assert len(steps) == 2
        assert steps[0].step_type == StepType.CREATE_FOLDER
        assert steps[0].title == "Demo"
        assert steps[1].step_type == StepType.CREATE_FILE
        assert steps[1].title == "Create index.js"
        assert steps[1].path == "index.js"
        assert steps[1].code == "console.log(1)"

    def test_all_steps_pending_with_sequential_ids(self, counter_artifact: str) -> None:
        """Steps are numbered from 1 and start pending."""
        steps = parse(counter_artifact)

        assert [s.step_id for s in steps] == [1, 2, 3, 4]
        assert all(s.status == StepStatus.PENDING for s in steps)

    def test_document_order_and_types(self, counter_artifact: str) -> None:
        """Steps follow action order with types matching action types."""
        steps = parse(counter_artifact)

        assert [s.step_type for s in steps] == [
            StepType.CREATE_FOLDER,
            StepType.CREATE_FILE,
            StepType.CREATE_FILE,
            StepType.RUN_SCRIPT,
        ]
        assert [s.path for s in steps] == [None, "package.json", "src/main.js", None]

    def test_shell_step(self, counter_artifact: str) -> None:
        """Shell actions become RunScript steps with trimmed code."""
        shell = parse(counter_artifact)[-1]

        assert shell.title == "Run command"
        assert shell.code == "npm install"
        assert shell.path is None

    def test_markup_inside_file_body_is_content(self, counter_artifact: str) -> None:
        """Tags inside an action body are kept verbatim."""
        main_js = parse(counter_artifact)[2]

        assert main_js.code == 'console.log("<div>count</div>");'

    def test_artifact_close_inside_body_does_not_end_artifact(self) -> None:
        """A closing artifact tag inside a file body is content."""
        text = (
            '<boltArtifact title="T">'
            '<boltAction type="file" filePath="docs.md">use </boltArtifact> to end</boltAction>'
            '<boltAction type="shell">ls</boltAction>'
            "</boltArtifact>"
        )

        steps = parse(text)

        assert steps[1].code == "use </boltArtifact> to end"
        assert steps[2].step_type == StepType.RUN_SCRIPT


class TestStepCounts:
    """Step count is 1 + file actions + shell actions."""

    @pytest.mark.parametrize(
        "files,shells",
        [(0, 0), (1, 0), (0, 2), (3, 2)],
    )
    def test_count(self, files: int, shells: int) -> None:
        """Every recognized action yields exactly one step."""
        body = "".join(
            f'<boltAction type="file" filePath="f{i}.txt">{i}</boltAction>'
            for i in range(files)
        ) + "".join(
            f'<boltAction type="shell">echo {i}</boltAction>' for i in range(shells)
        )

        steps = parse(f'<boltArtifact title="T">{body}</boltArtifact>')

        assert len(steps) == 1 + files + shells

    def test_unknown_action_types_skipped(self) -> None:
        """Unrecognized action types produce no step."""
        text = (
            '<boltArtifact title="T">'
            '<boltAction type="start">npm run dev</boltAction>'
            '<boltAction type="file" filePath="a.txt">a</boltAction>'
            "</boltArtifact>"
        )

        steps = parse(text)

        assert [s.step_type for s in steps] == [StepType.CREATE_FOLDER, StepType.CREATE_FILE]
        assert [s.step_id for s in steps] == [1, 2]


class TestMalformedInput:
    """Malformed or missing artifacts yield no steps and never raise."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "just some prose",
            "<boltAction type='shell'>ls</boltAction>",
            '<boltArtifact title="Open"><boltAction type="shell">ls</boltAction>',
            "<boltArtifact",
        ],
    )
    def test_returns_empty(self, text: str) -> None:
        """No complete artifact gives an empty list."""
        assert parse(text) == []

    def test_parse_artifact_returns_none(self) -> None:
        """parse_artifact() returns None without an artifact."""
        assert parse_artifact("nothing here") is None

    def test_unclosed_action_dropped_earlier_kept(self) -> None:
        """An action without a closing tag is dropped; earlier actions survive."""
        text = (
            '<boltArtifact title="T">'
            '<boltAction type="file" filePath="a.txt">a</boltAction>'
            '<boltAction type="file" filePath="b.txt">b'
            "</boltArtifact>"
        )

        steps = parse(text)

        assert [s.path for s in steps] == [None, "a.txt"]


class TestArtifactAttributes:
    """Title handling and attribute forms."""

    def test_missing_title_uses_default(self) -> None:
        """Without a title attribute the default title is used."""
        steps = parse('<boltArtifact id="x"></boltArtifact>')

        assert len(steps) == 1
        assert steps[0].title == "Project Files"

    def test_attribute_order_irrelevant(self) -> None:
        """filePath may come before type."""
        steps = parse(
            '<boltArtifact title="T"><boltAction filePath="a.txt" type="file">'
            "x</boltAction></boltArtifact>"
        )

        assert steps[1].path == "a.txt"

    def test_self_closing_action(self) -> None:
        """Self-closing file actions create empty files."""
        steps = parse(
            '<boltArtifact title="T"><boltAction type="file" filePath=".gitkeep"/>'
            "</boltArtifact>"
        )

        assert steps[1].path == ".gitkeep"
        assert steps[1].code == ""

    def test_file_action_without_path(self) -> None:
        """A file action without filePath keeps a None path."""
        steps = parse('<boltArtifact title="T"><boltAction type="file">x</boltAction></boltArtifact>')

        assert steps[1].title == "Create file"
        assert steps[1].path is None

    def test_only_first_artifact_read(self) -> None:
        """A second artifact in the same text is ignored."""
        text = DEMO + DEMO.replace("Demo", "Other")

        artifact = parse_artifact(text)

        assert artifact is not None
        assert artifact.title == "Demo"
        assert len(artifact.steps) == 2

    def test_tag_mentioned_in_prose_before_artifact(self) -> None:
        """A bare open tag in the lead-in prose does not hide the real title."""
        text = "I'll wrap the project in a <boltArtifact> block.\n\n" + DEMO

        artifact = parse_artifact(text)

        assert artifact is not None
        assert artifact.title == "Demo"
        assert [s.path for s in artifact.steps] == [None, "index.js"]

    def test_empty_artifact_before_second_is_kept(self) -> None:
        """An artifact closed before the next open tag is still the first."""
        text = '<boltArtifact title="Empty"></boltArtifact>' + DEMO

        artifact = parse_artifact(text)

        assert artifact is not None
        assert artifact.title == "Empty"
        assert len(artifact.steps) == 1


class TestCustomVocabulary:
    """ArtifactParser with other tag names."""

    def test_custom_tags(self) -> None:
        """Custom artifact and action tags are honored."""
        parser = ArtifactParser(artifact_tag="artifact", action_tag="action", default_title="Files")
        text = '<artifact><action type="file" filePath="x.py">pass</action></artifact>'

        steps = parser.parse(text)

        assert steps[0].title == "Files"
        assert steps[1].path == "x.py"

    def test_default_tags_not_matched_by_custom_parser(self) -> None:
        """The default vocabulary is not recognized by a custom parser."""
        parser = ArtifactParser(artifact_tag="artifact", action_tag="action")

        assert parser.parse(DEMO) == []
