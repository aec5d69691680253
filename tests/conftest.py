"""Shared pytest fixtures for buildpilot tests."""

import pytest

from buildpilot.application.session import BuildSession
from buildpilot.domain.models import TemplateResponse
from buildpilot.infrastructure.backend.mock import MockBackend
from buildpilot.infrastructure.persistence.preview_events import (
    InMemoryPreviewEventStore,
)
from buildpilot.infrastructure.sandbox.memory import InMemorySandbox

COUNTER_ARTIFACT = """Sure, here is a counter app.

<boltArtifact id="counter" title="Counter App">
  <boltAction type="file" filePath="package.json">
{"name": "counter", "scripts": {"dev": "vite"}}
  </boltAction>
  <boltAction type="file" filePath="src/main.js">
console.log("<div>count</div>");
  </boltAction>
  <boltAction type="shell">
npm install
  </boltAction>
</boltArtifact>

Run it with npm run dev."""


@pytest.fixture
def counter_artifact() -> str:
    """Model output with two file actions and one shell action."""
    return COUNTER_ARTIFACT


@pytest.fixture
def build_session() -> BuildSession:
    """Create an empty build session."""
    return BuildSession()


@pytest.fixture
def event_store() -> InMemoryPreviewEventStore:
    """Create an in-memory preview event store."""
    return InMemoryPreviewEventStore()


@pytest.fixture
def memory_sandbox() -> InMemorySandbox:
    """Sandbox where install succeeds and the dev server runs until killed."""
    return InMemorySandbox()


@pytest.fixture
def mock_backend(counter_artifact: str) -> MockBackend:
    """Backend with a template and one chat response."""
    return MockBackend(
        responses=[counter_artifact],
        template=TemplateResponse(
            prompts=("You are building a web app.",),
            ui_prompts=(
                '<boltArtifact title="Base"><boltAction type="file" '
                'filePath="index.html"><html></html></boltAction></boltArtifact>',
            ),
        ),
    )
