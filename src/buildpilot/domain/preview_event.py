"""Preview run trace models."""

from dataclasses import dataclass
from enum import Enum

from buildpilot.domain.models import Phase


class PreviewEventType(str, Enum):
    """Types of preview run events."""

    PHASE_CHANGE = "PHASE_CHANGE"
    URL_UPDATE = "URL_UPDATE"
    RUN_FAILED = "RUN_FAILED"


@dataclass(frozen=True)
class PreviewEvent:
    """Single observable change during an orchestration run."""

    event_id: str
    event_type: PreviewEventType
    run_id: str
    phase: Phase
    url: str = ""
    summary: str = ""
    created_at: str = ""  # ISO 8601
