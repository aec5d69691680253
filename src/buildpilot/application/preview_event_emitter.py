"""Preview event emission service."""

import uuid
from datetime import datetime, timezone

from buildpilot.domain.interfaces import PreviewEventStoreInterface
from buildpilot.domain.models import Phase
from buildpilot.domain.preview_event import PreviewEvent, PreviewEventType


class PreviewEventEmitter:
    """Emits preview run events to a store.

    Provides convenience methods for the orchestrator, handling ID
    generation and timestamps.
    """

    def __init__(self, event_store: PreviewEventStoreInterface, run_id: str) -> None:
        self._store = event_store
        self._run_id = run_id

    @property
    def run_id(self) -> str:
        return self._run_id

    def for_run(self, run_id: str) -> "PreviewEventEmitter":
        """Emitter writing to the same store under another run id."""
        return PreviewEventEmitter(self._store, run_id)

    def _emit(self, event: PreviewEvent) -> str:
        return self._store.store_event(event)

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def phase_change(self, phase: Phase) -> None:
        """Emit PHASE_CHANGE when the orchestrator enters a phase."""
        self._emit(
            PreviewEvent(
                event_id=str(uuid.uuid4()),
                event_type=PreviewEventType.PHASE_CHANGE,
                run_id=self._run_id,
                phase=phase,
                created_at=self._now(),
            )
        )

    def url_update(self, phase: Phase, url: str) -> None:
        """Emit URL_UPDATE for every readiness notification received."""
        self._emit(
            PreviewEvent(
                event_id=str(uuid.uuid4()),
                event_type=PreviewEventType.URL_UPDATE,
                run_id=self._run_id,
                phase=phase,
                url=url,
                created_at=self._now(),
            )
        )

    def run_failed(self, phase: Phase, error: str) -> None:
        """Emit RUN_FAILED when a run ends in idle or failed."""
        self._emit(
            PreviewEvent(
                event_id=str(uuid.uuid4()),
                event_type=PreviewEventType.RUN_FAILED,
                run_id=self._run_id,
                phase=phase,
                summary=error[:500],
                created_at=self._now(),
            )
        )
