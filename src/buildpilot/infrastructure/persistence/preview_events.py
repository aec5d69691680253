"""Preview event store implementations."""

from buildpilot.domain.interfaces import PreviewEventStoreInterface
from buildpilot.domain.preview_event import PreviewEvent, PreviewEventType


class InMemoryPreviewEventStore(PreviewEventStoreInterface):
    """In-memory implementation; events live as long as the session."""

    def __init__(self) -> None:
        self._events: list[PreviewEvent] = []

    def store_event(self, event: PreviewEvent) -> str:
        self._events.append(event)
        return event.event_id

    def get_events(
        self,
        run_id: str,
        event_type: PreviewEventType | None = None,
    ) -> list[PreviewEvent]:
        return [
            e
            for e in self._events
            if e.run_id == run_id
            and (event_type is None or e.event_type == event_type)
        ]

    def run_ids(self) -> list[str]:
        """Run ids in the order their first event was stored."""
        return list(dict.fromkeys(e.run_id for e in self._events))
