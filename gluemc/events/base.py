"""Parsed line container handed to event handlers."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..parsing.types import Event, EventType, Span, display


@dataclass(frozen=True)
class ParsedLine:
    """An event together with the line it borrows from.

    Handlers may read the event's views for as long as they hold this object.
    """

    line: bytes
    event: Event
    span: Span
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> EventType:
        return self.event.event_type

    def span_text(self) -> str:
        """The payload the event was parsed from, decoded for display."""
        return display(self.span.slice(self.line))

    def text(self) -> str:
        return display(self.line)
