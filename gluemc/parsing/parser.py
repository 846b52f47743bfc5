"""Line parser entry point."""

from typing import Optional, Sequence

from .dispatcher import GrammarDispatcher, GuardedGrammar, default_grammars
from .errors import PrefixMalformed
from .prefix import parse_prefix
from .table import DeathTemplateTable, death_templates
from .types import Bytes, Event, Span, UnknownEvent


class LineParser:
    """Turns one raw server log line into an ``(event, span)`` pair.

    The prefix is parsed first; a malformed prefix makes the whole line
    ``Unknown``. The payload then goes through the guarded grammars, falling
    back to ``Generic``, and to ``Unknown`` over the payload only when even
    that fails (an empty payload). Parsing never raises and keeps no state
    between calls.
    """

    def __init__(
        self,
        table: DeathTemplateTable = death_templates,
        grammars: Optional[Sequence[GuardedGrammar]] = None,
    ):
        self.table = table
        self._dispatcher = GrammarDispatcher(
            grammars if grammars is not None else default_grammars(table)
        )

    def parse_line(self, line: Bytes) -> tuple[Event, Span]:
        """Parse a line with its trailing newline already stripped.

        Event fields are views into ``line``; consume them before the buffer
        is reused. A ``memoryview`` argument is copied to ``bytes`` first.
        """
        if isinstance(line, memoryview):
            line = line.tobytes()
        end = len(line)

        try:
            time, context, start = parse_prefix(line)
        except PrefixMalformed:
            return UnknownEvent(raw=memoryview(line)), Span(0, end)

        event = self._dispatcher.dispatch(line, start, end, time, context)
        if event is None:
            return UnknownEvent(raw=memoryview(line)[start:end]), Span(start, end)
        return event, Span(start, end)
