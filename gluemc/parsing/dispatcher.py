"""Contextual grammar selection.

Grammars are tried in priority order, but only those whose guard accepts the
line's logger context are attempted at all. This keeps plugin output that
happens to look like ``X joined the game`` from being read as a join.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..logger import logger
from .death import match_death
from .errors import (
    DeathMessageTemplateExhausted,
    GrammarNotApplicable,
    PayloadGrammarFailed,
)
from .grammars import (
    parse_advancement,
    parse_chat,
    parse_generic,
    parse_join,
    parse_leave,
)
from .table import DeathTemplateTable
from .types import DeathEvent, Event, LoggerContext, LogLevel, Timestamp

Grammar = Callable[[bytes, int, int, Timestamp, LoggerContext], Event]


@dataclass(frozen=True, slots=True)
class Guard:
    """Accepts exactly one ``(level, logger name)`` pair."""

    level: LogLevel
    logger_name: bytes

    def allows(self, context: LoggerContext) -> bool:
        return context.level is self.level and context.name == self.logger_name


SERVER_THREAD_INFO = Guard(LogLevel.INFO, b"Server thread")


@dataclass(frozen=True, slots=True)
class GuardedGrammar:
    name: str
    grammar: Grammar
    guard: Optional[Guard] = None  # None accepts every context

    def attempt(
        self,
        line: bytes,
        start: int,
        end: int,
        time: Timestamp,
        context: LoggerContext,
    ) -> Event:
        if self.guard is not None and not self.guard.allows(context):
            raise GrammarNotApplicable(self.name)
        return self.grammar(line, start, end, time, context)


def death_grammar(table: DeathTemplateTable) -> Grammar:
    """Death grammar bound to a template table.

    Not applicable until the table has been installed.
    """

    def parse_death(
        line: bytes, start: int, end: int, time: Timestamp, context: LoggerContext
    ) -> DeathEvent:
        templates = table.get()
        if templates is None:
            raise GrammarNotApplicable("death")
        return match_death(templates, line, start, end, time)

    return parse_death


def default_grammars(table: DeathTemplateTable) -> list[GuardedGrammar]:
    return [
        GuardedGrammar("chat", parse_chat, SERVER_THREAD_INFO),
        GuardedGrammar("join", parse_join, SERVER_THREAD_INFO),
        GuardedGrammar("leave", parse_leave, SERVER_THREAD_INFO),
        GuardedGrammar("advancement", parse_advancement, SERVER_THREAD_INFO),
        GuardedGrammar("death", death_grammar(table), SERVER_THREAD_INFO),
        GuardedGrammar("generic", parse_generic),
    ]


class GrammarDispatcher:
    """First applicable grammar whose payload parses wins."""

    def __init__(self, grammars: Sequence[GuardedGrammar]):
        self.grammars = tuple(grammars)

    def dispatch(
        self,
        line: bytes,
        start: int,
        end: int,
        time: Timestamp,
        context: LoggerContext,
    ) -> Optional[Event]:
        """Return the first event produced, or None if every candidate failed."""
        for candidate in self.grammars:
            try:
                return candidate.attempt(line, start, end, time, context)
            except GrammarNotApplicable:
                continue
            except DeathMessageTemplateExhausted as e:
                logger.debug(f"Falling back from death grammar: {e}")
                continue
            except PayloadGrammarFailed:
                continue
        return None
