"""
Minecraft server log line parsing.

Classifies ``[HH:MM:SS] [name/LEVEL]: payload`` lines into chat, join, leave,
advancement, death and generic events.
"""

from .death import DeathTemplate, SlotKind, build_death_templates, match_death
from .errors import DeathMessageTemplateExhausted, ParseError, PrefixMalformed
from .parser import LineParser
from .table import DeathTemplateTable, death_templates
from .types import (
    AdvancementEvent,
    ChatEvent,
    DeathEvent,
    Event,
    EventType,
    GenericEvent,
    JoinEvent,
    LeaveEvent,
    LoggerContext,
    LogLevel,
    Span,
    Timestamp,
    UnknownEvent,
    display,
)

__all__ = [
    "AdvancementEvent",
    "ChatEvent",
    "DeathEvent",
    "DeathMessageTemplateExhausted",
    "DeathTemplate",
    "DeathTemplateTable",
    "Event",
    "EventType",
    "GenericEvent",
    "JoinEvent",
    "LeaveEvent",
    "LineParser",
    "LoggerContext",
    "LogLevel",
    "ParseError",
    "PrefixMalformed",
    "SlotKind",
    "Span",
    "Timestamp",
    "UnknownEvent",
    "build_death_templates",
    "death_templates",
    "display",
    "match_death",
]
