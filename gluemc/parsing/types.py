"""Types produced by the log line parser.

String-bearing fields are ``memoryview`` slices of the line that was parsed.
They compare equal to ``bytes`` with the same content and keep the source
buffer pinned while alive; use :func:`display` to turn one into text.
Events and logger contexts are unhashable, since views of a ``bytearray``
cannot be hashed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

Bytes = Union[bytes, bytearray, memoryview]


def display(view: Bytes) -> str:
    """Lossy UTF-8 decode of a parsed field, for rendering only."""
    return bytes(view).decode("utf-8", errors="replace")


class LogLevel(str, Enum):
    """Severity keyword of a server log line."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"


class EventType(str, Enum):
    GENERIC = "generic"
    CHAT = "chat"
    JOIN = "join"
    LEAVE = "leave"
    ADVANCEMENT = "advancement"
    DEATH = "death"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Timestamp:
    """``HH:MM:SS`` prefix. Ranges are not validated."""

    hours: int
    minutes: int
    seconds: int

    def __str__(self) -> str:
        return f"{self.hours:02}:{self.minutes:02}:{self.seconds:02}"


@dataclass(frozen=True, slots=True)
class LoggerContext:
    """The ``name/LEVEL`` tag of a line."""

    __hash__ = None  # type: ignore[assignment]
    name: memoryview
    level: LogLevel

    def __str__(self) -> str:
        return f"{display(self.name)}/{self.level.value}"


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open byte range ``[start, end)`` into the parsed line."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.end:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def slice(self, line: Bytes) -> bytes:
        return bytes(line[self.start : self.end])


@dataclass(frozen=True, slots=True)
class GenericEvent:
    __hash__ = None  # type: ignore[assignment]
    event_type: ClassVar[EventType] = EventType.GENERIC

    time: Timestamp
    logger: LoggerContext
    message: memoryview


@dataclass(frozen=True, slots=True)
class ChatEvent:
    __hash__ = None  # type: ignore[assignment]
    event_type: ClassVar[EventType] = EventType.CHAT

    time: Timestamp
    secure: bool
    sender: memoryview
    message: memoryview


@dataclass(frozen=True, slots=True)
class JoinEvent:
    __hash__ = None  # type: ignore[assignment]
    event_type: ClassVar[EventType] = EventType.JOIN

    time: Timestamp
    player: memoryview


@dataclass(frozen=True, slots=True)
class LeaveEvent:
    __hash__ = None  # type: ignore[assignment]
    event_type: ClassVar[EventType] = EventType.LEAVE

    time: Timestamp
    player: memoryview


@dataclass(frozen=True, slots=True)
class AdvancementEvent:
    __hash__ = None  # type: ignore[assignment]
    event_type: ClassVar[EventType] = EventType.ADVANCEMENT

    time: Timestamp
    player: memoryview
    advancement: memoryview


@dataclass(frozen=True, slots=True)
class DeathEvent:
    """Death message; slots the matched template did not declare are empty."""

    __hash__ = None  # type: ignore[assignment]
    event_type: ClassVar[EventType] = EventType.DEATH

    time: Timestamp
    victim: memoryview
    attacker: memoryview
    weapon: memoryview


@dataclass(frozen=True, slots=True)
class UnknownEvent:
    """Line (or payload) that no grammar accepted."""

    __hash__ = None  # type: ignore[assignment]
    event_type: ClassVar[EventType] = EventType.UNKNOWN

    raw: memoryview


Event = Union[
    GenericEvent,
    ChatEvent,
    JoinEvent,
    LeaveEvent,
    AdvancementEvent,
    DeathEvent,
    UnknownEvent,
]
