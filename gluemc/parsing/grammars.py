"""Payload grammars for chat, join, leave, advancement and generic lines.

Each grammar receives the line, the payload bounds and the already parsed
prefix. It returns an event whose fields are views into the line, or raises
:class:`PayloadGrammarFailed` without side effects.
"""

import re

from .errors import PayloadGrammarFailed
from .types import (
    AdvancementEvent,
    ChatEvent,
    GenericEvent,
    JoinEvent,
    LeaveEvent,
    LoggerContext,
    Timestamp,
)

NOT_SECURE_MARKER = b"[Not Secure] "
JOIN_SUFFIX = b" joined the game"
LEAVE_SUFFIX = b" left the game"
ADVANCEMENT_CONNECTORS = (
    b" has made the advancement ",
    b" has reached the goal ",
    b" has completed the challenge ",
)

# ASCII whitespace as understood by the server: no vertical tab
_NON_WHITESPACE_RUN = re.compile(rb"[^ \t\n\r\f]+")


def _player_run(line: bytes, start: int, end: int, grammar: str) -> int:
    m = _NON_WHITESPACE_RUN.match(line, start, end)
    if m is None:
        raise PayloadGrammarFailed(grammar, "expected a player name")
    return m.end()


def parse_chat(
    line: bytes, start: int, end: int, time: Timestamp, context: LoggerContext
) -> ChatEvent:
    """``[Not Secure] <name> message`` or ``[name] message``.

    The bracketed sender keeps its brackets so ``[Server]`` broadcasts stay
    distinguishable from player names.
    """
    view = memoryview(line)
    pos = start
    secure = not line.startswith(NOT_SECURE_MARKER, pos, end)
    if not secure:
        pos += len(NOT_SECURE_MARKER)

    if line.startswith(b"<", pos, end):
        close = line.find(b">", pos + 1, end)
        if close <= pos + 1:
            raise PayloadGrammarFailed("chat", "unterminated <sender>")
        sender = view[pos + 1 : close]
    elif line.startswith(b"[", pos, end):
        close = line.find(b"]", pos + 1, end)
        if close <= pos + 1:
            raise PayloadGrammarFailed("chat", "unterminated [sender]")
        sender = view[pos : close + 1]
    else:
        raise PayloadGrammarFailed("chat", "expected a sender")

    pos = close + 1
    if not line.startswith(b" ", pos, end) or pos + 1 >= end:
        raise PayloadGrammarFailed("chat", "expected a message")

    return ChatEvent(
        time=time, secure=secure, sender=sender, message=view[pos + 1 : end]
    )


def parse_join(
    line: bytes, start: int, end: int, time: Timestamp, context: LoggerContext
) -> JoinEvent:
    run_end = _player_run(line, start, end, "join")
    if not (
        run_end + len(JOIN_SUFFIX) == end and line.startswith(JOIN_SUFFIX, run_end)
    ):
        raise PayloadGrammarFailed("join")
    return JoinEvent(time=time, player=memoryview(line)[start:run_end])


def parse_leave(
    line: bytes, start: int, end: int, time: Timestamp, context: LoggerContext
) -> LeaveEvent:
    run_end = _player_run(line, start, end, "leave")
    if not (
        run_end + len(LEAVE_SUFFIX) == end and line.startswith(LEAVE_SUFFIX, run_end)
    ):
        raise PayloadGrammarFailed("leave")
    return LeaveEvent(time=time, player=memoryview(line)[start:run_end])


def parse_advancement(
    line: bytes, start: int, end: int, time: Timestamp, context: LoggerContext
) -> AdvancementEvent:
    """``<player> has made the advancement [Title]`` and its goal/challenge forms."""
    run_end = _player_run(line, start, end, "advancement")
    for connector in ADVANCEMENT_CONNECTORS:
        if line.startswith(connector, run_end, end):
            pos = run_end + len(connector)
            break
    else:
        raise PayloadGrammarFailed("advancement", "no advancement connector")

    if not line.startswith(b"[", pos, end):
        raise PayloadGrammarFailed("advancement", "expected [advancement]")
    close = line.find(b"]", pos + 1, end)
    if close <= pos + 1 or close != end - 1:
        raise PayloadGrammarFailed("advancement", "expected [advancement]")

    view = memoryview(line)
    return AdvancementEvent(
        time=time, player=view[start:run_end], advancement=view[pos + 1 : close]
    )


def parse_generic(
    line: bytes, start: int, end: int, time: Timestamp, context: LoggerContext
) -> GenericEvent:
    if start >= end:
        raise PayloadGrammarFailed("generic", "empty payload")
    return GenericEvent(time=time, logger=context, message=memoryview(line)[start:end])
