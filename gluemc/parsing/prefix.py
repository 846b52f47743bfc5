"""Parsers for the ``[HH:MM:SS] [name/LEVEL]`` line prefix."""

from .errors import PrefixMalformed
from .types import LoggerContext, LogLevel, Timestamp

_LEVELS = {level.value.encode(): level for level in LogLevel}


def _digit_pair(line: bytes, pos: int) -> int:
    if pos + 2 > len(line):
        raise PrefixMalformed(pos, "two digits")
    high, low = line[pos], line[pos + 1]
    if not (0x30 <= high <= 0x39 and 0x30 <= low <= 0x39):
        raise PrefixMalformed(pos, "two digits")
    return (high - 0x30) * 10 + (low - 0x30)


def _expect(line: bytes, pos: int, literal: bytes) -> int:
    if not line.startswith(literal, pos):
        raise PrefixMalformed(pos, repr(literal.decode()))
    return pos + len(literal)


def parse_timestamp(line: bytes, pos: int = 0) -> tuple[Timestamp, int]:
    """Parse ``[HH:MM:SS]`` at ``pos``.

    Returns the timestamp and the offset just past the closing bracket.
    """
    pos = _expect(line, pos, b"[")
    hours = _digit_pair(line, pos)
    pos = _expect(line, pos + 2, b":")
    minutes = _digit_pair(line, pos)
    pos = _expect(line, pos + 2, b":")
    seconds = _digit_pair(line, pos)
    pos = _expect(line, pos + 2, b"]")
    return Timestamp(hours, minutes, seconds), pos


def parse_logger_context(line: bytes, pos: int = 0) -> tuple[LoggerContext, int]:
    """Parse ``[name/LEVEL]`` at ``pos``.

    The name is everything up to the first ``/`` and may be empty. The level
    keyword is case-sensitive and must be closed by ``]`` directly.
    """
    start = _expect(line, pos, b"[")
    slash = line.find(b"/", start)
    if slash == -1:
        raise PrefixMalformed(start, "'/'")
    # longest keyword is five bytes
    close = line.find(b"]", slash + 1, slash + 7)
    if close == -1:
        raise PrefixMalformed(slash + 1, "']'")
    level = _LEVELS.get(bytes(line[slash + 1 : close]))
    if level is None:
        raise PrefixMalformed(slash + 1, "log level")
    name = memoryview(line)[start:slash]
    return LoggerContext(name=name, level=level), close + 1


def parse_prefix(line: bytes) -> tuple[Timestamp, LoggerContext, int]:
    """Parse the full prefix including the ``": "`` separator.

    Returns the offset where the payload begins.
    """
    time, pos = parse_timestamp(line, 0)
    pos = _expect(line, pos, b" ")
    context, pos = parse_logger_context(line, pos)
    pos = _expect(line, pos, b": ")
    return time, context, pos
