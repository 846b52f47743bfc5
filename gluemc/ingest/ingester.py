"""Async line-reading loop around the log parser."""

import asyncio
from typing import Callable, Optional

from ..events.base import ParsedLine
from ..events.dispatcher import EventDispatcher
from ..logger import logger
from ..parsing.parser import LineParser
from ..parsing.types import display


async def read_line(reader: asyncio.StreamReader) -> bytes:
    """Read one ``\\n``-terminated line of any length; b"" at EOF."""
    parts = []
    while True:
        try:
            parts.append(await reader.readuntil(b"\n"))
            break
        except asyncio.IncompleteReadError as e:
            parts.append(e.partial)
            break
        except asyncio.LimitOverrunError as e:
            parts.append(await reader.readexactly(e.consumed))
    return b"".join(parts)


class LineIngester:
    """Parses each line of server output and dispatches the event."""

    def __init__(
        self,
        parser: LineParser,
        dispatcher: EventDispatcher,
        mirror: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the ingester.

        Args:
            parser: Line parser to classify lines with
            dispatcher: Dispatcher that receives every parsed line
            mirror: Optional sink that receives each raw line as text
        """
        self.parser = parser
        self.dispatcher = dispatcher
        self.mirror = mirror

    async def run(self, reader: asyncio.StreamReader) -> None:
        """Consume ``reader`` until EOF."""
        while True:
            raw = await read_line(reader)
            if not raw:
                break
            await self.feed(raw)
        logger.info("Server output closed")

    async def feed(self, raw: bytes) -> Optional[ParsedLine]:
        """Handle one line as read, newline included."""
        if self.mirror is not None:
            self.mirror(display(raw))

        line = raw.removesuffix(b"\n").removesuffix(b"\r")
        if not line:
            return None

        event, span = self.parser.parse_line(line)
        logger.debug(f"Parsed {event.event_type.value} line [{span.start}, {span.end})")

        parsed = ParsedLine(line=line, event=event, span=span)
        await self.dispatcher.dispatch(parsed)
        return parsed
