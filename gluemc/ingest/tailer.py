"""Log file following using watchfiles."""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

import aiofiles
from aiofiles import os as aioos
from watchfiles import Change, awatch

from ..logger import logger

LineCallback = Callable[[bytes], Awaitable[object]]


class LogTailer:
    """Follows a server log file (typically ``logs/latest.log``).

    New complete lines are passed to the callback as bytes, newline
    included. A partial trailing line is held back until it is completed.
    """

    def __init__(
        self, log_path: Path, on_line: LineCallback, from_start: bool = False
    ):
        """Initialize the tailer.

        Args:
            log_path: Path to the log file
            on_line: Coroutine called with every new line
            from_start: Read existing content instead of starting at the end
        """
        self.log_path = Path(log_path).resolve()
        self.on_line = on_line
        self.from_start = from_start
        self.position = 0
        self._pending = b""
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> None:
        """Watch the file until :meth:`stop` is called."""
        if await aioos.path.exists(self.log_path) and not self.from_start:
            self.position = await aioos.path.getsize(self.log_path)
            logger.info(f"Log file found, starting at byte {self.position}")
        else:
            self.position = 0

        while not await aioos.path.exists(self.log_path):
            if self._stop_event.is_set():
                return
            await asyncio.sleep(1)

        await self.read_new_lines()
        async for changes in awatch(self.log_path.parent, stop_event=self._stop_event):
            for change_type, changed_path in changes:
                if Path(changed_path) != self.log_path:
                    continue
                if change_type == Change.deleted:
                    logger.info(f"Log file deleted: {self.log_path}")
                    continue
                if change_type == Change.added:
                    logger.info(f"Log file created: {self.log_path}")
                    self._restart()
                await self.read_new_lines()

    def _restart(self) -> None:
        self.position = 0
        self._pending = b""

    async def read_new_lines(self) -> int:
        """Read appended content and emit complete lines.

        Returns the number of lines emitted.
        """
        if not await aioos.path.exists(self.log_path):
            return 0

        size = await aioos.path.getsize(self.log_path)
        if size < self.position:
            logger.info(f"Log file truncated, reading {self.log_path} from the start")
            self._restart()
        if size == self.position:
            return 0

        async with aiofiles.open(self.log_path, "rb") as f:
            await f.seek(self.position)
            content = await f.read()
            self.position = await f.tell()

        lines = (self._pending + content).split(b"\n")
        self._pending = lines.pop()
        for line in lines:
            await self.on_line(line + b"\n")
        return len(lines)

    @property
    def pending(self) -> Optional[bytes]:
        """Unterminated tail of the file, if any."""
        return self._pending or None
