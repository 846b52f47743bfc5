"""Console mirror: batches raw server output into webhook-sized messages."""

import asyncio
from typing import Awaitable, Callable, List, Optional

from ..logger import logger

Sink = Callable[[str], Awaitable[object]]


def split_message(text: str, limit: int) -> List[str]:
    """Split ``text`` into chunks of at most ``limit`` characters.

    Chunks end at the last newline that fits (the newline itself is dropped);
    a run with no newline inside the limit is cut at the limit.
    """
    chunks = []
    while len(text) > limit:
        cut = text.rfind("\n", 1, limit + 1)
        if cut == -1:
            chunks.append(text[:limit])
            text = text[limit:]
        else:
            chunks.append(text[:cut])
            text = text[cut + 1 :]
    if text:
        chunks.append(text)
    return chunks


class ConsoleMirror:
    """Collects lines and flushes them once output goes quiet.

    Lines pushed within ``flush_interval`` seconds of each other are sent
    together, split to fit ``limit`` characters per message. A batch is also
    sent once it reaches ``limit`` characters or has been held for
    ``max_delay`` seconds, so continuous output still gets through.
    """

    def __init__(
        self,
        sink: Sink,
        limit: int = 2000,
        flush_interval: float = 0.1,
        max_delay: float = 2.0,
    ):
        self.sink = sink
        self.limit = limit
        self.flush_interval = flush_interval
        self.max_delay = max_delay
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._buffer: List[str] = []

    def push(self, text: str) -> None:
        self._queue.put_nowait(text)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run())

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            self._buffer.append(await self._queue.get())
            size = len(self._buffer[0])
            deadline = loop.time() + self.max_delay
            while size < self.limit:
                timeout = min(self.flush_interval, deadline - loop.time())
                if timeout <= 0:
                    break
                try:
                    text = await asyncio.wait_for(self._queue.get(), timeout=timeout)
                except TimeoutError:
                    break
                self._buffer.append(text)
                size += len(text)
            text = "".join(self._buffer)
            self._buffer.clear()
            await self.flush(text)

    async def flush(self, text: str) -> None:
        for chunk in split_message(text, self.limit):
            if not chunk.strip():
                continue
            try:
                await self.sink(chunk)
            except Exception as e:
                logger.error(f"Console mirror sink failed: {e}", exc_info=True)
                break

    async def aclose(self) -> None:
        """Stop the flush loop and send whatever is still queued."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        pending = self._buffer
        self._buffer = []
        while not self._queue.empty():
            pending.append(self._queue.get_nowait())
        if pending:
            await self.flush("".join(pending))
