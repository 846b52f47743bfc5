"""Child server process with a command channel on its stdin."""

import asyncio
from pathlib import Path
from typing import Optional, Sequence

from ..logger import logger

# Server output lines can be long (stack traces, modded chat)
STREAM_LIMIT = 1024 * 1024


class ServerProcess:
    """Runs the server command with piped stdin and stdout."""

    def __init__(self, command: Sequence[str], cwd: Optional[Path] = None):
        if not command:
            raise ValueError("Server command must not be empty")
        self.command = list(command)
        self.cwd = cwd
        self._process: Optional[asyncio.subprocess.Process] = None
        self._stdin_lock = asyncio.Lock()

    async def start(self) -> None:
        if self._process is not None:
            raise RuntimeError("Server process already started")

        self._process = await asyncio.create_subprocess_exec(
            *self.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            cwd=self.cwd,
            limit=STREAM_LIMIT,
        )
        logger.info(f"Started server process {self._process.pid}: {self.command}")

    @property
    def process(self) -> asyncio.subprocess.Process:
        if self._process is None:
            raise RuntimeError("Server process not started")
        return self._process

    @property
    def stdout(self) -> asyncio.StreamReader:
        assert self.process.stdout is not None
        return self.process.stdout

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode if self._process is not None else None

    async def send_command(self, command: bytes | str) -> None:
        """Write one console command followed by a newline.

        Raises:
            RuntimeError: If the process has not been started
            ConnectionResetError: If the server closed its stdin
        """
        if isinstance(command, str):
            command = command.encode()
        stdin = self.process.stdin
        assert stdin is not None
        async with self._stdin_lock:
            stdin.write(command + b"\n")
            await stdin.drain()
        logger.debug(f"Sent command: {command!r}")

    async def wait(self) -> int:
        return await self.process.wait()

    async def stop(self, timeout: float = 60.0) -> int:
        """Ask the server to stop and wait for it, killing it on timeout."""
        if self.returncode is not None:
            return self.returncode

        try:
            await self.send_command(b"stop")
        except (BrokenPipeError, ConnectionResetError) as e:
            logger.warning(f"Could not send stop command: {e}")

        try:
            return await asyncio.wait_for(self.process.wait(), timeout=timeout)
        except TimeoutError:
            logger.error(f"Server did not stop within {timeout}s, killing it")
            self.process.kill()
            return await self.process.wait()
