"""Command-line entry points.

    gluemc run -- java -jar server.jar nogui
    gluemc tail logs/latest.log
    gluemc parse < latest.log
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

import aiofiles
import httpx

from .config import Settings, settings
from .events.dispatcher import EventDispatcher
from .ingest.ingester import LineIngester, read_line
from .ingest.process import ServerProcess
from .ingest.tailer import LogTailer
from .lang import install_death_templates
from .logger import logger
from .parsing.parser import LineParser
from .parsing.table import DeathTemplateTable, death_templates
from .parsing.types import (
    AdvancementEvent,
    ChatEvent,
    DeathEvent,
    Event,
    GenericEvent,
    JoinEvent,
    LeaveEvent,
    UnknownEvent,
    display,
)
from .relay.console import ConsoleMirror
from .relay.models import Colour
from .relay.webhook import WebhookRelay


def describe_event(event: Event) -> str:
    """One-line human readable rendering of an event."""
    match event:
        case ChatEvent(time=time, secure=secure, sender=sender, message=message):
            marker = "" if secure else " (not secure)"
            return f"{time} chat{marker} {display(sender)}: {display(message)}"
        case JoinEvent(time=time, player=player):
            return f"{time} join {display(player)}"
        case LeaveEvent(time=time, player=player):
            return f"{time} leave {display(player)}"
        case AdvancementEvent(time=time, player=player, advancement=advancement):
            return f"{time} advancement {display(player)} [{display(advancement)}]"
        case DeathEvent(time=time, victim=victim, attacker=attacker, weapon=weapon):
            return (
                f"{time} death victim={display(victim)!r} "
                f"attacker={display(attacker)!r} weapon={display(weapon)!r}"
            )
        case GenericEvent(time=time, logger=context, message=message):
            return f"{time} [{context}] {display(message)}"
        case UnknownEvent(raw=raw):
            return f"unknown {display(raw)}"
    raise TypeError(f"Not an event: {event!r}")


class Relays:
    """Webhook relays configured in settings; either may be absent."""

    def __init__(self, config: Settings):
        self.events: Optional[WebhookRelay] = None
        self.console: Optional[ConsoleMirror] = None
        self._console_relay: Optional[WebhookRelay] = None

        if config.discord_webhook_url:
            self.events = WebhookRelay(config.discord_webhook_url, config.relay)
        else:
            logger.warning("DISCORD_WEBHOOK_URL is not set, events will not be relayed")

        if config.discord_console_webhook_url:
            self._console_relay = WebhookRelay(
                config.discord_console_webhook_url, config.relay
            )
            self.console = ConsoleMirror(
                self._console_relay.send_text,
                limit=config.relay.message_limit,
                flush_interval=config.relay.console_flush_interval,
                max_delay=config.relay.console_max_delay,
            )

    def attach(self, dispatcher: EventDispatcher) -> None:
        if self.events is not None:
            dispatcher.on_player_event(self.events.handle)
        if self.console is not None:
            self.console.start()

    async def announce(self, text: str, colour: Colour) -> None:
        logger.info(text)
        if self.events is not None:
            await self.events.announce(text, colour)

    async def aclose(self) -> None:
        if self.console is not None:
            await self.console.aclose()
        for relay in (self.events, self._console_relay):
            if relay is not None:
                await relay.aclose()


def _build_ingester(relays: Relays) -> LineIngester:
    dispatcher = EventDispatcher()
    relays.attach(dispatcher)
    mirror = relays.console.push if relays.console is not None else None
    return LineIngester(LineParser(), dispatcher, mirror=mirror)


async def run_server(command: Sequence[str], config: Settings = settings) -> int:
    """Run the server, relaying its output until it exits or a signal arrives."""
    await install_death_templates(config.localization)

    relays = Relays(config)
    ingester = _build_ingester(relays)
    server = ServerProcess(command, cwd=config.server_directory)

    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM, signal.SIGQUIT):
        loop.add_signal_handler(sig, stop_requested.set)

    await relays.announce("Starting server", Colour.GREEN)
    await server.start()
    ingest_task = asyncio.create_task(ingester.run(server.stdout))
    stop_task = asyncio.create_task(stop_requested.wait())

    try:
        await asyncio.wait(
            {ingest_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
        )
        if stop_requested.is_set():
            await relays.announce("Stopping server", Colour.RED)
            returncode = await server.stop()
            await ingest_task
        else:
            returncode = await server.wait()
            await relays.announce("Server stopped", Colour.RED)
    finally:
        stop_task.cancel()
        if not ingest_task.done():
            ingest_task.cancel()
        await relays.aclose()

    logger.info(f"Server exited with status {returncode}")
    return returncode


async def tail_log(log_path: Path, config: Settings = settings) -> int:
    """Relay a log file written by a server running elsewhere."""
    await install_death_templates(config.localization)

    relays = Relays(config)
    ingester = _build_ingester(relays)
    tailer = LogTailer(log_path, ingester.feed)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, tailer.stop)

    try:
        await tailer.run()
    finally:
        await relays.aclose()
    return 0


async def parse_stream(
    reader: asyncio.StreamReader,
    lang_file: Optional[Path],
    config: Settings = settings,
    table: DeathTemplateTable = death_templates,
) -> int:
    """Print the classification of every line read from ``reader``."""
    if lang_file is not None:
        lang = config.localization.model_copy(update={"file": lang_file})
        await install_death_templates(lang, table=table)

    parser = LineParser(table=table)
    while raw := await read_line(reader):
        line = raw.removesuffix(b"\n").removesuffix(b"\r")
        event, span = parser.parse_line(line)
        print(f"[{span.start:>3}, {span.end:>3}) {describe_event(event)}")
    return 0


async def _stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(
        lambda: asyncio.StreamReaderProtocol(reader), sys.stdin.buffer
    )
    return reader


async def _file_reader(path: Path) -> asyncio.StreamReader:
    async with aiofiles.open(path, "rb") as f:
        content = await f.read()
    reader = asyncio.StreamReader()
    reader.feed_data(content)
    reader.feed_eof()
    return reader


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gluemc",
        description="Relay a Minecraft server's log output to Discord webhooks.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="Run the server command and relay its output")
    run.add_argument("command", nargs=argparse.REMAINDER, help="Server command")

    tail = sub.add_parser("tail", help="Follow a server log file and relay it")
    tail.add_argument("log_file", type=Path)

    parse = sub.add_parser("parse", help="Classify log lines and print the events")
    parse.add_argument("file", nargs="?", type=Path, help="Log file (default: stdin)")
    parse.add_argument(
        "--lang", type=Path, default=None, help="en_us.json for death messages"
    )
    return parser


async def _main(args: argparse.Namespace) -> int:
    if args.cmd == "run":
        command = args.command
        if command and command[0] == "--":
            command = command[1:]
        if not command:
            print("Usage: gluemc run [--] <command> [args...]", file=sys.stderr)
            return 2
        return await run_server(command)
    if args.cmd == "tail":
        return await tail_log(args.log_file)

    reader = await (_file_reader(args.file) if args.file else _stdin_reader())
    return await parse_stream(reader, args.lang)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    try:
        return asyncio.run(_main(args))
    except (httpx.HTTPError, OSError) as e:
        logger.error(f"Startup failed: {type(e).__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        return 130
