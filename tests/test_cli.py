"""Tests for the command-line entry points."""

import asyncio
import logging
import sys
from unittest.mock import AsyncMock, patch

import pytest

from gluemc.cli import (
    build_arg_parser,
    describe_event,
    main,
    parse_stream,
    run_server,
)
from gluemc.config import Settings
from gluemc.parsing.table import DeathTemplateTable

from .helpers import EN_US_EXCERPT, log_line


def reader_of(data: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    reader.feed_eof()
    return reader


class TestDescribeEvent:
    """Test the one-line event rendering."""

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ("<Steve> hi", "12:34:56 chat Steve: hi"),
            ("[Not Secure] <Steve> hi", "12:34:56 chat (not secure) Steve: hi"),
            ("Steve joined the game", "12:34:56 join Steve"),
            ("Steve left the game", "12:34:56 leave Steve"),
            (
                "Steve has made the advancement [Stone Age]",
                "12:34:56 advancement Steve [Stone Age]",
            ),
            (
                "Bob was slain by Zombie using Sword",
                "12:34:56 death victim='Bob' attacker='Zombie' weapon='Sword'",
            ),
            ("Bob exploded", "12:34:56 [Server thread/INFO] Bob exploded"),
        ],
    )
    def test_events(self, parser, payload, expected):
        event, _ = parser.parse_line(log_line(payload))

        assert describe_event(event) == expected

    def test_unknown(self, parser):
        event, _ = parser.parse_line(b"not a log line")

        assert describe_event(event) == "unknown not a log line"

    def test_not_an_event(self):
        with pytest.raises(TypeError):
            describe_event("hello")


class TestParseStream:
    """Test the ``parse`` subcommand pipeline."""

    @pytest.mark.asyncio
    async def test_prints_each_line(self, tmp_path, capsys):
        lang_file = tmp_path / "en_us.json"
        lang_file.write_text(EN_US_EXCERPT, encoding="utf-8")
        table = DeathTemplateTable()

        data = (
            log_line("Steve joined the game")
            + b"\n"
            + log_line("Bob drowned")
            + b"\r\n"
            + b"garbage\n"
        )
        status = await parse_stream(
            reader_of(data), lang_file, config=Settings(_env_file=None), table=table
        )

        assert status == 0
        assert table.installed
        assert capsys.readouterr().out.splitlines() == [
            "[ 33,  54) 12:34:56 join Steve",
            "[ 33,  44) 12:34:56 death victim='Bob' attacker='' weapon=''",
            "[  0,   7) unknown garbage",
        ]

    @pytest.mark.asyncio
    async def test_without_lang_file(self, capsys):
        table = DeathTemplateTable()

        await parse_stream(reader_of(log_line("Bob drowned")), None, table=table)

        assert not table.installed
        assert "[Server thread/INFO] Bob drowned" in capsys.readouterr().out


class TestArguments:
    """Test argument parsing and exit codes."""

    def test_run_keeps_server_arguments(self):
        args = build_arg_parser().parse_args(
            ["run", "--", "java", "-Xmx4G", "-jar", "server.jar", "nogui"]
        )

        assert args.cmd == "run"
        assert args.command[-4:] == ["-Xmx4G", "-jar", "server.jar", "nogui"]

    def test_parse_options(self, tmp_path):
        args = build_arg_parser().parse_args(
            ["parse", str(tmp_path / "latest.log"), "--lang", "en_us.json"]
        )

        assert args.file == tmp_path / "latest.log"
        assert str(args.lang) == "en_us.json"

    def test_run_without_command(self, capsys):
        assert main(["run"]) == 2
        assert "Usage: gluemc run" in capsys.readouterr().err

    def test_startup_failure_exit_code(self, tmp_path):
        with patch(
            "gluemc.cli.tail_log", new=AsyncMock(side_effect=OSError("no such file"))
        ):
            assert main(["tail", str(tmp_path / "latest.log")]) == 1


class TestRunServer:
    """Test the ``run`` pipeline against a stand-in server."""

    @pytest.mark.asyncio
    async def test_relays_until_server_exits(self, tmp_path, monkeypatch, caplog):
        monkeypatch.delenv("DISCORD_WEBHOOK_URL", raising=False)
        monkeypatch.delenv("DISCORD_CONSOLE_WEBHOOK_URL", raising=False)
        config = Settings(_env_file=None, server_directory=tmp_path)
        script = "print('[00:00:00] [Server thread/INFO]: Steve joined the game')"

        with caplog.at_level(logging.DEBUG, logger="gluemc"):
            with patch("gluemc.cli.install_death_templates", new=AsyncMock()) as install:
                status = await run_server([sys.executable, "-c", script], config)

        assert status == 0
        install.assert_awaited_once_with(config.localization)
        assert "events will not be relayed" in caplog.text
        assert "Parsed join line" in caplog.text
        assert "Server stopped" in caplog.text
