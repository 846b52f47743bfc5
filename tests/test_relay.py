"""Tests for webhook rendering, delivery and the console mirror."""

import asyncio
import json

import httpx
import pytest

from gluemc.config import RelaySettings
from gluemc.relay.console import ConsoleMirror, split_message
from gluemc.relay.models import Colour, WebhookMessage
from gluemc.relay.render import render_event
from gluemc.relay.webhook import WebhookRelay

from .helpers import parsed_line

WEBHOOK_URL = "https://discord.example/api/webhooks/1/token"


@pytest.fixture
def relay_settings():
    return RelaySettings(avatar_url_template="https://avatars.example/{name}")


class TestRenderEvent:
    """Test turning parsed events into webhook messages."""

    def test_chat(self, parser, relay_settings):
        message = render_event(parsed_line(parser, "<Steve> hello"), relay_settings)

        assert message.to_payload() == {
            "username": "Steve",
            "avatar_url": "https://avatars.example/Steve",
            "content": "hello",
        }

    def test_server_chat_uses_console_avatar(self, parser, relay_settings):
        message = render_event(
            parsed_line(parser, "[Server] Restarting soon"), relay_settings
        )

        assert message.username == "[Server]"
        assert message.avatar_url == "https://avatars.example/Console"
        assert message.content == "Restarting soon"

    def test_join(self, parser, relay_settings):
        message = render_event(
            parsed_line(parser, "Steve joined the game"), relay_settings
        )

        assert message.to_payload() == {
            "username": "Steve",
            "avatar_url": "https://avatars.example/Steve",
            "embeds": [
                {
                    "author": {
                        "name": "Steve joined",
                        "icon_url": "https://avatars.example/Steve",
                    },
                    "color": 0x57F287,
                }
            ],
        }

    def test_leave(self, parser, relay_settings):
        message = render_event(parsed_line(parser, "Steve left the game"), relay_settings)

        assert message.embeds[0].author.name == "Steve left"
        assert message.embeds[0].color == Colour.RED

    def test_advancement(self, parser, relay_settings):
        message = render_event(
            parsed_line(parser, "Steve has reached the goal [Sky's the Limit]"),
            relay_settings,
        )

        assert message.username == "Steve"
        assert message.embeds[0].author.name == "Steve has reached the goal [Sky's the Limit]"
        assert message.embeds[0].color == Colour.YELLOW

    def test_death(self, parser, relay_settings):
        message = render_event(
            parsed_line(parser, "Bob was slain by Zombie using Sword"), relay_settings
        )

        assert message.username == "Bob"
        assert message.avatar_url == "https://avatars.example/Bob"
        assert message.embeds[0].author.name == "Bob was slain by Zombie using Sword"
        assert message.embeds[0].color == Colour.RED

    @pytest.mark.parametrize(
        "payload, kwargs",
        [
            ("Done (3.2s)!", {}),
            ("<Steve> hi", {"level": "WARN"}),
            ("", {}),
        ],
    )
    def test_not_relayed(self, parser, relay_settings, payload, kwargs):
        assert render_event(parsed_line(parser, payload, **kwargs), relay_settings) is None


class TestWebhookMessage:
    """Test payload serialization."""

    def test_notice(self):
        message = WebhookMessage.notice(
            "Starting server", Colour.GREEN, "Console", "https://avatars.example/Console"
        )

        assert message.to_payload() == {
            "username": "Console",
            "avatar_url": "https://avatars.example/Console",
            "embeds": [{"author": {"name": "Starting server"}, "color": 0x57F287}],
        }

    def test_content_only(self):
        assert WebhookMessage(content="hi").to_payload() == {"content": "hi"}


class TestWebhookRelay:
    """Test delivery over HTTP."""

    @pytest.mark.asyncio
    async def test_handle_posts_rendered_message(self, parser, relay_settings):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(204)

        relay = WebhookRelay(
            WEBHOOK_URL, relay_settings, transport=httpx.MockTransport(handler)
        )
        try:
            await relay.handle(parsed_line(parser, "Steve joined the game"))
            await relay.handle(parsed_line(parser, "Preparing level \"world\""))
        finally:
            await relay.aclose()

        assert len(requests) == 1
        assert str(requests[0].url) == WEBHOOK_URL
        body = json.loads(requests[0].content)
        assert body["embeds"][0]["author"]["name"] == "Steve joined"

    @pytest.mark.asyncio
    async def test_send_failure_is_logged(self, relay_settings, caplog):
        relay = WebhookRelay(
            WEBHOOK_URL,
            relay_settings,
            transport=httpx.MockTransport(lambda request: httpx.Response(429)),
        )
        try:
            result = await relay.send(WebhookMessage(content="hi"))
        finally:
            await relay.aclose()

        assert result is False
        assert "Failed to execute webhook: HTTPStatusError" in caplog.text

    @pytest.mark.asyncio
    async def test_announce(self, relay_settings):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(204)

        relay = WebhookRelay(
            WEBHOOK_URL, relay_settings, transport=httpx.MockTransport(handler)
        )
        try:
            assert await relay.announce("Stopping server", Colour.RED) is True
            assert await relay.send_text("line one\nline two") is True
        finally:
            await relay.aclose()

        assert bodies[0]["username"] == "Console"
        assert bodies[0]["embeds"][0] == {
            "author": {"name": "Stopping server"},
            "color": 0xED4245,
        }
        assert bodies[1]["content"] == "line one\nline two"


class TestSplitMessage:
    """Test splitting console output into message-sized chunks."""

    def test_short_text(self):
        assert split_message("hello\nworld", 2000) == ["hello\nworld"]

    def test_splits_at_last_newline(self):
        assert split_message("aaa\nbbb\nccc", 8) == ["aaa\nbbb", "ccc"]

    def test_hard_split_without_newline(self):
        assert split_message("abcdefghij", 4) == ["abcd", "efgh", "ij"]

    def test_chunks_fit_limit(self):
        text = "\n".join(f"line {i} " + "x" * (i % 50) for i in range(300))
        chunks = split_message(text, 200)

        assert all(len(chunk) <= 200 for chunk in chunks)
        assert "\n".join(chunks) == text

    def test_empty(self):
        assert split_message("", 10) == []


class TestConsoleMirror:
    """Test batching of console output."""

    @pytest.mark.asyncio
    async def test_batches_lines_until_quiet(self):
        sent = []

        async def sink(text: str) -> None:
            sent.append(text)

        mirror = ConsoleMirror(sink, limit=2000, flush_interval=0.05)
        mirror.start()
        try:
            mirror.push("first\n")
            mirror.push("second\n")
            await asyncio.sleep(0.2)
            mirror.push("third\n")
            await asyncio.sleep(0.2)
        finally:
            await mirror.aclose()

        assert sent == ["first\nsecond\n", "third\n"]

    @pytest.mark.asyncio
    async def test_steady_stream_flushes_after_max_delay(self):
        """Output that never goes quiet is still sent while it keeps coming."""
        sent = []

        async def sink(text: str) -> None:
            sent.append(text)

        mirror = ConsoleMirror(sink, flush_interval=0.1, max_delay=0.3)
        mirror.start()
        try:
            for i in range(20):
                mirror.push(f"tick {i}\n")
                await asyncio.sleep(0.05)
            flushed_while_streaming = list(sent)
        finally:
            await mirror.aclose()

        assert flushed_while_streaming
        assert "".join(sent) == "".join(f"tick {i}\n" for i in range(20))

    @pytest.mark.asyncio
    async def test_full_batch_flushes_immediately(self):
        sent = []
        got = asyncio.Event()

        async def sink(text: str) -> None:
            sent.append(text)
            got.set()

        mirror = ConsoleMirror(sink, limit=10, flush_interval=10, max_delay=10)
        mirror.start()
        try:
            mirror.push("12345\n")
            mirror.push("67890\n")
            await asyncio.wait_for(got.wait(), timeout=1)
        finally:
            await mirror.aclose()

        assert sent == ["12345", "67890\n"]

    @pytest.mark.asyncio
    async def test_respects_limit(self):
        sent = []

        async def sink(text: str) -> None:
            sent.append(text)

        mirror = ConsoleMirror(sink, limit=10, flush_interval=0.05)
        await mirror.flush("12345\n67890\nabc\n")

        assert sent == ["12345", "67890\nabc\n"]

    @pytest.mark.asyncio
    async def test_aclose_flushes_pending(self):
        sent = []

        async def sink(text: str) -> None:
            sent.append(text)

        mirror = ConsoleMirror(sink, flush_interval=10)
        mirror.push("never flushed by the loop\n")
        await mirror.aclose()

        assert sent == ["never flushed by the loop\n"]

    @pytest.mark.asyncio
    async def test_skips_blank_chunks(self):
        sent = []

        async def sink(text: str) -> None:
            sent.append(text)

        mirror = ConsoleMirror(sink)
        await mirror.flush("\n\n  \n")

        assert sent == []

    @pytest.mark.asyncio
    async def test_sink_failure_is_logged(self, caplog):
        async def sink(text: str) -> None:
            raise ConnectionError("webhook down")

        mirror = ConsoleMirror(sink, limit=5)
        await mirror.flush("aaaa\nbbbb\n")

        assert "Console mirror sink failed: webhook down" in caplog.text
