"""Webhook delivery over HTTP."""

from typing import Optional

import httpx

from ..config import RelaySettings
from ..events.base import ParsedLine
from ..logger import log_exception, logger
from .models import Colour, WebhookMessage
from .render import render_event


class WebhookRelay:
    """Posts messages to one Discord webhook."""

    def __init__(
        self,
        url: str,
        relay: RelaySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.relay = relay
        self._client = httpx.AsyncClient(timeout=relay.timeout, transport=transport)

    @log_exception("Failed to execute webhook", default_return=False)
    async def send(self, message: WebhookMessage) -> bool:
        """Deliver a message. Failures are logged and reported as False."""
        response = await self._client.post(self.url, json=message.to_payload())
        response.raise_for_status()
        return True

    async def handle(self, parsed: ParsedLine) -> None:
        """Event handler: relay the event if it renders to a message."""
        message = render_event(parsed, self.relay)
        if message is None:
            return
        logger.debug(f"Relaying {parsed.event_type.value} event: {parsed.span_text()}")
        await self.send(message)

    async def announce(self, text: str, colour: Colour) -> bool:
        """Send a console-authored notice such as "Starting server"."""
        name = self.relay.console_username
        return await self.send(
            WebhookMessage.notice(text, colour, name, self.relay.avatar_url(name))
        )

    async def send_text(self, content: str) -> bool:
        name = self.relay.console_username
        return await self.send(
            WebhookMessage(
                username=name, avatar_url=self.relay.avatar_url(name), content=content
            )
        )

    async def aclose(self) -> None:
        await self._client.aclose()
