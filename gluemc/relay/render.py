"""Rendering of parsed events into webhook messages."""

from typing import Optional

from ..config import RelaySettings
from ..events.base import ParsedLine
from ..parsing.types import (
    AdvancementEvent,
    ChatEvent,
    DeathEvent,
    JoinEvent,
    LeaveEvent,
    display,
)
from .models import Colour, Embed, EmbedAuthor, WebhookMessage

# Chat sender used by the server console's /say
SERVER_SENDER = "[Server]"


def _player_message(
    name: str, author: str, colour: Colour, relay: RelaySettings
) -> WebhookMessage:
    avatar = relay.avatar_url(name)
    return WebhookMessage(
        username=name,
        avatar_url=avatar,
        embeds=[
            Embed(author=EmbedAuthor(name=author, icon_url=avatar), color=int(colour))
        ],
    )


def render_event(parsed: ParsedLine, relay: RelaySettings) -> Optional[WebhookMessage]:
    """Build the webhook message for a player event.

    Returns None for events that are not relayed (generic and unknown lines).
    """
    match parsed.event:
        case ChatEvent(sender=sender, message=message):
            name = display(sender)
            avatar_name = relay.console_username if name == SERVER_SENDER else name
            return WebhookMessage(
                username=name,
                avatar_url=relay.avatar_url(avatar_name),
                content=display(message),
            )
        case JoinEvent(player=player):
            name = display(player)
            return _player_message(name, f"{name} joined", Colour.GREEN, relay)
        case LeaveEvent(player=player):
            name = display(player)
            return _player_message(name, f"{name} left", Colour.RED, relay)
        case AdvancementEvent(player=player):
            return _player_message(
                display(player), parsed.span_text(), Colour.YELLOW, relay
            )
        case DeathEvent(victim=victim):
            return _player_message(
                display(victim), parsed.span_text(), Colour.RED, relay
            )
        case _:
            return None
