"""
Discord webhook relay.

Renders player events into webhook messages and mirrors raw console output.
"""

from .console import ConsoleMirror, split_message
from .models import Colour, Embed, EmbedAuthor, WebhookMessage
from .render import render_event
from .webhook import WebhookRelay

__all__ = [
    "Colour",
    "ConsoleMirror",
    "Embed",
    "EmbedAuthor",
    "WebhookMessage",
    "WebhookRelay",
    "render_event",
    "split_message",
]
