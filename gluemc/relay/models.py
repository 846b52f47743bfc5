"""Discord webhook payload models."""

from enum import IntEnum
from typing import List, Optional

from pydantic import BaseModel, Field


class Colour(IntEnum):
    """Discord branding colours."""

    GREEN = 0x57F287
    YELLOW = 0xFEE75C
    RED = 0xED4245


class EmbedAuthor(BaseModel):
    name: str
    icon_url: Optional[str] = None


class Embed(BaseModel):
    author: EmbedAuthor
    color: Optional[int] = None


class WebhookMessage(BaseModel):
    """Body of an "execute webhook" request."""

    username: Optional[str] = None
    avatar_url: Optional[str] = None
    content: Optional[str] = None
    embeds: List[Embed] = Field(default_factory=list)

    def to_payload(self) -> dict:
        payload = self.model_dump(exclude_none=True)
        if not self.embeds:
            payload.pop("embeds")
        return payload

    @classmethod
    def notice(
        cls, text: str, colour: Colour, username: str, avatar_url: str
    ) -> "WebhookMessage":
        """Embed-only message with the author line set to ``text``."""
        return cls(
            username=username,
            avatar_url=avatar_url,
            embeds=[Embed(author=EmbedAuthor(name=text), color=int(colour))],
        )
