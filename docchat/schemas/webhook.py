"""Schemas for the LINE Messaging API webhook payload (text events only)."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LineMessage(BaseModel):
    """Message object of a ``message`` event."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None


class LineSource(BaseModel):
    """Event source (user, group or room)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str = "user"
    user_id: Optional[str] = Field(default=None, alias="userId")


class LineEvent(BaseModel):
    """A single webhook event."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    message: Optional[LineMessage] = None
    source: Optional[LineSource] = None
    reply_token: Optional[str] = Field(default=None, alias="replyToken")

    @property
    def is_text_message(self) -> bool:
        return (
            self.type == "message"
            and self.message is not None
            and self.message.type == "text"
        )


class LineWebhookBody(BaseModel):
    """Webhook request body."""

    model_config = ConfigDict(extra="allow")

    destination: Optional[str] = None
    events: List[LineEvent] = Field(default_factory=list)
