"""Outgoing Send API models."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SenderAction(str, Enum):
    """Sender actions supported by the Send API."""

    MARK_SEEN = "mark_seen"
    TYPING_ON = "typing_on"
    TYPING_OFF = "typing_off"


class Recipient(BaseModel):
    id: str = Field(..., min_length=1)


class QuickReplyOption(BaseModel):
    """One tappable quick reply."""

    content_type: Literal["text"] = "text"
    title: str
    payload: str


class OutboundAttachment(BaseModel):
    """Media attachment or structured template."""

    type: Literal["image", "audio", "video", "file", "template"]
    payload: dict[str, Any]


class OutboundBody(BaseModel):
    """Message body: a text (with optional quick replies) or one attachment."""

    text: str | None = None
    metadata: str | None = None
    quick_replies: list[QuickReplyOption] | None = None
    attachment: OutboundAttachment | None = None

    @model_validator(mode="after")
    def _text_or_attachment(self) -> "OutboundBody":
        if (self.text is None) == (self.attachment is None):
            raise ValueError("message body needs exactly one of text or attachment")
        return self


class OutboundMessage(BaseModel):
    """Request body for POST /me/messages."""

    recipient: Recipient
    message: OutboundBody | None = None
    sender_action: SenderAction | None = None

    @model_validator(mode="after")
    def _message_or_action(self) -> "OutboundMessage":
        if (self.message is None) == (self.sender_action is None):
            raise ValueError("outbound message needs exactly one of message or sender_action")
        return self

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by the Send API."""
        return self.model_dump(mode="json", exclude_none=True)


class DeliveryResult(BaseModel):
    """Outcome of one outbound call, success or failure."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    success: bool
    status_code: int | None = None
    recipient_id: str | None = None
    message_id: str | None = None
    error: str | None = None
    error_type: str | None = None
    attempts: int = 1
    elapsed_ms: float = 0.0
