"""Incoming Facebook Messenger webhook models.

A messaging event carries exactly one of the variant keys ``optin``,
``message``, ``delivery``, ``postback`` or ``read``. The variants are
modelled as separate classes joined into a discriminated union; an event
with zero or several variant keys fails validation instead of being
silently classified by key priority.
"""

from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

# Variant keys, in classification order
EVENT_KINDS = ("optin", "message", "delivery", "postback", "read")


class MessengerModel(BaseModel):
    """Base for webhook models; Graph ids sometimes arrive as numbers."""

    model_config = ConfigDict(coerce_numbers_to_str=True)


class Participant(MessengerModel):
    id: str


class Attachment(MessengerModel):
    """Attachment on an incoming message (image, audio, location, ...)."""

    type: str
    payload: dict[str, Any] | None = None


class QuickReplySelection(MessengerModel):
    """Quick reply the user tapped."""

    payload: str
    content_type: str | None = None
    title: str | None = None


class Message(MessengerModel):
    """Incoming (or echoed) message."""

    mid: str | None = None
    text: str | None = None
    attachments: list[Attachment] = Field(default_factory=list)
    quick_reply: QuickReplySelection | None = None
    is_echo: bool = False
    app_id: str | None = None
    metadata: str | None = None


class Optin(MessengerModel):
    ref: str | None = None


class Delivery(MessengerModel):
    mids: list[str] = Field(default_factory=list)
    watermark: int | None = None
    seq: int | None = None


class Postback(MessengerModel):
    payload: str | None = None
    title: str | None = None


class Read(MessengerModel):
    watermark: int | None = None
    seq: int | None = None


class BaseMessagingEvent(MessengerModel):
    sender: Participant
    recipient: Participant
    timestamp: int | None = None


class OptinEvent(BaseMessagingEvent):
    optin: Optin


class MessageEvent(BaseMessagingEvent):
    message: Message


class DeliveryEvent(BaseMessagingEvent):
    delivery: Delivery


class PostbackEvent(BaseMessagingEvent):
    postback: Postback


class ReadEvent(BaseMessagingEvent):
    read: Read


def event_kind(value: Any) -> str | None:
    """Return the single variant key present on an event, else None."""
    if isinstance(value, dict):
        present = [kind for kind in EVENT_KINDS if value.get(kind) is not None]
    else:
        present = [kind for kind in EVENT_KINDS if getattr(value, kind, None) is not None]
    return present[0] if len(present) == 1 else None


MessagingEvent = Annotated[
    Union[
        Annotated[OptinEvent, Tag("optin")],
        Annotated[MessageEvent, Tag("message")],
        Annotated[DeliveryEvent, Tag("delivery")],
        Annotated[PostbackEvent, Tag("postback")],
        Annotated[ReadEvent, Tag("read")],
    ],
    Discriminator(
        event_kind,
        custom_error_type="invalid_messaging_event",
        custom_error_message="Messaging event must carry exactly one of: "
        + ", ".join(EVENT_KINDS),
    ),
]

messaging_event_adapter: TypeAdapter[MessagingEvent] = TypeAdapter(MessagingEvent)


class ChangeValue(MessengerModel):
    """Value of a page feed change (comments, posts, reactions)."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="allow")

    item: str | None = None
    verb: str | None = None
    message: str | None = None
    sender_name: str | None = None
    sender_id: str | None = None
    comment_id: str | None = None
    post_id: str | None = None


class ChangeEvent(MessengerModel):
    field: str | None = None
    value: ChangeValue


class Entry(MessengerModel):
    """One page's batch of events.

    Messaging items are kept undecoded so each event is validated on its
    own and a malformed one does not reject the whole batch.
    """

    id: str
    time: int | None = None
    messaging: list[Any] = Field(default_factory=list)
    changes: list[ChangeEvent] = Field(default_factory=list)


class InboundEnvelope(MessengerModel):
    """Facebook webhook payload."""

    object: str
    entry: list[Entry] = Field(default_factory=list)
