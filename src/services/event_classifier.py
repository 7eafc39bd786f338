"""Classify webhook events and dispatch them to their handlers.

Each messaging event in a page envelope is decoded on its own and handled
by one of five handlers (optin, message, delivery, postback, read). Page
feed changes are inspected for comments, which are logged only.

Handlers never raise: any failure is logged so that one bad event cannot
affect the others or the webhook acknowledgment.
"""

from __future__ import annotations

from typing import Any

import logfire
from fastapi import BackgroundTasks
from pydantic import ValidationError

from src.config import get_settings
from src.constants import AUTHENTICATION_SUCCESS_TEXT, POSTBACK_CALLED_TEXT
from src.middleware.correlation_id import get_correlation_id
from src.models.messenger import (
    ChangeEvent,
    DeliveryEvent,
    InboundEnvelope,
    MessageEvent,
    MessagingEvent,
    OptinEvent,
    PostbackEvent,
    ReadEvent,
    messaging_event_adapter,
)
from src.services.message_router import MessageRouter, get_message_router
from src.services.messaging_protocol import MessagingService, get_messaging_service

PAGE_OBJECT = "page"


def decode_event(raw_event: Any) -> MessagingEvent | None:
    """Decode one raw messaging event, or None if it is not a known kind."""
    if not isinstance(raw_event, dict):
        logfire.warn("Webhook received non-object messaging item", item=raw_event)
        return None
    try:
        return messaging_event_adapter.validate_python(raw_event)
    except ValidationError as e:
        logfire.warn(
            "Webhook received unknown messaging event",
            event=raw_event,
            errors=e.errors(include_url=False, include_input=False),
        )
        return None


class EventClassifier:
    """Fan a webhook envelope out to per-event handlers.

    Example:
        >>> classifier = EventClassifier(messaging, router)
        >>> scheduled = classifier.schedule(envelope, background_tasks)
    """

    def __init__(self, messaging_service: MessagingService, router: MessageRouter):
        self._messaging = messaging_service
        self._router = router

    def schedule(
        self,
        envelope: InboundEnvelope,
        background_tasks: BackgroundTasks,
    ) -> int:
        """Queue one background task per event in the envelope.

        Returns:
            Number of messaging events scheduled (0 for non-page objects)
        """
        if envelope.object != PAGE_OBJECT:
            logfire.info("Ignoring non-page webhook", object=envelope.object)
            return 0

        scheduled = 0
        for entry in envelope.entry:
            for raw_event in entry.messaging:
                event = decode_event(raw_event)
                if event is None:
                    continue
                background_tasks.add_task(self.dispatch, event)
                scheduled += 1

            if entry.changes:
                logfire.info("Page changes received", page_id=entry.id, count=len(entry.changes))
            for change in entry.changes:
                self.handle_change(change)

        return scheduled

    async def dispatch(self, event: MessagingEvent) -> None:
        """Run the handler for one event, logging instead of raising."""
        event_type = type(event).__name__
        try:
            with logfire.span(
                "messaging event",
                event_type=event_type,
                sender_id=event.sender.id,
                correlation_id=get_correlation_id(),
            ):
                if isinstance(event, OptinEvent):
                    await self.handle_optin(event)
                elif isinstance(event, MessageEvent):
                    await self._router.route(event)
                elif isinstance(event, DeliveryEvent):
                    self.handle_delivery(event)
                elif isinstance(event, PostbackEvent):
                    await self.handle_postback(event)
                elif isinstance(event, ReadEvent):
                    self.handle_read(event)
        except Exception as e:
            logfire.error(
                "Error handling messaging event",
                event_type=event_type,
                sender_id=event.sender.id,
                correlation_id=get_correlation_id(),
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=True,
            )

    async def handle_optin(self, event: OptinEvent) -> None:
        """Authentication ("Send to Messenger") opt-in."""
        logfire.info(
            "Received authentication",
            sender_id=event.sender.id,
            recipient_id=event.recipient.id,
            ref=event.optin.ref,
            timestamp=event.timestamp,
        )
        await self._messaging.send_text(event.sender.id, AUTHENTICATION_SUCCESS_TEXT)

    def handle_delivery(self, event: DeliveryEvent) -> None:
        delivery = event.delivery
        for mid in delivery.mids:
            logfire.info("Received delivery confirmation", mid=mid)
        logfire.info(
            "All messages before watermark were delivered",
            watermark=delivery.watermark,
            seq=delivery.seq,
        )

    async def handle_postback(self, event: PostbackEvent) -> None:
        logfire.info(
            "Received postback",
            sender_id=event.sender.id,
            recipient_id=event.recipient.id,
            payload=event.postback.payload,
            timestamp=event.timestamp,
        )
        await self._messaging.send_text(event.sender.id, POSTBACK_CALLED_TEXT)

    def handle_read(self, event: ReadEvent) -> None:
        logfire.info(
            "Received message read event",
            watermark=event.read.watermark,
            seq=event.read.seq,
        )

    def handle_change(self, change: ChangeEvent) -> None:
        """Log page comments.

        Replying to comments (private reply or public comment reply) is
        intentionally not done here; this is where it would hook in.
        """
        value = change.value
        if value.item != "comment" or not value.message:
            return
        logfire.info(
            "Page comment received",
            sender_name=value.sender_name,
            comment_id=value.comment_id,
            message=value.message,
        )


def get_event_classifier() -> EventClassifier:
    """Factory function to create an EventClassifier for the configured page.

    The classifier and the router share one messaging service, so every
    reply for the page goes through the same Send API binding.
    """
    settings = get_settings()
    messaging_service = get_messaging_service(settings.messenger_page_access_token)
    return EventClassifier(
        messaging_service=messaging_service,
        router=get_message_router(messaging_service=messaging_service),
    )
