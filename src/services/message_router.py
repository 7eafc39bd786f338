"""Reply strategy for incoming message events.

A message is handled by the first rule that applies:

1. Echoes of the page's own messages are only logged.
2. A tapped quick reply is acknowledged and scored.
3. Text matching a keyword gets the matching demo reply.
4. Any other text goes through the command relay and, if no command
   handled it, is looked up on the reply service.
5. A message with only attachments is acknowledged.

Anything else gets no reply.
"""

from __future__ import annotations

from typing import Callable

import logfire

from src.config import get_settings
from src.constants import (
    ATTACHMENT_RECEIVED_TEXT,
    CLOUD_FUNCTION_GET_REPLY,
    CLOUD_FUNCTION_TEST,
    DEFAULT_QUIZ_ID,
    DEFAULT_QUIZ_TEXT,
    DEMO_ASSET_BASE_URL,
    NOT_UNDERSTOOD_TEXT,
    QUICK_REPLY_ACK_PREFIX,
    QUIZ_CATALOGUE,
    QUIZ_CORRECT_TEXT,
    QUIZ_WRONG_TEXT,
    TEST_CLOUD_FUNCTION_MSG,
)
from src.models.messenger import Message, MessageEvent, QuickReplySelection
from src.models.outbound import OutboundMessage
from src.services import reply_composer
from src.services.messaging_protocol import MessagingService, get_messaging_service
from src.services.reply_service import ReplyServiceClient, get_reply_service_client
from src.services.training_relay import TrainingRelay

# Keyword -> builder, given the demo asset base URL
KeywordBuilder = Callable[[str], OutboundMessage]


def build_keyword_table(
    base_url: str = DEMO_ASSET_BASE_URL,
) -> dict[str, KeywordBuilder]:
    """Exact-match (case-sensitive) keywords answered with a canned reply."""
    return {
        "image": lambda rid: reply_composer.image_message(rid, base_url),
        "gif": lambda rid: reply_composer.gif_message(rid, base_url),
        "audio": lambda rid: reply_composer.audio_message(rid, base_url),
        "video": lambda rid: reply_composer.video_message(rid, base_url),
        "file": lambda rid: reply_composer.file_message(rid, base_url),
        "button": reply_composer.button_message,
        "generic": lambda rid: reply_composer.generic_message(rid, base_url),
        "receipt": lambda rid: reply_composer.receipt_message(rid, base_url),
        "quick reply": reply_composer.quick_reply_message,
        "read receipt": reply_composer.read_receipt,
        "typing on": reply_composer.typing_on,
        "typing off": reply_composer.typing_off,
        "#help": reply_composer.help_message,
        "#menu": reply_composer.menu_message,
        "#quiz": lambda rid: reply_composer.quiz_message(
            rid, DEFAULT_QUIZ_TEXT, quiz_id=DEFAULT_QUIZ_ID
        ),
    }


# Keywords answered by the reply service rather than the composer
SERVICE_KEYWORDS = frozenset({"test"})


class MessageRouter:
    """Decide and send the reply for one incoming message.

    Example:
        >>> router = MessageRouter(messaging_service=MockMessagingService())
        >>> await router.route(event)
    """

    def __init__(
        self,
        messaging_service: MessagingService,
        reply_client: ReplyServiceClient | None = None,
        training_relay: TrainingRelay | None = None,
        demo_asset_base_url: str = DEMO_ASSET_BASE_URL,
        quiz_catalogue: dict[str, str] | None = None,
    ):
        """Initialize the router.

        Args:
            messaging_service: Where replies are sent
            reply_client: Reply-service client; created from settings if
                          not provided
            training_relay: Command relay; shares ``reply_client`` if not
                            provided
            demo_asset_base_url: Base URL of demo media attachments
            quiz_catalogue: Quiz id -> correct option
        """
        self._messaging = messaging_service
        self._reply_client = reply_client
        self._training_relay = training_relay
        self._keywords = build_keyword_table(demo_asset_base_url)
        self._quiz_catalogue = QUIZ_CATALOGUE if quiz_catalogue is None else quiz_catalogue

    @property
    def keywords(self) -> frozenset[str]:
        return frozenset(self._keywords) | SERVICE_KEYWORDS

    def _get_reply_client(self) -> ReplyServiceClient:
        if self._reply_client is None:
            self._reply_client = get_reply_service_client()
        return self._reply_client

    def _get_training_relay(self) -> TrainingRelay:
        if self._training_relay is None:
            self._training_relay = TrainingRelay(reply_client=self._get_reply_client())
        return self._training_relay

    async def route(self, event: MessageEvent) -> None:
        """Reply to one message event according to the routing rules."""
        sender_id = event.sender.id
        message = event.message

        logfire.info(
            "Received message",
            sender_id=sender_id,
            recipient_id=event.recipient.id,
            timestamp=event.timestamp,
            mid=message.mid,
        )

        if message.is_echo:
            logfire.info(
                "Received echo",
                mid=message.mid,
                app_id=message.app_id,
                metadata=message.metadata,
            )
            return

        if message.quick_reply is not None:
            await self._handle_quick_reply(sender_id, message, message.quick_reply)
            return

        if message.text:
            await self._handle_text(sender_id, message.text)
        elif message.attachments:
            await self._messaging.send_text(sender_id, ATTACHMENT_RECEIVED_TEXT)

    async def _handle_quick_reply(
        self,
        sender_id: str,
        message: Message,
        quick_reply: QuickReplySelection,
    ) -> None:
        payload = quick_reply.payload
        logfire.info("Quick reply", mid=message.mid, payload=payload)

        quiz = reply_composer.parse_quiz_payload(payload)
        if quiz is not None:
            quiz_id, choice = quiz
            expected = self._quiz_catalogue.get(quiz_id)
            if expected is None:
                logfire.warn("Quick reply for unknown quiz", quiz_id=quiz_id)
            correct = expected is not None and choice == expected
        else:
            # Plain quick replies are scored by their visible text
            choice = payload
            correct = message.text == payload

        # Acknowledgment first, verdict second
        await self._messaging.send_text(sender_id, QUICK_REPLY_ACK_PREFIX + choice)
        await self._messaging.send_text(
            sender_id, QUIZ_CORRECT_TEXT if correct else QUIZ_WRONG_TEXT
        )

    async def _handle_text(self, sender_id: str, text: str) -> None:
        builder = self._keywords.get(text)
        if builder is not None:
            logfire.info("Keyword reply", keyword=text, sender_id=sender_id)
            await self._messaging.send(builder(sender_id))
            return

        if text in SERVICE_KEYWORDS:
            reply = await self._get_reply_client().call_function(
                CLOUD_FUNCTION_TEST, {"msg": TEST_CLOUD_FUNCTION_MSG}
            )
            if reply is not None:
                await self._messaging.send_text(sender_id, reply)
            return

        await self._handle_free_text(sender_id, text)

    async def _handle_free_text(self, sender_id: str, text: str) -> None:
        command_reply = await self._get_training_relay().process_command(text)
        if command_reply != text:
            await self._messaging.send_text(sender_id, command_reply)
            return

        # No command matched: ask the reply service for a learned answer
        reply = await self._get_reply_client().call_function(
            CLOUD_FUNCTION_GET_REPLY, {"msg": text}
        )
        if reply is None:
            logfire.warn("No answer from reply service", sender_id=sender_id)
            return
        if reply == "":
            logfire.info("No reply rule matched", sender_id=sender_id)
            await self._messaging.send_text(sender_id, NOT_UNDERSTOOD_TEXT)
            return
        await self._messaging.send_text(sender_id, reply)


def get_message_router(
    messaging_service: MessagingService | None = None,
    reply_client: ReplyServiceClient | None = None,
) -> MessageRouter:
    """Factory function to create a MessageRouter bound to the configured page.

    Args:
        messaging_service: Optional messaging service (defaults to Facebook)
        reply_client: Optional reply-service client

    Returns:
        Configured MessageRouter instance
    """
    settings = get_settings()
    return MessageRouter(
        messaging_service=messaging_service
        or get_messaging_service(settings.messenger_page_access_token),
        reply_client=reply_client,
        demo_asset_base_url=settings.demo_asset_base_url,
    )
