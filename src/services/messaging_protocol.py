"""Messaging abstraction protocols for decoupling from the Facebook API.

This module provides a Protocol-based abstraction for the Send Gateway,
allowing the router and event handlers to:
- Mock messaging in tests without httpx mocking
- Bind the page access token once instead of threading it through calls
"""

from typing import Protocol

from src.models.outbound import DeliveryResult, OutboundMessage
from src.services.reply_composer import text_message


class MessagingService(Protocol):
    """Protocol for delivering outbound messages to a user.

    Implementations never raise for delivery failures; the outcome is
    reported in the returned DeliveryResult.
    """

    async def send(self, message: OutboundMessage) -> DeliveryResult:
        """Deliver a composed message or sender action."""
        ...

    async def send_text(self, recipient_id: str, text: str) -> DeliveryResult:
        """Deliver a plain text message."""
        ...


class FacebookMessagingService:
    """Facebook Messenger implementation of MessagingService.

    Example:
        >>> service = FacebookMessagingService(page_access_token="...")
        >>> result = await service.send_text("user123", "Hello!")
        >>> result.success
        True
    """

    def __init__(self, page_access_token: str):
        """Initialize with Facebook Page access token.

        Args:
            page_access_token: Facebook Page access token for API calls
        """
        if not page_access_token:
            raise ValueError("page_access_token is required")
        self._token = page_access_token

    async def send(self, message: OutboundMessage) -> DeliveryResult:
        from src.services.facebook_service import send_message

        return await send_message(page_access_token=self._token, message=message)

    async def send_text(self, recipient_id: str, text: str) -> DeliveryResult:
        return await self.send(text_message(recipient_id, text))


class MockMessagingService:
    """Mock implementation for testing.

    Example:
        >>> service = MockMessagingService()
        >>> await service.send_text("user123", "Test message")
        >>> service.sent_texts
        [('user123', 'Test message')]
    """

    def __init__(self, should_fail_send: bool = False):
        """Initialize mock service.

        Args:
            should_fail_send: Whether sends should report failure
        """
        self._should_fail_send = should_fail_send
        self.sent_messages: list[OutboundMessage] = []

    async def send(self, message: OutboundMessage) -> DeliveryResult:
        """Record the message and return the configured result."""
        self.sent_messages.append(message)
        if self._should_fail_send:
            return DeliveryResult(
                success=False, recipient_id=message.recipient.id, error="mock failure"
            )
        return DeliveryResult(
            success=True,
            status_code=200,
            recipient_id=message.recipient.id,
            message_id=f"mid.mock.{len(self.sent_messages)}",
        )

    async def send_text(self, recipient_id: str, text: str) -> DeliveryResult:
        return await self.send(text_message(recipient_id, text))

    @property
    def sent_texts(self) -> list[tuple[str, str]]:
        """(recipient_id, text) for every text message sent so far."""
        return [
            (m.recipient.id, m.message.text)
            for m in self.sent_messages
            if m.message is not None and m.message.text is not None
        ]


def get_messaging_service(page_access_token: str) -> FacebookMessagingService:
    """Factory function to get a MessagingService implementation.

    Args:
        page_access_token: Facebook Page access token

    Returns:
        MessagingService implementation (currently Facebook)
    """
    return FacebookMessagingService(page_access_token=page_access_token)
