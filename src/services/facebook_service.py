"""Send messages to Facebook Graph API service."""

import time
from typing import Any

import httpx
import logfire

from src.config import get_settings
from src.constants import FACEBOOK_GRAPH_API_HOST
from src.logging_config import mask_pii
from src.models.outbound import DeliveryResult, OutboundMessage
from src.services.http_retry import post_with_retry
from src.services.reply_composer import text_message


def _message_kind(message: OutboundMessage) -> str:
    """Short label of what is being sent, for logs."""
    if message.sender_action is not None:
        return message.sender_action.value
    if message.message is not None and message.message.attachment is not None:
        attachment = message.message.attachment
        if attachment.type == "template":
            return f"template:{attachment.payload.get('template_type')}"
        return attachment.type
    return "text"


def _parse_error(response: httpx.Response) -> str:
    """Extract the Graph API error message, falling back to the raw body."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:500]
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"{error.get('code')}: {error['message']}"
    return response.text[:500]


async def send_message(
    page_access_token: str,
    message: OutboundMessage,
) -> DeliveryResult:
    """
    Send a message or sender action via the Facebook Send API.

    Never raises for delivery problems: transport errors and non-200
    responses are logged and reported in the returned DeliveryResult.
    Each call is independent; sending the same message twice makes two
    requests.

    Args:
        page_access_token: Facebook Page access token
        message: Outbound message built by the reply composer

    Returns:
        DeliveryResult describing the outcome
    """
    start_time = time.time()
    settings = get_settings()
    recipient_id = message.recipient.id
    kind = _message_kind(message)

    logfire.info(
        "Sending Facebook message",
        recipient_id=recipient_id,
        kind=kind,
        api_version=settings.graph_api_version,
        access_token=mask_pii(page_access_token),
    )

    url = f"{FACEBOOK_GRAPH_API_HOST}/{settings.graph_api_version}/me/messages"
    params = {"access_token": page_access_token}

    async with httpx.AsyncClient(timeout=settings.facebook_api_timeout_seconds) as client:
        outcome = await post_with_retry(
            client,
            url,
            operation="send_api",
            max_retries=settings.send_max_retries,
            backoff_seconds=settings.retry_backoff_seconds,
            params=params,
            json=message.to_payload(),
        )
    elapsed_ms = (time.time() - start_time) * 1000

    if outcome.error is not None:
        logfire.error(
            "Facebook API request error",
            recipient_id=recipient_id,
            kind=kind,
            error=str(outcome.error),
            error_type=type(outcome.error).__name__,
            attempts=outcome.attempts,
            response_time_ms=elapsed_ms,
        )
        return DeliveryResult(
            success=False,
            recipient_id=recipient_id,
            error=str(outcome.error),
            error_type=type(outcome.error).__name__,
            attempts=outcome.attempts,
            elapsed_ms=elapsed_ms,
        )

    response = outcome.response
    if response.status_code != 200:
        error = _parse_error(response)
        logfire.error(
            "Facebook message send failed",
            recipient_id=recipient_id,
            kind=kind,
            status_code=response.status_code,
            error=error,
            attempts=outcome.attempts,
            response_time_ms=elapsed_ms,
        )
        return DeliveryResult(
            success=False,
            status_code=response.status_code,
            recipient_id=recipient_id,
            error=error,
            error_type="HTTPStatusError",
            attempts=outcome.attempts,
            elapsed_ms=elapsed_ms,
        )

    try:
        body: Any = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    confirmed_recipient = body.get("recipient_id") or recipient_id
    message_id = body.get("message_id")
    if message_id:
        logfire.info(
            "Successfully sent message",
            message_id=message_id,
            recipient_id=confirmed_recipient,
            kind=kind,
            response_time_ms=elapsed_ms,
        )
    else:
        logfire.info(
            "Successfully called Send API",
            recipient_id=confirmed_recipient,
            kind=kind,
            response_time_ms=elapsed_ms,
        )

    return DeliveryResult(
        success=True,
        status_code=response.status_code,
        recipient_id=str(confirmed_recipient),
        message_id=message_id,
        attempts=outcome.attempts,
        elapsed_ms=elapsed_ms,
    )


async def send_text_message(
    page_access_token: str,
    recipient_id: str,
    text: str,
) -> DeliveryResult:
    """
    Send a plain text message via Facebook Graph API.

    Args:
        page_access_token: Facebook Page access token
        recipient_id: Facebook user ID to send message to
        text: Message text to send
    """
    return await send_message(page_access_token, text_message(recipient_id, text))
