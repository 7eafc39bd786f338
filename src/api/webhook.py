"""Facebook webhook endpoints.

This module handles the webhook verification handshake and incoming
Messenger callbacks.

Processing order for callbacks:
1. Signature verification on the raw body (403 on mismatch)
2. Envelope decoding (400 if the body is not a webhook envelope)
3. Event classification; every event is queued as a background task

The response is sent once all events are queued, so outbound sends never
delay or fail the acknowledgment.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from src.config import get_settings
from src.constants import SIGNATURE_HEADER
from src.models.messenger import InboundEnvelope
from src.services.event_classifier import PAGE_OBJECT, EventClassifier, get_event_classifier
from src.services.signature import SignatureVerificationError, verify_request_signature

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(request: Request):
    """Facebook webhook verification endpoint."""
    settings = get_settings()

    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    if mode == "subscribe" and token == settings.messenger_validation_token:
        logger.info("Validating webhook")
        return PlainTextResponse(challenge or "")

    logger.error("Failed validation. Make sure the validation tokens match.")
    return Response(status_code=403)


@router.post("")
async def handle_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    classifier: EventClassifier = Depends(get_event_classifier),
):
    """Handle incoming Facebook Messenger webhook events."""
    settings = get_settings()
    body = await request.body()

    try:
        verify_request_signature(
            body,
            request.headers.get(SIGNATURE_HEADER),
            settings.messenger_app_secret,
        )
    except SignatureVerificationError as e:
        logger.warning("Rejected webhook callback: %s", e)
        return Response(status_code=403)

    try:
        envelope = InboundEnvelope.model_validate_json(body)
    except ValidationError as e:
        logger.warning("Malformed webhook payload (%d errors)", e.error_count())
        return JSONResponse(status_code=400, content={"status": "invalid"})

    if envelope.object != PAGE_OBJECT:
        logger.info("Ignoring webhook for object %s", envelope.object)
        return {"status": "ignored"}

    scheduled = classifier.schedule(envelope, background_tasks)
    logger.info(
        "Webhook accepted: %d entries, %d messaging events scheduled",
        len(envelope.entry),
        scheduled,
    )
    return {"status": "ok"}
